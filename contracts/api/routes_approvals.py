from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from contracts.api.dependencies import get_contract_service
from contracts.api.schemas import ApprovalSignPayload, RejectPayload
from contracts.logic.contract_service import ContractService

router = APIRouter(prefix="/api/approvals", tags=["approvals"])


@router.get("")
def list_approvals(
    approver_id: Optional[int] = Query(default=None),
    service: ContractService = Depends(get_contract_service),
) -> List[dict]:
    return [
        {**approval.as_dict(), "contract": view.as_dict()}
        for approval, view in service.list_approvals(approver_id)
    ]


@router.post("/{approval_id}/sign")
def sign_approval(
    approval_id: int,
    payload: ApprovalSignPayload,
    service: ContractService = Depends(get_contract_service),
) -> dict:
    approval, contract_status = service.sign_approval(approval_id, payload.to_request(notes=payload.notes))
    return {
        "message": "Approval signed",
        "approval_signed_path": approval.signed_ref.path if approval.signed_ref else None,
        "approval_status": approval.status.value,
        "contract_status": contract_status.value,
    }


@router.post("/{approval_id}/reject")
def reject_approval(
    approval_id: int,
    payload: Optional[RejectPayload] = Body(default=None),
    service: ContractService = Depends(get_contract_service),
) -> dict:
    approval, contract_status = service.reject_approval(approval_id, payload.notes if payload else None)
    return {
        "message": "Approval rejected",
        "approval_status": approval.status.value,
        "notes": approval.notes,
        "contract_status": contract_status.value,
    }
