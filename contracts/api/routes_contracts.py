"""Contract CRUD, owner upload/sign, page previews and approval requests."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Optional, Type, TypeVar

from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from contracts.api.dependencies import AppServices, get_contract_service, get_services
from contracts.api.routes_files import read_upload
from contracts.api.schemas import (
    ContractCreatePayload,
    ContractUpdatePayload,
    RequestApprovalPayload,
    SignPayload,
)
from contracts.logic.contract_service import ContractService

router = APIRouter(prefix="/api/contracts", tags=["contracts"])

FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

PayloadT = TypeVar("PayloadT", bound=BaseModel)


async def read_fields(request: Request) -> Dict[str, Any]:
    """Contract fields from a JSON body or from browser FormData (file parts ignored)."""
    if request.headers.get("content-type", "").lower().startswith(FORM_TYPES):
        form = await request.form()
        return {key: value for key, value in form.multi_items() if isinstance(value, str)}
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        data = json.loads(raw)
    except ValueError:
        raise RequestValidationError([{"loc": ("body",), "msg": "Invalid JSON", "type": "json_invalid"}])
    if not isinstance(data, dict):
        raise RequestValidationError([{"loc": ("body",), "msg": "Expected an object", "type": "dict_type"}])
    return data


def parse_fields(model: Type[PayloadT], fields: Dict[str, Any]) -> PayloadT:
    try:
        return model.model_validate(fields)
    except PayloadError as exc:
        raise RequestValidationError(exc.errors()) from exc


async def create_payload(request: Request) -> ContractCreatePayload:
    return parse_fields(ContractCreatePayload, await read_fields(request))


async def update_payload(request: Request) -> ContractUpdatePayload:
    return parse_fields(ContractUpdatePayload, await read_fields(request))


@router.get("")
def list_contracts(
    owner_id: Optional[int] = Query(default=None),
    status: Optional[str] = Query(default=None),
    service: ContractService = Depends(get_contract_service),
) -> List[dict]:
    return [v.as_dict() for v in service.list_contracts(owner_id=owner_id, status=status)]


@router.get("/{contract_id}")
def get_contract(contract_id: int, service: ContractService = Depends(get_contract_service)) -> dict:
    return service.get_contract(contract_id).as_dict()


@router.post("", status_code=201)
def create_contract(
    payload: ContractCreatePayload = Depends(create_payload),
    service: ContractService = Depends(get_contract_service),
) -> dict:
    view = service.create_contract(
        owner_id=payload.owner_id,
        title=payload.title,
        vendor=payload.vendor,
        contract_code=payload.contract_code,
    )
    return view.as_dict()


@router.put("/{contract_id}")
def update_contract(
    contract_id: int,
    payload: ContractUpdatePayload = Depends(update_payload),
    service: ContractService = Depends(get_contract_service),
) -> dict:
    view = service.update_contract(
        contract_id,
        title=payload.title,
        vendor=payload.vendor,
        contract_code=payload.contract_code,
    )
    return view.as_dict()


@router.delete("/{contract_id}")
def delete_contract(contract_id: int, service: ContractService = Depends(get_contract_service)) -> dict:
    service.delete_contract(contract_id)
    return {"message": "Contract deleted"}


@router.post("/{contract_id}/upload")
def upload_contract_pdf(
    contract_id: int,
    pdf: UploadFile = File(...),
    service: ContractService = Depends(get_contract_service),
) -> dict:
    view = service.upload_original(contract_id, read_upload(pdf, service.max_upload_bytes))
    body = view.as_dict()
    return {"message": "Upload successful", "upload_path": body["upload_path"], "contract": body}


@router.post("/{contract_id}/sign")
def sign_contract(
    contract_id: int,
    payload: SignPayload,
    service: ContractService = Depends(get_contract_service),
) -> dict:
    view = service.sign_contract(contract_id, payload.to_request())
    body = view.as_dict()
    return {"message": "Signed", "signed_path": body["signed_path"], "contract": body}


@router.get("/{contract_id}/pages/{page_index}/preview")
def preview_page(
    contract_id: int,
    page_index: int,
    scale: Optional[float] = Query(default=None, gt=0),
    services: AppServices = Depends(get_services),
) -> Response:
    render_scale = scale if scale is not None else services.config.signing.preview_scale
    preview = services.contracts.render_preview(contract_id, page_index, render_scale)
    return Response(
        content=preview.png,
        media_type="image/png",
        headers={
            "X-Render-Scale": str(preview.scale),
            "X-Page-Height-Pixels": str(preview.height_px),
            "X-Page-Width-Pixels": str(preview.width_px),
            "X-Page-Index": str(preview.page_index),
            "X-Page-Count": str(preview.page_count),
        },
    )


@router.post("/{contract_id}/request-approval")
def request_approval(
    contract_id: int,
    payload: RequestApprovalPayload,
    service: ContractService = Depends(get_contract_service),
) -> JSONResponse:
    approval, created = service.request_approval(contract_id, payload.approver_id)
    body = {
        "message": "Approval requested" if created else "Approval request already exists",
        "approval_id": approval.id,
        "approval": approval.as_dict(),
    }
    return JSONResponse(status_code=201 if created else 200, content=body)


@router.get("/{contract_id}/audit")
def contract_audit(contract_id: int, service: ContractService = Depends(get_contract_service)) -> List[dict]:
    return [e.as_dict() for e in service.audit_events(contract_id)]
