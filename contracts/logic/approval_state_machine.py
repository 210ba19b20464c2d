"""
Approval state machine
======================

Contract:  draft -> in_progress -> pending_approval -> active_contract
           pending_approval -> in_progress   (rejection)
           active_contract  -> in_progress   (fresh upload)
Approval:  pending -> approved | rejected     (both terminal)

Every transition runs inside one record-store transaction together with the
ledger pointer update and the audit entry. "All approvers cleared" is a
pending-count query evaluated in the same transaction as the status flip it
gates.

Only ContractStatus values reach this module; string synonyms are normalized
at the boundary.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from contracts.adapters.identity_directory import IdentityDirectory
from contracts.logic.audit_trail import AuditTrail
from contracts.logic.version_ledger import VersionLedger
from contracts.models.approval import Approval, ApprovalStatus
from contracts.models.contract import Contract
from contracts.models.contract_status import ContractStatus
from contracts.models.document_version_set import DocumentVersionSet
from contracts.models.file_ref import FileRef
from contracts.repository.contract_repository import ContractRepository
from core.exceptions.errors import ConflictError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class ApprovalStateMachine:
    def __init__(
        self,
        *,
        repository: ContractRepository,
        ledger: VersionLedger,
        directory: IdentityDirectory,
        audit: AuditTrail,
    ) -> None:
        self._repo = repository
        self._ledger = ledger
        self._directory = directory
        self._audit = audit

    # ---- helpers ------------------------------------------------------------

    def _require_contract(self, contract_id: int) -> Contract:
        contract = self._repo.get_contract(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.", code="contract_not_found")
        return contract

    def _require_approval(self, approval_id: int) -> Approval:
        approval = self._repo.get_approval(approval_id)
        if approval is None:
            raise NotFoundError(f"Approval {approval_id} not found.", code="approval_not_found")
        return approval

    def _set_status(self, contract: Contract, status: ContractStatus) -> None:
        if not isinstance(status, ContractStatus):
            raise TypeError(f"status must be ContractStatus, got {type(status).__name__}")
        self._repo.set_status(contract.id, status)
        if contract.status is not status:
            logger.info("Contract %s: %s -> %s", contract.id, contract.status.value, status.value)

    @staticmethod
    def check_signable(approval: Approval) -> None:
        """Raise unless *approval* is still pending."""
        if approval.status is ApprovalStatus.REJECTED:
            raise ValidationError("Approval has already been rejected.", code="approval_rejected")
        if approval.status is ApprovalStatus.APPROVED:
            raise ConflictError("Approval has already been approved.", code="approval_already_approved")

    # ---- owner-side transitions ----------------------------------------------

    def upload_original(self, contract_id: int, original_ref: FileRef, *, actor_id: Optional[int] = None) -> DocumentVersionSet:
        store = self._repo.store
        with store.transaction():
            contract = self._require_contract(contract_id)
            superseded = self._ledger.record_upload(contract_id, original_ref)
            self._set_status(contract, ContractStatus.IN_PROGRESS)
            self._audit.write(
                contract_id, "original_uploaded", actor_id=actor_id, details={"upload_path": original_ref.path}
            )
            versions = self._repo.get_versions(contract_id)
        self._ledger.reclaim(superseded)
        return versions

    def owner_signed(self, contract_id: int, signed_ref: FileRef, *, actor_id: Optional[int] = None) -> DocumentVersionSet:
        store = self._repo.store
        with store.transaction():
            contract = self._require_contract(contract_id)
            superseded = self._ledger.record_signed(contract_id, signed_ref)
            self._set_status(contract, ContractStatus.ACTIVE_CONTRACT)
            self._audit.write(
                contract_id, "owner_signed", actor_id=actor_id, details={"signed_path": signed_ref.path}
            )
            versions = self._repo.get_versions(contract_id)
        self._ledger.reclaim(superseded)
        return versions

    # ---- approval transitions -----------------------------------------------

    def request_approval(self, contract_id: int, approver_id: int, *, actor_id: Optional[int] = None) -> Tuple[Approval, bool]:
        """
        Returns (approval, created). A pending approval for the same
        (contract, approver) is returned unchanged with created=False.
        """
        store = self._repo.store
        with store.transaction():
            contract = self._require_contract(contract_id)
            if not self._directory.exists(approver_id):
                raise ValidationError(f"approver_id {approver_id} is not a known user.", code="approver_invalid")

            existing = self._repo.find_pending_approval(contract_id, approver_id)
            if existing is not None:
                return existing, False

            approval_id = self._repo.insert_approval(contract_id, approver_id)
            self._set_status(contract, ContractStatus.PENDING_APPROVAL)
            self._audit.write(
                contract_id, "approval_requested", actor_id=actor_id, approval_id=approval_id,
                details={"approver_id": approver_id},
            )
            approval = self._require_approval(approval_id)
        return approval, True

    def approval_signed(self, approval_id: int, signed_ref: FileRef, *, notes: Optional[str] = None) -> Tuple[Approval, ContractStatus]:
        """
        Record an approver's stamp. The approval is re-checked inside the
        transaction, so a reject that landed after the caller's pre-check wins.
        """
        store = self._repo.store
        with store.transaction():
            approval = self._require_approval(approval_id)
            self.check_signable(approval)
            contract = self._require_contract(approval.contract_id)

            self._ledger.record_approval_signed(approval_id, signed_ref)
            self._repo.mark_approved(approval_id, notes=notes)

            remaining = self._repo.count_pending(contract.id)
            status = contract.status
            if remaining == 0:
                status = ContractStatus.ACTIVE_CONTRACT
                self._set_status(contract, status)
            self._audit.write(
                contract.id, "approval_signed", actor_id=approval.approver_id, approval_id=approval_id,
                details={"approval_signed_path": signed_ref.path, "pending_left": remaining},
            )
            updated = self._require_approval(approval_id)
        return updated, status

    def reject(self, approval_id: int, *, notes: Optional[str] = None) -> Tuple[Approval, ContractStatus]:
        store = self._repo.store
        with store.transaction():
            approval = self._require_approval(approval_id)
            if approval.status.is_terminal:
                raise ConflictError(
                    f"Approval is already {approval.status.value}.", code="approval_not_pending"
                )
            contract = self._require_contract(approval.contract_id)

            self._repo.mark_rejected(approval_id, notes=notes)
            self._set_status(contract, ContractStatus.IN_PROGRESS)
            self._audit.write(
                contract.id, "approval_rejected", actor_id=approval.approver_id, approval_id=approval_id,
                details={"notes": notes},
            )
            updated = self._require_approval(approval_id)
        return updated, ContractStatus.IN_PROGRESS
