"""
Contract service
================

Facade used by the HTTP layer. Owns contract CRUD and uploads, and runs the
signing pipeline:

    ledger.resolve_source -> compositor.compose -> blob put
        -> ledger/state machine pointer + status update (one transaction)
        -> reclaim superseded artifacts (after commit, fire-and-forget)

A new artifact is always written under a fresh name before any pointer refers
to it; if the pointer update is refused, the orphan is handed straight to the
reclaimer.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from contracts.adapters.blob_store import BlobStore
from contracts.adapters.identity_directory import IdentityDirectory
from contracts.logic.approval_state_machine import ApprovalStateMachine
from contracts.logic.audit_trail import AuditTrail
from contracts.logic.version_ledger import VersionLedger
from contracts.models.approval import Approval
from contracts.models.audit_event import AuditEvent
from contracts.models.contract import Contract, ContractView
from contracts.models.contract_status import ContractStatus, normalize_status
from contracts.models.file_ref import FileRef, StorageArea
from contracts.repository.contract_repository import ContractRepository
from core.exceptions.errors import (
    ContractSignError,
    NotFoundError,
    PayloadTooLargeError,
    ValidationError,
)
from signature.logic.image_payload import parse_data_url
from signature.logic.naming_strategy import NamingContext, NamingStrategy, TimestampSuffixStrategy
from signature.logic.page_preview import PagePreview, render_page
from signature.logic.pdf_compositor import PdfCompositor
from signature.models.annotation_placement import PdfRect

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
PDF_MAGIC = b"%PDF-"


@dataclass(frozen=True)
class SignRequest:
    """One committed placement: page, rectangle in PDF points, stamp image."""
    page_index: int
    rect: PdfRect
    image_data_url: str
    notes: Optional[str] = None


@dataclass(frozen=True)
class UploadedPdf:
    filename: str
    content_type: str
    data: bytes


def clean_notes(notes: Optional[str]) -> Optional[str]:
    """Blank notes are stored as NULL; anything else verbatim."""
    if notes is None or not str(notes).strip():
        return None
    return str(notes)


def _require_text(value: Optional[str], field: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{field} is required.", code="missing_field", detail={"field": field})
    return text


class ContractService:
    def __init__(
        self,
        *,
        repository: ContractRepository,
        ledger: VersionLedger,
        machine: ApprovalStateMachine,
        directory: IdentityDirectory,
        blobs: BlobStore,
        audit: AuditTrail,
        compositor: Optional[PdfCompositor] = None,
        naming: Optional[NamingStrategy] = None,
        max_upload_bytes: int = 25 * 1024 * 1024,
    ) -> None:
        self._repo = repository
        self._ledger = ledger
        self._machine = machine
        self._directory = directory
        self._blobs = blobs
        self._audit = audit
        self._compositor = compositor or PdfCompositor()
        self._naming = naming or TimestampSuffixStrategy()
        self._max_upload_bytes = int(max_upload_bytes)

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_contract(self, contract_id: int) -> Contract:
        contract = self._repo.get_contract(contract_id)
        if contract is None:
            raise NotFoundError(f"Contract {contract_id} not found.", code="contract_not_found")
        return contract

    def _view(self, contract: Contract) -> ContractView:
        return ContractView(contract=contract, versions=self._ledger.version_set(contract.id))

    @contextmanager
    def _orphan_guard(self, ref: FileRef) -> Iterator[None]:
        """Reclaim *ref* if the pointer update that should adopt it fails."""
        try:
            yield
        except ContractSignError:
            logger.info("Pointer update refused; reclaiming %s", ref.path)
            self._ledger.reclaim([ref])
            raise

    def check_pdf_upload(self, upload: UploadedPdf) -> None:
        if upload is None or not upload.data:
            raise ValidationError("A PDF file is required.", code="file_required")
        if len(upload.data) > self._max_upload_bytes:
            limit_mb = self._max_upload_bytes // (1024 * 1024)
            raise PayloadTooLargeError(f"File too large. Max {limit_mb}MB.", detail={"max_bytes": self._max_upload_bytes})
        content_type = (upload.content_type or "").split(";", 1)[0].strip().lower()
        if content_type != PDF_MIME:
            raise ValidationError("Only PDF files are allowed.", code="not_pdf")
        if not upload.data.startswith(PDF_MAGIC):
            raise ValidationError("Uploaded file is not a PDF document.", code="not_pdf")

    def _compose(self, source_bytes: bytes, req: SignRequest) -> bytes:
        if req.page_index < 0:
            raise ValidationError("pageIndex must be >= 0", code="bad_payload")
        payload = parse_data_url(req.image_data_url)
        return self._compositor.compose(
            source_bytes=source_bytes,
            page_index=req.page_index,
            rect=req.rect,
            image_bytes=payload.data,
            image_kind=payload.kind,
        )

    # =========================================================================
    # Contracts
    # =========================================================================

    def list_contracts(self, *, owner_id: Optional[int] = None, status: Optional[str] = None) -> List[ContractView]:
        wanted = normalize_status(status) if status not in (None, "") else None
        return [self._view(c) for c in self._repo.list_contracts(owner_id=owner_id, status=wanted)]

    def get_contract(self, contract_id: int) -> ContractView:
        return self._view(self._require_contract(contract_id))

    def create_contract(
        self,
        *,
        owner_id: Optional[int],
        title: str,
        vendor: str,
        contract_code: str,
        contract_id: Optional[int] = None,
    ) -> ContractView:
        t = _require_text(title, "title")
        v = _require_text(vendor, "vendor")
        code = _require_text(contract_code, "contractId")
        if owner_id is None or not self._directory.exists(owner_id):
            raise ValidationError("owner_id must reference a known user.", code="owner_invalid")

        with self._repo.store.transaction():
            contract_id = self._repo.insert_contract(
                owner_id=owner_id, contract_code=code, title=t, vendor=v, contract_id=contract_id
            )
            self._audit.write(contract_id, "contract_created", actor_id=owner_id, details={"contract_code": code})
            view = self.get_contract(contract_id)
        logger.info("Contract %s created (%s) for owner %s", contract_id, code, owner_id)
        return view

    def update_contract(
        self,
        contract_id: int,
        *,
        title: Optional[str] = None,
        vendor: Optional[str] = None,
        contract_code: Optional[str] = None,
    ) -> ContractView:
        fields = {}
        if title is not None:
            fields["title"] = _require_text(title, "title")
        if vendor is not None:
            fields["vendor"] = _require_text(vendor, "vendor")
        if contract_code is not None:
            fields["contract_code"] = _require_text(contract_code, "contractId")

        with self._repo.store.transaction():
            self._require_contract(contract_id)
            if fields:
                self._repo.update_contract(contract_id, fields)
                self._audit.write(contract_id, "contract_updated", details=fields)
            view = self.get_contract(contract_id)
        return view

    def delete_contract(self, contract_id: int, *, actor_id: Optional[int] = None) -> None:
        """Cascade to files, approvals and version set; files are reclaimed after commit."""
        with self._repo.store.transaction():
            self._require_contract(contract_id)
            refs = self._ledger.forget(contract_id)
            self._repo.delete_contract(contract_id)
            self._audit.write(contract_id, "contract_deleted", actor_id=actor_id, details={"files": len(refs)})
        self._ledger.reclaim(refs)
        logger.info("Contract %s deleted (%s files queued for removal)", contract_id, len(refs))

    # =========================================================================
    # Uploads
    # =========================================================================

    def upload_legacy(self, upload: UploadedPdf) -> FileRef:
        self.check_pdf_upload(upload)
        ref = FileRef(StorageArea.UPLOADS, self._naming.upload_name(upload.filename))
        self._ledger.store_artifact(ref, upload.data)
        logger.info("Stored upload %s (%d bytes)", ref.name, len(upload.data))
        return ref

    def list_uploads(self) -> List[str]:
        return [n for n in self._blobs.list_names(StorageArea.UPLOADS) if n.lower().endswith(".pdf")]

    def upload_original(self, contract_id: int, upload: UploadedPdf, *, actor_id: Optional[int] = None) -> ContractView:
        self._require_contract(contract_id)
        self.check_pdf_upload(upload)
        ref = FileRef(StorageArea.UPLOADS, self._naming.upload_name(upload.filename))
        self._ledger.store_artifact(ref, upload.data)
        with self._orphan_guard(ref):
            self._machine.upload_original(contract_id, ref, actor_id=actor_id)
        return self.get_contract(contract_id)

    # =========================================================================
    # Signing
    # =========================================================================

    def sign_legacy(self, filename: str, req: SignRequest) -> FileRef:
        """Filename-addressed stamping; produces an artifact, touches no contract."""
        source = self._ledger.resolve_legacy_source(filename)
        out = self._compose(self._blobs.get(source), req)
        ref = FileRef(StorageArea.STORAGE, self._naming.signed_name(NamingContext(source_name=source.name)))
        self._ledger.store_artifact(ref, out)
        logger.info("Signed %s -> %s", source.name, ref.name)
        return ref

    def sign_contract(self, contract_id: int, req: SignRequest, *, actor_id: Optional[int] = None) -> ContractView:
        self._require_contract(contract_id)
        source, data = self._ledger.load_source(contract_id)
        out = self._compose(data, req)
        ref = FileRef(StorageArea.STORAGE, self._naming.signed_name(NamingContext(contract_id=contract_id)))
        self._ledger.store_artifact(ref, out)
        with self._orphan_guard(ref):
            self._machine.owner_signed(contract_id, ref, actor_id=actor_id)
        logger.info("Contract %s signed by owner from %s -> %s", contract_id, source.name, ref.name)
        return self.get_contract(contract_id)

    def render_preview(self, contract_id: int, page_index: int, scale: float) -> PagePreview:
        self._require_contract(contract_id)
        _, data = self._ledger.load_source(contract_id)
        return render_page(data, page_index, scale)

    # =========================================================================
    # Approvals
    # =========================================================================

    def request_approval(self, contract_id: int, approver_id: Optional[int], *, actor_id: Optional[int] = None) -> Tuple[Approval, bool]:
        if approver_id is None or approver_id <= 0:
            raise ValidationError("approver_id is required.", code="missing_field", detail={"field": "approver_id"})
        approval, created = self._machine.request_approval(contract_id, approver_id, actor_id=actor_id)
        if created:
            logger.info("Approval %s requested from user %s for contract %s", approval.id, approver_id, contract_id)
        return approval, created

    def list_approvals(self, approver_id: Optional[int]) -> List[Tuple[Approval, ContractView]]:
        if approver_id is None or approver_id <= 0:
            raise ValidationError("approver_id is required.", code="missing_field", detail={"field": "approver_id"})
        result: List[Tuple[Approval, ContractView]] = []
        for approval in self._repo.list_approvals(approver_id=approver_id):
            contract = self._repo.get_contract(approval.contract_id)
            if contract is not None:
                result.append((approval, self._view(contract)))
        return result

    def get_approval(self, approval_id: int) -> Approval:
        approval = self._repo.get_approval(approval_id)
        if approval is None:
            raise NotFoundError(f"Approval {approval_id} not found.", code="approval_not_found")
        return approval

    def sign_approval(self, approval_id: int, req: SignRequest) -> Tuple[Approval, ContractStatus]:
        approval = self.get_approval(approval_id)
        self._machine.check_signable(approval)

        contract_id = approval.contract_id
        source, data = self._ledger.load_source(contract_id)
        out = self._compose(data, req)
        ref = FileRef(
            StorageArea.STORAGE,
            self._naming.signed_name(NamingContext(contract_id=contract_id, approval_id=approval_id)),
        )
        self._ledger.store_artifact(ref, out)
        with self._orphan_guard(ref):
            updated, status = self._machine.approval_signed(approval_id, ref, notes=clean_notes(req.notes))
        logger.info("Approval %s signed from %s; contract %s is %s", approval_id, source.name, contract_id, status.value)
        return updated, status

    def reject_approval(self, approval_id: int, notes: Optional[str] = None) -> Tuple[Approval, ContractStatus]:
        updated, status = self._machine.reject(approval_id, notes=clean_notes(notes))
        logger.info("Approval %s rejected; contract %s back to %s", approval_id, updated.contract_id, status.value)
        return updated, status

    def audit_events(self, contract_id: int) -> List[AuditEvent]:
        self._require_contract(contract_id)
        return self._audit.for_contract(contract_id)
