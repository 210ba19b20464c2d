"""
Document Version Ledger
=======================

Tracks, per contract, the chain original -> signed artifact.

- Signing always reads the *latest* version, re-read from the record store
  on every call (no caching of file identity across requests).
- New artifacts are immutable; pointers move, files are never rewritten.
- Superseded files are returned to the caller, who hands them to the
  reclaimer once its transaction has committed.

Status transitions that accompany these pointer updates are applied by the
approval state machine in the same transaction.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Tuple

from contracts.adapters.blob_store import BlobStore
from contracts.logic.reclaimer import ArtifactReclaimer
from contracts.models.document_version_set import DocumentVersionSet
from contracts.models.file_ref import FileRef, StorageArea
from contracts.repository.contract_repository import ContractRepository
from core.exceptions.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class VersionLedger:
    def __init__(self, repository: ContractRepository, blobs: BlobStore, reclaimer: ArtifactReclaimer) -> None:
        self._repo = repository
        self._blobs = blobs
        self._reclaimer = reclaimer

    # ---- reads --------------------------------------------------------------

    def version_set(self, contract_id: int) -> DocumentVersionSet:
        return self._repo.get_versions(contract_id)

    def resolve_source(self, contract_id: int) -> FileRef:
        """signed_ref if present, else original_ref; NotFoundError if neither."""
        latest = self._repo.get_versions(contract_id).latest
        if latest is None:
            raise NotFoundError(
                f"No PDF uploaded yet for contract {contract_id}.", code="source_not_uploaded"
            )
        return latest

    def load_source(self, contract_id: int) -> Tuple[FileRef, bytes]:
        ref = self.resolve_source(contract_id)
        if not self._blobs.exists(ref):
            raise NotFoundError(f"Source PDF not found: {ref.path}", code="source_missing")
        return ref, self._blobs.get(ref)

    def resolve_legacy_source(self, filename: str) -> FileRef:
        """
        Legacy filename-addressed route: trusts the client filename (basename
        only) but requires the file to exist in the upload area.
        """
        try:
            ref = FileRef(StorageArea.UPLOADS, str(filename or "").replace("\\", "/").rsplit("/", 1)[-1])
        except ValidationError:
            raise ValidationError("filename is required", code="bad_payload") from None
        if not self._blobs.exists(ref):
            raise NotFoundError("Source PDF not found", code="source_missing")
        return ref

    # ---- pointer updates ----------------------------------------------------

    def record_upload(self, contract_id: int, original_ref: FileRef) -> List[FileRef]:
        """Replace the original; any signed artifact derived from the old one is dropped."""
        with self._repo.store.transaction():
            prev = self._repo.get_versions(contract_id)
            self._repo.save_versions(DocumentVersionSet(contract_id, original_ref=original_ref, signed_ref=None))
        return [r for r in (prev.original_ref, prev.signed_ref) if r is not None and r != original_ref]

    def record_signed(self, contract_id: int, signed_ref: FileRef) -> List[FileRef]:
        """At most one live signed artifact per contract; the previous one is superseded."""
        with self._repo.store.transaction():
            prev = self._repo.get_versions(contract_id)
            self._repo.save_versions(
                DocumentVersionSet(contract_id, original_ref=prev.original_ref, signed_ref=signed_ref)
            )
        if prev.signed_ref is not None and prev.signed_ref != signed_ref:
            return [prev.signed_ref]
        return []

    def record_approval_signed(self, approval_id: int, signed_ref: FileRef) -> None:
        """Sets the approval's own artifact; the contract's signed_ref is untouched."""
        self._repo.set_approval_signed_ref(approval_id, signed_ref)

    def forget(self, contract_id: int) -> List[FileRef]:
        """Every file owned by a contract (used before cascading deletion)."""
        versions = self._repo.get_versions(contract_id)
        refs: List[FileRef] = [r for r in (versions.original_ref, versions.signed_ref) if r is not None]
        refs.extend(self._repo.approval_signed_refs(contract_id))
        return refs

    # ---- artifacts ----------------------------------------------------------

    def store_artifact(self, ref: FileRef, data: bytes) -> FileRef:
        """Write a new artifact before any pointer references it."""
        self._blobs.put(ref, data)
        return ref

    def reclaim(self, refs: Iterable[Optional[FileRef]]) -> None:
        self._reclaimer.submit(refs)
