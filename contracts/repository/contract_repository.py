"""Record-store repository for contracts, document versions and approvals.

Lightweight repository - only CRUD and simple queries.
Business rules live in the ledger and the approval state machine.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from contracts.adapters.record_store import RecordStore
from contracts.models.approval import Approval, ApprovalStatus
from contracts.models.contract import Contract
from contracts.models.contract_status import ContractStatus
from contracts.models.document_version_set import DocumentVersionSet
from contracts.models.file_ref import FileRef

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _quoted(values) -> str:
    return ", ".join(f"'{v.value}'" for v in values)


SCHEMA = f"""
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    full_name TEXT NOT NULL,
    email TEXT NOT NULL UNIQUE,
    role TEXT NOT NULL DEFAULT 'user',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS contracts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    owner_id INTEGER NOT NULL REFERENCES users(id),
    contract_code TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    vendor TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'draft' CHECK (status IN ({_quoted(ContractStatus)})),
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS contract_files (
    contract_id INTEGER PRIMARY KEY REFERENCES contracts(id) ON DELETE CASCADE,
    upload_path TEXT,
    signed_path TEXT,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS approvals (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    contract_id INTEGER NOT NULL REFERENCES contracts(id) ON DELETE CASCADE,
    approver_id INTEGER NOT NULL REFERENCES users(id),
    status TEXT NOT NULL DEFAULT 'pending' CHECK (status IN ({_quoted(ApprovalStatus)})),
    notes TEXT,
    signed_path TEXT,
    signed_at TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE UNIQUE INDEX IF NOT EXISTS ux_approvals_one_pending
    ON approvals (contract_id, approver_id) WHERE status = 'pending';

CREATE INDEX IF NOT EXISTS ix_approvals_approver ON approvals (approver_id);

CREATE TABLE IF NOT EXISTS audit_events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    contract_id INTEGER NOT NULL,
    approval_id INTEGER,
    action TEXT NOT NULL,
    actor_id INTEGER,
    details TEXT,
    ts_utc TEXT NOT NULL
);
"""


class ContractRepository:
    """Record-store backend for the contracts feature."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._store.executescript(SCHEMA)

    @property
    def store(self) -> RecordStore:
        return self._store

    # =========================================================================
    # Contracts
    # =========================================================================

    def insert_contract(
        self,
        *,
        owner_id: int,
        contract_code: str,
        title: str,
        vendor: str,
        contract_id: Optional[int] = None,
    ) -> int:
        now = utc_now()
        data: Dict[str, Any] = {
            "owner_id": owner_id,
            "contract_code": contract_code,
            "title": title,
            "vendor": vendor,
            "status": ContractStatus.DRAFT.value,
            "created_at": now,
            "updated_at": now,
        }
        if contract_id is not None:
            data = {"id": contract_id, **data}
        return self._store.insert("contracts", data)

    def get_contract(self, contract_id: int) -> Optional[Contract]:
        row = self._store.fetchone("SELECT * FROM contracts WHERE id = ?", (contract_id,))
        return Contract.from_row(row) if row else None

    def list_contracts(
        self,
        *,
        owner_id: Optional[int] = None,
        status: Optional[ContractStatus] = None,
    ) -> List[Contract]:
        clauses, params = [], []
        if owner_id is not None:
            clauses.append("owner_id = ?")
            params.append(owner_id)
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._store.fetchall(f"SELECT * FROM contracts{where} ORDER BY id DESC", tuple(params))
        return [Contract.from_row(r) for r in rows]

    def update_contract(self, contract_id: int, fields: Dict[str, Any]) -> int:
        if not fields:
            return 0
        return self._store.update("contracts", {**fields, "updated_at": utc_now()}, "id = ?", (contract_id,))

    def set_status(self, contract_id: int, status: ContractStatus) -> int:
        return self._store.update(
            "contracts", {"status": status.value, "updated_at": utc_now()}, "id = ?", (contract_id,)
        )

    def delete_contract(self, contract_id: int) -> int:
        return self._store.delete("contracts", "id = ?", (contract_id,))

    # =========================================================================
    # Document versions
    # =========================================================================

    def get_versions(self, contract_id: int) -> DocumentVersionSet:
        row = self._store.fetchone(
            "SELECT upload_path, signed_path FROM contract_files WHERE contract_id = ?", (contract_id,)
        )
        return DocumentVersionSet.from_row(contract_id, row)

    def save_versions(self, versions: DocumentVersionSet) -> None:
        data = {
            "upload_path": versions.original_ref.path if versions.original_ref else None,
            "signed_path": versions.signed_ref.path if versions.signed_ref else None,
            "updated_at": utc_now(),
        }
        changed = self._store.update("contract_files", data, "contract_id = ?", (versions.contract_id,))
        if changed == 0:
            self._store.insert("contract_files", {"contract_id": versions.contract_id, **data})

    # =========================================================================
    # Approvals
    # =========================================================================

    def get_approval(self, approval_id: int) -> Optional[Approval]:
        row = self._store.fetchone("SELECT * FROM approvals WHERE id = ?", (approval_id,))
        return Approval.from_row(row) if row else None

    def find_pending_approval(self, contract_id: int, approver_id: int) -> Optional[Approval]:
        row = self._store.fetchone(
            "SELECT * FROM approvals WHERE contract_id = ? AND approver_id = ? AND status = ? "
            "ORDER BY id DESC LIMIT 1",
            (contract_id, approver_id, ApprovalStatus.PENDING.value),
        )
        return Approval.from_row(row) if row else None

    def insert_approval(self, contract_id: int, approver_id: int) -> int:
        now = utc_now()
        return self._store.insert(
            "approvals",
            {
                "contract_id": contract_id,
                "approver_id": approver_id,
                "status": ApprovalStatus.PENDING.value,
                "created_at": now,
                "updated_at": now,
            },
        )

    def set_approval_signed_ref(self, approval_id: int, signed_ref: FileRef) -> int:
        return self._store.update(
            "approvals",
            {"signed_path": signed_ref.path, "updated_at": utc_now()},
            "id = ?",
            (approval_id,),
        )

    def mark_approved(self, approval_id: int, *, notes: Optional[str]) -> int:
        now = utc_now()
        return self._store.update(
            "approvals",
            {
                "status": ApprovalStatus.APPROVED.value,
                "notes": notes,
                "signed_at": now,
                "updated_at": now,
            },
            "id = ? AND status = ?",
            (approval_id, ApprovalStatus.PENDING.value),
        )

    def mark_rejected(self, approval_id: int, *, notes: Optional[str]) -> int:
        return self._store.update(
            "approvals",
            {"status": ApprovalStatus.REJECTED.value, "notes": notes, "updated_at": utc_now()},
            "id = ? AND status = ?",
            (approval_id, ApprovalStatus.PENDING.value),
        )

    def count_pending(self, contract_id: int) -> int:
        row = self._store.fetchone(
            "SELECT COUNT(1) AS cnt FROM approvals WHERE contract_id = ? AND status = ?",
            (contract_id, ApprovalStatus.PENDING.value),
        )
        return int(row["cnt"]) if row else 0

    def list_approvals(
        self,
        *,
        approver_id: Optional[int] = None,
        contract_id: Optional[int] = None,
    ) -> List[Approval]:
        clauses, params = [], []
        if approver_id is not None:
            clauses.append("approver_id = ?")
            params.append(approver_id)
        if contract_id is not None:
            clauses.append("contract_id = ?")
            params.append(contract_id)
        where = f" WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._store.fetchall(f"SELECT * FROM approvals{where} ORDER BY id DESC", tuple(params))
        return [Approval.from_row(r) for r in rows]

    def approval_signed_refs(self, contract_id: int) -> List[FileRef]:
        rows = self._store.fetchall(
            "SELECT signed_path FROM approvals WHERE contract_id = ? AND signed_path IS NOT NULL",
            (contract_id,),
        )
        return [FileRef.from_path(r["signed_path"]) for r in rows]
