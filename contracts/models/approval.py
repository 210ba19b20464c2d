from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

from .file_ref import FileRef


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self is not ApprovalStatus.PENDING


@dataclass(slots=True)
class Approval:
    """
    One approver's decision on one contract.
    Approved/rejected records are terminal; a new cycle creates a new record.
    """
    id: int
    contract_id: int
    approver_id: int
    status: ApprovalStatus
    notes: Optional[str] = None
    signed_ref: Optional[FileRef] = None
    signed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Approval":
        return cls(
            id=int(row["id"]),
            contract_id=int(row["contract_id"]),
            approver_id=int(row["approver_id"]),
            status=ApprovalStatus(row["status"]),
            notes=row.get("notes"),
            signed_ref=FileRef.from_optional_path(row.get("signed_path")),
            signed_at=row.get("signed_at"),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "approval_id": self.id,
            "contract_id": self.contract_id,
            "approver_id": self.approver_id,
            "approval_status": self.status.value,
            "notes": self.notes or "",
            "approval_signed_path": self.signed_ref.path if self.signed_ref else None,
            "signed_at": self.signed_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
