from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .contract_status import ContractStatus, status_label
from .document_version_set import DocumentVersionSet


@dataclass(slots=True)
class Contract:
    id: int
    owner_id: int
    contract_code: str
    title: str
    vendor: str
    status: ContractStatus
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Contract":
        return cls(
            id=int(row["id"]),
            owner_id=int(row["owner_id"]),
            contract_code=row["contract_code"] or "",
            title=row["title"] or "",
            vendor=row["vendor"] or "",
            status=ContractStatus(row["status"]),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


@dataclass(slots=True)
class ContractView:
    """Contract joined with its current document versions."""
    contract: Contract
    versions: DocumentVersionSet

    def as_dict(self) -> dict[str, Any]:
        c = self.contract
        return {
            "id": c.id,
            "title": c.title,
            "vendor": c.vendor,
            "contractId": c.contract_code,
            "status": c.status.value,
            "status_label": status_label(c.status),
            "upload_path": self.versions.original_ref.path if self.versions.original_ref else None,
            "signed_path": self.versions.signed_ref.path if self.versions.signed_ref else None,
            "owner_id": c.owner_id,
        }
