from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional


@dataclass(slots=True)
class AuditEvent:
    id: Optional[int]
    contract_id: int
    action: str
    ts_utc: str
    approval_id: Optional[int] = None
    actor_id: Optional[int] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "AuditEvent":
        return cls(
            id=row["id"],
            contract_id=int(row["contract_id"]),
            action=row["action"],
            ts_utc=row["ts_utc"],
            approval_id=row.get("approval_id"),
            actor_id=row.get("actor_id"),
            details=json.loads(row["details"] or "{}"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "contract_id": self.contract_id,
            "approval_id": self.approval_id,
            "action": self.action,
            "actor_id": self.actor_id,
            "details": self.details,
            "ts_utc": self.ts_utc,
        }
