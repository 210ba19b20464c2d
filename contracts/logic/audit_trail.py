from __future__ import annotations

import json
from typing import Any, List, Optional

from contracts.adapters.record_store import RecordStore
from contracts.models.audit_event import AuditEvent
from contracts.repository.contract_repository import utc_now


class AuditTrail:
    """Append-only event log; written inside the caller's transaction."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store

    def write(
        self,
        contract_id: int,
        action: str,
        *,
        actor_id: Optional[int] = None,
        approval_id: Optional[int] = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self._store.insert(
            "audit_events",
            {
                "contract_id": contract_id,
                "approval_id": approval_id,
                "action": action,
                "actor_id": actor_id,
                "details": json.dumps(details or {}, ensure_ascii=False),
                "ts_utc": utc_now(),
            },
        )

    def for_contract(self, contract_id: int) -> List[AuditEvent]:
        rows = self._store.fetchall(
            "SELECT * FROM audit_events WHERE contract_id = ? ORDER BY id", (contract_id,)
        )
        return [AuditEvent.from_row(r) for r in rows]
