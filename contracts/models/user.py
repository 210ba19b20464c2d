from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping


@dataclass(slots=True)
class User:
    """Identity known to the service (owner or approver). Credentials live elsewhere."""
    id: int
    full_name: str
    email: str
    role: str = "user"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "User":
        return cls(
            id=int(row["id"]),
            full_name=row["full_name"],
            email=row["email"],
            role=row["role"] or "user",
        )
