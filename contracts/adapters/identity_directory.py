"""Identity lookups for owners and approvers.

Authentication and credential storage are external; the service only needs
to know whether a user id refers to a known identity.
"""

from __future__ import annotations
from typing import Optional, Protocol

from contracts.adapters.record_store import RecordStore
from contracts.models.user import User
from contracts.repository.contract_repository import SCHEMA, utc_now


class IdentityDirectory(Protocol):
    def get(self, user_id: int) -> Optional[User]: ...
    def exists(self, user_id: int) -> bool: ...


class RecordStoreIdentityDirectory:
    """Users table in the shared record store."""

    def __init__(self, store: RecordStore) -> None:
        self._store = store
        self._store.executescript(SCHEMA)

    def get(self, user_id: int) -> Optional[User]:
        row = self._store.fetchone("SELECT * FROM users WHERE id = ?", (user_id,))
        return User.from_row(row) if row else None

    def exists(self, user_id: int) -> bool:
        return self._store.fetchone("SELECT 1 AS ok FROM users WHERE id = ?", (user_id,)) is not None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._store.fetchone("SELECT * FROM users WHERE email = ?", (email.strip(),))
        return User.from_row(row) if row else None

    def register(self, *, full_name: str, email: str, role: str = "user", user_id: Optional[int] = None) -> User:
        """
        Add an identity (seeding/admin tooling).

        Raises:
            ConflictError: if the email is already registered
        """
        data = {
            "full_name": full_name.strip(),
            "email": email.strip(),
            "role": role,
            "created_at": utc_now(),
        }
        if user_id is not None:
            data = {"id": user_id, **data}
        new_id = self._store.insert("users", data)
        return User(id=new_id, full_name=data["full_name"], email=data["email"], role=role)
