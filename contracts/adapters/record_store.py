"""Record store abstraction.

Transactional CRUD used by the repository layer. Implementations translate
driver errors into the service error taxonomy (ConflictError for unique
violations, IntegrityError for everything else constraint/schema related).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import Any, Dict, List, Optional


class RecordStore(ABC):
    """Abstract transactional record store."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager["RecordStore"]:
        """
        Open a transaction; nested calls join the outer one.
        Commits on normal exit, rolls back on exception.
        """
        raise NotImplementedError

    @abstractmethod
    def execute(self, query: str, params: tuple = ()) -> int:
        """
        Execute a statement.

        Returns:
            Number of affected rows
        """
        raise NotImplementedError

    @abstractmethod
    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch single row as dictionary (None if no row)."""
        raise NotImplementedError

    @abstractmethod
    def fetchall(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows as list of dictionaries."""
        raise NotImplementedError

    @abstractmethod
    def insert(self, table: str, data: Dict[str, Any]) -> int:
        """Insert row and return last inserted ID."""
        raise NotImplementedError

    @abstractmethod
    def update(self, table: str, data: Dict[str, Any], where: str, where_params: tuple = ()) -> int:
        """
        Update rows and return count of affected rows.

        Args:
            table: Table name
            data: Column-value mapping for SET clause
            where: WHERE clause (without "WHERE" keyword)
            where_params: Parameters for WHERE clause
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, table: str, where: str, where_params: tuple = ()) -> int:
        """Delete rows and return count of affected rows."""
        raise NotImplementedError

    @abstractmethod
    def executescript(self, script: str) -> None:
        """Execute multiple SQL statements (schema creation)."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError
