"""SQLite implementation of RecordStore.

One shared connection guarded by a re-entrant lock. Transactions use
``BEGIN IMMEDIATE`` so a read-then-write sequence (e.g. counting pending
approvals before flipping the contract status) cannot interleave with
another writer.
"""

from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from threading import RLock
from typing import Any, Dict, Iterator, List, Optional
import logging
import sqlite3

from contracts.adapters.record_store import RecordStore
from core.common.db_interface import create_sqlite_connection
from core.exceptions.errors import ConflictError, IntegrityError

logger = logging.getLogger(__name__)


def _translate(exc: sqlite3.Error, query: str) -> Exception:
    msg = str(exc)
    if isinstance(exc, sqlite3.IntegrityError):
        if "UNIQUE" in msg.upper():
            return ConflictError("Record already exists (duplicate).", code="duplicate", detail=msg)
        return IntegrityError("Record violates a referential constraint.", code="constraint_violation", detail=msg)
    if isinstance(exc, sqlite3.OperationalError):
        return IntegrityError("Record store schema or state does not match.", code="store_operational", detail=msg)
    logger.error("Unexpected SQLite error for %r: %s", query, msg)
    return IntegrityError("Record store failure.", code="store_error", detail=msg)


class SQLiteRecordStore(RecordStore):
    """SQLite implementation of RecordStore (file path or ``:memory:``)."""

    def __init__(self, db_path: str | Path):
        """
        Args:
            db_path: Path to SQLite database file, or ":memory:"
        """
        self._db_path = db_path
        self._conn: Optional[sqlite3.Connection] = None
        self._lock = RLock()
        self._depth = 0

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create connection."""
        if self._conn is None:
            self._conn = create_sqlite_connection(
                self._db_path,
                check_same_thread=False,
                foreign_keys=True,
            )
        return self._conn

    def _run(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self.conn.execute(query, params)
        except sqlite3.Error as exc:
            raise _translate(exc, query) from exc

    @contextmanager
    def transaction(self) -> Iterator["SQLiteRecordStore"]:
        with self._lock:
            outer = self._depth == 0
            if outer:
                self._run("BEGIN IMMEDIATE")
            self._depth += 1
            try:
                yield self
            except BaseException:
                self._depth -= 1
                if outer:
                    self.conn.execute("ROLLBACK")
                raise
            self._depth -= 1
            if outer:
                try:
                    self._run("COMMIT")
                except IntegrityError:
                    self.conn.execute("ROLLBACK")
                    raise

    def execute(self, query: str, params: tuple = ()) -> int:
        with self._lock:
            return self._run(query, params).rowcount

    def fetchone(self, query: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        """Fetch single row as dictionary."""
        with self._lock:
            row = self._run(query, params).fetchone()
            return dict(row) if row else None

    def fetchall(self, query: str, params: tuple = ()) -> List[Dict[str, Any]]:
        """Fetch all rows as list of dictionaries."""
        with self._lock:
            rows = self._run(query, params).fetchall()
            return [dict(row) for row in rows]

    def insert(self, table: str, data: Dict[str, Any]) -> int:
        """Insert row and return last inserted ID."""
        columns = ", ".join(data.keys())
        placeholders = ", ".join(["?"] * len(data))
        query = f"INSERT INTO {table} ({columns}) VALUES ({placeholders})"
        with self._lock:
            return int(self._run(query, tuple(data.values())).lastrowid)

    def update(self, table: str, data: Dict[str, Any], where: str, where_params: tuple = ()) -> int:
        """Update rows and return count of affected rows."""
        set_clause = ", ".join([f"{key} = ?" for key in data.keys()])
        params = tuple(data.values()) + tuple(where_params)
        query = f"UPDATE {table} SET {set_clause} WHERE {where}"
        with self._lock:
            return self._run(query, params).rowcount

    def delete(self, table: str, where: str, where_params: tuple = ()) -> int:
        """Delete rows and return count of affected rows."""
        query = f"DELETE FROM {table} WHERE {where}"
        with self._lock:
            return self._run(query, tuple(where_params)).rowcount

    def executescript(self, script: str) -> None:
        with self._lock:
            try:
                self.conn.executescript(script)
            except sqlite3.Error as exc:
                raise _translate(exc, "<script>") from exc

    def close(self) -> None:
        """Close database connection."""
        with self._lock:
            if self._conn:
                try:
                    self._conn.close()
                finally:
                    self._conn = None
