"""
Best-effort deletion of superseded artifacts.

Deletion is fire-and-forget: callers hand over refs after their pointer
update committed and never wait for the result. Failures are logged and
dropped; a missing file is not a failure.
"""
from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Lock
from typing import Iterable, List, Optional

from contracts.adapters.blob_store import BlobStore
from contracts.models.file_ref import FileRef
from core.exceptions.errors import StorageError

logger = logging.getLogger(__name__)


class ArtifactReclaimer:
    def __init__(self, blobs: BlobStore, *, synchronous: bool = False, max_workers: int = 2) -> None:
        self._blobs = blobs
        self._executor: Optional[ThreadPoolExecutor] = None
        if not synchronous:
            self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="reclaim")
        self._pending: List[Future] = []
        self._lock = Lock()

    def submit(self, refs: Iterable[Optional[FileRef]]) -> None:
        for ref in refs:
            if ref is None:
                continue
            if self._executor is None:
                self._delete(ref)
                continue
            fut = self._executor.submit(self._delete, ref)
            with self._lock:
                self._pending = [f for f in self._pending if not f.done()]
                self._pending.append(fut)

    def _delete(self, ref: FileRef) -> None:
        try:
            if self._blobs.delete(ref):
                logger.info("Reclaimed superseded file %s", ref.path)
        except StorageError as exc:
            logger.warning("Failed to delete superseded file %s: %s", ref.path, exc.message)

    def drain(self) -> None:
        """Wait for queued deletions (tests and shutdown)."""
        with self._lock:
            pending, self._pending = self._pending, []
        for fut in pending:
            fut.result()

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
