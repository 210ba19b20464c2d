"""In-memory BlobStore, used by tests and throwaway instances."""

from __future__ import annotations
from threading import RLock
from typing import Dict

from contracts.adapters.blob_store import BlobStore
from contracts.models.file_ref import FileRef, StorageArea
from core.exceptions.errors import NotFoundError, StorageError


class InMemoryBlobStore(BlobStore):

    def __init__(self) -> None:
        self._blobs: Dict[FileRef, bytes] = {}
        self._lock = RLock()

    def put(self, ref: FileRef, data: bytes) -> None:
        with self._lock:
            if ref in self._blobs:
                raise StorageError(f"Stored file already exists: {ref.path}", code="blob_exists")
            self._blobs[ref] = bytes(data)

    def get(self, ref: FileRef) -> bytes:
        with self._lock:
            try:
                return self._blobs[ref]
            except KeyError:
                raise NotFoundError(f"File not found: {ref.path}", code="file_not_found") from None

    def delete(self, ref: FileRef) -> bool:
        with self._lock:
            return self._blobs.pop(ref, None) is not None

    def exists(self, ref: FileRef) -> bool:
        with self._lock:
            return ref in self._blobs

    def list_names(self, area: StorageArea) -> list[str]:
        with self._lock:
            return sorted(ref.name for ref in self._blobs if ref.area == area)
