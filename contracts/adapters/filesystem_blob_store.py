"""Filesystem implementation of BlobStore.

Uploads and derived artifacts live in two separate directories.
"""

from __future__ import annotations
from pathlib import Path

from contracts.adapters.blob_store import BlobStore
from contracts.models.file_ref import FileRef, StorageArea
from core.exceptions.errors import NotFoundError, StorageError


class FilesystemBlobStore(BlobStore):
    """Local filesystem implementation of BlobStore."""

    def __init__(self, uploads_dir: str | Path, storage_dir: str | Path):
        """
        Args:
            uploads_dir: Directory for uploaded originals
            storage_dir: Directory for signed artifacts
        """
        self._roots = {
            StorageArea.UPLOADS: Path(uploads_dir),
            StorageArea.STORAGE: Path(storage_dir),
        }
        for root in self._roots.values():
            root.mkdir(parents=True, exist_ok=True)

    def _path(self, ref: FileRef) -> Path:
        return self._roots[ref.area] / ref.name

    def put(self, ref: FileRef, data: bytes) -> None:
        """Exclusive create; artifacts are append-only and never overwritten."""
        dest = self._path(ref)
        try:
            with open(dest, "xb") as fh:
                fh.write(data)
        except FileExistsError as exc:
            raise StorageError(f"Stored file already exists: {ref.path}", code="blob_exists") from exc
        except OSError as exc:
            raise StorageError(f"Failed to write {ref.path}: {exc}") from exc

    def get(self, ref: FileRef) -> bytes:
        path = self._path(ref)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError(f"File not found: {ref.path}", code="file_not_found") from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {ref.path}: {exc}") from exc

    def delete(self, ref: FileRef) -> bool:
        path = self._path(ref)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete {ref.path}: {exc}", code="delete_failed") from exc

    def exists(self, ref: FileRef) -> bool:
        return self._path(ref).is_file()

    def list_names(self, area: StorageArea) -> list[str]:
        root = self._roots[area]
        if not root.exists():
            return []
        return sorted(p.name for p in root.iterdir() if p.is_file() and not p.name.startswith("."))
