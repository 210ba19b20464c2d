"""Blob store abstraction.

Defines the interface for PDF file storage. The core only talks to this
interface; it never touches filesystem paths directly.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from contracts.models.file_ref import FileRef, StorageArea


class BlobStore(ABC):
    """Abstract storage for uploaded originals and derived artifacts."""

    @abstractmethod
    def put(self, ref: FileRef, data: bytes) -> None:
        """
        Persist bytes under *ref*. Refs are unique by construction;
        an existing blob with the same ref is an error.

        Raises:
            StorageError: on write failure or name collision
        """
        raise NotImplementedError

    @abstractmethod
    def get(self, ref: FileRef) -> bytes:
        """
        Read bytes stored under *ref*.

        Raises:
            NotFoundError: if nothing is stored under *ref*
        """
        raise NotImplementedError

    @abstractmethod
    def delete(self, ref: FileRef) -> bool:
        """
        Remove a blob. A missing blob is not an error.

        Returns:
            True if something was deleted

        Raises:
            StorageError: if the blob exists but cannot be removed
        """
        raise NotImplementedError

    @abstractmethod
    def exists(self, ref: FileRef) -> bool:
        raise NotImplementedError

    @abstractmethod
    def list_names(self, area: StorageArea) -> list[str]:
        """Names stored in *area*, sorted."""
        raise NotImplementedError
