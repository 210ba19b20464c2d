from __future__ import annotations
import posixpath
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from urllib.parse import quote, unquote

from core.exceptions.errors import ValidationError


class StorageArea(str, Enum):
    """Upload area holds originals; storage area holds derived artifacts."""
    UPLOADS = "uploads"
    STORAGE = "storage"


@dataclass(frozen=True)
class FileRef:
    area: StorageArea
    name: str

    def __post_init__(self) -> None:
        if not self.name or self.name != posixpath.basename(self.name) or self.name in {".", ".."}:
            raise ValidationError(f"Invalid stored file name: {self.name!r}", code="invalid_filename")

    @property
    def path(self) -> str:
        """Storage-relative public path, e.g. ``/storage/contract-7-signed-....pdf``."""
        return f"/{self.area.value}/{quote(self.name)}"

    @classmethod
    def from_path(cls, path: str) -> "FileRef":
        raw = str(path or "").strip()
        for area in StorageArea:
            prefix = f"/{area.value}/"
            if raw.startswith(prefix):
                name = posixpath.basename(unquote(raw[len(prefix):]))
                return cls(area, name)
        raise ValidationError(f"Not a stored file path: {path!r}", code="invalid_path")

    @classmethod
    def from_optional_path(cls, path: Optional[str]) -> Optional["FileRef"]:
        return cls.from_path(path) if path else None

    def __str__(self) -> str:
        return self.path
