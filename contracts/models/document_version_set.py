from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .file_ref import FileRef


@dataclass(frozen=True)
class DocumentVersionSet:
    """
    original_ref: latest uploaded source PDF.
    signed_ref:   owner-signed artifact derived from *this* original, or None.
    """
    contract_id: int
    original_ref: Optional[FileRef] = None
    signed_ref: Optional[FileRef] = None

    @property
    def latest(self) -> Optional[FileRef]:
        return self.signed_ref or self.original_ref

    @classmethod
    def from_row(cls, contract_id: int, row: Optional[Mapping[str, Any]]) -> "DocumentVersionSet":
        if not row:
            return cls(contract_id)
        return cls(
            contract_id=contract_id,
            original_ref=FileRef.from_optional_path(row.get("upload_path")),
            signed_ref=FileRef.from_optional_path(row.get("signed_path")),
        )
