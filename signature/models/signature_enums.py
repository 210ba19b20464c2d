# signature/models/signature_enums.py
from __future__ import annotations
from enum import Enum


class ImageKind(str, Enum):
    """Raster encodings accepted for a signature stamp."""
    PNG = "png"
    JPEG = "jpeg"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def pil_format(self) -> str:
        return self.value.upper()
