from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class PdfRect:
    """
    Rectangle on a PDF page in points (1 pt = 1/72 inch), origin bottom-left.
    (x, y) is the lower-left corner.
    """
    x: float
    y: float
    width: float
    height: float

    @property
    def top(self) -> float:
        return self.y + self.height

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass(frozen=True)
class PixelRect:
    """Rectangle on a rendered page canvas in pixels, origin top-left."""
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class AnnotationPlacement:
    """
    One stamp placement held by the client until commit.
    Parameterizes exactly one compose call; never persisted on its own.
    """
    page_index: int
    rect: PdfRect
    image_data_url: str

    def to_payload(self) -> Dict[str, Any]:
        """Sign request body as sent over the wire."""
        return {
            "pageIndex": self.page_index,
            "x": self.rect.x,
            "y": self.rect.y,
            "width": self.rect.width,
            "height": self.rect.height,
            "imageDataUrl": self.image_data_url,
        }
