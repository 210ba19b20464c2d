"""
Page rasterization for placement previews.

The returned pixel height is exactly the ``page_height_px`` the coordinate
mapper expects for the same ``scale``.
"""
from __future__ import annotations

import io
import math
from dataclasses import dataclass

import pypdfium2 as pdfium

from core.exceptions.errors import SourceDocumentError, ValidationError


@dataclass(frozen=True)
class PagePreview:
    png: bytes
    page_index: int
    page_count: int
    scale: float
    width_px: int
    height_px: int


MAX_SCALE = 8.0


def render_page(source_bytes: bytes, page_index: int, scale: float) -> PagePreview:
    s = float(scale)
    if not math.isfinite(s) or s <= 0 or s > MAX_SCALE:
        raise ValidationError(f"Render scale must be in (0, {MAX_SCALE}]", code="invalid_scale")

    try:
        pdf = pdfium.PdfDocument(source_bytes)
    except pdfium.PdfiumError as exc:
        raise SourceDocumentError(f"Source PDF could not be rendered: {exc}") from exc
    try:
        count = len(pdf)
        if count == 0:
            raise SourceDocumentError("Source PDF has no pages")
        idx = page_index if 0 <= page_index < count else 0
        page = pdf[idx]
        try:
            pil = page.render(scale=s).to_pil()
        finally:
            page.close()
    finally:
        pdf.close()

    buf = io.BytesIO()
    pil.save(buf, format="PNG")
    return PagePreview(
        png=buf.getvalue(),
        page_index=idx,
        page_count=count,
        scale=s,
        width_px=pil.width,
        height_px=pil.height,
    )
