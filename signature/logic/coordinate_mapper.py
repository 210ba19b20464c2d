"""
Pixel space -> PDF point space.

A page rendered at ``scale`` pixels per point has its canvas origin at the
top-left; PDF pages have theirs at the bottom-left. A stamp whose *visual*
top-left sits at the click position therefore has its PDF anchor (lower-left)
``stamp_h`` pixels further down before the flip.

Pixel inputs are not clamped to the canvas; callers validate bounds.
"""
from __future__ import annotations

import math

from core.exceptions.errors import ValidationError
from ..models.annotation_placement import PdfRect, PixelRect

DEFAULT_STAMP_W_PX = 170.0
DEFAULT_STAMP_H_PX = 70.0


def _check_scale(scale: float) -> float:
    s = float(scale)
    if not math.isfinite(s) or s <= 0:
        raise ValidationError(f"Render scale must be > 0, got {scale!r}", code="invalid_scale")
    return s


def map_click(
    *,
    scale: float,
    page_height_px: float,
    click_x: float,
    click_y: float,
    stamp_w: float = DEFAULT_STAMP_W_PX,
    stamp_h: float = DEFAULT_STAMP_H_PX,
) -> PdfRect:
    """Fixed-size stamp dropped with its top-left corner at (click_x, click_y)."""
    s = _check_scale(scale)
    return PdfRect(
        x=click_x / s,
        y=(page_height_px - click_y - stamp_h) / s,
        width=stamp_w / s,
        height=stamp_h / s,
    )


def map_box(*, scale: float, page_height_px: float, box: PixelRect) -> PdfRect:
    """Free-form drawn/selected bounding box; flipped with the box's own height."""
    s = _check_scale(scale)
    return PdfRect(
        x=box.left / s,
        y=(page_height_px - box.top - box.height) / s,
        width=box.width / s,
        height=box.height / s,
    )


def to_pixels(*, scale: float, page_height_px: float, rect: PdfRect) -> PixelRect:
    """Inverse of :func:`map_box`, used to redraw a stored placement on a preview."""
    s = _check_scale(scale)
    height = rect.height * s
    return PixelRect(
        left=rect.x * s,
        top=page_height_px - rect.y * s - height,
        width=rect.width * s,
        height=height,
    )
