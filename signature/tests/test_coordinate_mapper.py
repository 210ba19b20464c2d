"""Pixel -> PDF point mapping."""
from __future__ import annotations

import math

import pytest

from core.config.config_service import SigningConfig
from core.exceptions.errors import ValidationError
from signature.logic.coordinate_mapper import DEFAULT_STAMP_H_PX, DEFAULT_STAMP_W_PX, map_box, map_click, to_pixels
from signature.models.annotation_placement import PdfRect, PixelRect


def test_click_on_letter_page_at_approval_scale() -> None:
    # letter page (612 x 792 pt) rendered at 1.25 -> 765 x 990 px
    rect = map_click(scale=1.25, page_height_px=990, click_x=100, click_y=200)
    assert rect.x == pytest.approx(80.0)
    assert rect.y == pytest.approx((990 - 200 - 70) / 1.25)
    assert rect.width == pytest.approx(136.0)
    assert rect.height == pytest.approx(56.0)


@pytest.mark.parametrize("scale", [0.5, 1.0, 1.25, 2.0])
@pytest.mark.parametrize("click_y", [0, 35.5, 400, 989])
def test_stamp_top_edge_lands_under_click(scale: float, click_y: float) -> None:
    height_px = 792 * scale
    rect = map_click(scale=scale, page_height_px=height_px, click_x=10, click_y=click_y)
    assert rect.y + rect.height == pytest.approx((height_px - click_y) / scale)


def test_scaling_all_pixel_inputs_keeps_pdf_rect() -> None:
    base = map_click(scale=1.0, page_height_px=792, click_x=50, click_y=100, stamp_w=170, stamp_h=70)
    k = 3.0
    scaled = map_click(scale=k, page_height_px=792 * k, click_x=50 * k, click_y=100 * k, stamp_w=170 * k, stamp_h=70 * k)
    for a, b in zip((base.x, base.y, base.width, base.height), (scaled.x, scaled.y, scaled.width, scaled.height)):
        assert a == pytest.approx(b)


def test_scale_change_scales_output_inversely() -> None:
    one = map_click(scale=1.0, page_height_px=1000, click_x=100, click_y=100)
    two = map_click(scale=2.0, page_height_px=1000, click_x=100, click_y=100)
    assert two.x == pytest.approx(one.x / 2)
    assert two.width == pytest.approx(one.width / 2)
    assert two.y == pytest.approx(one.y / 2)


def test_box_flip_uses_box_height() -> None:
    rect = map_box(scale=2.0, page_height_px=1584, box=PixelRect(left=20, top=100, width=200, height=80))
    assert rect == PdfRect(x=10.0, y=(1584 - 100 - 80) / 2.0, width=100.0, height=40.0)


def test_to_pixels_inverts_map_box() -> None:
    box = PixelRect(left=33, top=120, width=170, height=70)
    rect = map_box(scale=1.25, page_height_px=990, box=box)
    back = to_pixels(scale=1.25, page_height_px=990, rect=rect)
    assert back.left == pytest.approx(box.left)
    assert back.top == pytest.approx(box.top)
    assert back.width == pytest.approx(box.width)
    assert back.height == pytest.approx(box.height)


def test_pixels_are_not_clamped() -> None:
    rect = map_click(scale=1.0, page_height_px=100, click_x=-5, click_y=150)
    assert rect.x == -5
    assert rect.y < 0


@pytest.mark.parametrize("scale", [0, -1.25, math.nan, math.inf])
def test_invalid_scale_rejected(scale: float) -> None:
    with pytest.raises(ValidationError) as info:
        map_click(scale=scale, page_height_px=990, click_x=1, click_y=1)
    assert info.value.code == "invalid_scale"


def test_default_stamp_matches_signing_config() -> None:
    signing = SigningConfig()
    assert (DEFAULT_STAMP_W_PX, DEFAULT_STAMP_H_PX) == (signing.stamp_width_px, signing.stamp_height_px)
    rect = map_click(
        scale=signing.preview_scale,
        page_height_px=990,
        click_x=0,
        click_y=0,
        stamp_w=signing.stamp_width_px,
        stamp_h=signing.stamp_height_px,
    )
    assert rect == map_click(scale=1.25, page_height_px=990, click_x=0, click_y=0)
