"""Tests for bounding box hit testing and the resize/rotate affines."""
from __future__ import annotations

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from canvas.bounding_box import (
    HIT_AREA,
    HIT_CORNER,
    HIT_ROTATION,
    HIT_SEGMENT,
    BoundingBox,
    BoundingBoxResizing,
    BoundingBoxRotating,
    HitResult,
    get_resizing_base,
)
from geometry.affine import apply_affine, get_translate_affine
from geometry.rects import Rect, get_rect_points
from geometry.vectors import Vec2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _box(width=100, height=100, scale=1.0):
    return BoundingBox(get_rect_points(Rect(0, 0, width, height)), scale)


def _resizing(box, hit):
    return BoundingBoxResizing(box.get_rotation(), hit, box.get_resizing_base(hit))


def _scales(affine):
    a, b, c, d, e, f = affine
    return a, d


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------

class TestHitTest:
    def test_handles(self):
        box = _box()
        assert box.hit_test(Vec2(120, -20)) == HitResult(HIT_ROTATION)
        assert box.hit_test(Vec2(0, 0)) == HitResult(HIT_CORNER, 0)
        assert box.hit_test(Vec2(50, 0)) == HitResult(HIT_SEGMENT, 0)
        assert box.hit_test(Vec2(50, 50)) == HitResult(HIT_AREA)
        assert box.hit_test(Vec2(200, 200)) is None

    def test_handles_shrink_with_zoom(self):
        assert _box(scale=1.0).hit_test(Vec2(0, 4)) == HitResult(HIT_CORNER, 0)
        assert _box(scale=2.0).hit_test(Vec2(0, 4)) == HitResult(HIT_SEGMENT, 3)

    def test_cursor_styles(self):
        box = _box()
        assert box.get_cursor_style(HitResult(HIT_CORNER, 0)) == "nwse-resize"
        assert box.get_cursor_style(HitResult(HIT_CORNER, 1)) == "nesw-resize"
        assert box.get_cursor_style(HitResult(HIT_SEGMENT, 0)) == "ns-resize"
        assert box.get_cursor_style(HitResult(HIT_SEGMENT, 1)) == "ew-resize"
        assert box.get_cursor_style(HitResult(HIT_ROTATION)) == "grab"
        assert box.get_cursor_style(None) is None

    def test_transformed_box(self):
        moved = _box().get_transformed_bounding_box(get_translate_affine(Vec2(10, 0)))
        assert moved.path[0] == Vec2(10, 0)
        assert moved.get_center() == Vec2(60, 50)


# ---------------------------------------------------------------------------
# Resizing
# ---------------------------------------------------------------------------

class TestResizingBase:
    def test_segment(self):
        base = get_resizing_base(_box().path, HitResult(HIT_SEGMENT, 1))
        assert base.origin == Vec2(0, 50)
        assert base.direction == Vec2(100, 0)

    def test_corner_of_tall_rect(self):
        base = get_resizing_base(_box(100, 200).path, HitResult(HIT_CORNER, 0))
        assert base.origin == Vec2(100, 200)
        assert base.direction == Vec2(-100, -200)

    def test_area_has_no_base(self):
        with pytest.raises(ValueError):
            get_resizing_base(_box().path, HitResult(HIT_AREA))


class TestResizing:
    def test_corner_free(self):
        resizing = _resizing(_box(), HitResult(HIT_CORNER, 2))
        assert _scales(resizing.get_affine(Vec2(50, 0))) == pytest.approx((1.5, 1.0))

    def test_corner_keep_aspect(self):
        resizing = _resizing(_box(), HitResult(HIT_CORNER, 2))
        assert _scales(resizing.get_affine(Vec2(50, 0), keep_aspect=True)) == pytest.approx((1.25, 1.25))

    def test_corner_centralized(self):
        resizing = _resizing(_box(), HitResult(HIT_CORNER, 2))
        affine = resizing.get_affine(Vec2(50, 0), centralize=True)
        assert apply_affine(affine, Vec2(50, 50)) == pytest.approx(Vec2(50, 50))
        assert apply_affine(affine, Vec2(100, 100)) == pytest.approx(Vec2(150, 100))

    def test_segment_only_moves_its_axis(self):
        resizing = _resizing(_box(), HitResult(HIT_SEGMENT, 1))
        assert _scales(resizing.get_affine(Vec2(50, 30))) == pytest.approx((1.5, 1.0))

    def test_min_size(self):
        resizing = _resizing(_box(), HitResult(HIT_CORNER, 2))
        assert _scales(resizing.get_affine(Vec2(-150, 0)))[0] == pytest.approx(0.1)

    def test_tall_rect_from_top_left(self):
        resizing = _resizing(_box(100, 200), HitResult(HIT_CORNER, 0))
        assert _scales(resizing.get_affine(Vec2(-10, -20))) == pytest.approx((1.1, 1.1))
        assert _scales(resizing.get_affine(Vec2(-10, -40))) == pytest.approx((1.1, 1.2))
        assert _scales(resizing.get_affine(Vec2(-10, -40), keep_aspect=True)) == pytest.approx((1.18, 1.18))

    def test_keep_aspect_lands_on_snapped_line(self):
        resizing = _resizing(_box(), HitResult(HIT_CORNER, 2))
        affine = resizing.get_affine_after_snapping(
            Vec2(48, 40), (Vec2(150, -100), Vec2(150, 300)), keep_aspect=True,
        )
        assert _scales(affine) == pytest.approx((1.5, 1.5))
        assert resizing.get_transformed_anchor(affine) == pytest.approx(Vec2(150, 150))


# ---------------------------------------------------------------------------
# Rotating
# ---------------------------------------------------------------------------

class TestRotating:
    def test_quarter_turn(self):
        rotating = BoundingBoxRotating(0.0, Vec2(50, 50))
        affine = rotating.get_affine(Vec2(120, -20), Vec2(120, 120))
        assert apply_affine(affine, Vec2(100, 50)) == pytest.approx(Vec2(50, 100))

    def test_loose_snap_near_45(self):
        rotating = BoundingBoxRotating(0.0, Vec2(0, 0))
        current = Vec2(math.cos(math.radians(44)), math.sin(math.radians(44)))
        affine = rotating.get_affine(Vec2(1, 0), current)
        assert apply_affine(affine, Vec2(1, 0)) == pytest.approx(
            Vec2(math.cos(math.pi / 4), math.sin(math.pi / 4))
        )

    def test_no_loose_snap_far_from_45(self):
        rotating = BoundingBoxRotating(0.0, Vec2(0, 0))
        current = Vec2(math.cos(math.radians(30)), math.sin(math.radians(30)))
        affine = rotating.get_affine(Vec2(1, 0), current)
        assert apply_affine(affine, Vec2(1, 0)) == pytest.approx(current)

    def test_hard_snap(self):
        rotating = BoundingBoxRotating(0.0, Vec2(0, 0))
        current = Vec2(math.cos(math.radians(20)), math.sin(math.radians(20)))
        affine = rotating.get_affine(Vec2(1, 0), current, snap=True)
        assert apply_affine(affine, Vec2(1, 0)) == pytest.approx(
            Vec2(math.cos(math.radians(15)), math.sin(math.radians(15)))
        )
