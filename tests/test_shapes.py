"""Tests for the shape registry and the per-type structs."""
from __future__ import annotations

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from errors import ShapeTypeError
from geometry.affine import get_rotated_at_affine, get_scale_at_affine, get_translate_affine
from geometry.vectors import Vec2
from models import EllipseShape, LineShape, RectangleShape, ShapeAttachment
from shapes import create_shape, get_attachment_by_updating_rotation, get_struct, resize_shape
from shapes.line import get_point_at_rate, get_rate_at_point


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

class TestRegistry:
    def test_unknown_type(self):
        with pytest.raises(ShapeTypeError):
            get_struct("hexagon")

    def test_create_shape(self):
        shape = create_shape("ellipse", id="e", width=5.0)
        assert isinstance(shape, EllipseShape)
        assert shape.width == 5.0
        assert shape.height == 100.0

    def test_create_shape_ignores_type_argument(self):
        shape = create_shape("line", id="l", type="rectangle")
        assert isinstance(shape, LineShape)


# ---------------------------------------------------------------------------
# Rectangle and ellipse
# ---------------------------------------------------------------------------

class TestRectangle:
    def test_scale_patch_only_has_changed_fields(self):
        shape = RectangleShape(id="a", width=10, height=20)
        patch = resize_shape(shape, get_scale_at_affine(Vec2(0, 0), 2, 2))
        assert patch == pytest.approx({"width": 20, "height": 40})

    def test_rotation_about_center(self):
        shape = RectangleShape(id="a", width=10, height=20)
        patch = resize_shape(shape, get_rotated_at_affine(Vec2(5, 10), math.pi / 2))
        assert set(patch) == {"rotation"}
        assert patch["rotation"] == pytest.approx(math.pi / 2)

    def test_identity_gives_empty_patch(self):
        shape = RectangleShape(id="a", p=Vec2(3, 4), rotation=0.3)
        assert resize_shape(shape, get_translate_affine(Vec2(0, 0))) == {}

    def test_local_rect_polygon(self):
        shape = RectangleShape(id="a", p=Vec2(10, 10), width=20, height=10)
        polygon = get_struct("rectangle").get_local_rect_polygon(shape)
        assert polygon == [Vec2(10, 10), Vec2(30, 10), Vec2(30, 20), Vec2(10, 20)]

    def test_snapping_lines(self):
        shape = RectangleShape(id="a", width=20, height=10)
        lines = get_struct("rectangle").get_snapping_lines(shape)
        assert [seg[0].x for seg in lines.v] == [0, 10, 20]
        assert [seg[0].y for seg in lines.h] == [0, 5, 10]

    def test_ellipse_corner_is_outside(self):
        rect = RectangleShape(id="r")
        ellipse = EllipseShape(id="e")
        assert get_struct("rectangle").is_point_on(rect, Vec2(5, 5))
        assert not get_struct("ellipse").is_point_on(ellipse, Vec2(5, 5))
        assert get_struct("ellipse").is_point_on(ellipse, Vec2(50, 5))


# ---------------------------------------------------------------------------
# Line
# ---------------------------------------------------------------------------

class TestLine:
    def test_translate_moves_both_ends(self):
        shape = LineShape(id="l", p=Vec2(0, 0), q=Vec2(100, 0))
        patch = resize_shape(shape, get_translate_affine(Vec2(5, 5)))
        assert patch == {"p": Vec2(5, 5), "q": Vec2(105, 5)}

    def test_hit_width_is_screen_space(self):
        shape = LineShape(id="l")
        struct = get_struct("line")
        assert struct.is_point_on(shape, Vec2(50, 5), scale=1.0)
        assert not struct.is_point_on(shape, Vec2(50, 5), scale=2.0)

    def test_rates(self):
        shape = LineShape(id="l", p=Vec2(0, 0), q=Vec2(100, 0))
        assert get_point_at_rate(shape, 0.25) == Vec2(25, 0)
        assert get_rate_at_point(shape, Vec2(40, 30)) == pytest.approx(0.4)
        assert get_rate_at_point(shape, Vec2(-40, 0)) == 0.0

    def test_line_is_host_not_attachable(self):
        struct = get_struct("line")
        shape = LineShape(id="l")
        assert struct.is_attachment_host(shape)
        assert not struct.can_attach(shape)


# ---------------------------------------------------------------------------
# Attachment rotation
# ---------------------------------------------------------------------------

class TestAttachmentRotation:
    def test_offset_follows_rotation(self):
        shape = RectangleShape(id="a", rotation=0.1, attachment=ShapeAttachment(id="l", rotation=0.2))
        attachment = get_attachment_by_updating_rotation(shape, 0.5)
        assert attachment.rotation == pytest.approx(0.6)
        assert attachment.id == "l"

    def test_no_change(self):
        shape = RectangleShape(id="a", rotation=0.1, attachment=ShapeAttachment(id="l"))
        assert get_attachment_by_updating_rotation(shape, 0.1) is None
        assert get_attachment_by_updating_rotation(RectangleShape(id="b"), 1.0) is None
