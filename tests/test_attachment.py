"""Tests for shapes attached to line hosts."""
from __future__ import annotations

import math
import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from canvas.attachment import (
    get_attachment_anchor_point,
    get_line_attachment_patch,
    get_next_attachment_anchor,
)
from canvas.composite import ShapeComposite
from geometry.vectors import Vec2
from models import ROTATION_ABSOLUTE, GroupShape, LineShape, RectangleShape, ShapeAttachment


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

def _attached(rotation_type="relative", host_id="line"):
    return RectangleShape(
        id="r", p=Vec2(45, -5), width=10, height=10,
        attachment=ShapeAttachment(id=host_id, to=Vec2(0.5, 0), rotation_type=rotation_type),
    )


@pytest.fixture
def composite():
    """A 10x10 rect centered on the middle of a horizontal line."""
    return ShapeComposite([LineShape(id="line", p=Vec2(0, 0), q=Vec2(100, 0)), _attached()])


# ---------------------------------------------------------------------------
# Anchors
# ---------------------------------------------------------------------------

class TestAnchor:
    def test_anchor_point(self, composite):
        r = composite.get_shape("r")
        assert get_attachment_anchor_point(composite, r) == pytest.approx(Vec2(50, 0))
        assert get_attachment_anchor_point(composite, r, Vec2(0, 0)) == pytest.approx(Vec2(45, -5))

    def test_next_anchor_is_clamped(self, composite):
        r = composite.get_shape("r")
        assert get_next_attachment_anchor(composite, r, Vec2(1000, 0)) == pytest.approx(Vec2(1, 0.5))
        assert get_next_attachment_anchor(composite, r, Vec2(47.5, -5)) == pytest.approx(Vec2(0.25, 0))


# ---------------------------------------------------------------------------
# Line edits
# ---------------------------------------------------------------------------

class TestLineAttachmentPatch:
    def test_follows_translated_line(self, composite):
        patch = get_line_attachment_patch(composite, {"line": {"p": Vec2(0, 10), "q": Vec2(100, 10)}})
        assert set(patch["r"]) == {"p"}
        assert patch["r"]["p"] == pytest.approx(Vec2(45, 5))

    def test_relative_follows_slope(self, composite):
        patch = get_line_attachment_patch(composite, {"line": {"q": Vec2(0, 100)}})
        assert patch["r"]["rotation"] == pytest.approx(math.pi / 2)
        assert patch["r"]["p"] == pytest.approx(Vec2(-5, 45))

    def test_absolute_keeps_rotation(self):
        composite = ShapeComposite([LineShape(id="line"), _attached(ROTATION_ABSOLUTE)])
        patch = get_line_attachment_patch(composite, {"line": {"q": Vec2(0, 100)}})
        assert "rotation" not in patch["r"]
        assert patch["r"]["p"] == pytest.approx(Vec2(-5, 45))

    def test_missing_host_clears_attachment(self):
        composite = ShapeComposite([_attached(host_id="gone")])
        patch = get_line_attachment_patch(composite, {"r": {"p": Vec2(0, 0)}})
        assert patch == {"r": {"attachment": None}}

    def test_grouped_shape_keeps_attachment(self):
        composite = ShapeComposite([
            LineShape(id="line"),
            GroupShape(id="g"),
            RectangleShape(
                id="r", parent_id="g", p=Vec2(45, -5), width=10, height=10,
                attachment=ShapeAttachment(id="line", to=Vec2(0.5, 0)),
            ),
        ])
        patch = get_line_attachment_patch(composite, {"line": {"p": Vec2(0, 10), "q": Vec2(100, 10)}})
        assert patch["r"]["p"] == pytest.approx(Vec2(45, 5))

    def test_unrelated_update(self, composite):
        assert get_line_attachment_patch(composite, {"other": {"p": Vec2(1, 1)}}) == {}
