"""
shapes/line.py

Straight line shape from p to q.

Lines are attachment hosts: other shapes can be pinned at a rate along them.
The rotation field of a line is unused, its direction comes from p -> q.
"""

from __future__ import annotations

from typing import List, Optional

from geometry.affine import AffineMatrix, apply_affine
from geometry.rects import get_outer_rectangle, get_rect_points, is_point_close_to_segment, Rect
from geometry.vectors import Vec2, get_center, get_distance, get_radian, is_same, lerp_point, rotate
from models import LineShape, Shape, ShapePatch
from settings import get_settings
from shapes.core import ShapeContext, ShapeStruct


class LineStruct(ShapeStruct):
    label = "Line"
    shape_class = LineShape

    def get_local_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        """Zero height rect along the line, centered on its midpoint."""
        c = get_center(shape.p, shape.q)
        length = get_distance(shape.p, shape.q)
        return Rect(c.x - length / 2, c.y, length, 0.0)

    def get_local_rect_polygon(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> List[Vec2]:
        c = get_center(shape.p, shape.q)
        radian = get_radian(shape.q, shape.p)
        return [rotate(p, radian, c) for p in get_rect_points(self.get_local_rect(shape))]

    def get_wrapper_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        return get_outer_rectangle([[shape.p, shape.q]])

    def is_point_on(self, shape: Shape, p: Vec2, ctx: Optional[ShapeContext] = None, scale: float = 1.0) -> bool:
        threshold = get_settings().settings.canvas.lines.hit_width / scale
        return is_point_close_to_segment((shape.p, shape.q), p, threshold)

    def resize(self, shape: Shape, affine: AffineMatrix, ctx: Optional[ShapeContext] = None) -> ShapePatch:
        p = apply_affine(affine, shape.p)
        q = apply_affine(affine, shape.q)
        ret: ShapePatch = {}
        if not is_same(p, shape.p):
            ret["p"] = p
        if not is_same(q, shape.q):
            ret["q"] = q
        return ret

    def can_attach(self, shape: Shape) -> bool:
        return False

    def is_attachment_host(self, shape: Shape) -> bool:
        return True


def get_point_at_rate(shape: LineShape, rate: float) -> Vec2:
    """Point at rate along the line, 0 at p and 1 at q."""
    return lerp_point(shape.p, shape.q, rate)


def get_rate_at_point(shape: LineShape, p: Vec2) -> float:
    """Rate of the projection of p onto the line, clamped to [0, 1]."""
    vx = shape.q.x - shape.p.x
    vy = shape.q.y - shape.p.y
    d = vx * vx + vy * vy
    if d == 0:
        return 0.0
    t = ((p.x - shape.p.x) * vx + (p.y - shape.p.y) * vy) / d
    return max(0.0, min(1.0, t))


def get_line_radian(shape: LineShape) -> float:
    return get_radian(shape.q, shape.p)


struct = LineStruct()
