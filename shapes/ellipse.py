"""
shapes/ellipse.py

Ellipse shape. Shares the rectangle's geometry and only differs in hit testing.
"""

from __future__ import annotations

from typing import Optional

from geometry.rects import get_rect_center
from geometry.vectors import MINVALUE, Vec2, rotate
from models import EllipseShape, Shape
from shapes.core import ShapeContext
from shapes.rectangle import RectangleStruct


class EllipseStruct(RectangleStruct):
    label = "Ellipse"
    shape_class = EllipseShape

    def is_point_on(self, shape: Shape, p: Vec2, ctx: Optional[ShapeContext] = None, scale: float = 1.0) -> bool:
        rect = self.get_local_rect(shape)
        rx = rect.width / 2
        ry = rect.height / 2
        if rx < MINVALUE or ry < MINVALUE:
            return False
        c = get_rect_center(rect)
        local = rotate(p, -shape.rotation, c)
        dx = (local.x - c.x) / rx
        dy = (local.y - c.y) / ry
        return dx * dx + dy * dy <= 1.0


struct = EllipseStruct()
