"""
shapes/rectangle.py

Rectangle shape: position, size and rotation about its own center.
"""

from __future__ import annotations

from typing import Optional

from geometry.affine import AffineMatrix
from geometry.rects import Rect, is_point_on_rectangle_rotated
from geometry.vectors import Vec2
from models import RectangleShape, Shape, ShapePatch
from shapes.core import ShapeContext, ShapeStruct, resize_rect_polygon


class RectangleStruct(ShapeStruct):
    label = "Rectangle"
    shape_class = RectangleShape

    def get_local_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        return Rect(shape.p.x, shape.p.y, shape.width, shape.height)

    def is_point_on(self, shape: Shape, p: Vec2, ctx: Optional[ShapeContext] = None, scale: float = 1.0) -> bool:
        return is_point_on_rectangle_rotated(self.get_local_rect(shape), shape.rotation, p)

    def resize(self, shape: Shape, affine: AffineMatrix, ctx: Optional[ShapeContext] = None) -> ShapePatch:
        return resize_rect_polygon(shape, self.get_local_rect_polygon(shape, ctx), affine)


struct = RectangleStruct()
