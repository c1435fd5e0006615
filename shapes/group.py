"""
shapes/group.py

Group shape.

A group has no geometry of its own: its position and size are derived from
its children on every call and are never cached. Only its rotation is
stored, and it decides the orientation of the derived local rect. resize()
therefore only ever patches rotation; the children carry the real change.
"""

from __future__ import annotations

from typing import List, Optional

from geometry.affine import AffineMatrix, apply_affine
from geometry.rects import (
    EMPTY_RECT,
    Rect,
    get_local_space,
    get_outer_rectangle,
    get_rect_center,
    get_rect_points,
    get_wrapper_rect,
)
from geometry.vectors import Vec2, get_radian, get_rotate_fn, is_same_value, normalize_radian
from models import GroupShape, Shape, ShapePatch
from shapes.core import ShapeContext, ShapeSnappingLines, ShapeStruct


def _get_children(shape: Shape, ctx: Optional[ShapeContext]) -> List[Shape]:
    if ctx is None:
        return []
    node = ctx.tree_node_map.get(shape.id)
    if node is None:
        return []
    return [ctx.shape_map[c.id] for c in node.children if c.id in ctx.shape_map]


class GroupStruct(ShapeStruct):
    label = "Group"
    shape_class = GroupShape

    def get_wrapper_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        children = _get_children(shape, ctx)
        if not children:
            return EMPTY_RECT
        return get_wrapper_rect(ctx.get_struct(c.type).get_wrapper_rect(c, ctx) for c in children)

    def get_local_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        return get_local_space(self.get_local_rect_polygon(shape, ctx))[0]

    def get_local_rect_polygon(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> List[Vec2]:
        """Outer rect of the children's local polygons in the group's rotated frame."""
        children = _get_children(shape, ctx)
        if not children:
            return get_rect_points(self.get_wrapper_rect(shape, ctx))

        inner_points: List[Vec2] = []
        for c in children:
            inner_points.extend(ctx.get_struct(c.type).get_local_rect_polygon(c, ctx))
        center = get_rect_center(get_outer_rectangle([inner_points]))
        rotate_fn = get_rotate_fn(shape.rotation, center)
        derotated = get_outer_rectangle([[rotate_fn(p, reverse=True) for p in inner_points]])
        return [rotate_fn(p) for p in get_rect_points(derotated)]

    def is_point_on(self, shape: Shape, p: Vec2, ctx: Optional[ShapeContext] = None, scale: float = 1.0) -> bool:
        return any(
            ctx.get_struct(c.type).is_point_on(c, p, ctx, scale)
            for c in _get_children(shape, ctx)
        )

    def resize(self, shape: Shape, affine: AffineMatrix, ctx: Optional[ShapeContext] = None) -> ShapePatch:
        if ctx is None:
            return {}
        polygon = [apply_affine(affine, p) for p in self.get_local_rect_polygon(shape, ctx)]
        rotation = get_radian(polygon[1], polygon[0])
        diff = normalize_radian(rotation - shape.rotation)
        if is_same_value(diff, 0.0):
            return {}
        return {"rotation": shape.rotation + diff}

    def get_snapping_lines(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> ShapeSnappingLines:
        # Children provide their own lines
        return ShapeSnappingLines()

    def can_attach(self, shape: Shape) -> bool:
        return False

    def should_delete(self, shape: Shape, ctx: ShapeContext) -> bool:
        return not any(s.parent_id == shape.id for s in ctx.shape_map.values())


struct = GroupStruct()
