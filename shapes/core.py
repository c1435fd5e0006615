"""
shapes/core.py

The geometric contract every shape type implements.

A ShapeStruct is a stateless object bound to one type tag. The composite
never looks at type specific fields directly; it asks the struct.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from geometry.affine import AffineMatrix, apply_affine
from geometry.rects import (
    Rect,
    get_rect_center_lines,
    get_rect_lines,
    get_rotated_rect_points,
    get_rotated_wrapper_rect,
    is_point_on_polygon,
)
from geometry.vectors import MINVALUE, Segment, Vec2, get_distance, get_radian, is_same, is_same_value, normalize_radian
from models import Shape, ShapePatch

if TYPE_CHECKING:
    from canvas.tree import TreeNode


@dataclass
class ShapeSnappingLines:
    """Candidate snapping segments of one shape.

    v holds vertical segments (constant x), h holds horizontal ones.
    """
    v: List[Segment] = field(default_factory=list)
    h: List[Segment] = field(default_factory=list)


@dataclass
class ShapeContext:
    """What a struct may see of the surrounding composite."""
    shape_map: Dict[str, Shape]
    tree_node_map: Dict[str, "TreeNode"]
    get_struct: Callable[[str], "ShapeStruct"]


class ShapeStruct:
    """Base implementation shared by the rectangular shape types.

    Subclasses override what differs. Every method is pure: shapes are never
    mutated and resize() returns only the fields that changed.
    """

    label = "Shape"
    shape_class: Any = Shape

    def create(self, **arg) -> Shape:
        return self.shape_class(**arg)

    def get_local_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        """Unrotated rect in the shape's local space."""
        return Rect(shape.p.x, shape.p.y, 0.0, 0.0)

    def get_local_rect_polygon(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> List[Vec2]:
        """Local rect corners (tl, tr, br, bl) rotated into place."""
        return get_rotated_rect_points(self.get_local_rect(shape, ctx), shape.rotation)

    def get_wrapper_rect(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> Rect:
        return get_rotated_wrapper_rect(self.get_local_rect(shape, ctx), shape.rotation)

    def is_point_on(self, shape: Shape, p: Vec2, ctx: Optional[ShapeContext] = None, scale: float = 1.0) -> bool:
        return is_point_on_polygon(self.get_local_rect_polygon(shape, ctx), p)

    def resize(self, shape: Shape, affine: AffineMatrix, ctx: Optional[ShapeContext] = None) -> ShapePatch:
        return {}

    def get_snapping_lines(self, shape: Shape, ctx: Optional[ShapeContext] = None) -> ShapeSnappingLines:
        """Edges and center lines of the wrapper rect."""
        rect = self.get_wrapper_rect(shape, ctx)
        top, right, bottom, left = get_rect_lines(rect)
        center_v, center_h = get_rect_center_lines(rect)
        return ShapeSnappingLines(v=[left, center_v, right], h=[top, center_h, bottom])

    def can_attach(self, shape: Shape) -> bool:
        """Whether shape may be attached onto a host."""
        return True

    def is_attachment_host(self, shape: Shape) -> bool:
        """Whether other shapes may attach onto shape."""
        return False

    def should_delete(self, shape: Shape, ctx: ShapeContext) -> bool:
        """Whether shape is left meaningless, e.g. a group without children."""
        return False


def resize_rect_polygon(shape: Shape, polygon: List[Vec2], affine: AffineMatrix) -> ShapePatch:
    """Patch for a rect-like shape whose local polygon is mapped by affine.

    Size comes from the transformed tl->tr and tl->bl edges and position from
    the transformed center, so rotation survives non-uniform scaling.
    """
    tl, tr, br, bl = [apply_affine(affine, p) for p in polygon]
    width = get_distance(tl, tr)
    height = get_distance(tl, bl)
    rotation = get_radian(tr, tl) if width > MINVALUE else shape.rotation
    cx = (tl.x + br.x) / 2
    cy = (tl.y + br.y) / 2
    p = Vec2(cx - width / 2, cy - height / 2)

    ret: ShapePatch = {}
    if not is_same(p, shape.p):
        ret["p"] = p
    if not is_same_value(width, getattr(shape, "width", 0.0)):
        ret["width"] = width
    if not is_same_value(height, getattr(shape, "height", 0.0)):
        ret["height"] = height
    diff = normalize_radian(rotation - shape.rotation)
    if not is_same_value(diff, 0.0):
        ret["rotation"] = shape.rotation + diff
    return ret

