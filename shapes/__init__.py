"""
shapes package

Shape type registry. Every type tag maps to one ShapeStruct; the map is
built once at import and looked up by get_struct().
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional

from errors import ShapeTypeError
from geometry.affine import AffineMatrix
from geometry.vectors import is_same_value
from models import Shape, ShapeAttachment, ShapePatch
from shapes.core import ShapeContext, ShapeSnappingLines, ShapeStruct
from shapes import ellipse, group, line, rectangle

SHAPE_STRUCTS: Dict[str, ShapeStruct] = {
    "rectangle": rectangle.struct,
    "ellipse": ellipse.struct,
    "line": line.struct,
    "group": group.struct,
}


def get_struct(shape_type: str) -> ShapeStruct:
    """Return the struct registered for shape_type.

    Raises:
        ShapeTypeError: If no struct is registered for the type.
    """
    struct = SHAPE_STRUCTS.get(shape_type)
    if struct is None:
        raise ShapeTypeError(shape_type)
    return struct


def create_shape(shape_type: str, **arg) -> Shape:
    """Create a shape of shape_type with the given field values."""
    arg.pop("type", None)
    return get_struct(shape_type).create(**arg)


def resize_shape(shape: Shape, affine: AffineMatrix, ctx: Optional[ShapeContext] = None) -> ShapePatch:
    return get_struct(shape.type).resize(shape, affine, ctx)


def is_group_shape(shape: Shape) -> bool:
    return shape.type == "group"


def is_line_shape(shape: Shape) -> bool:
    return shape.type == "line"


def get_attachment_by_updating_rotation(
    shape: Shape, next_rotation: Optional[float] = None
) -> Optional[ShapeAttachment]:
    """Attachment of shape after its rotation changes to next_rotation.

    The attachment rotation moves by the same amount as the shape so the
    visual offset from the host is kept.

    Returns:
        The updated attachment, or None when there is no attachment or the
        rotation does not change.
    """
    if shape.attachment is None or next_rotation is None:
        return None
    if is_same_value(next_rotation, shape.rotation):
        return None
    return replace(
        shape.attachment,
        rotation=shape.attachment.rotation + next_rotation - shape.rotation,
    )


__all__ = [
    "SHAPE_STRUCTS",
    "ShapeContext",
    "ShapeSnappingLines",
    "ShapeStruct",
    "create_shape",
    "get_attachment_by_updating_rotation",
    "get_struct",
    "is_group_shape",
    "is_line_shape",
    "resize_shape",
]
