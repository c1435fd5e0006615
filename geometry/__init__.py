"""
geometry package

Vectors, affine matrices and rectangle helpers shared by the whole kernel.
"""

from geometry.vectors import Vec2, MINVALUE
from geometry.affine import AffineMatrix, IDENTITY_AFFINE, apply_affine, multi_affines
from geometry.rects import Rect, get_rect_points, get_outer_rectangle

__all__ = [
    "Vec2",
    "MINVALUE",
    "AffineMatrix",
    "IDENTITY_AFFINE",
    "apply_affine",
    "multi_affines",
    "Rect",
    "get_rect_points",
    "get_outer_rectangle",
]
