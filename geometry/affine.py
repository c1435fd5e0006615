"""
geometry/affine.py

2D affine matrices as 6-tuples (a, b, c, d, e, f):

    x' = a*x + c*y + e
    y' = b*x + d*y + f

Composition and inversion go through numpy 3x3 matrices.
"""

from __future__ import annotations

import math
from typing import Iterable, Tuple

import numpy as np

from geometry.vectors import MINVALUE, Vec2

AffineMatrix = Tuple[float, float, float, float, float, float]

IDENTITY_AFFINE: AffineMatrix = (1.0, 0.0, 0.0, 1.0, 0.0, 0.0)


def _to_matrix(m: AffineMatrix) -> np.ndarray:
    a, b, c, d, e, f = m
    return np.array([[a, c, e], [b, d, f], [0.0, 0.0, 1.0]], dtype=float)


def _from_matrix(mat: np.ndarray) -> AffineMatrix:
    return (
        float(mat[0, 0]), float(mat[1, 0]),
        float(mat[0, 1]), float(mat[1, 1]),
        float(mat[0, 2]), float(mat[1, 2]),
    )


def multi_affines(affines: Iterable[AffineMatrix]) -> AffineMatrix:
    """Compose affines left to right: [A, B, C] -> A·B·C (C applies first)."""
    result = np.identity(3)
    for m in affines:
        result = result @ _to_matrix(m)
    return _from_matrix(result)


def apply_affine(m: AffineMatrix, p: Vec2) -> Vec2:
    a, b, c, d, e, f = m
    return Vec2(a * p.x + c * p.y + e, b * p.x + d * p.y + f)


def invert_affine(m: AffineMatrix) -> AffineMatrix:
    """Inverse of m. A singular matrix yields the identity."""
    mat = _to_matrix(m)
    if abs(np.linalg.det(mat)) < MINVALUE * MINVALUE:
        return IDENTITY_AFFINE
    return _from_matrix(np.linalg.inv(mat))


def is_identity_affine(m: AffineMatrix, tolerance: float = MINVALUE) -> bool:
    return all(abs(v - i) < tolerance for v, i in zip(m, IDENTITY_AFFINE))


def get_translate_affine(v: Vec2) -> AffineMatrix:
    return (1.0, 0.0, 0.0, 1.0, v.x, v.y)


def get_rotation_affine(radian: float) -> AffineMatrix:
    c = math.cos(radian)
    s = math.sin(radian)
    return (c, s, -s, c, 0.0, 0.0)


def get_rotated_at_affine(origin: Vec2, radian: float) -> AffineMatrix:
    """Rotation by radian about origin."""
    return multi_affines([
        get_translate_affine(origin),
        get_rotation_affine(radian),
        get_translate_affine(Vec2(-origin.x, -origin.y)),
    ])


def get_scale_at_affine(origin: Vec2, sx: float, sy: float) -> AffineMatrix:
    """Axis aligned scale about origin."""
    return (sx, 0.0, 0.0, sy, origin.x * (1 - sx), origin.y * (1 - sy))
