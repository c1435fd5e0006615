"""
geometry/vectors.py

2D vector helpers. Points and vectors share the Vec2 named tuple.
"""

from __future__ import annotations

import math
from typing import Callable, NamedTuple, Optional, Sequence, Tuple

# Tolerance used for "same value" comparisons
MINVALUE = 1e-6


class Vec2(NamedTuple):
    """A 2D point or vector."""
    x: float
    y: float


ORIGIN = Vec2(0.0, 0.0)

# A segment or infinite line given by two points
Segment = Tuple[Vec2, Vec2]


def vec(x: float, y: float) -> Vec2:
    return Vec2(float(x), float(y))


def add(a: Vec2, b: Vec2) -> Vec2:
    return Vec2(a.x + b.x, a.y + b.y)


def sub(a: Vec2, b: Vec2) -> Vec2:
    return Vec2(a.x - b.x, a.y - b.y)


def multi(a: Vec2, k: float) -> Vec2:
    return Vec2(a.x * k, a.y * k)


def dot(a: Vec2, b: Vec2) -> float:
    return a.x * b.x + a.y * b.y


def cross(a: Vec2, b: Vec2) -> float:
    return a.x * b.y - a.y * b.x


def get_norm(a: Vec2) -> float:
    return math.hypot(a.x, a.y)


def get_unit(a: Vec2) -> Vec2:
    """Return the unit vector of a, or the zero vector for a zero vector."""
    n = get_norm(a)
    if n < MINVALUE:
        return ORIGIN
    return Vec2(a.x / n, a.y / n)


def get_distance(a: Vec2, b: Vec2) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def get_center(a: Vec2, b: Vec2) -> Vec2:
    return Vec2((a.x + b.x) / 2, (a.y + b.y) / 2)


def lerp_point(a: Vec2, b: Vec2, t: float) -> Vec2:
    return Vec2(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def get_radian(p: Vec2, origin: Vec2 = ORIGIN) -> float:
    """Angle of the vector origin -> p."""
    return math.atan2(p.y - origin.y, p.x - origin.x)


def rotate(p: Vec2, radian: float, origin: Vec2 = ORIGIN) -> Vec2:
    """Rotate p about origin by radian (positive is clockwise on screen)."""
    if radian == 0:
        return Vec2(p.x, p.y)
    c = math.cos(radian)
    s = math.sin(radian)
    dx = p.x - origin.x
    dy = p.y - origin.y
    return Vec2(origin.x + dx * c - dy * s, origin.y + dx * s + dy * c)


def get_rotate_fn(radian: float, origin: Vec2 = ORIGIN) -> Callable[..., Vec2]:
    """Return fn(p, reverse=False) rotating about origin.

    With reverse=True the rotation is undone, which is how points are brought
    into a shape's local, unrotated space.
    """
    def fn(p: Vec2, reverse: bool = False) -> Vec2:
        return rotate(p, -radian if reverse else radian, origin)
    return fn


def is_same_value(a: float, b: float, tolerance: float = MINVALUE) -> bool:
    return abs(a - b) < tolerance


def is_same(a: Vec2, b: Vec2, tolerance: float = MINVALUE) -> bool:
    return is_same_value(a.x, b.x, tolerance) and is_same_value(a.y, b.y, tolerance)


def is_parallel(a: Vec2, b: Vec2) -> bool:
    """True when the two vectors are parallel or either is zero."""
    na = get_norm(a)
    nb = get_norm(b)
    if na < MINVALUE or nb < MINVALUE:
        return True
    return abs(cross(a, b)) / (na * nb) < MINVALUE


def get_pedal(p: Vec2, line: Segment) -> Vec2:
    """Foot of the perpendicular from p onto the infinite line."""
    a, b = line
    v = sub(b, a)
    d = dot(v, v)
    if d < MINVALUE:
        return a
    t = dot(sub(p, a), v) / d
    return Vec2(a.x + v.x * t, a.y + v.y * t)


def get_distance_to_line(p: Vec2, line: Segment) -> float:
    """Perpendicular distance from p to the infinite line."""
    return get_distance(p, get_pedal(p, line))


def snap_number(value: float, step: float) -> float:
    if step <= 0:
        return value
    return math.floor(value / step + 0.5) * step


def snap_angle(degree: float, step: float = 15.0) -> float:
    """Round an angle in degrees to the nearest multiple of step."""
    return snap_number(degree, step)


def normalize_radian(radian: float) -> float:
    """Map radian into [-pi, pi)."""
    return (radian + math.pi) % (2 * math.pi) - math.pi


def get_min_distance_point(p: Vec2, candidates: Sequence[Vec2]) -> Optional[Vec2]:
    if not candidates:
        return None
    return min(candidates, key=lambda c: get_distance(p, c))
