"""
geometry/rects.py

Axis aligned rectangles, polygons and segment helpers.

Rect polygons are always ordered tl, tr, br, bl (clockwise on screen).
"""

from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple

from geometry.vectors import (
    MINVALUE,
    Segment,
    Vec2,
    add,
    cross,
    dot,
    get_center,
    get_distance,
    get_radian,
    rotate,
    sub,
)


class Rect(NamedTuple):
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height


EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)


def get_rect_points(rect: Rect) -> List[Vec2]:
    """Corners of rect: tl, tr, br, bl."""
    return [
        Vec2(rect.x, rect.y),
        Vec2(rect.right, rect.y),
        Vec2(rect.right, rect.bottom),
        Vec2(rect.x, rect.bottom),
    ]


def get_rect_center(rect: Rect) -> Vec2:
    return Vec2(rect.x + rect.width / 2, rect.y + rect.height / 2)


def move_rect(rect: Rect, v: Vec2) -> Rect:
    return Rect(rect.x + v.x, rect.y + v.y, rect.width, rect.height)


def get_rotated_rect_points(rect: Rect, rotation: float) -> List[Vec2]:
    """Corners of rect rotated about its own center."""
    c = get_rect_center(rect)
    return [rotate(p, rotation, c) for p in get_rect_points(rect)]


def get_outer_rectangle(point_lists: Iterable[Sequence[Vec2]]) -> Rect:
    """Smallest axis aligned rect holding every point. Empty input -> EMPTY_RECT."""
    xs: List[float] = []
    ys: List[float] = []
    for points in point_lists:
        for p in points:
            xs.append(p.x)
            ys.append(p.y)
    if not xs:
        return EMPTY_RECT
    x = min(xs)
    y = min(ys)
    return Rect(x, y, max(xs) - x, max(ys) - y)


def get_wrapper_rect(rects: Iterable[Rect]) -> Rect:
    return get_outer_rectangle(get_rect_points(r) for r in rects)


def get_rotated_wrapper_rect(rect: Rect, rotation: float) -> Rect:
    return get_outer_rectangle([get_rotated_rect_points(rect, rotation)])


def get_local_space(polygon: Sequence[Vec2]) -> Tuple[Rect, float]:
    """Recover (unrotated rect, rotation) from a tl, tr, br, bl polygon."""
    rotation = get_radian(polygon[1], polygon[0])
    c = get_center(polygon[0], polygon[2])
    tl = rotate(polygon[0], -rotation, c)
    br = rotate(polygon[2], -rotation, c)
    return Rect(tl.x, tl.y, br.x - tl.x, br.y - tl.y), rotation


def get_rect_lines(rect: Rect) -> List[Segment]:
    """Edges of rect: top, right, bottom, left."""
    tl, tr, br, bl = get_rect_points(rect)
    return [(tl, tr), (tr, br), (br, bl), (bl, tl)]


def get_rect_center_lines(rect: Rect) -> Tuple[Segment, Segment]:
    """Vertical and horizontal center lines of rect."""
    c = get_rect_center(rect)
    return (
        (Vec2(c.x, rect.y), Vec2(c.x, rect.bottom)),
        (Vec2(rect.x, c.y), Vec2(rect.right, c.y)),
    )


def is_point_on_rectangle(rect: Rect, p: Vec2) -> bool:
    return rect.x <= p.x <= rect.right and rect.y <= p.y <= rect.bottom


def is_point_on_rectangle_rotated(rect: Rect, rotation: float, p: Vec2) -> bool:
    return is_point_on_rectangle(rect, rotate(p, -rotation, get_rect_center(rect)))


def is_point_on_polygon(polygon: Sequence[Vec2], p: Vec2) -> bool:
    """Even-odd point in polygon test."""
    inside = False
    n = len(polygon)
    j = n - 1
    for i in range(n):
        a = polygon[i]
        b = polygon[j]
        if (a.y > p.y) != (b.y > p.y):
            x = (b.x - a.x) * (p.y - a.y) / (b.y - a.y) + a.x
            if p.x < x:
                inside = not inside
        j = i
    return inside


def get_closest_point_on_segment(seg: Segment, p: Vec2) -> Vec2:
    a, b = seg
    v = sub(b, a)
    d = dot(v, v)
    if d < MINVALUE:
        return a
    t = max(0.0, min(1.0, dot(sub(p, a), v) / d))
    return Vec2(a.x + v.x * t, a.y + v.y * t)


def is_point_close_to_segment(seg: Segment, p: Vec2, threshold: float) -> bool:
    return get_distance(get_closest_point_on_segment(seg, p), p) <= threshold


def get_cross_line_and_line(a: Segment, b: Segment) -> Optional[Vec2]:
    """Intersection of two infinite lines, or None when parallel."""
    va = sub(a[1], a[0])
    vb = sub(b[1], b[0])
    denom = cross(va, vb)
    if abs(denom) < MINVALUE:
        return None
    t = cross(sub(b[0], a[0]), vb) / denom
    return Vec2(a[0].x + va.x * t, a[0].y + va.y * t)


def is_rect_overlapped(a: Rect, b: Rect) -> bool:
    return a.x <= b.right and b.x <= a.right and a.y <= b.bottom and b.y <= a.bottom


def is_rect_inside(outer: Rect, inner: Rect) -> bool:
    return (
        outer.x <= inner.x and outer.y <= inner.y
        and inner.right <= outer.right and inner.bottom <= outer.bottom
    )


def get_relative_point_within_rect(rect: Rect, rate: Vec2) -> Vec2:
    return Vec2(rect.x + rect.width * rate.x, rect.y + rect.height * rate.y)


def get_relative_rate_within_rect(rect: Rect, p: Vec2) -> Vec2:
    """Inverse of get_relative_point_within_rect. Zero sized axes map to 0."""
    rx = (p.x - rect.x) / rect.width if abs(rect.width) > MINVALUE else 0.0
    ry = (p.y - rect.y) / rect.height if abs(rect.height) > MINVALUE else 0.0
    return Vec2(rx, ry)


def expand_rect(rect: Rect, margin: float) -> Rect:
    return Rect(rect.x - margin, rect.y - margin, rect.width + margin * 2, rect.height + margin * 2)


def get_rect_from_points(a: Vec2, b: Vec2) -> Rect:
    """Normalized rect spanned by two arbitrary corner points."""
    x = min(a.x, b.x)
    y = min(a.y, b.y)
    return Rect(x, y, abs(a.x - b.x), abs(a.y - b.y))


def translate_points(points: Sequence[Vec2], v: Vec2) -> List[Vec2]:
    return [add(p, v) for p in points]
