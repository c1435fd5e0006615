"""
canvas/bounding_box.py

Selection bounding box: handle hit testing and the affine matrices that
correspond to dragging a handle.

The box is built from a tl, tr, br, bl outline which may be rotated.
Handle sizes are screen pixels; `scale` is the zoom (screen pixels per
diagram unit), so they are divided by it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

from geometry.affine import (
    IDENTITY_AFFINE,
    AffineMatrix,
    apply_affine,
    get_rotation_affine,
    get_translate_affine,
    multi_affines,
)
from geometry.rects import get_cross_line_and_line, is_point_close_to_segment, is_point_on_polygon
from geometry.vectors import (
    MINVALUE,
    Segment,
    Vec2,
    add,
    get_center,
    get_distance,
    get_norm,
    get_pedal,
    get_radian,
    get_rotate_fn,
    multi,
    rotate,
    snap_angle,
    sub,
)
from settings import get_settings

HIT_ROTATION = "rotation"
HIT_CORNER = "corner"
HIT_SEGMENT = "segment"
HIT_AREA = "area"


@dataclass(frozen=True)
class HitResult:
    """Which part of the bounding box a point hits.

    Corners are indexed clockwise from tl. Segment i joins corner i to i+1.
    """
    type: str
    index: int = 0


@dataclass(frozen=True)
class ResizingBase:
    """Fixed point and the vector from it to the dragged handle."""
    origin: Vec2
    direction: Vec2


def get_resizing_base(path: Sequence[Vec2], hit: HitResult) -> ResizingBase:
    """Resizing base for a corner or segment handle.

    Raises:
        ValueError: For hits that do not resize (area, rotation).
    """
    tl, tr, br, bl = path
    if hit.type == HIT_SEGMENT:
        if hit.index == 0:
            return ResizingBase(origin=get_center(bl, br), direction=sub(tl, bl))
        if hit.index == 1:
            return ResizingBase(origin=get_center(tl, bl), direction=sub(tr, tl))
        if hit.index == 2:
            return ResizingBase(origin=get_center(tl, tr), direction=sub(bl, tl))
        return ResizingBase(origin=get_center(tr, br), direction=sub(tl, tr))
    if hit.type == HIT_CORNER:
        opposite = path[(hit.index + 2) % 4]
        return ResizingBase(origin=opposite, direction=sub(path[hit.index], opposite))
    raise ValueError(f"No resizing base for hit type {hit.type!r}")


def get_moving_bounding_box_points(path: Sequence[Vec2], hit: HitResult) -> List[Vec2]:
    """Outline points that follow the pointer while hit is dragged."""
    if hit.type == HIT_CORNER:
        return [path[hit.index]]
    if hit.type == HIT_SEGMENT:
        return [path[hit.index], path[(hit.index + 1) % 4]]
    return []


def _resize_cursor(radian: float) -> str:
    """Nearest of the four resize cursors for a drag direction."""
    deg = math.degrees(radian) % 180
    index = int(math.floor(deg / 45 + 0.5)) % 4
    return ("ew-resize", "nwse-resize", "ns-resize", "nesw-resize")[index]


class BoundingBox:
    """Hit testing over a selection outline.

    Args:
        path: Outline corners tl, tr, br, bl.
        scale: Current zoom.
    """

    def __init__(self, path: Sequence[Vec2], scale: float = 1.0):
        self.path: List[Vec2] = list(path)
        tl, tr, br, bl = self.path
        self.rotation = get_radian(tr, tl)
        self.center = get_center(tl, br)
        self.segments: List[Segment] = [(tl, tr), (tr, br), (br, bl), (bl, tl)]
        self.update_scale(scale)

    def update_scale(self, scale: float) -> None:
        handles = get_settings().settings.canvas.handles
        self.scale = scale
        self.anchor_size = handles.anchor_size / scale
        self.anchors = [self._get_anchor(p) for p in self.path]
        offset = handles.rotation_offset / scale
        self.rotation_anchor_center = add(self.path[1], rotate(Vec2(offset, -offset), self.rotation))
        self.rotation_anchor_radius = self.anchor_size * 2

    def _get_anchor(self, p: Vec2) -> List[Vec2]:
        s = self.anchor_size
        square = [Vec2(p.x - s, p.y - s), Vec2(p.x + s, p.y - s), Vec2(p.x + s, p.y + s), Vec2(p.x - s, p.y + s)]
        if self.rotation == 0:
            return square
        return [rotate(q, self.rotation, p) for q in square]

    def get_rotation(self) -> float:
        return self.rotation

    def get_center(self) -> Vec2:
        return self.center

    def hit_test(self, p: Vec2) -> Optional[HitResult]:
        """Classify p. Rotation handle wins over corners, corners over edges."""
        if get_distance(p, self.rotation_anchor_center) <= self.rotation_anchor_radius:
            return HitResult(HIT_ROTATION)

        for i, anchor in enumerate(self.anchors):
            if is_point_on_polygon(anchor, p):
                return HitResult(HIT_CORNER, i)

        for i, seg in enumerate(self.segments):
            if is_point_close_to_segment(seg, p, self.anchor_size):
                return HitResult(HIT_SEGMENT, i)

        if is_point_on_polygon(self.path, p):
            return HitResult(HIT_AREA)
        return None

    def get_cursor_style(self, hit: Optional[HitResult]) -> Optional[str]:
        if hit is None:
            return None
        if hit.type == HIT_CORNER:
            r = math.pi / 4 if hit.index % 2 == 0 else -math.pi / 4
            return _resize_cursor(r + self.rotation)
        if hit.type == HIT_SEGMENT:
            r = math.pi / 2 if hit.index % 2 == 0 else 0.0
            return _resize_cursor(r + self.rotation)
        if hit.type == HIT_ROTATION:
            return "grab"
        return None

    def get_resizing_base(self, hit: HitResult) -> ResizingBase:
        return get_resizing_base(self.path, hit)

    def get_transformed_bounding_box(self, affine: AffineMatrix) -> "BoundingBox":
        return BoundingBox([apply_affine(affine, p) for p in self.path], self.scale)


def _rotated_scale_affine(origin: Vec2, rotation: float, sx: float, sy: float) -> AffineMatrix:
    """Scale by (sx, sy) along the axes of a frame rotated by rotation about origin."""
    return multi_affines([
        get_translate_affine(origin),
        get_rotation_affine(rotation),
        (sx, 0.0, 0.0, sy, 0.0, 0.0),
        get_rotation_affine(-rotation),
        get_translate_affine(Vec2(-origin.x, -origin.y)),
    ])


def _safe_rate(numerator: float, denominator: float) -> float:
    if abs(denominator) < MINVALUE:
        return 0.0
    return numerator / denominator


class BoundingBoxResizing:
    """Affine matrices for one resize gesture.

    Args:
        rotation: Rotation of the bounding box.
        hit: The dragged handle (corner or segment).
        resizing_base: Result of get_resizing_base() for hit.
    """

    def __init__(self, rotation: float, hit: HitResult, resizing_base: ResizingBase):
        self.rotation = rotation
        self.hit = hit
        self.resizing_base = resizing_base
        self.is_corner = hit.type == HIT_CORNER
        # Segments 0 and 2 are horizontal edges and only resize vertically
        horizontal_edge = hit.index % 2 == 0
        self.x_resizable = self.is_corner or not horizontal_edge
        self.y_resizable = self.is_corner or horizontal_edge

        self.rotated_direction = rotate(resizing_base.direction, -rotation)
        self.centralized_origin = add(resizing_base.origin, multi(resizing_base.direction, 0.5))
        self.centralized_rotated_direction = multi(self.rotated_direction, 0.5)
        self._rotate_fn = get_rotate_fn(-rotation, self.centralized_origin)
        self.rotated_origin = self._rotate_fn(resizing_base.origin)

    def _get_scale(self, diff: Vec2, keep_aspect: bool, centralize: bool):
        min_size = get_settings().settings.canvas.shapes.min_size
        direction = self.centralized_rotated_direction if centralize else self.rotated_direction
        adjusted_diff = get_pedal(diff, (self.resizing_base.direction, Vec2(0.0, 0.0))) if keep_aspect else diff
        rotated_diff = rotate(adjusted_diff, -self.rotation)

        # Keep at least min_size along every axis that has a length
        mini = min_size / 2 if centralize else min_size
        rx, ry = rotated_diff
        sign_x = math.copysign(1.0, direction.x) if abs(direction.x) >= MINVALUE else 0.0
        sign_y = math.copysign(1.0, direction.y) if abs(direction.y) >= MINVALUE else 0.0
        if sign_x and (direction.x + rx) * sign_x < mini:
            rx = mini * sign_x - direction.x
        if sign_y and (direction.y + ry) * sign_y < mini:
            ry = mini * sign_y - direction.y

        sx = 1.0 + _safe_rate(rx, direction.x) if self.x_resizable else 1.0
        sy = 1.0 + _safe_rate(ry, direction.y) if self.y_resizable else 1.0

        if keep_aspect:
            if self.is_corner:
                if not sign_x:
                    sx = sy
                elif not sign_y:
                    sy = sx
                sx = sy = max(sx, sy)
            elif self.x_resizable:
                sy = sx
            else:
                sx = sy
        return sx, sy

    def get_affine(self, diff: Vec2, keep_aspect: bool = False, centralize: bool = False) -> AffineMatrix:
        """Affine for a pointer displacement diff from the gesture start.

        Args:
            diff: Pointer displacement in diagram coordinates.
            keep_aspect: Use one factor for both axes.
            centralize: Keep the box center fixed instead of the opposite handle.
        """
        sx, sy = self._get_scale(diff, keep_aspect, centralize)
        origin = self.centralized_origin if centralize else self.resizing_base.origin
        return _rotated_scale_affine(origin, self.rotation, sx, sy)

    def get_affine_after_snapping(
        self,
        diff: Vec2,
        snapped_segment: Segment,
        keep_aspect: bool = False,
        centralize: bool = False,
    ) -> AffineMatrix:
        """Like get_affine(), but lands a keep-aspect corner on snapped_segment.

        The handle slides along the box diagonal, so the uniform rate comes
        from where that diagonal crosses the snapped line.
        """
        if not (keep_aspect and self.is_corner):
            return self.get_affine(diff, keep_aspect, centralize)

        rotated_segment = (self._rotate_fn(snapped_segment[0]), self._rotate_fn(snapped_segment[1]))
        direction = self.centralized_rotated_direction if centralize else self.rotated_direction
        rotated_origin = self._rotate_fn(self.centralized_origin) if centralize else self.rotated_origin
        cross_point = get_cross_line_and_line(rotated_segment, (rotated_origin, add(direction, rotated_origin)))
        if cross_point is None or get_norm(direction) < MINVALUE:
            return IDENTITY_AFFINE

        rate = get_norm(sub(cross_point, rotated_origin)) / get_norm(direction)
        origin = self.centralized_origin if centralize else self.resizing_base.origin
        return _rotated_scale_affine(origin, self.rotation, rate, rate)

    def get_transformed_anchor(self, affine: AffineMatrix) -> Vec2:
        """Where the dragged handle lands under affine."""
        return apply_affine(affine, add(self.resizing_base.origin, self.resizing_base.direction))


class BoundingBoxRotating:
    """Affine matrices for one rotation gesture about origin.

    Args:
        rotation: Rotation of the bounding box when the gesture started.
        origin: Rotation center.
    """

    def __init__(self, rotation: float, origin: Vec2):
        self.rotation = rotation
        self.origin = origin

    def _snapped(self, dr: float, step: float) -> float:
        return math.radians(snap_angle(math.degrees(dr + self.rotation), step)) - self.rotation

    def get_affine(self, start: Vec2, current: Vec2, snap: bool = False) -> AffineMatrix:
        """Rotation taking start to current about origin.

        With snap the absolute angle snaps to snap_step degrees. Otherwise it
        snaps loosely to loose_step, only when within half of loose_tolerance.
        """
        rot = get_settings().settings.rotation
        dr = get_radian(current, self.origin) - get_radian(start, self.origin)

        if snap:
            r = self._snapped(dr, rot.snap_step)
        else:
            fine = self._snapped(dr, rot.loose_tolerance)
            coarse = self._snapped(dr, rot.loose_step)
            r = fine if abs(fine - coarse) < 1e-4 else dr

        return multi_affines([
            get_translate_affine(self.origin),
            get_rotation_affine(r),
            get_translate_affine(Vec2(-self.origin.x, -self.origin.y)),
        ])
