"""
canvas/snapping.py

Snapping of moving points and rects to shape guides and grid lines.

Every snapping source contributes vertical lines (snap along x) and
horizontal lines (snap along y). Thresholds are in screen pixels and get
divided by the zoom scale, so snapping feels the same at any zoom level.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from geometry.affine import AffineMatrix, apply_affine
from geometry.rects import Rect, get_rect_lines, move_rect
from geometry.vectors import MINVALUE, Segment, Vec2, add, get_norm, is_parallel, sub
from shapes.core import ShapeSnappingLines

if TYPE_CHECKING:
    from canvas.bounding_box import BoundingBoxResizing

log = logging.getLogger(__name__)

SNAP_THRESHOLD = 10.0
GRID_ID = "GRID"


@dataclass(frozen=True)
class SnappingTarget:
    """A line the result snapped to, trimmed to span the snapped point."""
    id: str
    line: Segment


@dataclass
class SnappingResult:
    """Correction to add to the raw input, and the lines responsible."""
    diff: Vec2 = Vec2(0.0, 0.0)
    targets: List[SnappingTarget] = field(default_factory=list)


@dataclass(frozen=True)
class _Candidate:
    id: str
    d: float
    line: Segment

    @property
    def ad(self) -> float:
        return abs(self.d)


def _closest(id_: str, lines: Sequence[Segment], target_of, clients: Sequence[float], threshold: float) -> List[_Candidate]:
    """Candidates within threshold, closest first."""
    ret = []
    for line in lines:
        target = target_of(line)
        d = min((target - v for v in clients), key=abs)
        if abs(d) < threshold:
            ret.append(_Candidate(id_, d, line))
    ret.sort(key=lambda c: c.ad)
    return ret


class ShapeSnapping:
    """Snapping against a fixed set of sources.

    Args:
        shape_snapping_list: (shape id, snapping lines) of every snapping source.
        grid_snapping: Optional grid lines, reported with the id GRID_ID.
        threshold: Snap distance in screen pixels.
    """

    def __init__(
        self,
        shape_snapping_list: Sequence[Tuple[str, ShapeSnappingLines]],
        grid_snapping: Optional[ShapeSnappingLines] = None,
        threshold: float = SNAP_THRESHOLD,
    ):
        self.threshold = threshold
        self.sources: List[Tuple[str, ShapeSnappingLines]] = list(shape_snapping_list)
        if grid_snapping is not None:
            self.sources.insert(0, (GRID_ID, grid_snapping))

    def _threshold(self, scale: float) -> float:
        return self.threshold / scale if scale > 0 else self.threshold

    def test_point(self, point: Vec2, scale: float = 1.0, origin: Optional[Vec2] = None) -> Optional[SnappingResult]:
        """Snap a single point.

        Args:
            point: Current (raw) point.
            scale: Zoom scale of the view.
            origin: Where the drag started. Lines parallel to the drag
                vector are ignored.

        Returns:
            The result, or None when nothing is within the threshold.
        """
        threshold = self._threshold(scale)
        drag = sub(point, origin) if origin is not None else None
        if drag is not None and get_norm(drag) < MINVALUE:
            drag = None

        x_closest: Optional[_Candidate] = None
        y_closest: Optional[_Candidate] = None
        for id_, lines in self.sources:
            if not (drag is not None and is_parallel(drag, Vec2(0.0, 1.0))):
                found = _closest(id_, lines.v, lambda l: l[0].x, [point.x], threshold)
                if found and (x_closest is None or found[0].ad < x_closest.ad):
                    x_closest = found[0]
            if not (drag is not None and is_parallel(drag, Vec2(1.0, 0.0))):
                found = _closest(id_, lines.h, lambda l: l[0].y, [point.y], threshold)
                if found and (y_closest is None or found[0].ad < y_closest.ad):
                    y_closest = found[0]

        if x_closest is None and y_closest is None:
            return None

        # Both axes only when the combined correction stays within reach
        if x_closest is not None and y_closest is not None:
            if get_norm(Vec2(x_closest.d, y_closest.d)) >= threshold:
                log.debug("Snapping %s only on the nearer axis", point)
                if x_closest.ad <= y_closest.ad:
                    y_closest = None
                else:
                    x_closest = None

        diff = Vec2(x_closest.d if x_closest else 0.0, y_closest.d if y_closest else 0.0)
        adjusted = add(point, diff)
        targets: List[SnappingTarget] = []
        if x_closest is not None:
            x = x_closest.line[0].x
            ys = sorted([adjusted.y, x_closest.line[0].y, x_closest.line[1].y])
            targets.append(SnappingTarget(x_closest.id, (Vec2(x, ys[0]), Vec2(x, ys[-1]))))
        if y_closest is not None:
            y = y_closest.line[0].y
            xs = sorted([adjusted.x, y_closest.line[0].x, y_closest.line[1].x])
            targets.append(SnappingTarget(y_closest.id, (Vec2(xs[0], y), Vec2(xs[-1], y))))
        return SnappingResult(diff=diff, targets=targets)

    def test(self, rect: Rect, scale: float = 1.0) -> Optional[SnappingResult]:
        """Snap a moving rect by its edges and center lines.

        Every source line equally close to the winner is reported as well,
        so aligned guides all show up.
        """
        threshold = self._threshold(scale)
        x_clients = [rect.x + rect.width / 2, rect.x, rect.right]
        y_clients = [rect.y + rect.height / 2, rect.y, rect.bottom]

        x_found: List[_Candidate] = []
        y_found: List[_Candidate] = []
        for id_, lines in self.sources:
            x_found.extend(_closest(id_, lines.v, lambda l: l[0].x, x_clients, threshold))
            y_found.extend(_closest(id_, lines.h, lambda l: l[0].y, y_clients, threshold))

        x_best = _pick_ties(x_found)
        y_best = _pick_ties(y_found)
        if not x_best and not y_best:
            return None

        diff = Vec2(x_best[0].d if x_best else 0.0, y_best[0].d if y_best else 0.0)
        top, _, _, left = get_rect_lines(move_rect(rect, diff))
        targets: List[SnappingTarget] = []
        for c in x_best:
            ys = sorted([left[0].y, left[1].y, c.line[0].y, c.line[1].y])
            x = c.line[0].x
            targets.append(SnappingTarget(c.id, (Vec2(x, ys[0]), Vec2(x, ys[-1]))))
        for c in y_best:
            xs = sorted([top[0].x, top[1].x, c.line[0].x, c.line[1].x])
            y = c.line[0].y
            targets.append(SnappingTarget(c.id, (Vec2(xs[0], y), Vec2(xs[-1], y))))
        return SnappingResult(diff=diff, targets=targets)


def _pick_ties(found: List[_Candidate]) -> List[_Candidate]:
    """Closest candidate plus the ones tied with it at the same correction."""
    if not found:
        return []
    best = min(found, key=lambda c: c.ad)
    return [c for c in found if abs(c.d - best.d) < MINVALUE]


def get_snapping_result_for_bounding_box_resizing(
    resizing: "BoundingBoxResizing",
    snapping: ShapeSnapping,
    moving_points: Sequence[Vec2],
    diff: Vec2,
    keep_aspect: bool = False,
    centralize: bool = False,
    scale: float = 1.0,
) -> Tuple[AffineMatrix, Optional[SnappingResult]]:
    """Resize affine with the moving handle points snapped.

    The plain resize is applied first, then the moving point closest to a
    snapping line decides the correction.

    Returns:
        The affine to use and the snapping result, None when nothing snapped.
    """
    affine = resizing.get_affine(diff, keep_aspect, centralize)
    results = [snapping.test_point(apply_affine(affine, p), scale) for p in moving_points]
    results = [r for r in results if r is not None]
    if not results:
        return affine, None

    result = min(results, key=lambda r: get_norm(r.diff))
    adjusted = add(diff, result.diff)
    if keep_aspect and result.targets:
        affine = resizing.get_affine_after_snapping(adjusted, result.targets[0].line, keep_aspect, centralize)
    else:
        affine = resizing.get_affine(adjusted, keep_aspect, centralize)
    return affine, result
