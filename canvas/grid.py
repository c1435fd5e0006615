"""
canvas/grid.py

Background grid used as an extra snapping source.
"""

from __future__ import annotations

import math
from typing import List

from geometry.rects import Rect
from geometry.vectors import Segment, Vec2
from shapes.core import ShapeSnappingLines


class Grid:
    """Grid lines every `size` units covering range_rect.

    Args:
        size: Distance between two lines.
        range_rect: Area to cover, usually the visible viewport.
        disabled: Produce no lines at all.
    """

    def __init__(self, size: float, range_rect: Rect, disabled: bool = False):
        self.size = size
        self.range_rect = range_rect
        self.disabled = disabled or size <= 0

        self.segments_v: List[Segment] = []
        self.segments_h: List[Segment] = []
        if self.disabled:
            return

        r = range_rect
        base_x = math.ceil(r.x / size) * size
        for i in range(math.ceil(r.width / size)):
            x = base_x + i * size
            self.segments_v.append((Vec2(x, r.y), Vec2(x, r.y + r.height)))

        base_y = math.ceil(r.y / size) * size
        for i in range(math.ceil(r.height / size)):
            y = base_y + i * size
            self.segments_h.append((Vec2(r.x, y), Vec2(r.x + r.width, y)))

    def get_snapping_lines(self) -> ShapeSnappingLines:
        return ShapeSnappingLines(v=list(self.segments_v), h=list(self.segments_h))


def get_grid_size(scale: float) -> float:
    """Grid size suited to the zoom level, coarser when zoomed out."""
    units_per_px = 1.0 / scale if scale > 0 else 1.0
    if units_per_px < 0.6:
        return 25.0
    if units_per_px < 1.5:
        return 50.0
    if units_per_px < 2.4:
        return 100.0
    if units_per_px < 4.8:
        return 200.0
    return 400.0
