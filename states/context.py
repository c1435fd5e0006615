"""
states/context.py

CanvasStateContext: everything a canvas state may read or change.

The composite is rebuilt whenever the store commits and whenever the
temporary overlay is replaced, so states never see a stale revision.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence

from canvas.attachment import get_line_attachment_patch
from canvas.composite import ShapeComposite, replace_tmp_shape_map
from canvas.grid import Grid, get_grid_size
from canvas.snapping import ShapeSnapping
from canvas.tree import get_all_branch_ids
from debug_trace import trace_call
from geometry.rects import Rect
from geometry.vectors import Vec2, add, multi, sub
from models import PatchInfo, Shape, ShapePatchMap
from settings import AppSettings, get_settings
from utils import drop_empty_patches, merge_map

log = logging.getLogger(__name__)


def make_id_gen(prefix: str = "s") -> Callable[[], str]:
    """Return a callable that produces sequential IDs ``s000001, s000002, ...``."""
    counter = 0

    def _next_id() -> str:
        nonlocal counter
        counter += 1
        return f"{prefix}{counter:06d}"

    return _next_id


class CanvasStateContext:
    """Shared state of one canvas.

    Args:
        store: Committed shape document.
        history: Optional undo history. Commits go through it when given.
        settings: Settings to use, defaults to the global settings.
        viewport_size: Size of the view in pixels.
    """

    def __init__(self, store, history=None, settings: Optional[AppSettings] = None,
                 viewport_size: Vec2 = Vec2(800.0, 600.0)):
        self.store = store
        self.history = history
        self.settings = settings if settings is not None else get_settings().settings
        self._next_id = make_id_gen()

        self._tmp_shape_map: ShapePatchMap = {}
        self._composite: Optional[ShapeComposite] = None
        self._unwatch = store.watch(self._on_store_changed)

        self._selected: Dict[str, bool] = {}
        self.scale = 1.0
        self.viewport_origin = Vec2(0.0, 0.0)
        self.viewport_size = viewport_size
        self.cursor: Optional[str] = None
        self.dragging = False
        self.draft_shapes: List[Shape] = []
        self.clipboard: List[Shape] = []

    def dispose(self) -> None:
        self._unwatch()

    # ------------------------------------------------------------------
    # Shapes
    # ------------------------------------------------------------------

    def _on_store_changed(self, patch_info: PatchInfo) -> None:
        self._composite = None
        # Selection may point at deleted shapes
        shape_map = self.store.get_shape_map()
        self._selected = {k: v for k, v in self._selected.items() if k in shape_map}

    def get_shape_composite(self) -> ShapeComposite:
        if self._composite is None:
            self._composite = ShapeComposite(self.store.get_shapes(), self._tmp_shape_map)
        return self._composite

    def get_shape_map(self) -> Dict[str, Shape]:
        return self.get_shape_composite().shape_map

    def get_tmp_shape_map(self) -> ShapePatchMap:
        return self._tmp_shape_map

    def set_tmp_shape_map(self, patch_map: ShapePatchMap) -> None:
        self._tmp_shape_map = drop_empty_patches(patch_map)
        if self._composite is None:
            return
        self._composite = replace_tmp_shape_map(self._composite, self._tmp_shape_map)

    def generate_id(self) -> str:
        shape_map = self.store.get_shape_map()
        while True:
            shape_id = self._next_id()
            if shape_id not in shape_map:
                return shape_id

    @trace_call("COMMIT")
    def commit(self, patch_info: PatchInfo, text: str = "Edit shapes") -> None:
        if patch_info.is_empty():
            return
        log.debug("Commit '%s'", text)
        if self.history is not None:
            self.history.commit(patch_info, text)
        else:
            self.store.patch(patch_info)

    def patch_shapes(self, patch_map: ShapePatchMap, text: str = "Edit shapes") -> None:
        """Commit updates, keeping shapes attached to lines on their lines."""
        patch_map = drop_empty_patches(patch_map)
        if not patch_map:
            return
        committed = self.get_shape_composite().get_shape_composite_without_tmp()
        attached = get_line_attachment_patch(committed, patch_map)
        self.commit(PatchInfo(update=merge_map(patch_map, attached)), text)

    def add_shapes(self, shapes: Sequence[Shape], text: str = "Add shapes") -> None:
        self.commit(PatchInfo(add=list(shapes)), text)

    def delete_shapes(self, ids: Sequence[str], text: str = "Delete shapes") -> None:
        self.commit(PatchInfo(delete=list(ids)), text)

    def undo(self) -> None:
        if self.history is not None:
            self.history.undo()

    def redo(self) -> None:
        if self.history is not None:
            self.history.redo()

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def get_selected_shape_ids(self) -> List[str]:
        return list(self._selected)

    def get_last_selected_shape_id(self) -> Optional[str]:
        return next(reversed(self._selected), None) if self._selected else None

    def select_shape(self, shape_id: str, additive: bool = False) -> None:
        if additive:
            if shape_id in self._selected:
                del self._selected[shape_id]
            else:
                self._selected[shape_id] = True
            return
        self._selected = {shape_id: True}

    def multi_select_shapes(self, ids: Sequence[str], additive: bool = False) -> None:
        if not additive:
            self._selected = {}
        for shape_id in ids:
            self._selected[shape_id] = True

    def clear_all_selected(self) -> None:
        self._selected = {}

    # ------------------------------------------------------------------
    # Viewport
    # ------------------------------------------------------------------

    def get_scale(self) -> float:
        return self.scale

    def get_viewport(self) -> Rect:
        """Visible diagram area."""
        return Rect(
            self.viewport_origin.x,
            self.viewport_origin.y,
            self.viewport_size.x / self.scale,
            self.viewport_size.y / self.scale,
        )

    def set_viewport_size(self, size: Vec2) -> None:
        self.viewport_size = size

    def pan_view(self, v: Vec2) -> None:
        self.viewport_origin = add(self.viewport_origin, v)

    def zoom_view(self, step: float, center: Optional[Vec2] = None) -> float:
        """Zoom by wheel_factor ** step keeping center fixed on screen."""
        zoom = self.settings.canvas.zoom
        next_scale = self.scale * zoom.wheel_factor ** step
        next_scale = max(zoom.min_scale, min(zoom.max_scale, next_scale))
        if center is not None:
            # center stays at the same screen position
            rate = self.scale / next_scale
            self.viewport_origin = add(center, multi(sub(self.viewport_origin, center), rate))
        self.scale = next_scale
        return next_scale

    def get_grid(self) -> Grid:
        snapping = self.settings.snapping
        size = snapping.grid_size if snapping.grid_size > 0 else get_grid_size(self.scale)
        return Grid(size, self.get_viewport(), disabled=not snapping.grid_enabled)

    def get_shape_snapping(self, exclude_ids: Sequence[str] = ()) -> Optional[ShapeSnapping]:
        """Snapping against every shape outside the branches of exclude_ids."""
        snapping = self.settings.snapping
        if not snapping.enabled:
            return None
        composite = self.get_shape_composite()
        excluded = set(get_all_branch_ids(composite.merged_shape_tree_map, exclude_ids))
        candidates = [
            s for s in composite.merged_shapes
            if s.id not in excluded and s.type != "group"
        ]
        grid = self.get_grid()
        return ShapeSnapping(
            [(s.id, composite.get_snapping_lines(s)) for s in candidates],
            grid.get_snapping_lines() if not grid.disabled else None,
            snapping.threshold,
        )

    # ------------------------------------------------------------------
    # UI feedback
    # ------------------------------------------------------------------

    def set_cursor(self, cursor: Optional[str] = None) -> None:
        self.cursor = cursor

    def start_dragging(self) -> None:
        self.dragging = True

    def stop_dragging(self) -> None:
        self.dragging = False

    def set_draft_shapes(self, shapes: Sequence[Shape]) -> None:
        """Shapes being drawn, not part of the document yet."""
        self.draft_shapes = list(shapes)
