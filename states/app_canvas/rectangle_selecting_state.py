"""
states/app_canvas/rectangle_selecting_state.py

Rubber band selection of the root shapes fully inside the dragged rect.
"""

from __future__ import annotations

from typing import List, Optional

from geometry.rects import Rect, get_rect_from_points, is_rect_inside
from states.app_canvas.commons import handle_common_wheel, handle_escape, translate_on_selection
from states.core import ModeState, TransitionValue
from states.events import KEY_DOWN, POINTER_MOVE, POINTER_UP, WHEEL


class RectangleSelectingState(ModeState):
    """Rubber band selection.

    Args:
        keep_selection: Add to the current selection instead of replacing it.
    """

    label = "RectangleSelecting"

    def __init__(self, keep_selection: bool = False):
        self.keep_selection = keep_selection
        self.rectangle: Optional[Rect] = None
        self.target_ids: List[str] = []

    def on_start(self, ctx) -> TransitionValue:
        ctx.start_dragging()
        if not self.keep_selection:
            ctx.clear_all_selected()
        return None

    def on_end(self, ctx) -> None:
        ctx.stop_dragging()

    def handle_event(self, ctx, event) -> TransitionValue:
        if event.type == POINTER_MOVE:
            self.rectangle = get_rect_from_points(event.data.start, event.data.current)
            composite = ctx.get_shape_composite()
            self.target_ids = [
                node.id for node in composite.merged_shape_tree
                if is_rect_inside(self.rectangle, composite.get_wrapper_rect(composite.merged_shape_map[node.id]))
            ]
            return None

        if event.type == POINTER_UP:
            if self.target_ids:
                ctx.multi_select_shapes(self.target_ids, self.keep_selection)
            return translate_on_selection(ctx)

        if event.type == WHEEL:
            handle_common_wheel(ctx, event)
            return None

        if event.type == KEY_DOWN:
            return handle_escape(event)
        return None
