"""
states/app_canvas/pointer_down_on_shape_state.py

Pointer pressed on a shape: a click selects, a drag moves.
"""

from __future__ import annotations

from geometry.vectors import get_distance
from states.app_canvas.commons import handle_escape, translate_on_selection
from states.core import ModeState, TransitionValue
from states.events import KEY_DOWN, POINTER_MOVE, POINTER_UP


class PointerDownOnShapeState(ModeState):
    label = "PointerDownOnShape"

    def handle_event(self, ctx, event) -> TransitionValue:
        from states.app_canvas.moving_shape_state import MovingShapeState

        if event.type == POINTER_MOVE:
            # Drag threshold is in screen pixels
            moved = get_distance(event.data.current, event.data.start) * event.data.scale
            if moved < ctx.settings.gesture.drag_threshold:
                return None
            return MovingShapeState

        if event.type == POINTER_UP:
            return translate_on_selection(ctx)

        if event.type == KEY_DOWN:
            return handle_escape(event)
        return None
