"""
states/app_canvas/panning_state.py

Panning the view while the pointer is held.

Entered with a stack-resume transition, so breaking out of it hands
control back to the suspended state exactly where it was.
"""

from __future__ import annotations

from geometry.vectors import sub
from states.core import BREAK, ModeState, TransitionValue
from states.events import KEY_DOWN, POINTER_MOVE, POINTER_UP


class PanningState(ModeState):
    label = "Panning"

    def on_start(self, ctx) -> TransitionValue:
        ctx.set_cursor("grabbing")
        return None

    def on_end(self, ctx) -> None:
        ctx.set_cursor(None)

    def handle_event(self, ctx, event) -> TransitionValue:
        if event.type == POINTER_MOVE:
            # Keep the grabbed diagram point under the pointer
            ctx.pan_view(sub(event.data.start, event.data.current))
            return None
        if event.type == POINTER_UP:
            return BREAK
        if event.type == KEY_DOWN and event.key == "Escape":
            return BREAK
        return None
