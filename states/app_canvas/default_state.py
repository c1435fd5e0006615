"""
states/app_canvas/default_state.py

Idle canvas with nothing selected.
"""

from __future__ import annotations

from states.app_canvas.commons import (
    handle_clipboard_event,
    handle_common_shortcut,
    handle_common_wheel,
    handle_context_menu,
    translate_on_selection,
)
from states.core import STACK_RESUME, ModeState, Transition, TransitionValue
from states.events import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    CHANGE_STATE,
    CONTEXT_MENU,
    COPY,
    KEY_DOWN,
    PASTE,
    POINTER_DOWN,
    SELECTION,
    WHEEL,
)


class DefaultState(ModeState):
    label = "Default"

    def on_start(self, ctx) -> TransitionValue:
        from states.app_canvas.selected_state import SelectedState

        ctx.set_cursor(None)
        # A cancelled gesture lands here with the selection still alive
        composite = ctx.get_shape_composite()
        if any(composite.has_shape(i) for i in ctx.get_selected_shape_ids()):
            return SelectedState
        return None

    def handle_event(self, ctx, event) -> TransitionValue:
        from states.app_canvas.panning_state import PanningState
        from states.app_canvas.pointer_down_on_shape_state import PointerDownOnShapeState
        from states.app_canvas.rectangle_selecting_state import RectangleSelectingState
        from states.app_canvas.shape_tool_state import new_shape_tool_state

        if event.type == POINTER_DOWN:
            if event.options.button == BUTTON_MIDDLE:
                return Transition(PanningState, STACK_RESUME)
            if event.options.button != BUTTON_LEFT:
                return None

            composite = ctx.get_shape_composite()
            shape = composite.find_shape_at(event.point, ctx.get_scale())
            if shape is None:
                return lambda: RectangleSelectingState(keep_selection=event.options.ctrl)
            ctx.select_shape(shape.id, event.options.ctrl)
            if event.options.ctrl:
                return translate_on_selection(ctx)
            return PointerDownOnShapeState

        if event.type == KEY_DOWN:
            return handle_common_shortcut(ctx, event)

        if event.type == WHEEL:
            handle_common_wheel(ctx, event)
            return None

        if event.type == SELECTION:
            return translate_on_selection(ctx)

        if event.type in (COPY, PASTE):
            return handle_clipboard_event(ctx, event)

        if event.type == CONTEXT_MENU:
            return handle_context_menu(ctx, event)

        if event.type == CHANGE_STATE:
            if event.name == "ShapeTool":
                tool = event.options or "rectangle"
                return lambda: new_shape_tool_state(tool)
            if event.name == "Break":
                return translate_on_selection(ctx)
        return None
