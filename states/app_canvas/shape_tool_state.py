"""
states/app_canvas/shape_tool_state.py

Shape drawing tool, built as a grouped state: the outer ShapeToolState
owns tool switching and leaving the tool, the inner machine runs the
Ready/Drawing cycle.

Labels read "ShapeTool:Ready" and "ShapeTool:DrawingShape".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from geometry.rects import get_rect_from_points
from geometry.vectors import Vec2, add, get_distance
from models import Shape
from shapes import create_shape
from states.app_canvas.commons import TOOL_KEYS, handle_common_wheel, translate_on_selection
from states.core import BREAK, STACK_RESUME, GroupState, ModeState, Transition, TransitionValue
from states.events import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    CHANGE_STATE,
    KEY_DOWN,
    POINTER_DOWN,
    POINTER_MOVE,
    POINTER_UP,
    WHEEL,
)

log = logging.getLogger(__name__)


@dataclass
class ToolSelection:
    """Tool shared by the outer and the inner states."""
    tool: str = "rectangle"


@dataclass
class ShapeToolContext:
    """Context of the inner machine: the canvas plus the active tool."""
    canvas: object
    selection: ToolSelection


def build_tool_shape(ctx: ShapeToolContext, start: Vec2, current: Vec2, shape_id: str = "draft") -> Shape:
    """Shape the active tool makes for a drag from start to current.

    A drag shorter than the minimum size yields a default sized shape at start.
    """
    shape_settings = ctx.canvas.settings.canvas.shapes
    tool = ctx.selection.tool
    short = get_distance(start, current) < shape_settings.min_size

    if tool == "line":
        q = add(start, Vec2(shape_settings.default_width, 0.0)) if short else current
        return create_shape("line", id=shape_id, p=start, q=q)

    if short:
        return create_shape(
            tool, id=shape_id, p=start,
            width=shape_settings.default_width, height=shape_settings.default_height,
        )
    rect = get_rect_from_points(start, current)
    return create_shape(
        tool, id=shape_id, p=Vec2(rect.x, rect.y),
        width=max(rect.width, shape_settings.min_size),
        height=max(rect.height, shape_settings.min_size),
    )


# ---------------------------------------------------------------------------
# Inner states
# ---------------------------------------------------------------------------

class ToolReadyState(ModeState):
    label = "Ready"

    def handle_event(self, ctx: ShapeToolContext, event) -> TransitionValue:
        if event.type == POINTER_DOWN and event.options.button == BUTTON_LEFT:
            start = event.point
            return lambda: DrawingShapeState(start)
        return None


class DrawingShapeState(ModeState):
    label = "DrawingShape"

    def __init__(self, start: Vec2):
        self.start = start
        self.current = start

    def on_start(self, ctx: ShapeToolContext) -> TransitionValue:
        ctx.canvas.start_dragging()
        ctx.canvas.set_draft_shapes([build_tool_shape(ctx, self.start, self.current)])
        return None

    def on_end(self, ctx: ShapeToolContext) -> None:
        ctx.canvas.stop_dragging()
        ctx.canvas.set_draft_shapes([])

    def handle_event(self, ctx: ShapeToolContext, event) -> TransitionValue:
        if event.type == POINTER_MOVE:
            self.current = event.data.current
            ctx.canvas.set_draft_shapes([build_tool_shape(ctx, self.start, self.current)])
            return None

        if event.type == POINTER_UP:
            shape = build_tool_shape(ctx, self.start, event.point, ctx.canvas.generate_id())
            ctx.canvas.add_shapes([shape], f"Add {shape.type}")
            ctx.canvas.select_shape(shape.id)
            log.debug("Created %s %s", shape.type, shape.id)
            return ToolReadyState

        if event.type == KEY_DOWN and event.key == "Escape":
            return BREAK
        return None


# ---------------------------------------------------------------------------
# Outer state
# ---------------------------------------------------------------------------

class ShapeToolState(ModeState):
    """Keeps the tool alive until Escape or a "Break" request."""

    label = "ShapeTool"

    def __init__(self, selection: ToolSelection):
        self.selection = selection

    def on_start(self, ctx) -> TransitionValue:
        ctx.set_cursor("crosshair")
        return None

    def on_resume(self, ctx) -> TransitionValue:
        ctx.set_cursor("crosshair")
        return None

    def on_end(self, ctx) -> None:
        ctx.set_cursor(None)

    def handle_event(self, ctx, event) -> TransitionValue:
        from states.app_canvas.panning_state import PanningState

        if event.type == POINTER_DOWN and event.options.button == BUTTON_MIDDLE:
            return Transition(PanningState, STACK_RESUME)

        if event.type == KEY_DOWN:
            if event.key == "Escape":
                return translate_on_selection(ctx)
            if not event.ctrl and event.key in TOOL_KEYS:
                self.selection.tool = TOOL_KEYS[event.key]
            return None

        if event.type == WHEEL:
            handle_common_wheel(ctx, event)
            return None

        if event.type == CHANGE_STATE:
            if event.name == "ShapeTool":
                self.selection.tool = event.options or self.selection.tool
                return None
            if event.name == "Break":
                return translate_on_selection(ctx)
        return None


def new_shape_tool_state(tool: Optional[str] = None) -> GroupState:
    """Grouped drawing state starting with tool."""
    selection = ToolSelection(tool or "rectangle")
    return GroupState(
        lambda: ShapeToolState(selection),
        ToolReadyState,
        lambda ctx: ShapeToolContext(ctx, selection),
    )
