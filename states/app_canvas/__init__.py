"""
states/app_canvas package

Concrete states of the diagram canvas. DefaultState is the bottom state.
"""

from states.app_canvas.default_state import DefaultState
from states.app_canvas.moving_shape_state import MovingShapeState
from states.app_canvas.panning_state import PanningState
from states.app_canvas.pointer_down_on_shape_state import PointerDownOnShapeState
from states.app_canvas.rectangle_selecting_state import RectangleSelectingState
from states.app_canvas.resizing_state import ResizingState
from states.app_canvas.rotating_state import RotatingState
from states.app_canvas.selected_state import SelectedState
from states.app_canvas.shape_tool_state import new_shape_tool_state


def get_initial_state() -> DefaultState:
    return DefaultState()


__all__ = [
    "DefaultState",
    "MovingShapeState",
    "PanningState",
    "PointerDownOnShapeState",
    "RectangleSelectingState",
    "ResizingState",
    "RotatingState",
    "SelectedState",
    "get_initial_state",
    "new_shape_tool_state",
]
