"""
states/events.py

Events fed into the interaction state machine.

Coordinates are diagram coordinates. `scale` is the zoom of the view that
produced the event, so pixel thresholds can be converted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from geometry.vectors import Vec2

POINTER_MOVE = "pointermove"
POINTER_DOWN = "pointerdown"
POINTER_UP = "pointerup"
KEY_DOWN = "keydown"
CHANGE_STATE = "state"
CONTEXT_MENU = "contextmenu"
COPY = "copy"
PASTE = "paste"
SELECTION = "selection"
WHEEL = "wheel"

BUTTON_LEFT = 0
BUTTON_MIDDLE = 1
BUTTON_RIGHT = 2


@dataclass
class ModifierOptions:
    ctrl: bool = False
    shift: bool = False
    alt: bool = False


@dataclass
class MouseOptions(ModifierOptions):
    button: int = BUTTON_LEFT


@dataclass
class EditMovement(ModifierOptions):
    """Pointer drag from start to current."""
    start: Vec2 = Vec2(0.0, 0.0)
    current: Vec2 = Vec2(0.0, 0.0)
    scale: float = 1.0


@dataclass
class PointerMoveEvent:
    data: EditMovement
    type: str = field(default=POINTER_MOVE, init=False)


@dataclass
class PointerDownEvent:
    point: Vec2
    options: MouseOptions = field(default_factory=MouseOptions)
    type: str = field(default=POINTER_DOWN, init=False)


@dataclass
class PointerUpEvent:
    point: Vec2
    options: MouseOptions = field(default_factory=MouseOptions)
    type: str = field(default=POINTER_UP, init=False)


@dataclass
class KeyDownEvent:
    """Key press. key uses DOM style names: "a", "Escape", "Delete", ..."""
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    point: Optional[Vec2] = None
    type: str = field(default=KEY_DOWN, init=False)


@dataclass
class ChangeStateEvent:
    """Request from outside the canvas, e.g. a toolbar button."""
    name: str
    options: Any = None
    type: str = field(default=CHANGE_STATE, init=False)


@dataclass
class ContextMenuEvent:
    point: Vec2
    type: str = field(default=CONTEXT_MENU, init=False)


@dataclass
class CopyEvent:
    type: str = field(default=COPY, init=False)


@dataclass
class PasteEvent:
    point: Optional[Vec2] = None
    type: str = field(default=PASTE, init=False)


@dataclass
class SelectionEvent:
    """The selection changed from outside the state machine."""
    type: str = field(default=SELECTION, init=False)


@dataclass
class WheelEvent:
    """Wheel rotation in notches. Positive zooms in about point."""
    delta: float
    point: Vec2
    type: str = field(default=WHEEL, init=False)
