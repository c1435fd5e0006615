"""
canvas/input_adapter.py

Translation of Qt input into state machine events.

Widget positions are converted to diagram coordinates by the caller; the
helpers here only map buttons, modifiers and key codes.
"""

from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt

from geometry.vectors import Vec2
from states.events import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    BUTTON_RIGHT,
    EditMovement,
    KeyDownEvent,
    ModifierOptions,
    MouseOptions,
    PointerDownEvent,
    PointerMoveEvent,
    PointerUpEvent,
    WheelEvent,
)

_BUTTONS = {
    Qt.MouseButton.LeftButton: BUTTON_LEFT,
    Qt.MouseButton.MiddleButton: BUTTON_MIDDLE,
    Qt.MouseButton.RightButton: BUTTON_RIGHT,
}

# Qt keys with a DOM style name other than their text
_KEY_NAMES = {
    Qt.Key.Key_Escape: "Escape",
    Qt.Key.Key_Delete: "Delete",
    Qt.Key.Key_Backspace: "Backspace",
    Qt.Key.Key_Return: "Enter",
    Qt.Key.Key_Enter: "Enter",
    Qt.Key.Key_Tab: "Tab",
    Qt.Key.Key_Left: "ArrowLeft",
    Qt.Key.Key_Right: "ArrowRight",
    Qt.Key.Key_Up: "ArrowUp",
    Qt.Key.Key_Down: "ArrowDown",
    Qt.Key.Key_Shift: "Shift",
    Qt.Key.Key_Control: "Control",
    Qt.Key.Key_Alt: "Alt",
}

# One wheel notch in angleDelta units
WHEEL_NOTCH = 120.0


def modifier_options_from_qt(modifiers: Qt.KeyboardModifier) -> ModifierOptions:
    """Map Qt modifiers. Command on macOS arrives as ControlModifier."""
    return ModifierOptions(
        ctrl=bool(modifiers & Qt.KeyboardModifier.ControlModifier),
        shift=bool(modifiers & Qt.KeyboardModifier.ShiftModifier),
        alt=bool(modifiers & Qt.KeyboardModifier.AltModifier),
    )


def mouse_options_from_qt(button: Qt.MouseButton, modifiers: Qt.KeyboardModifier) -> MouseOptions:
    m = modifier_options_from_qt(modifiers)
    return MouseOptions(ctrl=m.ctrl, shift=m.shift, alt=m.alt, button=_BUTTONS.get(button, BUTTON_LEFT))


def key_name_from_qt(key: int, text: str = "") -> Optional[str]:
    """DOM style key name, or None for keys the canvas does not use.

    Letter keys report the typed text, so shift+z arrives as "Z". ctrl+letter
    types a control character and falls back to the lower case letter.
    """
    try:
        qt_key = Qt.Key(key)
    except ValueError:
        qt_key = None
    if qt_key in _KEY_NAMES:
        return _KEY_NAMES[qt_key]
    if text and text.isprintable():
        return text
    if Qt.Key.Key_A.value <= key <= Qt.Key.Key_Z.value:
        return chr(key).lower()
    return None


def pointer_down_event(point: Vec2, button: Qt.MouseButton, modifiers: Qt.KeyboardModifier) -> PointerDownEvent:
    return PointerDownEvent(point, mouse_options_from_qt(button, modifiers))


def pointer_up_event(point: Vec2, button: Qt.MouseButton, modifiers: Qt.KeyboardModifier) -> PointerUpEvent:
    return PointerUpEvent(point, mouse_options_from_qt(button, modifiers))


def pointer_move_event(start: Vec2, current: Vec2, modifiers: Qt.KeyboardModifier, scale: float) -> PointerMoveEvent:
    m = modifier_options_from_qt(modifiers)
    return PointerMoveEvent(EditMovement(ctrl=m.ctrl, shift=m.shift, alt=m.alt, start=start, current=current, scale=scale))


def key_down_event(key: int, text: str, modifiers: Qt.KeyboardModifier,
                   point: Optional[Vec2] = None) -> Optional[KeyDownEvent]:
    name = key_name_from_qt(key, text)
    if name is None:
        return None
    m = modifier_options_from_qt(modifiers)
    return KeyDownEvent(name, ctrl=m.ctrl, shift=m.shift, alt=m.alt, point=point)


def wheel_event(angle_delta_y: int, point: Vec2) -> Optional[WheelEvent]:
    if angle_delta_y == 0:
        return None
    return WheelEvent(angle_delta_y / WHEEL_NOTCH, point)
