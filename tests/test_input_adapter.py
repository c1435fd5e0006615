"""Tests for mapping Qt input onto state machine events."""
from __future__ import annotations

import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from PyQt6.QtCore import Qt

from canvas.input_adapter import (
    key_down_event,
    key_name_from_qt,
    mouse_options_from_qt,
    pointer_move_event,
    wheel_event,
)
from geometry.vectors import Vec2
from states.events import BUTTON_LEFT, BUTTON_MIDDLE, KEY_DOWN, POINTER_MOVE

NO_MODS = Qt.KeyboardModifier.NoModifier
CTRL = Qt.KeyboardModifier.ControlModifier
SHIFT = Qt.KeyboardModifier.ShiftModifier


class TestKeys:
    def test_named_keys(self):
        assert key_name_from_qt(Qt.Key.Key_Escape.value) == "Escape"
        assert key_name_from_qt(Qt.Key.Key_Delete.value) == "Delete"
        assert key_name_from_qt(Qt.Key.Key_Return.value, "\r") == "Enter"

    def test_letters_use_typed_text(self):
        assert key_name_from_qt(Qt.Key.Key_Z.value, "Z") == "Z"
        assert key_name_from_qt(Qt.Key.Key_R.value, "r") == "r"

    def test_control_character_falls_back_to_letter(self):
        assert key_name_from_qt(Qt.Key.Key_Z.value, "\x1a") == "z"

    def test_unknown_key(self):
        assert key_name_from_qt(Qt.Key.Key_F5.value) is None
        assert key_down_event(Qt.Key.Key_F5.value, "", NO_MODS) is None

    def test_key_down_event(self):
        event = key_down_event(Qt.Key.Key_G.value, "\x07", CTRL, Vec2(1, 2))
        assert event.type == KEY_DOWN
        assert event.key == "g"
        assert event.ctrl and not event.shift
        assert event.point == Vec2(1, 2)


class TestPointer:
    def test_buttons_and_modifiers(self):
        options = mouse_options_from_qt(Qt.MouseButton.MiddleButton, CTRL | SHIFT)
        assert options.button == BUTTON_MIDDLE
        assert options.ctrl and options.shift and not options.alt

    def test_unmapped_button_is_left(self):
        assert mouse_options_from_qt(Qt.MouseButton.BackButton, NO_MODS).button == BUTTON_LEFT

    def test_move_event(self):
        event = pointer_move_event(Vec2(0, 0), Vec2(3, 4), SHIFT, 2.0)
        assert event.type == POINTER_MOVE
        assert event.data.current == Vec2(3, 4)
        assert event.data.shift
        assert event.data.scale == 2.0


class TestWheel:
    def test_notches(self):
        assert wheel_event(240, Vec2(0, 0)).delta == 2.0
        assert wheel_event(-120, Vec2(0, 0)).delta == -1.0

    def test_zero_delta(self):
        assert wheel_event(0, Vec2(0, 0)) is None
