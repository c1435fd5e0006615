"""Tests for the shape store and the QUndoStack backed history."""
from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from errors import ShapeNotFoundError
from geometry.vectors import Vec2
from models import PatchInfo, RectangleShape
from states.app_canvas import get_initial_state
from states.context import CanvasStateContext
from states.core import StateMachine
from states.events import KeyDownEvent
from store import ShapeStore
from undo_commands import ShapeHistory


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store():
    return ShapeStore([RectangleShape(id="a"), RectangleShape(id="b", p=Vec2(200, 0))])


# ---------------------------------------------------------------------------
# ShapeStore
# ---------------------------------------------------------------------------

class TestShapeStore:
    def test_patch(self, store):
        store.patch(PatchInfo(
            add=[RectangleShape(id="c")],
            update={"a": {"width": 5.0}, "missing": {"width": 1.0}},
            delete=["b"],
        ))
        assert [s.id for s in store.get_shapes()] == ["a", "c"]
        assert store.get_shape("a").width == 5.0
        assert store.revision == 1

    def test_duplicated_add_is_skipped(self, store):
        store.patch(PatchInfo(add=[RectangleShape(id="a", width=1.0)]))
        assert len(store.get_shapes()) == 2
        assert store.get_shape("a").width == 100.0

    def test_empty_patch_is_noop(self, store):
        calls = []
        store.watch(calls.append)
        store.patch(PatchInfo())
        assert calls == []
        assert store.revision == 0

    def test_watch_and_unwatch(self, store):
        calls = []
        unwatch = store.watch(calls.append)
        info = PatchInfo(delete=["a"])
        store.patch(info)
        unwatch()
        store.patch(PatchInfo(delete=["b"]))
        assert calls == [info]

    def test_missing_shape(self, store):
        with pytest.raises(ShapeNotFoundError):
            store.get_shape("nope")

    def test_inverse_patch_reverts(self, store):
        before = store.get_shapes()
        info = PatchInfo(
            add=[RectangleShape(id="c")],
            update={"a": {"width": 5.0, "p": Vec2(1, 1)}},
            delete=["b"],
        )
        inverse = store.get_inverse_patch(info)
        store.patch(info)
        store.patch(inverse)
        assert sorted(s.id for s in store.get_shapes()) == ["a", "b"]
        assert store.get_shape("a") == before[0]
        assert store.get_shape("b") == before[1]

    def test_inverse_patch_restores_order(self):
        store = ShapeStore([RectangleShape(id=i) for i in "abcd"])
        info = PatchInfo(add=[RectangleShape(id="e")], delete=["a", "c"])
        inverse = store.get_inverse_patch(info)
        assert inverse.insert_at == {"a": 0, "c": 2}

        store.patch(info)
        assert [s.id for s in store.get_shapes()] == ["b", "d", "e"]
        store.patch(inverse)
        assert [s.id for s in store.get_shapes()] == ["a", "b", "c", "d"]

    def test_insert_at_past_end_goes_on_top(self, store):
        store.patch(PatchInfo(add=[RectangleShape(id="c")], insert_at={"c": 10}))
        assert [s.id for s in store.get_shapes()] == ["a", "b", "c"]


# ---------------------------------------------------------------------------
# ShapeHistory
# ---------------------------------------------------------------------------

class TestShapeHistory:
    def test_undo_redo(self, qapp, store):
        history = ShapeHistory(store)
        history.commit(PatchInfo(update={"a": {"width": 5.0}}), "Resize")
        assert store.get_shape("a").width == 5.0
        assert history.stack.undoText() == "Resize"

        history.undo()
        assert store.get_shape("a").width == 100.0
        assert history.can_redo()

        history.redo()
        assert store.get_shape("a").width == 5.0
        assert not history.can_redo()

    def test_empty_commit_is_not_recorded(self, qapp, store):
        history = ShapeHistory(store)
        history.commit(PatchInfo())
        assert not history.can_undo()

    def test_shortcuts_through_state_machine(self, qapp, store):
        history = ShapeHistory(store)
        ctx = CanvasStateContext(store, history)
        sm = StateMachine(ctx, get_initial_state)
        ctx.delete_shapes(["a"])
        assert "a" not in store.get_shape_map()

        sm.handle_event(KeyDownEvent("z", ctrl=True))
        assert "a" in store.get_shape_map()

        sm.handle_event(KeyDownEvent("Z", ctrl=True, shift=True))
        assert "a" not in store.get_shape_map()

    def test_undo_delete_keeps_stacking_order(self, qapp):
        store = ShapeStore([RectangleShape(id=i) for i in "abc"])
        history = ShapeHistory(store)
        history.commit(PatchInfo(delete=["a"]), "Delete shapes")
        assert [s.id for s in store.get_shapes()] == ["b", "c"]

        history.undo()
        assert [s.id for s in store.get_shapes()] == ["a", "b", "c"]
        history.redo()
        history.undo()
        assert [s.id for s in store.get_shapes()] == ["a", "b", "c"]
