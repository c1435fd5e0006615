"""Tests for the stack based state machine and grouped states."""
from __future__ import annotations

import os
import sys
from types import SimpleNamespace

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from states.core import BREAK, STACK_RESTART, STACK_RESUME, GroupState, ModeState, StateMachine, Transition


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class Recorder(ModeState):
    """Logs its hooks into ctx.log and answers events from a table."""

    def __init__(self, label, transitions=None, on_start_ret=None):
        self.label = label
        self.transitions = transitions or {}
        self.on_start_ret = on_start_ret

    def on_start(self, ctx):
        ctx.log.append(f"{self.label}.start")
        return self.on_start_ret

    def on_resume(self, ctx):
        ctx.log.append(f"{self.label}.resume")

    def on_end(self, ctx):
        ctx.log.append(f"{self.label}.end")

    def handle_event(self, ctx, event):
        ctx.handled.append(self.label)
        return self.transitions.get(event.type)


def _ctx():
    return SimpleNamespace(log=[], handled=[])


def _event(name):
    return SimpleNamespace(type=name)


def _label(sm):
    return sm.get_state_summary()["label"]


# ---------------------------------------------------------------------------
# StateMachine
# ---------------------------------------------------------------------------

class TestStateMachine:
    def test_initial_state_is_started(self):
        ctx = _ctx()
        sm = StateMachine(ctx, lambda: Recorder("a"))
        assert _label(sm) == "a"
        assert ctx.log == ["a.start"]

    def test_replace(self):
        ctx = _ctx()
        sm = StateMachine(ctx, lambda: Recorder("a", {"go": lambda: Recorder("b")}))
        sm.handle_event(_event("go"))
        assert _label(sm) == "b"
        assert sm.depth == 1
        assert ctx.log == ["a.start", "a.end", "b.start"]

    def test_on_start_transitions_are_followed(self):
        ctx = _ctx()
        c = lambda: Recorder("c")  # noqa: E731
        sm = StateMachine(ctx, lambda: Recorder("a", {"go": lambda: Recorder("b", on_start_ret=c)}))
        sm.handle_event(_event("go"))
        assert _label(sm) == "c"
        assert ctx.log == ["a.start", "a.end", "b.start", "b.end", "c.start"]

    def test_stack_resume(self):
        ctx = _ctx()
        b = lambda: Recorder("b", {"stop": BREAK})  # noqa: E731
        sm = StateMachine(ctx, lambda: Recorder("a", {"go": Transition(b, STACK_RESUME)}))

        sm.handle_event(_event("go"))
        assert _label(sm) == "b"
        assert sm.depth == 2
        assert ctx.log == ["a.start", "b.start"]

        sm.handle_event(_event("stop"))
        assert _label(sm) == "a"
        assert sm.depth == 1
        assert ctx.log == ["a.start", "b.start", "b.end", "a.resume"]

    def test_stack_restart(self):
        ctx = _ctx()
        b = lambda: Recorder("b", {"stop": BREAK})  # noqa: E731
        sm = StateMachine(ctx, lambda: Recorder("a", {"go": Transition(b, STACK_RESTART)}))

        sm.handle_event(_event("go"))
        assert ctx.log == ["a.start", "a.end", "b.start"]

        sm.handle_event(_event("stop"))
        assert _label(sm) == "a"
        assert ctx.log == ["a.start", "a.end", "b.start", "b.end", "a.start"]

    def test_replace_keeps_stacking_type(self):
        ctx = _ctx()
        c = lambda: Recorder("c", {"stop": BREAK})  # noqa: E731
        b = lambda: Recorder("b", {"next": c})  # noqa: E731
        sm = StateMachine(ctx, lambda: Recorder("a", {"go": Transition(b, STACK_RESUME)}))

        sm.handle_event(_event("go"))
        sm.handle_event(_event("next"))
        sm.handle_event(_event("stop"))
        assert _label(sm) == "a"
        assert ctx.log[-1] == "a.resume"

    def test_break_on_bottom_reseeds(self):
        ctx = _ctx()
        count = []

        def initial():
            count.append(1)
            return Recorder(f"a{len(count)}", {"stop": BREAK})

        sm = StateMachine(ctx, initial)
        sm.handle_event(_event("stop"))
        assert _label(sm) == "a2"
        assert sm.depth == 1
        assert ctx.log == ["a1.start", "a1.end", "a2.start"]

    def test_events_without_type_and_unknown_answers_are_ignored(self):
        ctx = _ctx()
        sm = StateMachine(ctx, lambda: Recorder("a", {"odd": 42}))
        sm.handle_event(SimpleNamespace())
        sm.handle_event(_event("odd"))
        sm.handle_event(_event("unhandled"))
        assert _label(sm) == "a"
        assert ctx.handled == ["a", "a"]

    def test_dispose(self):
        ctx = _ctx()
        sm = StateMachine(ctx, lambda: Recorder("a"))
        assert not sm.disposed
        sm.dispose()
        sm.dispose()
        assert sm.disposed
        sm.handle_event(_event("go"))
        assert ctx.log == ["a.start", "a.end"]
        assert ctx.handled == []


# ---------------------------------------------------------------------------
# GroupState
# ---------------------------------------------------------------------------

class TestGroupState:
    def _machine(self, ctx):
        ab = lambda: Recorder("ab")  # noqa: E731
        return StateMachine(ctx, lambda: GroupState(
            lambda: Recorder("a", {"leave": lambda: Recorder("z")}),
            lambda: Recorder("aa", {"next": ab}),
        ))

    def test_label_includes_inner_state(self):
        ctx = _ctx()
        sm = self._machine(ctx)
        assert _label(sm) == "a:aa"
        sm.handle_event(_event("next"))
        assert _label(sm) == "a:ab"
        assert ctx.log == ["a.start", "aa.start", "aa.end", "ab.start"]
        assert ctx.log.count("a.start") == 1

    def test_inner_machine_sees_events_first(self):
        ctx = _ctx()
        sm = self._machine(ctx)
        sm.handle_event(_event("next"))
        assert ctx.handled == ["aa", "a"]

    def test_leaving_disposes_inner_machine(self):
        ctx = _ctx()
        sm = self._machine(ctx)
        sm.handle_event(_event("leave"))
        assert _label(sm) == "z"
        assert ctx.log == ["a.start", "aa.start", "aa.end", "a.end", "z.start"]

    def test_label_after_end_is_outer_only(self):
        ctx = _ctx()
        group = GroupState(lambda: Recorder("a"), lambda: Recorder("aa"))
        sm = StateMachine(ctx, lambda: group)
        assert group.get_label() == "a:aa"

        sm.dispose()
        assert group.sm.disposed
        assert group.get_label() == "a"

    def test_derived_context(self):
        ctx = _ctx()
        inner = _ctx()
        StateMachine(ctx, lambda: GroupState(lambda: Recorder("a"), lambda: Recorder("aa"), lambda c: inner))
        assert ctx.log == ["a.start"]
        assert inner.log == ["aa.start"]
