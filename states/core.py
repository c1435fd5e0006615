"""
states/core.py

Stack based interaction state machine.

A state handles one event at a time and answers with a transition:

* a callable returning the next state: replace the current frame
* Transition(get_state, STACK_RESTART): end the current state and push the
  next one; breaking out of it restarts the suspended state
* Transition(get_state, STACK_RESUME): push the next one without ending the
  current state; breaking out of it resumes the suspended state as it was
* BREAK: pop the current frame
* None: stay

on_start may answer with a transition too. Those are followed until a
state settles, before the triggering call returns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from debug_trace import trace

log = logging.getLogger(__name__)

BREAK = "break"
STACK_RESTART = "stack-restart"
STACK_RESUME = "stack-resume"


class ModeState:
    """Base class for interaction states. Every hook is optional."""

    label = "State"

    def get_label(self) -> str:
        return self.label

    def on_start(self, ctx) -> "TransitionValue":
        return None

    def on_resume(self, ctx) -> "TransitionValue":
        """Called when a stack-resume child breaks back into this state."""
        return None

    def on_end(self, ctx) -> None:
        pass

    def handle_event(self, ctx, event) -> "TransitionValue":
        return None


@dataclass(frozen=True)
class Transition:
    """Explicit transition. type is STACK_RESTART, STACK_RESUME or None (replace)."""
    get_state: Callable[[], ModeState]
    type: Optional[str] = None


TransitionValue = Union[Callable[[], ModeState], Transition, str, None]


@dataclass
class _StackItem:
    state: ModeState
    type: Optional[str] = None


class StateMachine:
    """Runs states against a shared context.

    The stack is never empty: breaking out of the last frame reseeds it
    with get_initial_state().

    Args:
        ctx: Context handed to every state hook.
        get_initial_state: Factory for the bottom state.
    """

    def __init__(self, ctx: Any, get_initial_state: Callable[[], ModeState]):
        self.ctx = ctx
        self.get_initial_state = get_initial_state
        self._stack: List[_StackItem] = [_StackItem(get_initial_state())]
        self._disposed = False
        self._resolve(self._current.state.on_start(ctx))

    @property
    def _current(self) -> _StackItem:
        return self._stack[-1]

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def disposed(self) -> bool:
        """True once dispose() ran. A disposed machine has no current state."""
        return self._disposed

    def get_current_state(self) -> ModeState:
        return self._current.state

    def get_state_summary(self) -> Dict[str, str]:
        return {"label": self._current.state.get_label()}

    def handle_event(self, event: Any) -> None:
        """Feed one event to the current state. Events without a type are ignored."""
        if self._disposed or getattr(event, "type", None) is None:
            return
        trace(f"{self._current.state.get_label()} <- {event.type}", "EVENT")
        self._resolve(self._current.state.handle_event(self.ctx, event))

    def dispose(self) -> None:
        """End the current state and stop handling events."""
        if self._disposed:
            return
        self._current.state.on_end(self.ctx)
        self._stack.clear()
        self._disposed = True

    def _resolve(self, ret: TransitionValue) -> None:
        while ret is not None and not self._disposed:
            if isinstance(ret, Transition):
                ret = self._switch(ret.get_state(), ret.type)
            elif ret == BREAK:
                ret = self._break()
            elif callable(ret):
                ret = self._switch(ret(), None)
            else:
                log.warning("Ignoring unknown transition %r", ret)
                return

    def _switch(self, next_state: ModeState, transition_type: Optional[str]) -> TransitionValue:
        current = self._current
        trace(
            f"{current.state.get_label()} -> {next_state.get_label()} ({transition_type or 'replace'})",
            "STATE",
        )
        if transition_type == STACK_RESTART:
            current.state.on_end(self.ctx)
            self._stack.append(_StackItem(next_state, transition_type))
        elif transition_type == STACK_RESUME:
            self._stack.append(_StackItem(next_state, transition_type))
        else:
            current.state.on_end(self.ctx)
            # The replacing frame keeps the stacking type of the replaced one
            self._stack[-1] = _StackItem(next_state, current.type)
        return next_state.on_start(self.ctx)

    def _break(self) -> TransitionValue:
        current = self._current
        current.state.on_end(self.ctx)
        self._stack.pop()

        if not self._stack:
            log.debug("State stack emptied by %s, reseeding", current.state.get_label())
            self._stack.append(_StackItem(self.get_initial_state()))
            trace(f"{current.state.get_label()} -> {self._current.state.get_label()} (reseed)", "STATE")
            return self._current.state.on_start(self.ctx)

        trace(f"{current.state.get_label()} -> {self._current.state.get_label()} (break)", "STATE")
        if current.type == STACK_RESUME:
            return self._current.state.on_resume(self.ctx)
        return self._current.state.on_start(self.ctx)


class GroupState(ModeState):
    """A state with its own inner state machine.

    Every event goes to the inner machine first, then to the outer state.
    The inner machine is created on start and disposed on end.

    Args:
        get_state: Factory for the outer state.
        get_initial_state: Factory for the inner machine's initial state.
        derive_ctx: Builds the inner machine's context from the outer one.
    """

    def __init__(
        self,
        get_state: Callable[[], ModeState],
        get_initial_state: Callable[[], ModeState],
        derive_ctx: Callable[[Any], Any] = lambda ctx: ctx,
    ):
        self.state = get_state()
        self.get_initial_state = get_initial_state
        self.derive_ctx = derive_ctx
        self.sm: Optional[StateMachine] = None

    def get_label(self) -> str:
        label = self.state.get_label()
        if self.sm is not None and not self.sm.disposed:
            label += ":" + self.sm.get_state_summary()["label"]
        return label

    def on_start(self, ctx) -> TransitionValue:
        ret = self.state.on_start(ctx)
        self.sm = StateMachine(self.derive_ctx(ctx), self.get_initial_state)
        return ret

    def on_resume(self, ctx) -> TransitionValue:
        return self.state.on_resume(ctx)

    def on_end(self, ctx) -> None:
        if self.sm is not None:
            self.sm.dispose()
        self.state.on_end(ctx)

    def handle_event(self, ctx, event) -> TransitionValue:
        if self.sm is not None:
            self.sm.handle_event(event)
        return self.state.handle_event(ctx, event)
