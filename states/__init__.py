"""
states package

Interaction state machine and the events and context it runs on.
"""

from states.core import BREAK, STACK_RESTART, STACK_RESUME, GroupState, ModeState, StateMachine, Transition
from states.context import CanvasStateContext

__all__ = [
    "BREAK",
    "STACK_RESTART",
    "STACK_RESUME",
    "CanvasStateContext",
    "GroupState",
    "ModeState",
    "StateMachine",
    "Transition",
]
