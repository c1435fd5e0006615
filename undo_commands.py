"""
undo_commands.py

QUndoCommand implementations for undo/redo support in shapecraft.

Every committed gesture becomes one PatchShapesCommand on a QUndoStack.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from PyQt6.QtGui import QUndoCommand, QUndoStack

from models import PatchInfo

if TYPE_CHECKING:
    from store import ShapeStore

log = logging.getLogger(__name__)


class PatchShapesCommand(QUndoCommand):
    """Command for one committed change set.

    The change is applied before the command is pushed, so the first redo
    (triggered by QUndoStack.push) is skipped.
    """

    def __init__(self, store: "ShapeStore", patch_info: PatchInfo, inverse: PatchInfo,
                 text: str = "Edit shapes", parent=None):
        super().__init__(parent)
        self.store = store
        self.patch_info = patch_info
        self.inverse = inverse
        self.setText(text)
        self._first_redo = True

    def undo(self):
        self.store.patch(self.inverse)

    def redo(self):
        if self._first_redo:
            self._first_redo = False
            return
        self.store.patch(self.patch_info)


class ShapeHistory:
    """Commit entry point that records every change on a QUndoStack."""

    def __init__(self, store: "ShapeStore", stack: Optional[QUndoStack] = None):
        self.store = store
        self.stack = stack if stack is not None else QUndoStack()

    def commit(self, patch_info: PatchInfo, text: str = "Edit shapes") -> None:
        if patch_info.is_empty():
            return
        inverse = self.store.get_inverse_patch(patch_info)
        self.store.patch(patch_info)
        self.stack.push(PatchShapesCommand(self.store, patch_info, inverse, text))
        log.debug("Committed '%s'", text)

    def undo(self) -> None:
        self.stack.undo()

    def redo(self) -> None:
        self.stack.redo()

    def can_undo(self) -> bool:
        return self.stack.canUndo()

    def can_redo(self) -> bool:
        return self.stack.canRedo()
