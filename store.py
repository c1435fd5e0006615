"""
store.py

In-memory shape document.

ShapeStore owns the committed shape list. It applies PatchInfo change sets,
computes their inverse for undo, and notifies observers after each change.
"""

from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List

from errors import ShapeNotFoundError
from models import PatchInfo, Shape, apply_patch, insert_shapes

log = logging.getLogger(__name__)

Observer = Callable[[PatchInfo], None]


class ShapeStore:
    """Ordered list of committed shapes, first is bottom-most."""

    def __init__(self, shapes: Iterable[Shape] = ()):
        self._shapes: List[Shape] = list(shapes)
        self._observers: List[Observer] = []
        self.revision = 0

    def get_shapes(self) -> List[Shape]:
        return list(self._shapes)

    def get_shape_map(self) -> Dict[str, Shape]:
        return {s.id: s for s in self._shapes}

    def get_shape(self, shape_id: str) -> Shape:
        for s in self._shapes:
            if s.id == shape_id:
                return s
        raise ShapeNotFoundError(shape_id)

    def patch(self, patch_info: PatchInfo) -> None:
        """Apply a change set and notify observers.

        Updates for unknown ids are ignored. Added shapes go on top unless
        patch_info.insert_at places them.
        """
        if patch_info.is_empty():
            return
        deleted = set(patch_info.delete)
        next_shapes = [
            apply_patch(s, patch_info.update.get(s.id))
            for s in self._shapes
            if s.id not in deleted
        ]
        existing = {s.id for s in next_shapes}
        added = []
        for s in patch_info.add:
            if s.id in existing:
                log.warning("Skipping duplicated shape id %s", s.id)
                continue
            existing.add(s.id)
            added.append(s)

        self._shapes = insert_shapes(next_shapes, added, patch_info.insert_at)
        self.revision += 1
        log.debug(
            "Store revision %d: +%d ~%d -%d",
            self.revision, len(patch_info.add), len(patch_info.update), len(patch_info.delete),
        )
        for fn in list(self._observers):
            fn(patch_info)

    def get_inverse_patch(self, patch_info: PatchInfo) -> PatchInfo:
        """Change set that reverts patch_info when applied after it.

        Must be computed before patch_info is applied. Deleted shapes come
        back at their current index.
        """
        shape_map = self.get_shape_map()
        index_map = {s.id: i for i, s in enumerate(self._shapes)}
        update = {}
        for shape_id, patch in patch_info.update.items():
            shape = shape_map.get(shape_id)
            if shape is None or shape_id in patch_info.delete:
                continue
            update[shape_id] = {k: getattr(shape, k) for k in patch}
        return PatchInfo(
            add=[shape_map[i] for i in patch_info.delete if i in shape_map],
            update=update,
            delete=[s.id for s in patch_info.add],
            insert_at={i: index_map[i] for i in patch_info.delete if i in index_map},
        )

    def watch(self, fn: Observer) -> Callable[[], None]:
        """Register fn to run after every change. Returns an unsubscribe callable."""
        self._observers.append(fn)

        def unwatch() -> None:
            if fn in self._observers:
                self._observers.remove(fn)

        return unwatch
