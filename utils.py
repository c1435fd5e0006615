"""
utils.py

Utility functions for working with shape patch maps.
"""

from __future__ import annotations

from typing import Callable, Dict, Iterable, Optional, Sequence

from models import Shape, ShapePatch, ShapePatchMap, apply_patch


def to_map(shapes: Iterable[Shape]) -> Dict[str, Shape]:
    """Index shapes by id, keeping the last one for duplicated ids."""
    return {s.id: s for s in shapes}


def merge_map(base: ShapePatchMap, extra: ShapePatchMap) -> ShapePatchMap:
    """Merge two patch maps. Fields in extra win over fields in base."""
    merged: ShapePatchMap = {k: dict(v) for k, v in base.items()}
    for shape_id, patch in extra.items():
        if shape_id in merged:
            merged[shape_id].update(patch)
        else:
            merged[shape_id] = dict(patch)
    return merged


def patch_shapes(shape_map: Dict[str, Shape], patch_map: ShapePatchMap) -> Dict[str, Shape]:
    """Return shape_map with patch_map applied. Ids absent from shape_map are skipped."""
    result = dict(shape_map)
    for shape_id, patch in patch_map.items():
        shape = result.get(shape_id)
        if shape is not None:
            result[shape_id] = apply_patch(shape, patch)
    return result


def patch_pipe(
    getters: Sequence[Callable[[Dict[str, Shape], ShapePatchMap], ShapePatchMap]],
    src: Dict[str, Shape],
    initial: Optional[ShapePatchMap] = None,
) -> ShapePatchMap:
    """Run patch producers in sequence.

    Each getter receives the shapes with every previous patch applied plus
    the accumulated patch map, and returns a patch map to merge on top.

    Args:
        getters: Patch producers, applied in order.
        src: Committed shapes by id.
        initial: Optional starting patch map.

    Returns:
        The accumulated patch map.
    """
    patch = dict(initial or {})
    current = patch_shapes(src, patch)
    for getter in getters:
        extra = getter(current, patch)
        if extra:
            patch = merge_map(patch, extra)
            current = patch_shapes(src, patch)
    return patch


def drop_empty_patches(patch_map: ShapePatchMap) -> ShapePatchMap:
    return {k: v for k, v in patch_map.items() if v}


def trim_patch(shape: Shape, patch: ShapePatch) -> ShapePatch:
    """Drop fields whose value equals the current value of shape."""
    return {k: v for k, v in patch.items() if getattr(shape, k, None) != v}
