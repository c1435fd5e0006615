"""
states/app_canvas/commons.py

Handlers shared by the canvas states.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from canvas.composite import ShapeComposite
from canvas.tree import get_all_branch_ids
from geometry.vectors import Vec2, sub
from models import apply_patch
from states.core import BREAK, TransitionValue
from states.events import COPY, ContextMenuEvent, KeyDownEvent, WheelEvent

log = logging.getLogger(__name__)

TOOL_KEYS = {"r": "rectangle", "e": "ellipse", "l": "line"}
PASTE_OFFSET = Vec2(20.0, 20.0)


def get_root_target_ids(composite: ShapeComposite, ids: Sequence[str]) -> List[str]:
    """ids without the ones whose ancestor is also in ids."""
    id_set = set(ids)
    return [
        i for i in ids
        if composite.has_shape(i) and not any(a in id_set for a in composite.get_branch_path_to(i))
    ]


def translate_on_selection(ctx, bounding_box=None) -> TransitionValue:
    """Next state for the current selection."""
    from states.app_canvas.default_state import DefaultState
    from states.app_canvas.selected_state import SelectedState

    if not ctx.get_selected_shape_ids():
        return DefaultState
    return lambda: SelectedState(bounding_box)


def handle_common_shortcut(ctx, event: KeyDownEvent) -> TransitionValue:
    """Undo/redo and tool keys, available while no gesture is running."""
    from states.app_canvas.shape_tool_state import new_shape_tool_state

    key = event.key
    if event.ctrl and key.lower() == "z":
        if event.shift or key == "Z":
            ctx.redo()
        else:
            ctx.undo()
        return translate_on_selection(ctx)
    if event.ctrl and key == "y":
        ctx.redo()
        return translate_on_selection(ctx)
    if event.ctrl and key == "a":
        ctx.multi_select_shapes([n.id for n in ctx.get_shape_composite().merged_shape_tree])
        return translate_on_selection(ctx)
    if event.ctrl and key == "c":
        copy_selection(ctx)
        return None
    if event.ctrl and key == "v":
        return paste_clipboard(ctx)
    if not event.ctrl and key in TOOL_KEYS:
        tool = TOOL_KEYS[key]
        return lambda: new_shape_tool_state(tool)
    return None


def handle_common_wheel(ctx, event: WheelEvent) -> None:
    ctx.zoom_view(event.delta, event.point)


def handle_escape(event: KeyDownEvent) -> Optional[str]:
    """BREAK for Escape, None otherwise. Cancels the running gesture."""
    return BREAK if event.key == "Escape" else None


def copy_selection(ctx) -> None:
    """Put the selected branches on the context clipboard, in z-order."""
    composite = ctx.get_shape_composite()
    roots = get_root_target_ids(composite, ctx.get_selected_shape_ids())
    if not roots:
        return
    id_set = set(get_all_branch_ids(composite.merged_shape_tree_map, roots))
    ctx.clipboard = [s for s in composite.merged_shapes if s.id in id_set]
    log.debug("Copied %d shapes", len(ctx.clipboard))


def paste_clipboard(ctx, point: Optional[Vec2] = None) -> TransitionValue:
    """Add copies of the clipboard with fresh ids and select them.

    The copies land at point when given, otherwise shifted by PASTE_OFFSET.
    Pasted roots become top level. Attachments survive only when their host
    is pasted along.
    """
    if not ctx.clipboard:
        return None
    src = ShapeComposite(ctx.clipboard)
    if point is None:
        v = PASTE_OFFSET
    else:
        roots = [src.get_shape(n.id) for n in src.merged_shape_tree]
        rect = src.get_wrapper_rect_for_shapes(roots)
        v = sub(point, Vec2(rect.x, rect.y))

    id_map = {s.id: ctx.generate_id() for s in src.shapes}
    pasted = []
    for s in src.shapes:
        moved = apply_patch(s, src.transform_shape(s, (1.0, 0.0, 0.0, 1.0, v.x, v.y)))
        attachment = moved.attachment
        if attachment is not None:
            host_id = id_map.get(attachment.id)
            attachment = replace(attachment, id=host_id) if host_id else None
        pasted.append(replace(
            moved,
            id=id_map[s.id],
            parent_id=id_map.get(s.parent_id) if s.parent_id else None,
            attachment=attachment,
        ))
    ctx.add_shapes(pasted, "Paste shapes")
    ctx.multi_select_shapes([id_map[n.id] for n in src.merged_shape_tree])
    return translate_on_selection(ctx)


def handle_clipboard_event(ctx, event) -> TransitionValue:
    if event.type == COPY:
        copy_selection(ctx)
        return None
    return paste_clipboard(ctx, event.point)


def handle_context_menu(ctx, event: ContextMenuEvent) -> TransitionValue:
    """Pick the shape under the pointer before a context menu opens."""
    shape = ctx.get_shape_composite().find_shape_at(event.point, ctx.get_scale())
    if shape is None:
        return None
    if shape.id not in ctx.get_selected_shape_ids():
        ctx.select_shape(shape.id)
    return translate_on_selection(ctx)
