"""
states/app_canvas/selected_state.py

One or more shapes selected, with a bounding box offering resize and
rotation handles.
"""

from __future__ import annotations

import logging
from typing import Optional

from canvas.bounding_box import HIT_AREA, HIT_CORNER, HIT_ROTATION, HIT_SEGMENT, BoundingBox
from canvas.composite import can_group_shapes, get_delete_target_ids, get_selection_bounds
from canvas.tree import get_all_branch_ids
from models import GroupShape, PatchInfo
from states.app_canvas.commons import (
    get_root_target_ids,
    handle_clipboard_event,
    handle_common_shortcut,
    handle_common_wheel,
    handle_context_menu,
    translate_on_selection,
)
from states.core import STACK_RESUME, ModeState, Transition, TransitionValue
from states.events import (
    BUTTON_LEFT,
    BUTTON_MIDDLE,
    CHANGE_STATE,
    CONTEXT_MENU,
    COPY,
    KEY_DOWN,
    PASTE,
    POINTER_DOWN,
    POINTER_MOVE,
    SELECTION,
    WHEEL,
)

log = logging.getLogger(__name__)


class SelectedState(ModeState):
    """Selection idle state.

    Args:
        bounding_box: Bounding box to start with, e.g. the one transformed by
            the gesture that just finished. Rebuilt from the selection if None.
    """

    label = "Selected"

    def __init__(self, bounding_box: Optional[BoundingBox] = None):
        self.bounding_box = bounding_box

    def on_start(self, ctx) -> TransitionValue:
        from states.app_canvas.default_state import DefaultState

        composite = ctx.get_shape_composite()
        ids = [i for i in ctx.get_selected_shape_ids() if composite.has_shape(i)]
        if not ids:
            return DefaultState
        if self.bounding_box is None:
            path, _ = get_selection_bounds(composite, ids)
            self.bounding_box = BoundingBox(path, ctx.get_scale())
        else:
            self.bounding_box.update_scale(ctx.get_scale())
        return None

    def on_end(self, ctx) -> None:
        ctx.set_cursor(None)

    def _refresh(self, ctx) -> TransitionValue:
        self.bounding_box = None
        return self.on_start(ctx)

    def handle_event(self, ctx, event) -> TransitionValue:
        from states.app_canvas.panning_state import PanningState
        from states.app_canvas.pointer_down_on_shape_state import PointerDownOnShapeState
        from states.app_canvas.rectangle_selecting_state import RectangleSelectingState
        from states.app_canvas.resizing_state import ResizingState
        from states.app_canvas.rotating_state import RotatingState

        if event.type == POINTER_DOWN:
            if event.options.button == BUTTON_MIDDLE:
                return Transition(PanningState, STACK_RESUME)
            if event.options.button != BUTTON_LEFT:
                return None

            box = self.bounding_box
            hit = box.hit_test(event.point)
            if hit is not None and not event.options.ctrl:
                if hit.type == HIT_ROTATION:
                    return lambda: RotatingState(box)
                if hit.type in (HIT_CORNER, HIT_SEGMENT):
                    return lambda: ResizingState(box, hit)

            composite = ctx.get_shape_composite()
            shape = composite.find_shape_at(event.point, ctx.get_scale())
            if shape is not None:
                selected = shape.id in ctx.get_selected_shape_ids()
                if event.options.ctrl:
                    ctx.select_shape(shape.id, True)
                    return translate_on_selection(ctx)
                if not selected:
                    ctx.select_shape(shape.id)
                return PointerDownOnShapeState

            if hit is not None and hit.type == HIT_AREA:
                return PointerDownOnShapeState
            return lambda: RectangleSelectingState(keep_selection=event.options.ctrl)

        if event.type == POINTER_MOVE:
            ctx.set_cursor(self.bounding_box.get_cursor_style(self.bounding_box.hit_test(event.data.current)))
            return None

        if event.type == KEY_DOWN:
            return self._handle_key(ctx, event)

        if event.type == WHEEL:
            handle_common_wheel(ctx, event)
            self.bounding_box.update_scale(ctx.get_scale())
            return None

        if event.type == SELECTION:
            return self._refresh(ctx)

        if event.type in (COPY, PASTE):
            return handle_clipboard_event(ctx, event)

        if event.type == CONTEXT_MENU:
            return handle_context_menu(ctx, event)

        if event.type == CHANGE_STATE and event.name == "Break":
            ctx.clear_all_selected()
            return translate_on_selection(ctx)
        return None

    def _handle_key(self, ctx, event) -> TransitionValue:
        from states.app_canvas.default_state import DefaultState

        composite = ctx.get_shape_composite()
        ids = ctx.get_selected_shape_ids()

        if event.key == "Escape":
            ctx.clear_all_selected()
            return DefaultState

        if event.key in ("Delete", "Backspace"):
            branch_ids = get_all_branch_ids(composite.merged_shape_tree_map, ids)
            ctx.delete_shapes(get_delete_target_ids(composite, branch_ids), "Delete shapes")
            ctx.clear_all_selected()
            return DefaultState

        if event.ctrl and event.key == "g":
            roots = get_root_target_ids(composite, ids)
            if not can_group_shapes(composite, roots):
                return None
            first = composite.get_shape(roots[0])
            group = GroupShape(id=ctx.generate_id(), parent_id=first.parent_id)
            ctx.commit(
                PatchInfo(add=[group], update={i: {"parent_id": group.id} for i in roots}),
                "Group shapes",
            )
            log.debug("Grouped %s into %s", roots, group.id)
            ctx.select_shape(group.id)
            return self._refresh(ctx)

        if event.ctrl and event.key == "G":
            groups = [composite.get_shape(i) for i in ids if composite.get_shape(i).type == "group"]
            if not groups:
                return None
            children = []
            update = {}
            for g in groups:
                for node in composite.merged_shape_tree_map[g.id].children:
                    update[node.id] = {"parent_id": g.parent_id}
                    children.append(node.id)
            ctx.commit(PatchInfo(update=update, delete=[g.id for g in groups]), "Ungroup shapes")
            ctx.multi_select_shapes(children)
            return self._refresh(ctx)

        return handle_common_shortcut(ctx, event)
