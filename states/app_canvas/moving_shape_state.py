"""
states/app_canvas/moving_shape_state.py

Dragging the selected shapes.
"""

from __future__ import annotations

from typing import List, Optional

from canvas.attachment import get_line_attachment_patch
from canvas.bounding_box import BoundingBox
from canvas.snapping import ShapeSnapping, SnappingResult
from geometry.affine import IDENTITY_AFFINE, AffineMatrix
from geometry.rects import EMPTY_RECT, Rect, get_rect_points, move_rect
from geometry.vectors import Vec2, add, sub
from models import ShapePatchMap
from states.app_canvas.commons import get_root_target_ids, handle_escape, translate_on_selection
from states.core import BREAK, STACK_RESUME, ModeState, Transition, TransitionValue
from states.events import BUTTON_MIDDLE, KEY_DOWN, POINTER_DOWN, POINTER_MOVE, POINTER_UP, SELECTION
from utils import merge_map


class MovingShapeState(ModeState):
    label = "MovingShape"

    def __init__(self):
        self.target_ids: List[str] = []
        self.snapping: Optional[ShapeSnapping] = None
        self.snapping_result: Optional[SnappingResult] = None
        self.moving_rect: Rect = EMPTY_RECT
        self.affine: AffineMatrix = IDENTITY_AFFINE

    def on_start(self, ctx) -> TransitionValue:
        composite = ctx.get_shape_composite()
        self.target_ids = get_root_target_ids(composite, ctx.get_selected_shape_ids())
        if not self.target_ids:
            return BREAK

        ctx.start_dragging()
        ctx.set_cursor("move")
        self.snapping = ctx.get_shape_snapping(self.target_ids)
        self.moving_rect = composite.get_wrapper_rect_for_shapes(
            [composite.get_shape(i) for i in self.target_ids]
        )
        return None

    def on_resume(self, ctx) -> TransitionValue:
        ctx.set_cursor("move")
        return None

    def on_end(self, ctx) -> None:
        ctx.stop_dragging()
        ctx.set_tmp_shape_map({})
        ctx.set_cursor(None)

    def _get_patch(self, ctx) -> ShapePatchMap:
        composite = ctx.get_shape_composite()
        targets = composite.get_all_transform_targets(self.target_ids)
        moving_ids = {s.id for s in targets}
        patch: ShapePatchMap = {}
        for s in targets:
            src = composite.shape_map[s.id]
            p = composite.transform_shape(src, self.affine)
            # Leaving a host that doesn't move along detaches the shape
            if src.attachment is not None and src.attachment.id not in moving_ids:
                p["attachment"] = None
            patch[s.id] = p
        committed = composite.get_shape_composite_without_tmp()
        return merge_map(patch, get_line_attachment_patch(committed, patch))

    def handle_event(self, ctx, event) -> TransitionValue:
        from states.app_canvas.panning_state import PanningState

        if event.type == POINTER_MOVE:
            d = sub(event.data.current, event.data.start)
            self.snapping_result = None
            if self.snapping is not None and not event.data.ctrl:
                self.snapping_result = self.snapping.test(move_rect(self.moving_rect, d), ctx.get_scale())
            if self.snapping_result is not None:
                d = add(d, self.snapping_result.diff)
            self.affine = (1.0, 0.0, 0.0, 1.0, d.x, d.y)
            ctx.set_tmp_shape_map(self._get_patch(ctx))
            return None

        if event.type == POINTER_UP:
            tmp = ctx.get_tmp_shape_map()
            if tmp:
                ctx.patch_shapes(tmp, "Move shapes")
            moved = move_rect(self.moving_rect, Vec2(self.affine[4], self.affine[5]))
            box = BoundingBox(get_rect_points(moved), ctx.get_scale())
            return translate_on_selection(ctx, box if len(self.target_ids) > 1 else None)

        if event.type == POINTER_DOWN and event.options.button == BUTTON_MIDDLE:
            return Transition(PanningState, STACK_RESUME)

        if event.type == KEY_DOWN:
            return handle_escape(event)

        if event.type == SELECTION:
            return translate_on_selection(ctx)
        return None
