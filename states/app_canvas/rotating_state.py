"""
states/app_canvas/rotating_state.py

Dragging the rotation handle. Every selected branch turns about the
bounding box center. shift snaps to the rotation step.
"""

from __future__ import annotations

from typing import List

from canvas.bounding_box import BoundingBox, BoundingBoxRotating
from geometry.affine import IDENTITY_AFFINE, AffineMatrix
from models import ShapePatchMap
from shapes import get_attachment_by_updating_rotation
from states.app_canvas.commons import get_root_target_ids, handle_common_wheel, handle_escape, translate_on_selection
from states.core import BREAK, ModeState, TransitionValue
from states.events import KEY_DOWN, POINTER_MOVE, POINTER_UP, SELECTION, WHEEL


class RotatingState(ModeState):
    label = "Rotating"

    def __init__(self, bounding_box: BoundingBox):
        self.bounding_box = bounding_box
        self.rotating = BoundingBoxRotating(bounding_box.get_rotation(), bounding_box.get_center())
        self.target_ids: List[str] = []
        self.affine: AffineMatrix = IDENTITY_AFFINE

    def on_start(self, ctx) -> TransitionValue:
        composite = ctx.get_shape_composite()
        roots = get_root_target_ids(composite, ctx.get_selected_shape_ids())
        if not roots:
            return BREAK
        self.target_ids = [s.id for s in composite.get_all_transform_targets(roots)]
        ctx.start_dragging()
        ctx.set_cursor("grabbing")
        return None

    def on_end(self, ctx) -> None:
        ctx.stop_dragging()
        ctx.set_tmp_shape_map({})
        ctx.set_cursor(None)

    def _get_patch(self, ctx) -> ShapePatchMap:
        composite = ctx.get_shape_composite()
        patch: ShapePatchMap = {}
        for shape_id in self.target_ids:
            shape = composite.shape_map[shape_id]
            p = composite.transform_shape(shape, self.affine)
            if "rotation" in p:
                attachment = get_attachment_by_updating_rotation(shape, p["rotation"])
                if attachment is not None:
                    p["attachment"] = attachment
            patch[shape_id] = p
        return patch

    def handle_event(self, ctx, event) -> TransitionValue:
        if event.type == POINTER_MOVE:
            self.affine = self.rotating.get_affine(event.data.start, event.data.current, event.data.shift)
            ctx.set_tmp_shape_map(self._get_patch(ctx))
            return None

        if event.type == POINTER_UP:
            tmp = ctx.get_tmp_shape_map()
            if tmp:
                ctx.patch_shapes(tmp, "Rotate shapes")
            return translate_on_selection(ctx, self.bounding_box.get_transformed_bounding_box(self.affine))

        if event.type == WHEEL:
            handle_common_wheel(ctx, event)
            return None

        if event.type == KEY_DOWN:
            return handle_escape(event)

        if event.type == SELECTION:
            return translate_on_selection(ctx)
        return None
