"""
states/app_canvas/resizing_state.py

Dragging a resize handle of the selection bounding box.

shift keeps the aspect ratio, alt resizes about the center and ctrl
disables snapping.
"""

from __future__ import annotations

from typing import List, Optional

from canvas.bounding_box import BoundingBox, BoundingBoxResizing, HitResult, get_moving_bounding_box_points
from canvas.resizing import get_resize_patch_with_attachments, resize_shape_trees
from canvas.snapping import ShapeSnapping, SnappingResult, get_snapping_result_for_bounding_box_resizing
from geometry.affine import IDENTITY_AFFINE, AffineMatrix
from geometry.vectors import sub
from states.app_canvas.commons import get_root_target_ids, handle_escape, translate_on_selection
from states.core import BREAK, ModeState, TransitionValue
from states.events import KEY_DOWN, POINTER_MOVE, POINTER_UP, SELECTION


class ResizingState(ModeState):
    """Resize gesture.

    Args:
        bounding_box: Bounding box of the selection when the gesture started.
        hit: The grabbed handle, a corner or a segment.
    """

    label = "Resizing"

    def __init__(self, bounding_box: BoundingBox, hit: HitResult):
        self.bounding_box = bounding_box
        self.hit = hit
        self.resizing = BoundingBoxResizing(bounding_box.get_rotation(), hit, bounding_box.get_resizing_base(hit))
        self.moving_points = get_moving_bounding_box_points(bounding_box.path, hit)
        self.target_ids: List[str] = []
        self.snapping: Optional[ShapeSnapping] = None
        self.snapping_result: Optional[SnappingResult] = None
        self.affine: AffineMatrix = IDENTITY_AFFINE

    def on_start(self, ctx) -> TransitionValue:
        composite = ctx.get_shape_composite()
        self.target_ids = get_root_target_ids(composite, ctx.get_selected_shape_ids())
        if not self.target_ids:
            return BREAK
        ctx.start_dragging()
        ctx.set_cursor(self.bounding_box.get_cursor_style(self.hit))
        self.snapping = ctx.get_shape_snapping(self.target_ids)
        return None

    def on_end(self, ctx) -> None:
        ctx.stop_dragging()
        ctx.set_tmp_shape_map({})
        ctx.set_cursor(None)

    def handle_event(self, ctx, event) -> TransitionValue:
        if event.type == POINTER_MOVE:
            data = event.data
            diff = sub(data.current, data.start)
            if self.snapping is None or data.ctrl:
                self.affine = self.resizing.get_affine(diff, data.shift, data.alt)
                self.snapping_result = None
            else:
                self.affine, self.snapping_result = get_snapping_result_for_bounding_box_resizing(
                    self.resizing, self.snapping, self.moving_points, diff,
                    data.shift, data.alt, ctx.get_scale(),
                )

            composite = ctx.get_shape_composite()
            patch = resize_shape_trees(composite, self.target_ids, self.affine)
            ctx.set_tmp_shape_map(get_resize_patch_with_attachments(composite, patch))
            return None

        if event.type == POINTER_UP:
            tmp = ctx.get_tmp_shape_map()
            if tmp:
                ctx.patch_shapes(tmp, "Resize shapes")
            return translate_on_selection(ctx, self.bounding_box.get_transformed_bounding_box(self.affine))

        if event.type == KEY_DOWN:
            return handle_escape(event)

        if event.type == SELECTION:
            return translate_on_selection(ctx)
        return None
