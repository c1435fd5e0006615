"""
canvas/attachment.py

Shapes attached to a line host.

An attached shape stores the rate along its host line (attachment.to.x)
and the rate within its own local rect that sits on the line
(attachment.anchor). Whenever a host line changes, every attached shape is
moved back onto its rate, and relative attachments also follow the slope.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Set

from canvas.composite import ShapeComposite
from debug_trace import trace_call
from geometry.affine import AffineMatrix, get_rotated_at_affine
from geometry.rects import get_rect_center, get_relative_point_within_rect, get_relative_rate_within_rect
from geometry.vectors import Vec2, get_rotate_fn, is_same_value, rotate
from models import ROTATION_RELATIVE, LineShape, Shape, ShapePatchMap, apply_patch
from shapes.line import get_line_radian, get_point_at_rate
from utils import patch_pipe, to_map

log = logging.getLogger(__name__)


def get_attachment_anchor_point(composite: ShapeComposite, shape: Shape, rate: Optional[Vec2] = None) -> Vec2:
    """Global position of the anchor rate within shape's local rect.

    Falls back to the shape's own attachment anchor, then to the center.
    """
    if rate is None and shape.attachment is not None:
        rate = shape.attachment.anchor
    local_rect, rotation = composite.get_local_space(shape)
    c = get_rect_center(local_rect)
    if rate is None:
        return c
    return get_rotate_fn(rotation, c)(get_relative_point_within_rect(local_rect, rate))


def get_next_attachment_anchor(composite: ShapeComposite, shape: Shape, point: Vec2) -> Vec2:
    """Rate within shape's local rect that corresponds to the global point."""
    local_rect, rotation = composite.get_local_space(shape)
    local_point = rotate(point, -rotation, get_rect_center(local_rect))
    rate = get_relative_rate_within_rect(local_rect, local_point)
    return Vec2(min(1.0, max(0.0, rate.x)), min(1.0, max(0.0, rate.y)))


def get_affine_by_move_to_attached_point(
    composite: ShapeComposite, shape: Shape, anchor: Vec2, attached_point: Vec2
) -> AffineMatrix:
    """Translation that brings the anchor of shape onto attached_point."""
    anchor_p = get_attachment_anchor_point(composite, shape, anchor)
    return (1.0, 0.0, 0.0, 1.0, attached_point.x - anchor_p.x, attached_point.y - anchor_p.y)


def _get_updated_attached_map(composite: ShapeComposite, update_map: ShapePatchMap) -> Dict[str, Set[str]]:
    """Line id -> ids of the shapes attached to it, for every updated line."""
    shape_map = composite.shape_map
    line_ids = {
        i for i in update_map
        if i in shape_map and composite.get_struct(shape_map[i].type).is_attachment_host(shape_map[i])
    }
    attached_map: Dict[str, Set[str]] = {}

    for s in shape_map.values():
        attachment = s.attachment
        if attachment is None and s.id in update_map:
            attachment = update_map[s.id].get("attachment")
        if attachment is not None and attachment.id in line_ids:
            attached_map.setdefault(attachment.id, set()).add(s.id)

    # Shapes attached to a line that isn't updated but whose own patch moves them
    for shape_id, patch in update_map.items():
        if shape_id in line_ids or shape_id not in shape_map:
            continue
        s = apply_patch(shape_map[shape_id], patch)
        if s.attachment is None or s.attachment.id in line_ids:
            continue
        attached_map.setdefault(s.attachment.id, set()).add(shape_id)

    return attached_map


@trace_call("ATTACH")
def get_line_attachment_patch(composite: ShapeComposite, update_map: ShapePatchMap) -> ShapePatchMap:
    """Patches that keep attached shapes on their host lines.

    Args:
        composite: Composite before update_map is applied.
        update_map: Pending patches, usually a line being edited.

    Returns:
        Patches for attached shapes (and their branches). Attachments whose
        host is gone or no longer a line are cleared.
    """
    shape_map = composite.shape_map
    ret: ShapePatchMap = {}

    for line_id, attached_ids in _get_updated_attached_map(composite, update_map).items():
        line = shape_map.get(line_id)
        if line is None or not isinstance(line, LineShape):
            for attached_id in attached_ids:
                ret[attached_id] = {"attachment": None}
            continue

        next_line = apply_patch(line, update_map.get(line_id))
        for attached_id in attached_ids:
            shape = shape_map[attached_id]
            next_attached = apply_patch(shape, update_map.get(attached_id))
            if not composite.can_attach(next_attached):
                if shape.attachment is not None:
                    ret[attached_id] = {"attachment": None}
                continue

            attachment = next_attached.attachment
            if attachment is None:
                continue

            to_p = get_point_at_rate(next_line, attachment.to.x)
            next_rotation = next_attached.rotation
            if attachment.rotation_type == ROTATION_RELATIVE:
                next_rotation = attachment.rotation + get_line_radian(next_line)

            def rotate_step(current, patch, shape=shape, next_rotation=next_rotation):
                if is_same_value(next_rotation, shape.rotation):
                    return {}
                c = get_rect_center(composite.get_wrapper_rect(shape))
                affine = get_rotated_at_affine(c, next_rotation - shape.rotation)
                return {i: composite.transform_shape(s, affine) for i, s in current.items()}

            def translate_step(current, patch, attached_id=attached_id, anchor=attachment.anchor, to_p=to_p):
                rotated = composite.get_sub_shape_composite([attached_id], patch)
                affine = get_affine_by_move_to_attached_point(
                    rotated, rotated.merged_shape_map[attached_id], anchor, to_p,
                )
                return {i: composite.transform_shape(s, affine) for i, s in current.items()}

            targets = to_map(composite.get_all_transform_targets([attached_id]))
            patch = patch_pipe([rotate_step, translate_step], targets)
            for shape_id, p in patch.items():
                if p:
                    ret[shape_id] = p

    if ret:
        log.debug("Line attachment patches for %s", sorted(ret))
    return ret
