"""
canvas/resizing.py

Resizing whole shape trees while honoring group constraints.

resize_shape_trees() applies one affine to the target roots and walks their
branches root to leaf. A group hands its children a frame: its outline
before and after the resize, both expressed in the group's own derotated
space. Children with gc_v / gc_h constraints are corrected inside that frame
so pinned margins and sizes survive the resize.

Horizontal constraints reuse the vertical formulas in an x/y transposed
frame, so both axes always follow the same rules.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from canvas.composite import ShapeComposite
from canvas.tree import walk_tree_with_value
from debug_trace import trace_call
from geometry.affine import (
    IDENTITY_AFFINE,
    AffineMatrix,
    apply_affine,
    get_rotated_at_affine,
    is_identity_affine,
    multi_affines,
)
from geometry.rects import Rect, get_outer_rectangle
from geometry.vectors import MINVALUE, Vec2, get_center
from models import GroupConstraint, Shape, ShapePatchMap, coerce_group_constraint
from shapes import get_attachment_by_updating_rotation
from utils import merge_map

log = logging.getLogger(__name__)

# Swaps x and y. Conjugating with it turns a vertical rule into a horizontal one.
SWAP_AXES_AFFINE: AffineMatrix = (0.0, 1.0, 1.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class GroupResizeFrame:
    """What a resized group passes down to its children.

    Attributes:
        affine: Resizing affine inherited by the children.
        rotation_resized: Rotates the derotated resized frame back into place.
        derotation: Derotates the source outline about its center.
        derotation_resized: Derotates the resized outline about its center.
        derotated_rect: Source outline in derotated space.
        derotated_resized_rect: Resized outline in derotated space.
    """
    affine: AffineMatrix
    rotation_resized: AffineMatrix
    derotation: AffineMatrix
    derotation_resized: AffineMatrix
    derotated_rect: Rect
    derotated_resized_rect: Rect


@dataclass(frozen=True)
class InheritedResize:
    """Descendants of a non-group shape simply follow this affine."""
    affine: AffineMatrix


_Inherited = Union[GroupResizeFrame, InheritedResize, None]


def _map_polygon(affine: AffineMatrix, polygon: Sequence[Vec2]) -> List[Vec2]:
    return [apply_affine(affine, p) for p in polygon]


def _get_group_frame(
    shape: Shape,
    affine: AffineMatrix,
    src_polygon: Sequence[Vec2],
    resized_polygon: Sequence[Vec2],
) -> GroupResizeFrame:
    center = get_center(src_polygon[0], src_polygon[2])
    resized_center = get_center(resized_polygon[0], resized_polygon[2])
    derotation = get_rotated_at_affine(center, -shape.rotation)
    derotation_resized = get_rotated_at_affine(resized_center, -shape.rotation)
    return GroupResizeFrame(
        affine=affine,
        rotation_resized=get_rotated_at_affine(resized_center, shape.rotation),
        derotation=derotation,
        derotation_resized=derotation_resized,
        derotated_rect=get_outer_rectangle([_map_polygon(derotation, src_polygon)]),
        derotated_resized_rect=get_outer_rectangle([_map_polygon(derotation_resized, resized_polygon)]),
    )


# ----------------------------------------------------------------------
# Constraint adjustments
# ----------------------------------------------------------------------

def _scale_y_at(origin_y: float, target_y: float, rate: float) -> AffineMatrix:
    """Scale y by rate about origin_y, then move origin_y to target_y."""
    return (1.0, 0.0, 0.0, rate, 0.0, target_y - origin_y * rate)


def _rate(numerator: float, denominator: float) -> float:
    if abs(denominator) < MINVALUE:
        return 1.0
    return numerator / denominator


def get_vertical_constraint_adjustment_affine(
    gc: Union[int, GroupConstraint, None],
    src_rect: Rect,
    resized_rect: Rect,
    parent_rect: Rect,
    parent_resized_rect: Rect,
) -> Optional[AffineMatrix]:
    """Correction applied on top of the naive resize along y.

    Every rect is in the parent's derotated frame: src_rect and parent_rect
    before the resize, resized_rect and parent_resized_rect after it.

    Returns:
        The correction affine, or None when the shape just follows the
        parent (no constraint, or an unknown value).
    """
    constraint = coerce_group_constraint(gc)
    if constraint == GroupConstraint.NONE:
        return None

    h = resized_rect.height
    top = resized_rect.y
    bottom = resized_rect.y + h
    top_diff = (src_rect.y - parent_rect.y) - (top - parent_resized_rect.y)
    bottom_diff = (src_rect.bottom - parent_rect.bottom) - (bottom - parent_resized_rect.bottom)

    if constraint == GroupConstraint.PIN_START:
        # Top moves back to its margin, bottom stays
        return _scale_y_at(top, top + top_diff, _rate(h - top_diff, h))
    if constraint == GroupConstraint.PIN_SIZE:
        center_y = top + h / 2
        return _scale_y_at(center_y, center_y, _rate(src_rect.height, h))
    if constraint == GroupConstraint.PIN_END:
        # Bottom moves back to its margin, top stays
        return _scale_y_at(bottom, bottom + bottom_diff, _rate(h + bottom_diff, h))
    if constraint == GroupConstraint.PIN_START_SIZE:
        return _scale_y_at(top, top + top_diff, _rate(src_rect.height, h))
    if constraint == GroupConstraint.PIN_START_END:
        return _scale_y_at(top, top + top_diff, _rate(h - top_diff + bottom_diff, h))
    if constraint == GroupConstraint.PIN_SIZE_END:
        return _scale_y_at(bottom, bottom + bottom_diff, _rate(src_rect.height, h))
    return None


def _transpose_rect(rect: Rect) -> Rect:
    return Rect(rect.y, rect.x, rect.height, rect.width)


def get_horizontal_constraint_adjustment_affine(
    gc: Union[int, GroupConstraint, None],
    src_rect: Rect,
    resized_rect: Rect,
    parent_rect: Rect,
    parent_resized_rect: Rect,
) -> Optional[AffineMatrix]:
    """Same as the vertical adjustment, along x ("start" is the left edge)."""
    transposed = get_vertical_constraint_adjustment_affine(
        gc,
        _transpose_rect(src_rect),
        _transpose_rect(resized_rect),
        _transpose_rect(parent_rect),
        _transpose_rect(parent_resized_rect),
    )
    if transposed is None:
        return None
    return multi_affines([SWAP_AXES_AFFINE, transposed, SWAP_AXES_AFFINE])


# ----------------------------------------------------------------------
# Tree resize
# ----------------------------------------------------------------------

@trace_call("RESIZE")
def resize_shape_trees(
    composite: ShapeComposite,
    target_ids: Sequence[str],
    affine: AffineMatrix,
) -> ShapePatchMap:
    """Patches for resizing the branches of target_ids by affine.

    Source geometry comes from the committed shapes, so the result does not
    depend on the live preview overlay.

    Args:
        composite: Current composite.
        target_ids: Roots to resize. Every descendant is resized with them.
        affine: Resize applied to the roots.

    Returns:
        Patch for every shape of the branches. An identity affine yields
        only empty patches.
    """
    shape_map = composite.shape_map
    target_trees = [composite.merged_shape_tree_map[i] for i in target_ids if i in composite.merged_shape_tree_map]
    branch_ids = [s.id for s in composite.get_all_branch_merged_shapes(target_ids)]

    # Only the affected branches, so unrelated shapes can't leak into group bounds
    min_composite = ShapeComposite([shape_map[i] for i in branch_ids], get_struct=composite.get_struct)
    src_polygons: Dict[str, List[Vec2]] = {
        i: min_composite.get_local_rect_polygon(min_composite.shape_map[i]) for i in branch_ids
    }

    ret: ShapePatchMap = {}

    def visit(node, inherited: _Inherited) -> _Inherited:
        shape = min_composite.shape_map[node.id]

        if isinstance(inherited, InheritedResize):
            ret[node.id] = min_composite.transform_shape(shape, inherited.affine)
            return inherited

        src_polygon = src_polygons[node.id]

        if inherited is None:
            ret[node.id] = min_composite.transform_shape(shape, affine)
            if shape.type != "group":
                return InheritedResize(affine)
            return _get_group_frame(shape, affine, src_polygon, _map_polygon(affine, src_polygon))

        frame = inherited
        resized_polygon = _map_polygon(frame.affine, src_polygon)
        src_rect = get_outer_rectangle([_map_polygon(frame.derotation, src_polygon)])
        resized_rect = get_outer_rectangle([_map_polygon(frame.derotation_resized, resized_polygon)])

        adjustments = [
            a for a in (
                get_vertical_constraint_adjustment_affine(
                    shape.gc_v, src_rect, resized_rect, frame.derotated_rect, frame.derotated_resized_rect,
                ),
                get_horizontal_constraint_adjustment_affine(
                    shape.gc_h, src_rect, resized_rect, frame.derotated_rect, frame.derotated_resized_rect,
                ),
            )
            if a is not None
        ]
        if adjustments:
            adjustment = multi_affines([frame.rotation_resized, *adjustments, frame.derotation_resized])
        else:
            adjustment = IDENTITY_AFFINE

        next_affine = frame.affine if is_identity_affine(adjustment) else multi_affines([adjustment, frame.affine])
        ret[node.id] = min_composite.transform_shape(shape, next_affine)

        if shape.type != "group":
            return InheritedResize(next_affine)
        return _get_group_frame(shape, next_affine, src_polygon, _map_polygon(next_affine, src_polygon))

    walk_tree_with_value(target_trees, visit, None)
    log.debug("Resized %d shapes from %d roots", len(ret), len(target_trees))
    return ret


def get_resize_patch_with_attachments(composite: ShapeComposite, patch_map: ShapePatchMap) -> ShapePatchMap:
    """Add attachment rotation patches for shapes whose rotation changes.

    Keeps the offset of attached shapes from their host when the shapes
    themselves rotate.
    """
    extra: ShapePatchMap = {}
    for shape_id, patch in patch_map.items():
        if "rotation" not in patch:
            continue
        shape = composite.shape_map.get(shape_id)
        if shape is None or not composite.attached(shape):
            continue
        attachment = get_attachment_by_updating_rotation(shape, patch["rotation"])
        if attachment is not None:
            extra[shape_id] = {"attachment": attachment}
    return merge_map(patch_map, extra) if extra else patch_map
