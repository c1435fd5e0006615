"""
canvas/composite.py

ShapeComposite: a read-only index over one revision of the shape list.

The composite is never mutated. Committing a patch or replacing the
temporary overlay produces a new composite (get_next_shape_composite,
replace_tmp_shape_map). Geometry queries always see the merged view, i.e.
committed shapes with the temporary overlay applied.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from canvas.tree import (
    TreeNode,
    get_all_branch_ids,
    get_branch_path,
    get_parent_ref_map,
    get_tree,
    get_tree_node_map,
)
from errors import ShapeNotFoundError
from geometry.affine import AffineMatrix, apply_affine, get_rotated_at_affine
from geometry.rects import (
    Rect,
    get_local_space,
    get_outer_rectangle,
    get_rect_center,
    get_rect_points,
    get_wrapper_rect,
    is_rect_overlapped,
)
from geometry.vectors import Vec2, get_rotate_fn
from models import PatchInfo, Shape, ShapePatch, ShapePatchMap, apply_patch, insert_shapes
from shapes import get_struct as default_get_struct
from shapes.core import ShapeContext, ShapeSnappingLines, ShapeStruct

log = logging.getLogger(__name__)

ATTACHED_LINE = "line"
ATTACHED_SHAPE = "shape"


class ShapeComposite:
    """Index over a flat shape list plus an optional temporary patch overlay.

    Args:
        shapes: Committed shapes, in z-order.
        tmp_shape_map: Uncommitted patches (live preview) keyed by shape id.
        get_struct: Shape type registry lookup.
    """

    def __init__(
        self,
        shapes: Sequence[Shape],
        tmp_shape_map: Optional[ShapePatchMap] = None,
        get_struct: Callable[[str], ShapeStruct] = default_get_struct,
    ):
        self.get_struct = get_struct
        self.tmp_shape_map: ShapePatchMap = dict(tmp_shape_map or {})

        # Cycles and dangling parents are severed here once, so no walk below
        # needs to guard against them.
        self.parent_ref_map = get_parent_ref_map(shapes)
        self.shapes: List[Shape] = []
        for s in shapes:
            if s.parent_id and s.id not in self.parent_ref_map:
                log.debug("Treating %s as a root, parent %s is unusable", s.id, s.parent_id)
                s = apply_patch(s, {"parent_id": None})
            self.shapes.append(s)
        self.shape_map: Dict[str, Shape] = {s.id: s for s in self.shapes}

        self.merged_shape_map: Dict[str, Shape] = dict(self.shape_map)
        for shape_id, patch in self.tmp_shape_map.items():
            shape = self.merged_shape_map.get(shape_id)
            if shape is not None:
                self.merged_shape_map[shape_id] = apply_patch(shape, patch)
        self.merged_shapes: List[Shape] = [self.merged_shape_map[s.id] for s in self.shapes]

        merged_ref_map = self.parent_ref_map
        if any("parent_id" in patch for patch in self.tmp_shape_map.values()):
            merged_ref_map = get_parent_ref_map(self.merged_shapes)
        self.merged_shape_tree: List[TreeNode] = get_tree(self.merged_shapes, merged_ref_map)
        self.merged_shape_tree_map: Dict[str, TreeNode] = get_tree_node_map(self.merged_shape_tree)

        self.shape_context = ShapeContext(
            shape_map=self.merged_shape_map,
            tree_node_map=self.merged_shape_tree_map,
            get_struct=get_struct,
        )

        # (query, id) -> (shape instance, value). Groups are never stored.
        self._cache: Dict[Tuple[str, str], Tuple[Shape, Any]] = {}

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_shape(self, shape_id: str) -> Shape:
        """Merged shape for shape_id.

        Raises:
            ShapeNotFoundError: If shape_id is not part of this revision.
        """
        shape = self.merged_shape_map.get(shape_id)
        if shape is None:
            raise ShapeNotFoundError(shape_id)
        return shape

    def has_shape(self, shape_id: str) -> bool:
        return shape_id in self.shape_map

    def get_shape_struct(self, shape: Shape) -> ShapeStruct:
        return self.get_struct(shape.type)

    def _ensure_known(self, shape: Shape) -> None:
        if shape.id not in self.merged_shape_map:
            raise ShapeNotFoundError(shape.id)

    def _cached(self, query: str, shape: Shape, fn: Callable[[], Any]) -> Any:
        if shape.type == "group":
            return fn()
        key = (query, shape.id)
        hit = self._cache.get(key)
        if hit is not None and hit[0] is shape:
            return hit[1]
        value = fn()
        self._cache[key] = (shape, value)
        return value

    # ------------------------------------------------------------------
    # Tree queries
    # ------------------------------------------------------------------

    def get_all_branch_merged_shapes(self, ids: Sequence[str]) -> List[Shape]:
        """Every shape in the branches rooted at ids, roots included."""
        return [self.merged_shape_map[i] for i in get_all_branch_ids(self.merged_shape_tree_map, ids)]

    def get_all_transform_targets(self, ids: Sequence[str]) -> List[Shape]:
        return self.get_all_branch_merged_shapes(ids)

    def get_branch_path_to(self, shape_id: str) -> List[str]:
        """Ancestor ids of shape_id, root first, excluding shape_id itself."""
        return get_branch_path(self.parent_ref_map, shape_id)[:-1]

    def has_parent(self, shape: Shape) -> bool:
        return bool(shape.parent_id) and shape.parent_id in self.shape_map

    def attached(self, shape: Shape, kind: Optional[str] = None) -> bool:
        """Whether shape is attached to an existing host.

        Args:
            shape: Shape to check.
            kind: "line" to require a line host, "shape" to require any other
                host, None for any host.
        """
        if shape.attachment is None:
            return False
        host = self.shape_map.get(shape.attachment.id)
        if host is None:
            return False
        if kind is None:
            return True
        is_line_host = self.get_struct(host.type).is_attachment_host(host)
        return is_line_host if kind == ATTACHED_LINE else not is_line_host

    def can_attach(self, shape: Shape) -> bool:
        if not self.get_struct(shape.type).can_attach(shape):
            return False
        if not self.has_parent(shape):
            return True
        return self.shape_map[shape.parent_id].type == "group"

    def should_delete(self, shape: Shape) -> bool:
        return self.get_struct(shape.type).should_delete(shape, self.shape_context)

    # ------------------------------------------------------------------
    # Geometry
    # ------------------------------------------------------------------

    def transform_shape(self, shape: Shape, affine: AffineMatrix) -> ShapePatch:
        """Patch produced by applying affine to shape. Only changed fields."""
        self._ensure_known(shape)
        return self.get_struct(shape.type).resize(shape, affine, self.shape_context)

    def get_wrapper_rect(self, shape: Shape) -> Rect:
        self._ensure_known(shape)
        return self._cached(
            "wrapper_rect", shape,
            lambda: self.get_struct(shape.type).get_wrapper_rect(shape, self.shape_context),
        )

    def get_wrapper_rect_for_shapes(self, shapes: Sequence[Shape]) -> Rect:
        return get_wrapper_rect(self.get_wrapper_rect(s) for s in shapes)

    def get_local_rect_polygon(self, shape: Shape) -> List[Vec2]:
        self._ensure_known(shape)
        return self._cached(
            "local_rect_polygon", shape,
            lambda: self.get_struct(shape.type).get_local_rect_polygon(shape, self.shape_context),
        )

    def get_local_space(self, shape: Shape) -> Tuple[Rect, float]:
        """Unrotated rect and rotation of shape."""
        return get_local_space(self.get_local_rect_polygon(shape))

    def is_point_on(self, shape: Shape, p: Vec2, scale: float = 1.0) -> bool:
        self._ensure_known(shape)
        return self.get_struct(shape.type).is_point_on(shape, p, self.shape_context, scale)

    def find_shape_at(
        self,
        p: Vec2,
        scale: float = 1.0,
        parent_id: Optional[str] = None,
        exclude_ids: Optional[Sequence[str]] = None,
    ) -> Optional[Shape]:
        """Topmost shape under p among the children of parent_id (roots when None)."""
        exclude = set(exclude_ids or ())
        if parent_id is None:
            nodes = self.merged_shape_tree
        else:
            node = self.merged_shape_tree_map.get(parent_id)
            nodes = node.children if node else []
        for node in reversed(nodes):
            if node.id in exclude:
                continue
            shape = self.merged_shape_map[node.id]
            if self.is_point_on(shape, p, scale):
                return shape
        return None

    def get_shapes_overlapping_rect(self, shapes: Sequence[Shape], rect: Rect) -> List[Shape]:
        return [s for s in shapes if is_rect_overlapped(self.get_wrapper_rect(s), rect)]

    def get_snapping_lines(self, shape: Shape) -> ShapeSnappingLines:
        self._ensure_known(shape)
        return self._cached(
            "snapping_lines", shape,
            lambda: self.get_struct(shape.type).get_snapping_lines(shape, self.shape_context),
        )

    def rotate_shape_tree(self, target_id: str, next_rotation: float) -> ShapePatchMap:
        """Patches rotating a whole branch about the root's wrapper center."""
        root = self.get_shape(target_id)
        c = get_rect_center(self.get_wrapper_rect(root))
        affine = get_rotated_at_affine(c, next_rotation - root.rotation)
        ret: ShapePatchMap = {}
        for s in self.get_all_branch_merged_shapes([target_id]):
            patch = self.transform_shape(s, affine)
            if patch:
                ret[s.id] = patch
        return ret

    # ------------------------------------------------------------------
    # Derived composites
    # ------------------------------------------------------------------

    def get_shape_composite_without_tmp(self) -> "ShapeComposite":
        return ShapeComposite(self.shapes, get_struct=self.get_struct)

    def get_sub_shape_composite(
        self, ids: Sequence[str], update: Optional[ShapePatchMap] = None
    ) -> "ShapeComposite":
        """Composite holding only the branches of ids, with update applied.

        The merged view of this composite is the committed state of the
        returned one.
        """
        all_ids = get_all_branch_ids(self.merged_shape_tree_map, ids)
        update = update or {}
        return ShapeComposite(
            [apply_patch(self.merged_shape_map[i], update.get(i)) for i in all_ids],
            get_struct=self.get_struct,
        )


# ----------------------------------------------------------------------
# Module level helpers
# ----------------------------------------------------------------------

def get_next_shape_composite(composite: ShapeComposite, patch_info: PatchInfo) -> ShapeComposite:
    """Composite after committing patch_info. The temporary overlay is dropped."""
    deleted = set(patch_info.delete)
    shapes = [
        apply_patch(s, patch_info.update.get(s.id))
        for s in composite.shapes
        if s.id not in deleted
    ]
    shapes = insert_shapes(shapes, patch_info.add, patch_info.insert_at)
    return ShapeComposite(shapes, get_struct=composite.get_struct)


def replace_tmp_shape_map(composite: ShapeComposite, tmp_shape_map: ShapePatchMap) -> ShapeComposite:
    return ShapeComposite(composite.shapes, tmp_shape_map, get_struct=composite.get_struct)


def get_rotated_target_bounds(
    composite: ShapeComposite, target_ids: Sequence[str], bounding_rotation: float
) -> List[Vec2]:
    """Outline of the targets in a frame rotated by bounding_rotation."""
    shapes = [composite.get_shape(i) for i in target_ids]
    c = get_rect_center(composite.get_wrapper_rect_for_shapes(shapes))
    derotate = get_rotated_at_affine(c, -bounding_rotation)
    rotated = get_outer_rectangle(
        [apply_affine(derotate, p) for p in composite.get_local_rect_polygon(s)] for s in shapes
    )
    rotate_fn = get_rotate_fn(bounding_rotation, c)
    return [rotate_fn(p) for p in get_rect_points(rotated)]


def get_selection_bounds(composite: ShapeComposite, target_ids: Sequence[str]) -> Tuple[List[Vec2], float]:
    """Bounding box outline for a selection and its rotation.

    A single shape keeps its own rotation, several shapes share an axis
    aligned box.
    """
    if len(target_ids) == 1:
        shape = composite.get_shape(target_ids[0])
        return composite.get_local_rect_polygon(shape), shape.rotation
    return get_rotated_target_bounds(composite, target_ids, 0.0), 0.0


def get_delete_target_ids(composite: ShapeComposite, delete_src: Sequence[str]) -> List[str]:
    """delete_src plus the groups that would be left without children."""
    src = set(delete_src)
    remained = ShapeComposite([s for s in composite.shapes if s.id not in src], get_struct=composite.get_struct)
    ret = list(delete_src)
    for shape_id in delete_src:
        parent = remained.shape_map.get(composite.get_shape(shape_id).parent_id or "")
        if parent is not None and parent.id not in ret and remained.should_delete(parent):
            ret.append(parent.id)
    return ret


def can_group_shapes(composite: ShapeComposite, target_ids: Sequence[str]) -> bool:
    """Several targets that share the same group parent (or none) can be grouped."""
    if len(target_ids) < 2:
        return False
    first = composite.get_shape(target_ids[0])
    index_parent_id = first.parent_id if composite.has_parent(first) else None
    if index_parent_id and composite.shape_map[index_parent_id].type != "group":
        index_parent_id = None
    for shape_id in target_ids:
        s = composite.get_shape(shape_id)
        if composite.has_parent(s) and s.parent_id != index_parent_id:
            return False
    return True


def get_all_shape_range(composite: ShapeComposite) -> Rect:
    roots = [composite.merged_shape_map[n.id] for n in composite.merged_shape_tree]
    return composite.get_wrapper_rect_for_shapes(roots)
