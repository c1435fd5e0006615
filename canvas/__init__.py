"""
canvas package

Scene composite, bounding box, resizing, snapping and the Qt view that
feeds pointer input into the interaction state machine.
"""

from canvas.composite import ShapeComposite, get_next_shape_composite, replace_tmp_shape_map
from canvas.bounding_box import BoundingBox, BoundingBoxResizing, BoundingBoxRotating, HitResult
from canvas.resizing import resize_shape_trees
from canvas.snapping import ShapeSnapping, SnappingResult, SnappingTarget
from canvas.grid import Grid

__all__ = [
    "BoundingBox",
    "BoundingBoxResizing",
    "BoundingBoxRotating",
    "Grid",
    "HitResult",
    "ShapeComposite",
    "ShapeSnapping",
    "SnappingResult",
    "SnappingTarget",
    "get_next_shape_composite",
    "replace_tmp_shape_map",
    "resize_shape_trees",
]
