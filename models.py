"""
models.py

Data models and constants for the shapecraft geometry kernel.

Shapes are plain dataclasses treated as immutable values: every edit is a
partial patch (a dict keyed by field name) applied with apply_patch(), which
returns a new instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Type

from errors import ShapeTypeError
from geometry.vectors import Vec2

# Partial shape keyed by field name, and a map of those keyed by shape id
ShapePatch = Dict[str, Any]
ShapePatchMap = Dict[str, ShapePatch]


# ----------------------------
# Group constraints
# ----------------------------

class GroupConstraint(IntEnum):
    """How a child follows its ancestor group along one axis.

    "Start" is the top (vertical) or left (horizontal) edge of the group.
    """
    NONE = 0            # scale with the group
    PIN_START = 1       # keep the start margin
    PIN_SIZE = 2        # keep the size, keep the center rate
    PIN_END = 3         # keep the end margin
    PIN_START_SIZE = 4  # keep the start margin and the size
    PIN_START_END = 5   # keep both margins (stretch)
    PIN_SIZE_END = 6    # keep the size and the end margin


def coerce_group_constraint(value: Any) -> GroupConstraint:
    """Map a stored constraint value to GroupConstraint.

    Anything unknown is treated as NONE so a bad value never breaks a resize.
    """
    try:
        return GroupConstraint(value)
    except (ValueError, TypeError):
        return GroupConstraint.NONE


# ----------------------------
# Attachment
# ----------------------------

ROTATION_ABSOLUTE = "absolute"
ROTATION_RELATIVE = "relative"


@dataclass
class ShapeAttachment:
    """Anchoring of a shape onto a host shape.

    Attributes:
        id: Host shape id.
        to: Rate on the host. For a line host, to.x is the rate along the line.
        anchor: Rate within the attached shape's local rect that sits on the host.
        rotation_type: "absolute" or "relative" to the host direction.
        rotation: Rotation offset; for relative attachments it is relative to the host.
    """
    id: str
    to: Vec2 = Vec2(0.0, 0.0)
    anchor: Vec2 = Vec2(0.5, 0.5)
    rotation_type: str = ROTATION_RELATIVE
    rotation: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "to": {"x": self.to.x, "y": self.to.y},
            "anchor": {"x": self.anchor.x, "y": self.anchor.y},
            "rotationType": self.rotation_type,
            "rotation": self.rotation,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ShapeAttachment":
        return cls(
            id=d["id"],
            to=_vec_from_dict(d.get("to"), Vec2(0.0, 0.0)),
            anchor=_vec_from_dict(d.get("anchor"), Vec2(0.5, 0.5)),
            rotation_type=d.get("rotationType", ROTATION_RELATIVE),
            rotation=float(d.get("rotation", 0.0)),
        )


# ----------------------------
# Shapes
# ----------------------------

@dataclass
class Shape:
    """Fields common to every shape type.

    `type` selects the ShapeStruct that governs the shape's geometry.
    `parent_id` is a weak back reference into the same composite.
    """
    id: str = ""
    type: str = ""
    p: Vec2 = Vec2(0.0, 0.0)
    rotation: float = 0.0
    parent_id: Optional[str] = None
    gc_v: int = 0
    gc_h: int = 0
    attachment: Optional[ShapeAttachment] = None
    locked: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a plain dict with camelCase keys."""
        d: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Vec2):
                value = {"x": value.x, "y": value.y}
            elif isinstance(value, ShapeAttachment):
                value = value.to_dict()
            d[_DICT_KEYS.get(f.name, f.name)] = value
        return d


@dataclass
class RectangleShape(Shape):
    type: str = "rectangle"
    width: float = 100.0
    height: float = 100.0


@dataclass
class EllipseShape(Shape):
    type: str = "ellipse"
    width: float = 100.0
    height: float = 100.0


@dataclass
class LineShape(Shape):
    """Straight line from p to q."""
    type: str = "line"
    q: Vec2 = Vec2(100.0, 0.0)


@dataclass
class GroupShape(Shape):
    """Container whose geometry is always derived from its children."""
    type: str = "group"


SHAPE_CLASSES: Dict[str, Type[Shape]] = {
    "rectangle": RectangleShape,
    "ellipse": EllipseShape,
    "line": LineShape,
    "group": GroupShape,
}

_DICT_KEYS = {"parent_id": "parentId", "gc_v": "gcV", "gc_h": "gcH"}
_FIELD_NAMES = {v: k for k, v in _DICT_KEYS.items()}


def _vec_from_dict(d: Any, default: Vec2) -> Vec2:
    if not isinstance(d, dict):
        return default
    return Vec2(float(d.get("x", default.x)), float(d.get("y", default.y)))


def shape_from_dict(d: Dict[str, Any]) -> Shape:
    """Create a Shape from a dict produced by Shape.to_dict().

    Unknown keys are dropped. The type tag must be one of SHAPE_CLASSES.
    """
    cls = SHAPE_CLASSES.get(d.get("type", ""))
    if cls is None:
        raise ShapeTypeError(d.get("type", ""))
    known = {f.name: f for f in fields(cls)}
    values: Dict[str, Any] = {}
    for key, value in d.items():
        name = _FIELD_NAMES.get(key, key)
        if name not in known:
            continue
        if name in ("p", "q"):
            value = _vec_from_dict(value, Vec2(0.0, 0.0))
        elif name == "attachment" and value is not None:
            value = ShapeAttachment.from_dict(value)
        values[name] = value
    return cls(**values)


def apply_patch(shape: Shape, patch: Optional[ShapePatch]) -> Shape:
    """Return a copy of shape with patch applied. Empty patches return shape."""
    if not patch:
        return shape
    return replace(shape, **patch)


def get_patch_by_diff(src: Shape, dst: Shape) -> ShapePatch:
    """Fields of dst that differ from src."""
    return {
        f.name: getattr(dst, f.name)
        for f in fields(dst)
        if getattr(src, f.name, None) != getattr(dst, f.name)
    }


@dataclass
class PatchInfo:
    """A committed change set: shapes added, fields updated, ids deleted.

    insert_at maps ids of added shapes to the list index they go back to.
    Added shapes without an entry go on top.
    """
    add: List[Shape] = field(default_factory=list)
    update: ShapePatchMap = field(default_factory=dict)
    delete: List[str] = field(default_factory=list)
    insert_at: Dict[str, int] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not (self.add or self.update or self.delete)


def insert_shapes(shapes: Sequence[Shape], added: Sequence[Shape],
                  insert_at: Optional[Dict[str, int]] = None) -> List[Shape]:
    """shapes with added inserted.

    Indexed shapes are inserted in ascending index order, so a set of
    shapes removed from a list lands back where each one was.
    """
    insert_at = insert_at or {}
    ret = list(shapes)
    for s in sorted((s for s in added if s.id in insert_at), key=lambda s: insert_at[s.id]):
        ret.insert(min(insert_at[s.id], len(ret)), s)
    ret.extend(s for s in added if s.id not in insert_at)
    return ret
