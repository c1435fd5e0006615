"""
errors.py

Exception hierarchy for the shapecraft geometry kernel.

Only programmer errors are raised: a stale shape id or an unregistered shape
type. Degenerate geometry, unknown events and unknown constraint values are
absorbed where they occur.
"""

from __future__ import annotations


class ShapecraftError(Exception):
    """Base class for every error raised by shapecraft."""


class ShapeNotFoundError(ShapecraftError, KeyError):
    """A shape id was requested that does not exist in the composite."""

    def __init__(self, shape_id: str):
        super().__init__(shape_id)
        self.shape_id = shape_id

    def __str__(self) -> str:
        return f"Shape not found: {self.shape_id!r}"


class ShapeTypeError(ShapecraftError, ValueError):
    """A shape carries a type tag with no registered implementation."""

    def __init__(self, shape_type: str):
        super().__init__(shape_type)
        self.shape_type = shape_type

    def __str__(self) -> str:
        return f"Unknown shape type: {self.shape_type!r}"
