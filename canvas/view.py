"""
canvas/view.py

Qt widget that renders a shape store and feeds pointer and key input
into the interaction state machine.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QCursor, QPainter, QPen, QPolygonF
from PyQt6.QtWidgets import QWidget

from canvas.composite import get_selection_bounds
from canvas.input_adapter import (
    key_down_event,
    pointer_down_event,
    pointer_move_event,
    pointer_up_event,
    wheel_event,
)
from debug_trace import enable_trace
from geometry.vectors import Vec2, add, multi, sub
from models import Shape
from states.app_canvas import get_initial_state
from states.context import CanvasStateContext
from states.core import StateMachine
from states.events import ChangeStateEvent, ContextMenuEvent, CopyEvent, PasteEvent, SelectionEvent

log = logging.getLogger(__name__)

_CURSORS = {
    "move": Qt.CursorShape.SizeAllCursor,
    "grab": Qt.CursorShape.OpenHandCursor,
    "grabbing": Qt.CursorShape.ClosedHandCursor,
    "crosshair": Qt.CursorShape.CrossCursor,
    "ew-resize": Qt.CursorShape.SizeHorCursor,
    "ns-resize": Qt.CursorShape.SizeVerCursor,
    "nwse-resize": Qt.CursorShape.SizeFDiagCursor,
    "nesw-resize": Qt.CursorShape.SizeBDiagCursor,
}

SHAPE_PEN = QColor(40, 40, 40)
DRAFT_PEN = QColor(30, 120, 220)
SELECTION_PEN = QColor(30, 120, 220)
SNAP_PEN = QColor(220, 60, 120)


def _qpoint(p: Vec2) -> QPointF:
    return QPointF(p.x, p.y)


class ModeCanvasView(QWidget):
    """
    Diagram canvas driven by the interaction state machine.

    Every Qt input event is converted to diagram coordinates and handed to
    the machine; the view only paints what the context exposes.

    Args:
        ctx: Canvas context shared with the states.
        parent: Parent widget.
    """

    def __init__(self, ctx: CanvasStateContext, parent=None):
        super().__init__(parent)
        self.ctx = ctx
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        if ctx.settings.debug.trace_states:
            enable_trace(True)

        # Press point per held button, in press order. The latest one drives
        # the running gesture, so a pan inside a drag keeps the drag start.
        self._press_points: Dict[Qt.MouseButton, Vec2] = {}
        self._unwatch = ctx.store.watch(lambda _info: self.update())
        self.sm = StateMachine(ctx, get_initial_state)

    # ------------------------------------------------------------------
    # Coordinates
    # ------------------------------------------------------------------

    def to_diagram(self, pos: QPointF) -> Vec2:
        """Widget position to diagram coordinates."""
        return add(self.ctx.viewport_origin, multi(Vec2(pos.x(), pos.y()), 1.0 / self.ctx.get_scale()))

    def to_widget(self, p: Vec2) -> QPointF:
        return _qpoint(multi(sub(p, self.ctx.viewport_origin), self.ctx.get_scale()))

    # ------------------------------------------------------------------
    # State machine plumbing
    # ------------------------------------------------------------------

    def dispatch(self, event) -> None:
        if event is None:
            return
        self.sm.handle_event(event)
        self._sync_cursor()
        self.update()

    def change_state(self, name: str, options=None) -> None:
        """External request, e.g. a toolbar picking a shape tool."""
        self.dispatch(ChangeStateEvent(name, options))

    def notify_selection_changed(self) -> None:
        self.dispatch(SelectionEvent())

    def copy(self) -> None:
        self.dispatch(CopyEvent())

    def paste(self, point: Optional[Vec2] = None) -> None:
        self.dispatch(PasteEvent(point))

    def state_label(self) -> str:
        return self.sm.get_state_summary()["label"]

    def _sync_cursor(self) -> None:
        cursor = _CURSORS.get(self.ctx.cursor or "")
        if cursor is None:
            self.unsetCursor()
        else:
            self.setCursor(cursor)

    def dispose(self) -> None:
        log.debug("Disposing canvas view in state %s", self.state_label())
        self.sm.dispose()
        self._unwatch()

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------

    def resizeEvent(self, event):
        self.ctx.set_viewport_size(Vec2(float(self.width()), float(self.height())))
        super().resizeEvent(event)

    def mousePressEvent(self, event):
        point = self.to_diagram(event.position())
        self._press_points.pop(event.button(), None)
        self._press_points[event.button()] = point
        self.dispatch(pointer_down_event(point, event.button(), event.modifiers()))
        event.accept()

    def _gesture_start(self, held, fallback: Vec2) -> Vec2:
        for button in [b for b in self._press_points if not held & b]:
            del self._press_points[button]
        if not self._press_points:
            return fallback
        return next(reversed(self._press_points.values()))

    def mouseMoveEvent(self, event):
        current = self.to_diagram(event.position())
        start = self._gesture_start(event.buttons(), current)
        self.dispatch(pointer_move_event(start, current, event.modifiers(), self.ctx.get_scale()))
        event.accept()

    def mouseReleaseEvent(self, event):
        point = self.to_diagram(event.position())
        self._press_points.pop(event.button(), None)
        if not event.buttons():
            self._press_points.clear()
        self.dispatch(pointer_up_event(point, event.button(), event.modifiers()))
        event.accept()

    def wheelEvent(self, event):
        """Zoom about the pointer."""
        point = self.to_diagram(event.position())
        self.dispatch(wheel_event(event.angleDelta().y(), point))
        event.accept()

    def contextMenuEvent(self, event):
        self.dispatch(ContextMenuEvent(self.to_diagram(QPointF(event.pos()))))
        event.accept()

    def keyPressEvent(self, event):
        pos = self.mapFromGlobal(QCursor.pos())
        point = self.to_diagram(QPointF(pos))
        key_event = key_down_event(event.key(), event.text(), event.modifiers(), point)
        if key_event is None:
            super().keyPressEvent(event)
            return
        self.dispatch(key_event)
        event.accept()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), QColor(255, 255, 255))

        scale = self.ctx.get_scale()
        painter.scale(scale, scale)
        painter.translate(-self.ctx.viewport_origin.x, -self.ctx.viewport_origin.y)

        composite = self.ctx.get_shape_composite()
        pen = QPen(SHAPE_PEN)
        pen.setCosmetic(True)
        painter.setPen(pen)
        for shape in composite.get_shapes_overlapping_rect(composite.merged_shapes, self.ctx.get_viewport()):
            self._paint_shape(painter, composite, shape)

        if self.ctx.draft_shapes:
            pen = QPen(DRAFT_PEN)
            pen.setCosmetic(True)
            pen.setStyle(Qt.PenStyle.DashLine)
            painter.setPen(pen)
            for shape in self.ctx.draft_shapes:
                self._paint_shape(painter, composite, shape)

        self._paint_selection(painter, composite)
        self._paint_snapping(painter)
        painter.end()

    def _paint_shape(self, painter: QPainter, composite, shape: Shape) -> None:
        if shape.type == "group":
            return
        if shape.type == "line":
            painter.drawLine(_qpoint(shape.p), _qpoint(shape.q))
            return
        if shape.type == "ellipse":
            painter.save()
            center = Vec2(shape.p.x + shape.width / 2, shape.p.y + shape.height / 2)
            painter.translate(center.x, center.y)
            painter.rotate(math.degrees(shape.rotation))
            painter.drawEllipse(QRectF(-shape.width / 2, -shape.height / 2, shape.width, shape.height))
            painter.restore()
            return
        if composite.has_shape(shape.id):
            polygon = composite.get_local_rect_polygon(shape)
        else:
            polygon = composite.get_shape_struct(shape).get_local_rect_polygon(shape)
        painter.drawPolygon(QPolygonF([_qpoint(p) for p in polygon]))

    def _paint_selection(self, painter: QPainter, composite) -> None:
        ids = [i for i in self.ctx.get_selected_shape_ids() if composite.has_shape(i)]
        if not ids:
            return
        path, _rotation = get_selection_bounds(composite, ids)
        pen = QPen(SELECTION_PEN)
        pen.setCosmetic(True)
        painter.setPen(pen)
        painter.drawPolygon(QPolygonF([_qpoint(p) for p in path]))

    def _paint_snapping(self, painter: QPainter) -> None:
        result = getattr(self.sm.get_current_state(), "snapping_result", None)
        if result is None:
            return
        pen = QPen(SNAP_PEN)
        pen.setCosmetic(True)
        painter.setPen(pen)
        for target in result.targets:
            painter.drawLine(_qpoint(target.line[0]), _qpoint(target.line[1]))
