"""
Results view: the captured still with tappable word boxes.

Features:
- Displays the still stretched to fill the widget (independent axes)
- Draws one box per candidate; selected candidates are highlighted
- Click inside a box emits `wordTapped(index)`

Coordinates:
- Candidate boxes are stored in still-image space `(x0, y0, x1, y1)`
- Rendering maps them with the per-axis render scale of the current size
"""
from __future__ import annotations

from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal, QRectF
from PyQt6.QtGui import QPixmap, QPainter, QPen, QColor, QBrush, QMouseEvent
from PyQt6.QtWidgets import QWidget

from SnapDict.core.models import Candidate
from SnapDict.services.capture.geometry import RenderScale, compute_render_scale


class WordOverlay(QWidget):
    wordTapped = pyqtSignal(int)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._pixmap: Optional[QPixmap] = None
        self._candidates: list[Candidate] = []
        self._selected: frozenset[int] = frozenset()
        self._busy = False
        self.setMinimumHeight(120)

    # -------- Public API --------
    def setStill(self, pm: Optional[QPixmap]) -> None:
        self._pixmap = pm
        self.update()

    def setCandidates(self, candidates: list[Candidate]) -> None:
        self._candidates = list(candidates or [])
        self.update()

    def setSelected(self, indices) -> None:
        self._selected = frozenset(indices)
        self.update()

    def setBusy(self, busy: bool) -> None:
        """Show the processing veil while recognition runs."""
        self._busy = bool(busy)
        self.update()

    def clear(self) -> None:
        self._pixmap = None
        self._candidates = []
        self._selected = frozenset()
        self._busy = False
        self.update()

    # -------- Coordinate helpers --------
    def _render_scale(self) -> RenderScale:
        if not self._pixmap or self._pixmap.isNull():
            return compute_render_scale(0, 0, self.width(), self.height())
        return compute_render_scale(self._pixmap.width(), self._pixmap.height(), self.width(), self.height())

    def _hit_test(self, x: float, y: float) -> Optional[int]:
        """Index of the topmost candidate box under widget point (x, y), else None."""
        point = self._render_scale().overlay_point_to_still(x, y)
        if point is None:
            return None
        for i in range(len(self._candidates) - 1, -1, -1):
            if self._candidates[i].bbox.contains(*point):
                return i
        return None

    # -------- Painting --------
    def paintEvent(self, event):  # noqa: D401
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(0, 0, 0))
        if self._pixmap and not self._pixmap.isNull():
            painter.drawPixmap(self.rect(), self._pixmap)

        if self._busy:
            painter.fillRect(self.rect(), QColor(0, 0, 0, 100))
            painter.setPen(QColor(255, 255, 255))
            painter.drawText(self.rect(), Qt.AlignmentFlag.AlignCenter, "Processing...")
            painter.end()
            return

        scale = self._render_scale()
        pen = QPen(QColor(96, 165, 250))
        pen.setWidth(1)
        brush = QBrush(QColor(59, 130, 246, 50))
        sel_pen = QPen(QColor(250, 204, 21))
        sel_pen.setWidth(2)
        sel_brush = QBrush(QColor(250, 204, 21, 70))
        for i, cand in enumerate(self._candidates):
            r = scale.bbox_to_overlay(cand.bbox)
            if i in self._selected:
                painter.setPen(sel_pen)
                painter.setBrush(sel_brush)
            else:
                painter.setPen(pen)
                painter.setBrush(brush)
            painter.drawRoundedRect(QRectF(r.x, r.y, r.width, r.height), 3, 3)
        painter.end()

    # -------- Interaction --------
    def mousePressEvent(self, event: QMouseEvent):  # noqa: D401
        if self._busy or event.button() != Qt.MouseButton.LeftButton:
            super().mousePressEvent(event)
            return
        hit = self._hit_test(event.position().x(), event.position().y())
        if hit is not None:
            self.wordTapped.emit(hit)
