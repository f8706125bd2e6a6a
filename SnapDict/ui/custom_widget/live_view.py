"""Live camera view: cover-fitted frame with the region-of-interest frame on top."""
from __future__ import annotations

from typing import Optional

from PIL import Image
from PyQt6.QtCore import QRectF
from PyQt6.QtGui import QImage, QPainter, QPen, QColor, QBrush, QPainterPath
from PyQt6.QtWidgets import QWidget

from SnapDict.core.config import ScannerConfig
from SnapDict.services.capture.geometry import Rect, compute_cover_fit, roi_rect


def pil_to_qimage(img: Image.Image) -> QImage:
    rgb = img.convert('RGB')
    data = rgb.tobytes('raw', 'RGB')
    qimg = QImage(data, rgb.width, rgb.height, rgb.width * 3, QImage.Format.Format_RGB888)
    return qimg.copy()  # detach from the Python buffer


class LiveView(QWidget):
    def __init__(self, cfg: ScannerConfig | None = None, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.cfg = cfg or ScannerConfig()
        self._frame: Optional[QImage] = None
        self._native = (0, 0)

    def setFrame(self, img: Optional[Image.Image]) -> None:
        if img is None:
            self._frame = None
            self._native = (0, 0)
        else:
            self._frame = pil_to_qimage(img)
            self._native = img.size
        self.update()

    def clientSize(self) -> tuple[float, float]:
        return float(self.width()), float(self.height())

    def roi(self) -> Rect:
        return roi_rect(self.width(), self.height(), self.cfg.roi_width_ratio,
                        self.cfg.roi_height, self.cfg.roi_center_y_ratio)

    def paintEvent(self, event):  # noqa: D401
        painter = QPainter(self)
        painter.fillRect(self.rect(), QColor(0, 0, 0))
        if self._frame is not None:
            fit = compute_cover_fit(self._native[0], self._native[1], self.width(), self.height())
            shown = fit.native_to_display(Rect(0, 0, *self._native))
            target = QRectF(shown.x, shown.y, shown.width, shown.height)
            painter.drawImage(target, self._frame)

        roi = self.roi()
        roi_q = QRectF(roi.x, roi.y, roi.width, roi.height)
        # dim everything outside the ROI
        veil = QPainterPath()
        veil.addRect(QRectF(self.rect()))
        hole = QPainterPath()
        hole.addRoundedRect(roi_q, 8, 8)
        painter.fillPath(veil.subtracted(hole), QBrush(QColor(0, 0, 0, 150)))
        pen = QPen(QColor(250, 204, 21))
        pen.setWidth(2)
        painter.setPen(pen)
        painter.drawRoundedRect(roi_q, 8, 8)
        painter.end()
