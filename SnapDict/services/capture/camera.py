"""Live camera stream backed by OpenCV `VideoCapture`.

The stream is a scoped resource: use it as a context manager (or call
`release()` yourself) so the device handle is freed on every exit path,
including a failed open.
"""
from __future__ import annotations

import logging
from typing import Optional

import cv2
from PIL import Image

from SnapDict.core.config import CameraConfig

logger = logging.getLogger(__name__)


class DeviceUnavailableError(RuntimeError):
    """Camera missing, busy, or access denied."""


class CameraStream:
    def __init__(self, cfg: CameraConfig | None = None, capture_factory=None):
        self.cfg = cfg or CameraConfig()
        self._factory = capture_factory or cv2.VideoCapture
        self._cap = None
        self._native_size: tuple[int, int] = (0, 0)

    # -------- Lifecycle --------
    def open(self) -> "CameraStream":
        if self._cap is not None:
            return self
        logger.info('Opening camera %s (facing=%s, ideal=%dx%d)', self.cfg.device_index,
                    self.cfg.facing_mode, self.cfg.ideal_width, self.cfg.ideal_height)
        cap = self._factory(self.cfg.device_index)
        try:
            if cap is None or not cap.isOpened():
                raise DeviceUnavailableError(f'Camera {self.cfg.device_index} could not be opened')
            cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.cfg.ideal_width)
            cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.cfg.ideal_height)
        except Exception:
            if cap is not None:
                cap.release()
            raise
        self._cap = cap
        return self

    def release(self) -> None:
        if self._cap is None:
            return
        try:
            self._cap.release()
        finally:
            self._cap = None
            self._native_size = (0, 0)
            logger.info('Camera %s released', self.cfg.device_index)

    def __enter__(self) -> "CameraStream":
        return self.open()

    def __exit__(self, exc_type, exc, tb):
        self.release()

    @property
    def is_open(self) -> bool:
        return self._cap is not None

    @property
    def native_size(self) -> tuple[int, int]:
        """(width, height) of the last delivered frame; (0, 0) before the first."""
        return self._native_size

    # -------- Frames --------
    def read_frame(self) -> Optional[Image.Image]:
        """Grab the current frame as an RGB PIL image, or None if not ready."""
        if self._cap is None:
            raise DeviceUnavailableError('Camera stream is not open')
        ok, frame = self._cap.read()
        if not ok or frame is None:
            return None
        rgb = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        img = Image.fromarray(rgb)
        self._native_size = img.size
        return img
