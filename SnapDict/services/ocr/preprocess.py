"""Image conversion and enhancement helpers used before recognition.

`enhance_for_ocr` is the only transform applied between the region crop and
the recognizer: luminance grayscale followed by a fixed contrast stretch.
"""
from __future__ import annotations

import io
import logging

import numpy as np
from PIL import Image

from SnapDict.services.capture.geometry import Rect, crop_box

logger = logging.getLogger(__name__)

# Rec. 709 luma weights
LUMA_WEIGHTS = np.array([0.2126, 0.7152, 0.0722], dtype=np.float64)
CONTRAST_PIVOT = 128
DARK_GAIN = 0.8
LIGHT_GAIN = 1.2


def to_pil(image) -> Image.Image:
    """Convert a PyQt6 `QImage`, encoded bytes or PIL image to an RGB PIL `Image`."""
    if isinstance(image, Image.Image):
        return image if image.mode == 'RGB' else image.convert('RGB')

    if isinstance(image, (bytes, bytearray)):
        return Image.open(io.BytesIO(bytes(image))).convert('RGB')

    # Defer import of PyQt types to avoid hard dependency at import time.
    try:
        from PyQt6.QtGui import QImage
        from PyQt6.QtCore import QBuffer, QByteArray, QIODevice
    except ImportError:
        QImage = None

    if QImage is not None and isinstance(image, QImage):
        ba = QByteArray()
        buf = QBuffer(ba)
        buf.open(QIODevice.OpenModeFlag.WriteOnly)
        if not image.save(buf, 'PNG'):
            raise TypeError('QImage could not be encoded')
        return Image.open(io.BytesIO(bytes(ba))).convert('RGB')

    raise TypeError('Expected QImage, encoded bytes or PIL.Image')


def enhance_for_ocr(img: Image.Image) -> Image.Image:
    """Return a grayscale, contrast-stretched RGB copy of `img`.

    Per pixel: v = 0.2126r + 0.7152g + 0.0722b; v' = v*0.8 below 128 and
    v*1.2 otherwise, clamped to [0, 255]; all three channels set to v'.
    """
    rgb = np.asarray(to_pil(img), dtype=np.float64)
    v = rgb @ LUMA_WEIGHTS
    v = np.where(v < CONTRAST_PIVOT, v * DARK_GAIN, v * LIGHT_GAIN)
    v = np.clip(np.rint(v), 0, 255).astype(np.uint8)
    return Image.fromarray(np.stack([v, v, v], axis=-1), 'RGB')


def crop_region(frame: Image.Image, native: Rect) -> Image.Image:
    """Crop `native` (frame pixel space) out of `frame`.

    Parts of the rectangle that fall outside the frame come back black.
    """
    box = crop_box(native)
    if box[2] <= box[0] or box[3] <= box[1]:
        raise ValueError(f'Empty crop rectangle {native}')
    return to_pil(frame).crop(box)


def encode_png(img: Image.Image) -> bytes:
    buf = io.BytesIO()
    img.save(buf, 'PNG')
    return buf.getvalue()
