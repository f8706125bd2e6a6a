from __future__ import annotations

import logging
from typing import List, Tuple

from PIL import Image

from SnapDict.core.config import ScannerConfig
from SnapDict.core.models import Candidate
from SnapDict.services.capture.geometry import Rect, compute_cover_fit, roi_rect
from .candidates import normalize_spans
from .ocr_adapter import RecognitionAdapter, RecognitionError
from .preprocess import crop_region, enhance_for_ocr

logger = logging.getLogger(__name__)

NO_WORDS_MESSAGE = "No words detected"


def roi_in_frame(frame_size: Tuple[int, int], client_size: Tuple[float, float],
                 cfg: ScannerConfig | None = None) -> Rect:
    """Native-frame rectangle under the on-screen region of interest."""
    cfg = cfg or ScannerConfig()
    cw, ch = client_size
    fit = compute_cover_fit(frame_size[0], frame_size[1], cw, ch)
    roi = roi_rect(cw, ch, cfg.roi_width_ratio, cfg.roi_height, cfg.roi_center_y_ratio)
    return fit.display_to_native(roi)


def capture_still(frame: Image.Image, client_size: Tuple[float, float],
                  cfg: ScannerConfig | None = None) -> Image.Image:
    """Crop the region of interest out of a live frame and enhance it."""
    native = roi_in_frame(frame.size, client_size, cfg)
    logger.debug('ROI in frame %s -> %s', frame.size, native)
    return enhance_for_ocr(crop_region(frame, native))


def recognize_candidates(still: Image.Image, adapter: RecognitionAdapter) -> List[Candidate]:
    """Run recognition on an enhanced still and normalise the spans.

    Raises `RecognitionError` on engine failure or when nothing word-like
    was found.
    """
    spans = adapter.recognize(still)
    candidates = normalize_spans(spans)
    logger.info('Recognized %d spans, kept %d candidates', len(spans), len(candidates))
    if not candidates:
        raise RecognitionError(NO_WORDS_MESSAGE)
    return candidates
