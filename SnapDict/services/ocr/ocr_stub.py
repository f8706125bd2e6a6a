"""Fallback OCR implementation used when no real backend is available.

This stub returns no spans and logs a clear warning so the scanner stays
usable (every capture reports "No words detected") on machines without a
Tesseract install.
"""
from __future__ import annotations

import logging
from typing import List

from SnapDict.core.models import RecognizedSpan

logger = logging.getLogger(__name__)


class StubOCR:
    name = 'stub'

    def __init__(self, cfg=None):
        logger.warning('Using OCR stub: no OCR backend available. Install tesseract to enable real OCR.')

    def recognize_words(self, image, lang: str = 'eng') -> List[RecognizedSpan]:
        return []
