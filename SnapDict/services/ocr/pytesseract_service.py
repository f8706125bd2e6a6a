"""Minimal pytesseract OCR implementation for the scanner workflow.

Provides a thin wrapper around ``pytesseract.image_to_data`` that returns
word-level spans with bounding boxes in the input image's pixel space.
The image is expected to be enhanced already (see `preprocess.enhance_for_ocr`).
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

import pytesseract

from SnapDict.core.config import OCRConfig
from SnapDict.core.models import BBox, RecognizedSpan
from .preprocess import to_pil

logger = logging.getLogger(__name__)

WORD_LEVEL = 5


class PyTesseractOCR:
    """Wrapper around pytesseract producing `RecognizedSpan`s in reading order."""

    name = 'tesseract'

    def __init__(self, cfg: OCRConfig | None = None) -> None:
        self.cfg = cfg or OCRConfig()
        if self.cfg.tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = self.cfg.tesseract_cmd

    @staticmethod
    def available() -> bool:
        try:
            ver = pytesseract.get_tesseract_version()
        except Exception as exc:
            logger.debug('tesseract binary not usable: %s', exc)
            return False
        logger.debug('tesseract version %s', ver)
        return True

    def _config_flags(self) -> str:
        return f'--oem {self.cfg.oem} --psm {self.cfg.psm}'

    def recognize_words(self, image, lang: str | None = None) -> List[RecognizedSpan]:
        """Return the word spans tesseract finds in `image`, in engine order."""
        pil = to_pil(image)
        lang = lang or self.cfg.language
        data: Dict[str, List[Any]] = pytesseract.image_to_data(
            pil, lang=lang, config=self._config_flags(), output_type=pytesseract.Output.DICT
        )
        texts = data.get('text', [])
        levels = data.get('level', [WORD_LEVEL] * len(texts))
        spans: List[RecognizedSpan] = []
        for i, raw in enumerate(texts):
            if int(levels[i]) != WORD_LEVEL:
                continue
            txt = (raw or '').strip()
            if not txt:
                continue
            left = int(data['left'][i])
            top = int(data['top'][i])
            width = int(data['width'][i])
            height = int(data['height'][i])
            spans.append(RecognizedSpan(txt, BBox(left, top, left + width, top + height)))
        logger.debug('tesseract returned %d word spans (lang=%s)', len(spans), lang)
        return spans
