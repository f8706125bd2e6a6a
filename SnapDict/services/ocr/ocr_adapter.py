"""Factory and adapter-facing interface for OCR backends.

`create_ocr(cfg=None)` prefers the `OCR_BACKEND` environment variable, then
`cfg.backend`. Registered backends: `tesseract` (pytesseract) and `stub`.
With no explicit backend, tesseract is used when its binary is available,
otherwise `ocr_stub.StubOCR`.
"""
from __future__ import annotations

import os
import logging
from typing import List

from SnapDict.core.config import OCRConfig
from SnapDict.core.models import RecognizedSpan
from SnapDict.core.registry import OCR_REGISTRY
from . import preprocess
from .ocr_stub import StubOCR

logger = logging.getLogger(__name__)


class RecognitionError(RuntimeError):
    """The OCR engine failed or produced nothing usable."""


def _tesseract_factory(cfg: OCRConfig):
    from .pytesseract_service import PyTesseractOCR
    return PyTesseractOCR(cfg)


if 'tesseract' not in OCR_REGISTRY:
    OCR_REGISTRY.register('tesseract', _tesseract_factory, aliases=('pytesseract', 'tess'))
    OCR_REGISTRY.register('stub', StubOCR, aliases=('none',))


def _select_backend_name(cfg: OCRConfig | None) -> str | None:
    # Env var takes precedence
    be = os.getenv('OCR_BACKEND')
    if be:
        return be.strip().lower()
    if cfg and cfg.backend:
        return str(cfg.backend).strip().lower()
    return None


def create_ocr(cfg: OCRConfig | None = None):
    """Create an engine implementing `recognize_words(image, lang)`."""
    cfg = cfg or OCRConfig()
    backend = _select_backend_name(cfg)

    if backend:
        name = OCR_REGISTRY.resolve(backend)
        if name is None:
            msg = f"Unknown OCR backend '{backend}'. Supported: {', '.join(OCR_REGISTRY.names())}"
            logger.error(msg)
            raise RuntimeError(msg)
        if name == 'tesseract':
            from .pytesseract_service import PyTesseractOCR
            if cfg.tesseract_cmd:
                import pytesseract
                pytesseract.pytesseract.tesseract_cmd = cfg.tesseract_cmd
            if not PyTesseractOCR.available():
                msg = "Requested OCR backend 'tesseract' is not available."
                logger.error(msg)
                raise RuntimeError(msg)
        logger.info('Using %s OCR backend', name)
        return OCR_REGISTRY.create(name, cfg)

    # No explicit backend: try tesseract; otherwise stub
    try:
        engine = OCR_REGISTRY.create('tesseract', cfg)
        if engine.available():
            logger.info('Using tesseract OCR backend (lang=%s)', cfg.language)
            return engine
    except Exception:
        # Soft-fail: we'll fall back to stub
        logger.debug('tesseract backend not available by default', exc_info=True)

    logger.warning('No OCR backend available. Falling back to stub.')
    return OCR_REGISTRY.create('stub', cfg)


class RecognitionAdapter:
    """Call boundary around an OCR engine.

    Accepts a PIL image, encoded bytes or a QImage and returns raw spans;
    any engine failure surfaces as `RecognitionError`.
    """

    def __init__(self, engine=None, lang: str = 'eng'):
        self.engine = engine if engine is not None else create_ocr()
        self.lang = lang

    def recognize(self, image) -> List[RecognizedSpan]:
        try:
            pil = preprocess.to_pil(image)
            return list(self.engine.recognize_words(pil, lang=self.lang))
        except RecognitionError:
            raise
        except Exception as exc:
            logger.exception('OCR engine %s failed', getattr(self.engine, 'name', self.engine))
            raise RecognitionError(str(exc) or exc.__class__.__name__) from exc
