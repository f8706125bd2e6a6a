"""OCR package: adapter factory and helpers.

This package provides a `create_ocr(cfg=None)` factory (in `ocr_adapter`),
the preprocessing applied before recognition, and the normalisation of raw
spans into candidates. A stub fallback keeps the application usable when
the tesseract binary is not installed.
"""
from .ocr_adapter import create_ocr, RecognitionAdapter, RecognitionError

__all__ = ["create_ocr", "RecognitionAdapter", "RecognitionError"]
