import sys
from pathlib import Path

# Add the project root (one level up from 'test') to sys.path
project_root = Path(__file__).resolve().parents[1]
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

import pytest
import pytesseract
from PIL import Image

from SnapDict.core.config import OCRConfig
from SnapDict.core.models import BBox, RecognizedSpan
from SnapDict.services.ocr import RecognitionAdapter, RecognitionError, create_ocr
from SnapDict.services.ocr.ocr_stub import StubOCR
from SnapDict.services.ocr.pytesseract_service import PyTesseractOCR
from SnapDict.services.ocr.region_ocr_pipeline import (
    NO_WORDS_MESSAGE, capture_still, recognize_candidates, roi_in_frame,
)


class FakeEngine:
    name = 'fake'

    def __init__(self, spans=None, exc=None):
        self.spans = spans or []
        self.exc = exc
        self.calls = []

    def recognize_words(self, image, lang='eng'):
        self.calls.append((image.size, lang))
        if self.exc:
            raise self.exc
        return list(self.spans)


def _fake_image_to_data(*args, **kwargs):
    return {
        'level': [1, 5, 5, 5, 5],
        'text': ['', 'Hello,', ' ', 'world!', 'x'],
        'conf': ['-1', '91.5', '-1', '88', '12'],
        'left': [0, 4, 0, 60, 120],
        'top': [0, 5, 0, 6, 5],
        'width': [200, 50, 0, 48, 8],
        'height': [40, 20, 0, 19, 20],
    }


def test_explicit_stub_backend(monkeypatch):
    monkeypatch.delenv('OCR_BACKEND', raising=False)
    assert isinstance(create_ocr(OCRConfig(backend='stub')), StubOCR)


def test_env_backend_takes_precedence(monkeypatch):
    monkeypatch.setenv('OCR_BACKEND', 'stub')
    assert isinstance(create_ocr(OCRConfig(backend='tesseract')), StubOCR)


def test_unknown_backend_raises(monkeypatch):
    monkeypatch.setenv('OCR_BACKEND', 'nope')
    with pytest.raises(RuntimeError):
        create_ocr()


def test_auto_falls_back_to_stub_without_tesseract(monkeypatch):
    monkeypatch.delenv('OCR_BACKEND', raising=False)
    monkeypatch.setattr(PyTesseractOCR, 'available', staticmethod(lambda: False))
    assert isinstance(create_ocr(), StubOCR)


def test_auto_uses_tesseract_when_available(monkeypatch):
    monkeypatch.delenv('OCR_BACKEND', raising=False)
    monkeypatch.setattr(PyTesseractOCR, 'available', staticmethod(lambda: True))
    assert isinstance(create_ocr(), PyTesseractOCR)


def test_pytesseract_word_spans(monkeypatch):
    monkeypatch.setattr(pytesseract, 'image_to_data', _fake_image_to_data)
    spans = PyTesseractOCR().recognize_words(Image.new('RGB', (200, 40)), lang='eng')
    assert [s.text for s in spans] == ['Hello,', 'world!', 'x']
    assert spans[0].bbox == BBox(4, 5, 54, 25)


def test_adapter_wraps_engine_errors():
    adapter = RecognitionAdapter(FakeEngine(exc=OSError('tesseract crashed')))
    with pytest.raises(RecognitionError):
        adapter.recognize(Image.new('RGB', (10, 10)))


def test_recognize_candidates_normalizes():
    spans = [RecognizedSpan('!!hello,', BBox(0, 0, 10, 10)), RecognizedSpan('7', BBox(10, 0, 20, 10))]
    engine = FakeEngine(spans)
    cands = recognize_candidates(Image.new('RGB', (30, 10)), RecognitionAdapter(engine, lang='eng'))
    assert [c.display_text for c in cands] == ['hello']
    assert engine.calls == [((30, 10), 'eng')]


def test_no_words_is_a_recognition_failure():
    adapter = RecognitionAdapter(FakeEngine([RecognizedSpan('42', BBox(0, 0, 1, 1))]))
    with pytest.raises(RecognitionError, match=NO_WORDS_MESSAGE):
        recognize_candidates(Image.new('RGB', (5, 5)), adapter)


def test_capture_still_crops_roi_from_frame():
    frame = Image.new('RGB', (1920, 1080), (255, 255, 255))
    native = roi_in_frame(frame.size, (400, 800))
    still = capture_still(frame, (400, 800))
    assert still.size == (int(native.width), int(native.height))
    assert still.getpixel((0, 0)) == (255, 255, 255)
