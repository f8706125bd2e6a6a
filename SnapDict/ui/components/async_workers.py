from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, pyqtSignal, pyqtSlot

from SnapDict.services.ocr.ocr_adapter import RecognitionAdapter, RecognitionError
from SnapDict.services.ocr.region_ocr_pipeline import recognize_candidates

logger = logging.getLogger(__name__)


class RecognitionWorker(QObject):
    """Worker that recognizes one captured still in a background QThread.

    Every signal carries the capture generation so the receiver can drop
    results that arrive after the session moved on.

    Emits:
        - succeeded(generation, candidates)
        - failed(generation, message)
        - finished()
    """
    succeeded = pyqtSignal(int, list)
    failed = pyqtSignal(int, str)
    finished = pyqtSignal()

    def __init__(self, generation: int, still, adapter: RecognitionAdapter):
        super().__init__()
        self.generation = generation
        self._still = still
        self._adapter = adapter

    @pyqtSlot()
    def run(self):
        try:
            candidates = recognize_candidates(self._still, self._adapter)
        except RecognitionError as e:
            self.failed.emit(self.generation, str(e))
        except Exception as e:
            logger.exception('Unexpected error during recognition')
            self.failed.emit(self.generation, str(e) or 'Recognition failed')
        else:
            self.succeeded.emit(self.generation, candidates)
        finally:
            self.finished.emit()
