"""Scanner overlay: live view, capture, and word selection on the frozen still."""
from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal, QThread, QTimer
from PyQt6.QtGui import QPixmap
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QPushButton, QStackedWidget, QButtonGroup,
)

from SnapDict.core.config import AppConfig
from SnapDict.core.session import ScanSession, ScanStatus, SelectionMode, SelectionOutput
from SnapDict.services.capture.camera import CameraStream, DeviceUnavailableError
from SnapDict.services.ocr.ocr_adapter import RecognitionAdapter
from SnapDict.services.ocr.region_ocr_pipeline import capture_still
from SnapDict.ui.components.async_workers import RecognitionWorker
from SnapDict.ui.custom_widget.live_view import LiveView, pil_to_qimage
from SnapDict.ui.custom_widget.word_overlay import WordOverlay

logger = logging.getLogger(__name__)

CAMERA_ERROR_TEXT = "Cannot access the camera. Check device permissions."
TRANSIENT_ERROR_MS = 3000


class ScannerView(QWidget):
    selectionCommitted = pyqtSignal(object)  # SelectionOutput
    closeRequested = pyqtSignal()

    def __init__(self, cfg: AppConfig, adapter: RecognitionAdapter, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self.cfg = cfg
        self.adapter = adapter
        self.session = ScanSession()
        self.camera: Optional[CameraStream] = None
        self._last_frame = None
        self._jobs: dict[int, tuple[QThread, RecognitionWorker]] = {}

        self._timer = QTimer(self)
        self._timer.setInterval(cfg.camera.poll_interval_ms)
        self._timer.timeout.connect(self._pollFrame)
        self._errorTimer = QTimer(self)
        self._errorTimer.setSingleShot(True)
        self._errorTimer.timeout.connect(self._clearTransientError)

        outer = QVBoxLayout(self)
        top = QHBoxLayout()
        title = QLabel("SnapDict Scanner")
        top.addWidget(title)
        top.addStretch(1)
        self.closeBtn = QPushButton("Close")
        self.closeBtn.clicked.connect(self.closeRequested.emit)
        top.addWidget(self.closeBtn)
        outer.addLayout(top)

        self.errorLabel = QLabel("")
        self.errorLabel.setStyleSheet("background:#ef4444; color:white; padding:6px; border-radius:6px;")
        self.errorLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.errorLabel.hide()
        outer.addWidget(self.errorLabel)

        self.stack = QStackedWidget(self)
        self.liveView = LiveView(cfg.scanner, self)
        self.overlay = WordOverlay(self)
        self.overlay.wordTapped.connect(self._onWordTapped)
        self.stack.addWidget(self.liveView)
        self.stack.addWidget(self.overlay)
        outer.addWidget(self.stack, 1)

        self.hintLabel = QLabel("")
        self.hintLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        outer.addWidget(self.hintLabel)

        # Results controls
        self.resultsBar = QWidget(self)
        rb = QHBoxLayout(self.resultsBar)
        self.modeGroup = QButtonGroup(self)
        self.modeGroup.setExclusive(True)
        self._modeButtons: dict[SelectionMode, QPushButton] = {}
        for mode, label in ((SelectionMode.SINGLE, "Single"), (SelectionMode.MULTIPLE, "Multiple"),
                            (SelectionMode.SENTENCE, "Sentence")):
            btn = QPushButton(label)
            btn.setCheckable(True)
            btn.clicked.connect(lambda _checked, m=mode: self._onModeChosen(m))
            self.modeGroup.addButton(btn)
            self._modeButtons[mode] = btn
            rb.addWidget(btn)
        rb.addStretch(1)
        self.retakeBtn = QPushButton("Retake")
        self.retakeBtn.clicked.connect(self._onRetake)
        rb.addWidget(self.retakeBtn)
        self.commitBtn = QPushButton("Add")
        self.commitBtn.clicked.connect(self._onCommit)
        rb.addWidget(self.commitBtn)
        outer.addWidget(self.resultsBar)

        # Live controls
        self.captureBtn = QPushButton("Capture")
        self.captureBtn.setMinimumHeight(56)
        self.captureBtn.clicked.connect(self.capture)
        outer.addWidget(self.captureBtn)
        self.retryCameraBtn = QPushButton("Retry camera")
        self.retryCameraBtn.clicked.connect(self.start)
        outer.addWidget(self.retryCameraBtn)

        self._refresh()

    # -------- Camera lifecycle --------
    def start(self) -> None:
        """Acquire the camera (scanner mounted)."""
        self.stop()
        self.session.teardown()
        self.session.begin_priming()
        self.camera = CameraStream(self.cfg.camera)
        try:
            self.camera.open()
        except DeviceUnavailableError as e:
            logger.warning('Camera open failed: %s', e)
            self.camera = None
            self.session.stream_failed(CAMERA_ERROR_TEXT)
        else:
            self._timer.start()
        self._refresh()

    def stop(self) -> None:
        """Release the camera and invalidate any in-flight recognition (scanner dismissed)."""
        self._timer.stop()
        if self.camera is not None:
            self.camera.release()
            self.camera = None
        self._last_frame = None
        self.liveView.setFrame(None)
        self.overlay.clear()
        self.session.teardown()

    def shutdown(self) -> None:
        """Release the camera and wait for recognition threads (application exit)."""
        self.stop()
        for thread, _worker in list(self._jobs.values()):
            thread.quit()
            thread.wait()
        self._jobs.clear()

    def _pollFrame(self) -> None:
        if self.camera is None or self.session.status not in (ScanStatus.PRIMING, ScanStatus.IDLE):
            return
        try:
            frame = self.camera.read_frame()
        except DeviceUnavailableError as e:
            logger.warning('Camera read failed: %s', e)
            self._timer.stop()
            self.camera.release()
            self.camera = None
            self.session.stream_failed(CAMERA_ERROR_TEXT)
            self._refresh()
            return
        if frame is None:
            return
        self._last_frame = frame
        if self.session.status is ScanStatus.PRIMING:
            self.session.stream_ready()
            self._refresh()
        self.liveView.setFrame(frame)

    # -------- Capture --------
    def capture(self) -> None:
        if not self.session.can_capture or self._last_frame is None:
            return
        try:
            still = capture_still(self._last_frame, self.liveView.clientSize(), self.cfg.scanner)
        except ValueError as e:
            logger.warning('Capture skipped: %s', e)
            return
        generation = self.session.begin_capture(still)
        self.overlay.setStill(QPixmap.fromImage(pil_to_qimage(still)))
        self.overlay.setCandidates([])
        self.overlay.setBusy(True)
        self._refresh()

        # A torn-down capture may still be running; keep its thread referenced until it ends.
        thread = QThread()
        worker = RecognitionWorker(generation, still, self.adapter)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.succeeded.connect(self._onRecognized)
        worker.failed.connect(self._onRecognitionFailed)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(lambda g=generation: self._jobs.pop(g, None))
        thread.finished.connect(thread.deleteLater)
        self._jobs[generation] = (thread, worker)
        thread.start()

    def _onRecognized(self, generation: int, candidates: list) -> None:
        if not self.session.complete_recognition(generation, candidates):
            return
        self.overlay.setBusy(False)
        self.overlay.setCandidates(self.session.candidates)
        self.overlay.setSelected(self.session.selected_indices)
        self._refresh()

    def _onRecognitionFailed(self, generation: int, message: str) -> None:
        if not self.session.fail_recognition(generation, message):
            return
        self.overlay.clear()
        self._errorTimer.start(TRANSIENT_ERROR_MS)
        self._refresh()

    def _clearTransientError(self) -> None:
        self.session.clear_error()
        self._refresh()

    # -------- Selection --------
    def _onModeChosen(self, mode: SelectionMode) -> None:
        self.session.set_mode(mode)
        self._refresh()

    def _onWordTapped(self, index: int) -> None:
        out = self.session.tap(index)
        if out is not None:
            self._emitCommit(out)
            return
        self.overlay.setSelected(self.session.selected_indices)
        self._refresh()

    def _onCommit(self) -> None:
        out = self.session.commit()
        if out is not None:
            self._emitCommit(out)

    def _emitCommit(self, out: SelectionOutput) -> None:
        self.overlay.clear()
        self._refresh()
        self.selectionCommitted.emit(out)

    def _onRetake(self) -> None:
        if self.session.status is ScanStatus.SHOWING_RESULTS:
            self.session.retake()
            self.overlay.clear()
            self._refresh()

    # -------- View sync --------
    def _refresh(self) -> None:
        s = self.session
        showing_still = s.status in (ScanStatus.CAPTURING, ScanStatus.SHOWING_RESULTS)
        self.stack.setCurrentWidget(self.overlay if showing_still else self.liveView)

        message = s.device_error or s.error
        self.errorLabel.setText(message or "")
        self.errorLabel.setVisible(bool(message))

        self.captureBtn.setVisible(not showing_still and s.device_error is None)
        self.captureBtn.setEnabled(s.can_capture and self._last_frame is not None)
        self.retryCameraBtn.setVisible(s.device_error is not None)

        results = s.status is ScanStatus.SHOWING_RESULTS
        self.resultsBar.setVisible(results)
        self._modeButtons[s.mode].setChecked(True)
        self.commitBtn.setVisible(s.mode is not SelectionMode.SINGLE)
        self.commitBtn.setEnabled(s.can_commit)
        if results:
            hints = {
                SelectionMode.SINGLE: "Tap a word to look it up",
                SelectionMode.MULTIPLE: f"{len(s.selected_indices)} selected: tap words, then Add",
                SelectionMode.SENTENCE: f"{len(s.selected_indices)} selected: tap words, then Add as sentence",
            }
            self.hintLabel.setText(hints[s.mode])
        elif s.status is ScanStatus.PRIMING:
            self.hintLabel.setText("Starting camera...")
        elif s.status is ScanStatus.CAPTURING:
            self.hintLabel.setText("Processing...")
        else:
            self.hintLabel.setText("Align text inside the frame")
