"""Primary application window.

History list and detail view side by side, with the scanner swapped in over
both while it is open. View visibility follows the navigation state owned
by `SnapDictController`; Escape and the mouse back button deliver the back
signal.
"""
from __future__ import annotations

import logging

from PyQt6.QtCore import Qt, QEvent, QObject
from PyQt6.QtGui import QKeySequence, QShortcut
from PyQt6.QtWidgets import QMainWindow, QSplitter, QStackedWidget, QApplication

from SnapDict.core.config import AppConfig, load_config
from SnapDict.core.controller import SnapDictController
from SnapDict.core.navigation import View
from SnapDict.services.ocr.ocr_adapter import RecognitionAdapter, create_ocr
from SnapDict.services.storage.history_store import HistoryStore
from SnapDict.services.storage.kv_storage import JsonFileStorage
from SnapDict.ui.components.detail_view import DetailView
from SnapDict.ui.components.scanner_view import ScannerView
from SnapDict.ui.components.side_panel import HistoryPanel

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    def __init__(self, controller: SnapDictController, cfg: AppConfig, adapter: RecognitionAdapter):
        super().__init__()
        self.setWindowTitle("SnapDict")
        self.resize(1000, 720)
        self.controller = controller

        self.sidePanel = HistoryPanel(self)
        self.detailView = DetailView(self)
        self.scannerView = ScannerView(cfg, adapter, self)

        self.splitter = QSplitter(Qt.Orientation.Horizontal)
        self.splitter.addWidget(self.sidePanel)
        self.splitter.addWidget(self.detailView)
        self.splitter.setStretchFactor(1, 1)

        self.pages = QStackedWidget(self)
        self.pages.addWidget(self.splitter)
        self.pages.addWidget(self.scannerView)
        self.setCentralWidget(self.pages)

        self.sidePanel.scanRequested.connect(controller.open_scanner)
        self.sidePanel.manualAddRequested.connect(controller.manual_add)
        self.sidePanel.wordSelected.connect(controller.select_word)
        self.sidePanel.editRequested.connect(controller.edit_word)
        self.sidePanel.deleteRequested.connect(controller.delete_word)
        self.detailView.backRequested.connect(controller.close_detail)
        self.scannerView.closeRequested.connect(controller.close_scanner)
        self.scannerView.selectionCommitted.connect(controller.apply_selection)

        backShortcut = QShortcut(QKeySequence("Esc"), self)
        backShortcut.setContext(Qt.ShortcutContext.WindowShortcut)
        backShortcut.activated.connect(self._onBack)

        self._scanner_visible = False
        controller.subscribe(self._render)
        controller.load()

    def _onBack(self) -> None:
        if not self.controller.handle_back():
            logger.debug('Back signal with nothing to close')

    def _render(self) -> None:
        c = self.controller
        selected = c.selected_word
        self.sidePanel.setHistory(c.history, selected.id if selected else None)
        self.detailView.setWord(selected)

        scanner = c.nav.current_view is View.SCANNER
        if scanner != self._scanner_visible:
            self._scanner_visible = scanner
            if scanner:
                self.pages.setCurrentWidget(self.scannerView)
                self.scannerView.start()
            else:
                self.scannerView.stop()
                self.pages.setCurrentWidget(self.splitter)

    def closeEvent(self, event):  # noqa: D401
        self.scannerView.shutdown()
        super().closeEvent(event)


class BackButtonFilter(QObject):
    """Routes the mouse "back" button to the window's back handler."""
    def __init__(self, window: MainWindow):
        super().__init__(window)
        self._window = window

    def eventFilter(self, obj, event):  # noqa: D401
        if event.type() == QEvent.Type.MouseButtonPress and event.button() == Qt.MouseButton.BackButton:
            self._window._onBack()
            return True
        return False


def create_app_window(cfg: AppConfig | None = None) -> MainWindow:
    cfg = cfg or load_config()
    store = HistoryStore(JsonFileStorage(cfg.paths.history_path), key=cfg.history.storage_key,
                         capacity=cfg.history.capacity)
    controller = SnapDictController(store)
    adapter = RecognitionAdapter(create_ocr(cfg.ocr), lang=cfg.ocr.language)
    win = MainWindow(controller, cfg, adapter)
    app = QApplication.instance()
    if app is not None:
        app.installEventFilter(BackButtonFilter(win))
    return win
