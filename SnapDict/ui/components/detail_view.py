from __future__ import annotations

from datetime import datetime
from typing import Optional

from PyQt6.QtCore import Qt, QUrl, pyqtSignal
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import QWidget, QVBoxLayout, QLabel, QPushButton

from SnapDict.core.models import WordItem
from SnapDict.services.dictionary.providers import DICTIONARIES, lookup_url


class DetailView(QWidget):
    """Selected word with one button per dictionary provider."""
    backRequested = pyqtSignal()

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        self._word: Optional[WordItem] = None
        layout = QVBoxLayout(self)

        self.backBtn = QPushButton("← Back")
        self.backBtn.clicked.connect(self.backRequested.emit)
        layout.addWidget(self.backBtn, alignment=Qt.AlignmentFlag.AlignLeft)

        self.wordLabel = QLabel("Select a word to view details")
        self.wordLabel.setWordWrap(True)
        self.wordLabel.setTextInteractionFlags(Qt.TextInteractionFlag.TextSelectableByMouse | Qt.TextInteractionFlag.TextSelectableByKeyboard)
        self.wordLabel.setStyleSheet("font-size:40px; font-weight:bold;")
        layout.addWidget(self.wordLabel)

        self.addedLabel = QLabel("")
        layout.addWidget(self.addedLabel)

        self.dictButtons: list[QPushButton] = []
        for provider in DICTIONARIES:
            btn = QPushButton(f"{provider.name}  ↗")
            btn.setMinimumHeight(48)
            btn.clicked.connect(lambda _checked, p=provider: self._openDictionary(p))
            layout.addWidget(btn)
            self.dictButtons.append(btn)
        layout.addStretch(1)
        self.setWord(None)

    def setWord(self, word: Optional[WordItem]) -> None:
        self._word = word
        has = word is not None
        self.backBtn.setVisible(has)
        for btn in self.dictButtons:
            btn.setVisible(has)
        if not has:
            self.wordLabel.setText("Select a word to view details")
            self.addedLabel.setText("")
            return
        self.wordLabel.setText(word.text)
        added = datetime.fromtimestamp(word.timestamp / 1000)
        self.addedLabel.setText(f"Added on {added:%Y-%m-%d} at {added:%H:%M:%S}")

    def _openDictionary(self, provider) -> None:
        if self._word is None:
            return
        QDesktopServices.openUrl(QUrl(lookup_url(provider, self._word.text)))
