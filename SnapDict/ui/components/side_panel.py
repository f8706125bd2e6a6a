from __future__ import annotations
from typing import List, Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtWidgets import (
    QWidget, QVBoxLayout, QHBoxLayout, QLabel, QListWidget, QListWidgetItem, QPushButton,
    QLineEdit, QMenu, QInputDialog,
)

from SnapDict.core.models import WordItem


class HistoryPanel(QWidget):
    """Left-side panel: scan button, manual entry and the word history list."""
    scanRequested = pyqtSignal()
    manualAddRequested = pyqtSignal(str)
    wordSelected = pyqtSignal(str)           # word id
    editRequested = pyqtSignal(str, str)     # word id, new text
    deleteRequested = pyqtSignal(str)        # word id

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(parent)
        outer = QVBoxLayout(self)

        title = QLabel("SnapDict")
        title.setStyleSheet("font-size:20px; font-weight:bold;")
        outer.addWidget(title)
        outer.addWidget(QLabel("Scan & Learn"))

        self.scanBtn = QPushButton("Scan Text")
        self.scanBtn.clicked.connect(self.scanRequested.emit)
        outer.addWidget(self.scanBtn)

        row = QHBoxLayout()
        self.manualInput = QLineEdit()
        self.manualInput.setPlaceholderText("Type a word manually...")
        self.manualInput.returnPressed.connect(self._submitManual)
        self.manualInput.textChanged.connect(lambda t: self.addBtn.setEnabled(bool(t.strip())))
        row.addWidget(self.manualInput, 1)
        self.addBtn = QPushButton("+")
        self.addBtn.setEnabled(False)
        self.addBtn.clicked.connect(self._submitManual)
        row.addWidget(self.addBtn)
        outer.addLayout(row)

        self.emptyLabel = QLabel("No words yet.\nScan a word or type above!")
        self.emptyLabel.setAlignment(Qt.AlignmentFlag.AlignCenter)
        outer.addWidget(self.emptyLabel)

        self.wordsList = QListWidget()
        self.wordsList.itemClicked.connect(self._onItemClicked)
        self.wordsList.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        self.wordsList.customContextMenuRequested.connect(self._showContextMenu)
        outer.addWidget(self.wordsList, 1)

    def setHistory(self, items: List[WordItem], selected_id: Optional[str] = None) -> None:
        self.wordsList.blockSignals(True)
        self.wordsList.clear()
        for w in items:
            it = QListWidgetItem(w.text)
            it.setData(Qt.ItemDataRole.UserRole, w.id)
            self.wordsList.addItem(it)
            if w.id == selected_id:
                it.setSelected(True)
        self.wordsList.blockSignals(False)
        self.emptyLabel.setVisible(not items)

    def _submitManual(self) -> None:
        text = self.manualInput.text()
        if text.strip():
            self.manualAddRequested.emit(text)
            self.manualInput.clear()

    def _onItemClicked(self, item: QListWidgetItem) -> None:
        self.wordSelected.emit(item.data(Qt.ItemDataRole.UserRole))

    def _showContextMenu(self, pos) -> None:
        item = self.wordsList.itemAt(pos)
        if item is None:
            return
        word_id = item.data(Qt.ItemDataRole.UserRole)
        menu = QMenu(self)
        act_edit = menu.addAction("Edit")
        act_delete = menu.addAction("Delete")
        chosen = menu.exec(self.wordsList.viewport().mapToGlobal(pos))
        if chosen == act_edit:
            text, ok = QInputDialog.getText(self, "Edit word", "Word:", text=item.text())
            if ok and text.strip():
                self.editRequested.emit(word_id, text)
        elif chosen == act_delete:
            self.deleteRequested.emit(word_id)
