"""Application-level state: history snapshot, selection and navigation.

The Qt main window renders whatever this controller exposes and forwards
user intents to it; nothing here depends on Qt.
"""
from __future__ import annotations

import logging
from typing import Callable, List, Optional

from SnapDict.core.models import WordItem
from SnapDict.core.navigation import BackAction, NavigationController
from SnapDict.core.session import OutputKind, SelectionOutput
from SnapDict.services.storage.history_store import HistoryStore

logger = logging.getLogger(__name__)


class SnapDictController:
    def __init__(self, store: HistoryStore, navigation: NavigationController | None = None):
        self.store = store
        self.nav = navigation or NavigationController()
        self.history: List[WordItem] = []
        self._listeners: List[Callable[[], None]] = []
        self.nav.subscribe(lambda _nav: self._notify())

    def load(self) -> List[WordItem]:
        self.history = self.store.list()
        self._notify()
        return self.history

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    @property
    def selected_word(self) -> Optional[WordItem]:
        wid = self.nav.detail_word_id
        if wid is None:
            return None
        return next((w for w in self.history if w.id == wid), None)

    # -------- Navigation intents --------
    def open_scanner(self) -> None:
        self.nav.open_scanner()

    def close_scanner(self) -> None:
        self.nav.close_scanner()

    def select_word(self, word_id: str) -> None:
        if any(w.id == word_id for w in self.history):
            self.nav.open_detail(word_id)

    def close_detail(self) -> None:
        self.nav.close_detail()

    def handle_back(self) -> bool:
        """Returns False when the back signal should fall through to the platform."""
        return self.nav.handle_back() is not BackAction.DEFAULT

    # -------- History intents --------
    def _set_history(self, items: List[WordItem]) -> None:
        self.history = items
        self._notify()

    def _add_one(self, text: str) -> Optional[WordItem]:
        """Add `text`; returns the new head item, or None if nothing was stored."""
        before = {w.id for w in self.store.list()}
        self._set_history(self.store.add(text))
        if not self.history or self.history[0].id in before:
            logger.warning('Word %r was not added to history', text)
            return None
        return self.history[0]

    def manual_add(self, text: str) -> Optional[WordItem]:
        if not text.strip():
            return None
        new = self._add_one(text)
        if new is not None:
            self.nav.open_detail(new.id)
        return new

    def edit_word(self, word_id: str, new_text: str) -> None:
        self._set_history(self.store.update(word_id, new_text))

    def delete_word(self, word_id: str) -> None:
        self._set_history(self.store.remove(word_id))
        if self.nav.detail_word_id == word_id and self.selected_word is None:
            self.nav.close_detail()

    def apply_selection(self, output: SelectionOutput) -> None:
        """Store a scanner commit and move on from the scanner."""
        if output.kind is OutputKind.WORDS:
            words = [w for w in output.words if w.strip()]
            if not words:
                return
            self._set_history(self.store.add_many(words))
            logger.info('Batch-added %d words', len(words))
            self.nav.close_scanner()
            return
        if not output.text.strip():
            return
        new = self._add_one(output.text)
        if new is not None:
            self.nav.commit_to_detail(new.id)
