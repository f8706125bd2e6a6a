"""Persistent word history.

The whole history is one JSON-encoded list stored under a single key. Every
operation reads the full list, transforms it and (for mutations) writes it
back before returning it, most-recent-first. Calls are serialised with a
lock because each one depends on the previous write.
"""
from __future__ import annotations

import json
import logging
import random
import string
import threading
import time
from typing import Callable, Iterable, List, Optional

from SnapDict.core.config import STORAGE_KEY_HISTORY
from SnapDict.core.models import WordItem
from .kv_storage import MemoryStorage

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50
_ID_ALPHABET = string.ascii_lowercase + string.digits


def _now_ms() -> int:
    return int(time.time() * 1000)


def capitalize_first(text: str) -> str:
    return text[:1].upper() + text[1:]


class HistoryStore:
    def __init__(self, storage=None, key: str = STORAGE_KEY_HISTORY,
                 capacity: int = DEFAULT_CAPACITY, clock: Callable[[], int] = _now_ms,
                 rng: Optional[random.Random] = None):
        self.storage = storage if storage is not None else MemoryStorage()
        self.key = key
        self.capacity = capacity
        self._clock = clock
        self._rng = rng or random.Random()
        self._lock = threading.RLock()

    # -------- Persistence --------
    def _load(self) -> List[WordItem]:
        try:
            raw = self.storage.get_item(self.key)
        except Exception:
            logger.warning('Failed to load history', exc_info=True)
            return []
        if not raw:
            return []
        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise TypeError('history blob is not a list')
            return [WordItem.from_dict(r) for r in records]
        except (ValueError, TypeError, KeyError):
            logger.warning('Persisted history is corrupt; starting empty', exc_info=True)
            return []

    def _save(self, items: List[WordItem], previous: List[WordItem]) -> List[WordItem]:
        """Persist `items`; on a failed write the unchanged `previous` list is returned."""
        blob = json.dumps([i.to_dict() for i in items], ensure_ascii=False)
        try:
            self.storage.set_item(self.key, blob)
        except OSError:
            logger.warning('Failed to save history; keeping previous state', exc_info=True)
            return list(previous)
        return list(items)

    def _new_id(self, taken: set[str]) -> str:
        while True:
            suffix = ''.join(self._rng.choice(_ID_ALPHABET) for _ in range(7))
            candidate = f'{self._clock()}-{suffix}'
            if candidate not in taken:
                return candidate

    # -------- Operations --------
    def list(self) -> List[WordItem]:
        with self._lock:
            return self._load()

    def add(self, text: str) -> List[WordItem]:
        """Prepend `text` (first letter capitalised), replacing any case-insensitive duplicate."""
        with self._lock:
            clean = text.strip()
            current = self._load()
            if not clean:
                return current
            item = WordItem(
                id=self._new_id({i.id for i in current}),
                text=capitalize_first(clean),
                timestamp=self._clock(),
            )
            folded = clean.lower()
            kept = [i for i in current if i.text.lower() != folded]
            return self._save([item] + kept[:self.capacity - 1], current)

    def add_many(self, words: Iterable[str]) -> List[WordItem]:
        """Batch-add words given in reading order.

        Words are added last-first so the first word ends up most recent and
        the list head reads in the original order.
        """
        with self._lock:
            words = list(words)
            result = self._load()
            for word in reversed(words):
                result = self.add(word)
            return result

    def update(self, item_id: str, new_text: str) -> List[WordItem]:
        """Replace an item's text in place; id and timestamp are kept.

        Duplicates are not collapsed here, unlike `add`.
        """
        with self._lock:
            clean = new_text.strip()
            current = self._load()
            if not clean or not any(i.id == item_id for i in current):
                return current
            updated = [WordItem(i.id, clean, i.timestamp) if i.id == item_id else i for i in current]
            return self._save(updated, current)

    def remove(self, item_id: str) -> List[WordItem]:
        with self._lock:
            current = self._load()
            remaining = [i for i in current if i.id != item_id]
            if len(remaining) == len(current):
                return current
            return self._save(remaining, current)
