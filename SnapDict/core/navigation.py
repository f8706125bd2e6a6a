"""Navigation stack for the list / detail / scanner views.

The list view is the implicit bottom of the stack. On top of it there is
at most one `detail` frame and at most one `scanner` frame. The transient
flags (`scanner_open`, `detail_word_id`) decide what a back signal closes;
the frame stack only mirrors them so that one back press always closes
exactly one layer.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


class View(str, Enum):
    LIST = 'list'
    DETAIL = 'detail'
    SCANNER = 'scanner'


class BackAction(str, Enum):
    CLOSE_SCANNER = 'close_scanner'
    CLOSE_DETAIL = 'close_detail'
    DEFAULT = 'default'


@dataclass(frozen=True)
class NavigationFrame:
    view: View
    word_id: Optional[str] = None


def resolve_back_action(scanner_open: bool, detail_open: bool) -> BackAction:
    """What a single back signal closes, given the current transient flags."""
    if scanner_open:
        return BackAction.CLOSE_SCANNER
    if detail_open:
        return BackAction.CLOSE_DETAIL
    return BackAction.DEFAULT


class NavigationController:
    def __init__(self) -> None:
        self._frames: List[NavigationFrame] = []
        self.scanner_open = False
        self.detail_word_id: Optional[str] = None
        self._listeners: List[Callable[["NavigationController"], None]] = []

    # -------- Inspection --------
    @property
    def frames(self) -> List[NavigationFrame]:
        return list(self._frames)

    @property
    def detail_open(self) -> bool:
        return self.detail_word_id is not None

    @property
    def current_view(self) -> View:
        if self.scanner_open:
            return View.SCANNER
        if self.detail_open:
            return View.DETAIL
        return View.LIST

    def subscribe(self, listener: Callable[["NavigationController"], None]) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _index_of(self, view: View) -> Optional[int]:
        for i in range(len(self._frames) - 1, -1, -1):
            if self._frames[i].view is view:
                return i
        return None

    # -------- Transitions --------
    def open_scanner(self) -> None:
        if self.scanner_open:
            return
        self._frames.append(NavigationFrame(View.SCANNER))
        self.scanner_open = True
        self._notify()

    def close_scanner(self) -> None:
        """Explicit close: same path as a back press while the scanner is open."""
        if self.scanner_open:
            self._pop(View.SCANNER)

    def open_detail(self, word_id: str) -> None:
        """Show a word's detail; an already open detail frame is replaced."""
        idx = self._index_of(View.DETAIL)
        if idx is not None:
            self._frames[idx] = NavigationFrame(View.DETAIL, word_id)
        else:
            self._frames.append(NavigationFrame(View.DETAIL, word_id))
        self.detail_word_id = word_id
        self._notify()

    def close_detail(self) -> None:
        if self.detail_open:
            self._pop(View.DETAIL)

    def commit_to_detail(self, word_id: str) -> None:
        """Scanner produced a word: swap the scanner frame for that word's detail.

        One back press from the resulting detail returns to the list.
        """
        scanner_idx = self._index_of(View.SCANNER)
        if scanner_idx is not None:
            del self._frames[scanner_idx]
        self.scanner_open = False
        detail_idx = self._index_of(View.DETAIL)
        if detail_idx is not None:
            self._frames[detail_idx] = NavigationFrame(View.DETAIL, word_id)
        elif scanner_idx is not None:
            self._frames.insert(scanner_idx, NavigationFrame(View.DETAIL, word_id))
        else:
            self._frames.append(NavigationFrame(View.DETAIL, word_id))
        self.detail_word_id = word_id
        self._notify()

    def handle_back(self) -> BackAction:
        """Apply one back signal; DEFAULT means nothing was closed here."""
        action = resolve_back_action(self.scanner_open, self.detail_open)
        if action is BackAction.CLOSE_SCANNER:
            self._pop(View.SCANNER)
        elif action is BackAction.CLOSE_DETAIL:
            self._pop(View.DETAIL)
        return action

    def _pop(self, view: View) -> None:
        # Frame removal and flag update happen together.
        idx = self._index_of(view)
        if idx is not None:
            del self._frames[idx]
        else:
            logger.debug('No %s frame on the stack while closing it', view.value)
        if view is View.SCANNER:
            self.scanner_open = False
        elif view is View.DETAIL:
            self.detail_word_id = None
        self._notify()
