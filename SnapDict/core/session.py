"""Scanner session state machine.

A `ScanSession` tracks one scanner's capture status and, once recognition
results exist, the active selection mode and the selected candidate
indices. It is UI-agnostic: the Qt scanner view drives it and renders
whatever it exposes.

Status flow::

    idle -> priming -> idle            (camera stream becoming ready)
    idle -> capturing -> showingResults (recognition succeeded)
                      -> idle           (recognition failed, error set)
    showingResults -> idle              (retake / dismiss)

Every capture gets a new generation number. Recognition results carry the
generation they were started with; results for an older generation (the
session was torn down or a new capture began) are discarded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional, Sequence, Set, Tuple

from SnapDict.core.models import Candidate
from SnapDict.services.ocr.candidates import trim_punctuation

logger = logging.getLogger(__name__)


class InvalidTransitionError(RuntimeError):
    """Operation not allowed in the session's current status."""


class ScanStatus(str, Enum):
    IDLE = 'idle'
    PRIMING = 'priming'
    CAPTURING = 'capturing'
    SHOWING_RESULTS = 'showingResults'


class SelectionMode(str, Enum):
    SINGLE = 'single'
    MULTIPLE = 'multiple'
    SENTENCE = 'sentence'


class OutputKind(str, Enum):
    WORD = 'word'
    WORDS = 'words'
    SENTENCE = 'sentence'


@dataclass(frozen=True)
class SelectionOutput:
    kind: OutputKind
    words: Tuple[str, ...]

    @property
    def text(self) -> str:
        """The single committed string (word or sentence)."""
        return self.words[0] if self.words else ''


class ScanSession:
    def __init__(self) -> None:
        self.status: ScanStatus = ScanStatus.IDLE
        self.generation: int = 0
        self.snapshot: Any = None
        self.candidates: List[Candidate] = []
        self.mode: SelectionMode = SelectionMode.SINGLE
        self._selected: Set[int] = set()
        self.error: Optional[str] = None          # transient (recognition)
        self.device_error: Optional[str] = None   # persistent (camera)

    # -------- Read-only views --------
    @property
    def selected_indices(self) -> frozenset[int]:
        return frozenset(self._selected)

    @property
    def can_capture(self) -> bool:
        return self.status is ScanStatus.IDLE and self.device_error is None

    @property
    def can_commit(self) -> bool:
        return (self.status is ScanStatus.SHOWING_RESULTS
                and self.mode is not SelectionMode.SINGLE
                and bool(self._selected))

    def is_current(self, generation: int) -> bool:
        return generation == self.generation

    # -------- Device stream --------
    def begin_priming(self) -> None:
        if self.status is not ScanStatus.IDLE:
            raise InvalidTransitionError(f'Cannot prime camera while {self.status.value}')
        self.device_error = None
        self.status = ScanStatus.PRIMING

    def stream_ready(self) -> None:
        if self.status is ScanStatus.PRIMING:
            self.status = ScanStatus.IDLE

    def stream_failed(self, message: str) -> None:
        """Camera unavailable: stay idle with a persistent error; only retry/close remain."""
        logger.warning('Camera unavailable: %s', message)
        self.device_error = message
        if self.status in (ScanStatus.PRIMING, ScanStatus.IDLE):
            self.status = ScanStatus.IDLE

    # -------- Capture / recognition --------
    def begin_capture(self, snapshot: Any = None) -> int:
        """Freeze a snapshot and enter `capturing`; returns the capture generation."""
        if not self.can_capture:
            raise InvalidTransitionError(
                f'Cannot capture while {self.status.value}'
                + (' (camera unavailable)' if self.device_error else ''))
        self.generation += 1
        self.mode = SelectionMode.SINGLE
        self._selected.clear()
        self.candidates = []
        self.error = None
        self.snapshot = snapshot
        self.status = ScanStatus.CAPTURING
        return self.generation

    def complete_recognition(self, generation: int, candidates: Sequence[Candidate]) -> bool:
        """Apply recognition results; returns False if they were discarded as stale."""
        if not self._accepts(generation):
            return False
        self.candidates = list(candidates)
        self.status = ScanStatus.SHOWING_RESULTS
        return True

    def fail_recognition(self, generation: int, message: str) -> bool:
        """Back to idle with a transient error; the live frame resumes."""
        if not self._accepts(generation):
            return False
        logger.info('Recognition failed: %s', message)
        self._clear_results()
        self.error = message
        self.status = ScanStatus.IDLE
        return True

    def _accepts(self, generation: int) -> bool:
        if generation != self.generation or self.status is not ScanStatus.CAPTURING:
            logger.debug('Discarding stale recognition result (gen %s, current %s, %s)',
                         generation, self.generation, self.status.value)
            return False
        return True

    def retake(self) -> None:
        """Leave the results view and resume the live frame."""
        if self.status is not ScanStatus.SHOWING_RESULTS:
            raise InvalidTransitionError(f'Nothing to retake while {self.status.value}')
        self._clear_results()
        self.status = ScanStatus.IDLE

    def teardown(self) -> None:
        """End the session; any in-flight recognition becomes stale."""
        self.generation += 1
        self._clear_results()
        self.error = None
        self.status = ScanStatus.IDLE

    def clear_error(self) -> None:
        self.error = None

    def _clear_results(self) -> None:
        self.snapshot = None
        self.candidates = []
        self._selected.clear()
        self.mode = SelectionMode.SINGLE

    # -------- Selection --------
    def set_mode(self, mode: SelectionMode) -> None:
        """Switch selection mode; the current selection is kept."""
        self.mode = SelectionMode(mode)

    def tap(self, index: int) -> Optional[SelectionOutput]:
        """Handle a tap on candidate `index`.

        In single mode the tap commits immediately and ends the session;
        otherwise it toggles the index and returns None.
        """
        if self.status is not ScanStatus.SHOWING_RESULTS:
            raise InvalidTransitionError(f'No results to select while {self.status.value}')
        if not 0 <= index < len(self.candidates):
            raise IndexError(f'Candidate index {index} out of range')
        if self.mode is SelectionMode.SINGLE:
            out = SelectionOutput(OutputKind.WORD, (self.candidates[index].display_text,))
            self.teardown()
            return out
        self._selected ^= {index}
        return None

    def commit(self) -> Optional[SelectionOutput]:
        """Finish a multiple/sentence selection; no-op while nothing is selected."""
        if not self.can_commit:
            return None
        picked = [self.candidates[i] for i in sorted(self._selected)]
        if self.mode is SelectionMode.MULTIPLE:
            out = SelectionOutput(OutputKind.WORDS, tuple(c.display_text for c in picked))
        else:
            sentence = trim_punctuation(' '.join(c.original_text for c in picked))
            if not sentence:
                return None
            out = SelectionOutput(OutputKind.SENTENCE, (sentence,))
        self.teardown()
        return out
