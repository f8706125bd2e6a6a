"""Core data model schema.

Dataclass definitions shared by the capture pipeline, the scanner session
and the history store. Operational logic lives in the services and in the
session/navigation state machines.
"""
from __future__ import annotations
from dataclasses import dataclass, asdict
from typing import Dict, Any


# ---- History ----
@dataclass(frozen=True)
class WordItem:
    id: str
    text: str
    timestamp: int  # epoch milliseconds, set on creation only

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "WordItem":
        """Build from a persisted record; raises on missing or mistyped fields."""
        if not isinstance(raw, dict):
            raise TypeError('WordItem record must be a dict')
        item_id = raw['id']
        text = raw['text']
        ts = raw['timestamp']
        if not isinstance(item_id, str) or not isinstance(text, str):
            raise TypeError('WordItem id/text must be strings')
        if isinstance(ts, bool) or not isinstance(ts, (int, float)):
            raise TypeError('WordItem timestamp must be numeric')
        return cls(id=item_id, text=text, timestamp=int(ts))


# ---- OCR Layout Structures ----
@dataclass(frozen=True)
class BBox:
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0

    def contains(self, x: float, y: float) -> bool:
        return self.x0 <= x <= self.x1 and self.y0 <= y <= self.y1


@dataclass(frozen=True)
class RecognizedSpan:
    text: str
    bbox: BBox  # native still-image pixel space


@dataclass(frozen=True)
class Candidate:
    display_text: str   # punctuation-trimmed
    original_text: str  # as returned by the recognizer
    bbox: BBox
