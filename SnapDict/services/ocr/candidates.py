"""Normalization of raw recognizer spans into tappable word candidates."""
from __future__ import annotations

import logging
import re
from typing import Iterable, List

from SnapDict.core.models import Candidate, RecognizedSpan

logger = logging.getLogger(__name__)

_EDGE_NOISE = re.compile(r'^[^a-zA-Z0-9]+|[^a-zA-Z0-9]+$')
_LETTER = re.compile(r'[a-zA-Z]')


def trim_punctuation(text: str) -> str:
    """Strip whitespace, then leading/trailing non-alphanumerics.

    Interior punctuation (apostrophes, hyphens, commas) is left alone.
    """
    return _EDGE_NOISE.sub('', text.strip())


def is_word_like(display_text: str) -> bool:
    """At least two characters and at least one ASCII letter."""
    return len(display_text) > 1 and _LETTER.search(display_text) is not None


def normalize_spans(spans: Iterable[RecognizedSpan]) -> List[Candidate]:
    """Keep word-like spans, in recognizer order."""
    kept: List[Candidate] = []
    for span in spans:
        display = trim_punctuation(span.text)
        if not is_word_like(display):
            logger.debug('Dropping span %r', span.text)
            continue
        kept.append(Candidate(display_text=display, original_text=span.text, bbox=span.bbox))
    return kept
