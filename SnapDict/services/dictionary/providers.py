"""Online dictionary providers.
A committed word or sentence is handed to one of these as a lookup URL.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List

import requests


@dataclass(frozen=True)
class DictionaryProvider:
    name: str
    url_template: str  # contains "{word}"


DICTIONARIES: List[DictionaryProvider] = [
    DictionaryProvider('Cambridge', 'https://dictionary.cambridge.org/dictionary/english/{word}'),
    DictionaryProvider('Merriam-Webster', 'https://www.merriam-webster.com/dictionary/{word}'),
    DictionaryProvider('Longman', 'https://www.ldoceonline.com/dictionary/{word}'),
]


def lookup_url(provider: DictionaryProvider, text: str) -> str:
    """Build the provider's lookup URL for `text` (URL-quoted)."""
    if not isinstance(text, str):
        raise TypeError('Lookup text must be a string')
    text = text.strip()
    if not text:
        raise ValueError('Lookup text is empty')
    return provider.url_template.format(word=requests.utils.quote(text))


def provider_by_name(name: str) -> DictionaryProvider:
    for p in DICTIONARIES:
        if p.name.lower() == name.strip().lower():
            return p
    raise KeyError(f'No dictionary provider named {name}')
