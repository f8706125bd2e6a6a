"""Named factories for pluggable services.

Names are matched case-insensitively, and a factory may be reachable under
extra aliases (`pytesseract` -> `tesseract`). Only canonical names are listed.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Optional


class Registry:
    def __init__(self, kind: str = 'service') -> None:
        self.kind = kind
        self._factories: Dict[str, Callable[..., Any]] = {}
        self._aliases: Dict[str, str] = {}

    def register(self, name: str, factory: Callable[..., Any], aliases: Iterable[str] = ()) -> None:
        key = name.strip().lower()
        if key in self._factories or key in self._aliases:
            raise ValueError(f"{self.kind} '{name}' already registered")
        self._factories[key] = factory
        for alias in aliases:
            self._aliases[alias.strip().lower()] = key

    def resolve(self, name: str) -> Optional[str]:
        """Canonical name for `name` or one of its aliases, else None."""
        key = name.strip().lower()
        key = self._aliases.get(key, key)
        return key if key in self._factories else None

    def create(self, name: str, *args, **kwargs) -> Any:
        key = self.resolve(name)
        if key is None:
            raise KeyError(f"No {self.kind} registered as '{name}'. Supported: {', '.join(self.names())}")
        return self._factories[key](*args, **kwargs)

    def names(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, name: str) -> bool:
        return self.resolve(name) is not None


OCR_REGISTRY = Registry('OCR backend')
