"""String-keyed key/value storage backends.

`JsonFileStorage` keeps every key in one JSON object on disk and writes it
atomically under a short-lived directory lock; `MemoryStorage` is the
in-process equivalent. Both expose `get_item` / `set_item`.
"""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class FileLock:
    """Directory lock for short critical sections.

    A lock directory older than `stale_after` seconds is left over from a
    process that died while holding it, and is broken.
    """
    def __init__(self, lock_path: Path, retry_delay: float = 0.05, timeout: float = 2.0,
                 stale_after: float = 30.0):
        self.lock_path = Path(lock_path)
        self.retry_delay = retry_delay
        self.timeout = timeout
        self.stale_after = stale_after
        self._locked = False

    def _break_if_stale(self) -> None:
        try:
            age = time.time() - self.lock_path.stat().st_mtime
        except FileNotFoundError:
            return
        if age > self.stale_after:
            logger.warning('Breaking stale lock %s (%.0fs old)', self.lock_path, age)
            try:
                os.rmdir(str(self.lock_path))
            except FileNotFoundError:
                pass

    def __enter__(self):
        deadline = time.monotonic() + self.timeout
        while True:
            try:
                os.mkdir(str(self.lock_path))
                self._locked = True
                return self
            except FileExistsError:
                self._break_if_stale()
                if time.monotonic() > deadline:
                    raise TimeoutError(f"Timeout acquiring lock {self.lock_path}")
                time.sleep(self.retry_delay)

    def __exit__(self, exc_type, exc, tb):
        if self._locked:
            try:
                os.rmdir(str(self.lock_path))
            except OSError:
                logger.warning('Could not remove lock %s', self.lock_path)
            finally:
                self._locked = False


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStorage:
    def __init__(self, path: str | Path, lock_timeout: float = 2.0):
        self.path = Path(path)
        self.lock_timeout = lock_timeout
        self._lockfile = self.path.with_suffix(self.path.suffix + '.lock')

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open('r', encoding='utf8') as fh:
                data = json.load(fh)
        except (OSError, ValueError):
            logger.warning('Storage file %s unreadable; treating as empty', self.path, exc_info=True)
            return {}
        if not isinstance(data, dict):
            logger.warning('Storage file %s is not a JSON object; treating as empty', self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        """Write one key; raises OSError (TimeoutError when the lock is held)."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(self._lockfile, timeout=self.lock_timeout):
            data = self._read_all()
            data[key] = value
            # atomic write
            tmp = self.path.with_suffix(self.path.suffix + '.tmp')
            try:
                with tmp.open('w', encoding='utf8') as fh:
                    json.dump(data, fh, ensure_ascii=False, indent=2)
                os.replace(str(tmp), str(self.path))
            finally:
                if tmp.exists():
                    tmp.unlink()
