"""Configuration schema and environment loading.

Defaults live on the dataclasses; `load_config()` applies environment
overrides on top (environment wins, as with `OCR_BACKEND`).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import logging
import os

logger = logging.getLogger(__name__)

STORAGE_KEY_HISTORY = "snapdict_history_v1"


@dataclass
class OCRConfig:
    backend: str | None = None  # None -> auto (tesseract if present, else stub)
    language: str = "eng"
    tesseract_cmd: str | None = None
    psm: int = 6
    oem: int = 3


@dataclass
class CameraConfig:
    device_index: int = 0
    facing_mode: str = "environment"
    ideal_width: int = 1920
    ideal_height: int = 1080
    poll_interval_ms: int = 33


@dataclass
class ScannerConfig:
    roi_width_ratio: float = 0.85
    roi_height: float = 160.0
    roi_center_y_ratio: float = 1 / 3


@dataclass
class HistoryConfig:
    capacity: int = 50
    storage_key: str = STORAGE_KEY_HISTORY


@dataclass
class PathsConfig:
    data_root: str = "data"
    history_file: str = "snapdict_storage.json"

    @property
    def history_path(self) -> Path:
        return Path(self.data_root) / self.history_file


@dataclass
class AppConfig:
    ocr: OCRConfig = field(default_factory=OCRConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    scanner: ScannerConfig = field(default_factory=ScannerConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)


def load_config(env: dict | None = None) -> AppConfig:
    """Return an `AppConfig` with environment overrides applied."""
    env = os.environ if env is None else env
    cfg = AppConfig()

    backend = env.get('OCR_BACKEND')
    if backend:
        cfg.ocr.backend = backend.strip().lower()
    lang = env.get('OCR_LANG')
    if lang:
        cfg.ocr.language = lang.strip()
    cmd = env.get('TESSERACT_CMD')
    if cmd:
        cfg.ocr.tesseract_cmd = cmd
    idx = env.get('SNAPDICT_CAMERA_INDEX')
    if idx:
        try:
            cfg.camera.device_index = int(idx)
        except ValueError:
            logger.warning('Ignoring non-integer SNAPDICT_CAMERA_INDEX=%r', idx)
    data_dir = env.get('SNAPDICT_DATA_DIR')
    if data_dir:
        cfg.paths.data_root = data_dir
    return cfg
