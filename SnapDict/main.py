"""Application entry point launching the SnapDict PyQt6 UI."""
from __future__ import annotations

import logging
import os
import sys

try:
    from PyQt6.QtWidgets import QApplication
except ImportError as e:  # pragma: no cover - environment guard
    raise RuntimeError("PyQt6 is required to run the UI. Ensure it is installed.") from e

from SnapDict.ui.main_window import create_app_window


def main() -> None:
    logging.basicConfig(
        level=os.getenv('SNAPDICT_LOG_LEVEL', 'INFO').upper(),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    app = QApplication(sys.argv)
    win = create_app_window()
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
