# src/main.py
"""Main entry point for the Dispatch Board application."""

from __future__ import annotations

import sys
from importlib import import_module
from pathlib import Path

from PyQt6.QtWidgets import QApplication, QMessageBox

if __package__ in (None, ""):
    package_root = Path(__file__).resolve().parent.parent
    if str(package_root) not in sys.path:
        sys.path.insert(0, str(package_root))
    _dispatch = import_module("src.dispatch_app")
else:  # pragma: no cover - import path depends on runtime context
    _dispatch = import_module(".dispatch_app", package=__package__)

DispatchFeedError = _dispatch.DispatchFeedError
bootstrap_app = _dispatch.bootstrap_app


def main() -> None:
    """Launch the PyQt6 dispatch dashboard."""
    try:
        exit_code = bootstrap_app()
    except DispatchFeedError as exc:
        app = QApplication.instance() or QApplication(sys.argv)
        QMessageBox.critical(None, "Dispatch Feed", str(exc))
        raise SystemExit(1) from exc
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
