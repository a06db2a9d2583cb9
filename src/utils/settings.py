"""JSON-backed dashboard settings with environment overrides."""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

APP_DIR_NAME = "DispatchBoard"


def resolve_data_directory() -> Path:
    if sys.platform == "win32":
        base = Path(os.getenv("APPDATA", Path.home() / "AppData/Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library/Application Support"
    else:
        base = Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local/share"))
    return base / APP_DIR_NAME


def _deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class SettingsManager:
    """Load and persist lightweight JSON application settings."""

    DEFAULTS: dict[str, Any] = {
        "feed_file": "",
        "grid_start_hour": 0,
        "zoom_level": 2,
        "time_format": "12h",
        "currency_symbol": "$",
        "window_size": {"width": 1180, "height": 760},
    }

    def __init__(self, path: Path) -> None:
        self.path = path
        self.data = json.loads(json.dumps(self.DEFAULTS))  # deep copy
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            self.save()
            return
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError):
            logger.warning("Settings file %s unreadable; restoring defaults.", self.path)
            self.save()
            return
        if isinstance(loaded, dict):
            self.data = _deep_merge(self.data, loaded)

    def save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.data, indent=2), encoding="utf-8")

    def update(self, updates: Mapping[str, Any]) -> None:
        self.data = _deep_merge(self.data, updates)
        self.save()


@dataclass(frozen=True)
class RuntimeConfig:
    feed_file: Optional[Path]
    grid_start_hour: int
    zoom_level: int
    time_format: str
    currency_symbol: str


def resolve_runtime_config(
    settings: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> RuntimeConfig:
    """Merge stored settings with ``DISPATCH_*`` environment overrides."""

    env = os.environ if environ is None else environ

    feed_text = (env.get("DISPATCH_FEED_FILE") or str(settings.get("feed_file") or "")).strip()
    grid_start = settings.get("grid_start_hour", 0)
    env_start = (env.get("DISPATCH_GRID_START_HOUR") or "").strip()
    if env_start:
        try:
            grid_start = int(env_start)
        except ValueError:
            logger.warning("Ignoring non-numeric DISPATCH_GRID_START_HOUR=%r", env_start)
    currency = (env.get("DISPATCH_CURRENCY") or "").strip() or str(
        settings.get("currency_symbol", "$")
    )
    time_format = str(settings.get("time_format", "12h"))
    if time_format not in ("12h", "24h"):
        time_format = "12h"

    return RuntimeConfig(
        feed_file=Path(feed_text).expanduser() if feed_text else None,
        grid_start_hour=max(0, min(23, int(grid_start))),
        zoom_level=max(1, min(5, int(settings.get("zoom_level", 2)))),
        time_format=time_format,
        currency_symbol=currency,
    )


__all__ = ["RuntimeConfig", "SettingsManager", "resolve_data_directory", "resolve_runtime_config"]
