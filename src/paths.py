"""Central definitions for repository paths used across the application."""

from __future__ import annotations

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent
LOGS_DIR = BASE_DIR / "logs"
STATE_DIR = BASE_DIR / "state"
SETTINGS_FILE = STATE_DIR / "settings.json"
APP_LOG_FILE = LOGS_DIR / "seedshotter.log"

_RUNTIME_DIRECTORIES = (
    LOGS_DIR,
    STATE_DIR,
)


def ensure_runtime_directories() -> None:
    """Create the log and state directories if they are missing."""

    for directory in _RUNTIME_DIRECTORIES:
        directory.mkdir(parents=True, exist_ok=True)


__all__ = [
    "BASE_DIR",
    "LOGS_DIR",
    "STATE_DIR",
    "SETTINGS_FILE",
    "APP_LOG_FILE",
    "ensure_runtime_directories",
]
