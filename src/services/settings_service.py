"""Persistence of the user's seedshotter settings."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path

from errors import SettingsError
from models import SeedshotSettings
from paths import SETTINGS_FILE

logger = logging.getLogger(__name__)


class SettingsService:
    """
    Loads and saves :class:`SeedshotSettings` as JSON. Only the two paths
    and the label are stored; session state is always rebuilt on start.
    """

    def __init__(self, settings_path: Path = SETTINGS_FILE) -> None:
        self._path = Path(settings_path)
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> SeedshotSettings:
        """Return the stored settings, or defaults when missing or unreadable."""

        with self._lock:
            if not self._path.exists():
                return SeedshotSettings()
            try:
                raw = json.loads(self._path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError):
                logger.exception("Failed to read settings file %s; using defaults", self._path)
                return SeedshotSettings()

        if not isinstance(raw, dict):
            logger.warning("Unexpected settings payload: %s", type(raw))
            return SeedshotSettings()
        try:
            return SeedshotSettings.from_dict(raw)
        except (TypeError, ValueError) as exc:
            logger.warning("Invalid settings in %s (%s); using defaults", self._path, exc)
            return SeedshotSettings()

    def save(self, settings: SeedshotSettings) -> None:
        payload = json.dumps(settings.to_dict(), indent=2)
        with self._lock:
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                tmp_path = self._path.with_suffix(".tmp")
                tmp_path.write_text(payload, encoding="utf-8")
                tmp_path.replace(self._path)
            except OSError as exc:
                raise SettingsError(f"Could not save settings to {self._path}", underlying=exc) from exc
        logger.debug("Saved settings to %s", self._path)


__all__ = ["SettingsService"]
