"""Service tying the session manager, the capturer and persisted settings together."""

from __future__ import annotations

import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from capture import ScreenCapturer
from errors import SettingsError, StartupError
from models import SeedshotSettings, SessionOptions, WatchStrategy
from session_manager import SessionHandle, SessionManager
from watch_session import ErrorReporter

from .settings_service import SettingsService

logger = logging.getLogger(__name__)

CaptureListener = Callable[[Path], None]
PathLike = Union[str, Path]


class SeedshotService:
    """Front door used by the GUI, the CLI and the HTTP API."""

    _UNSET = object()

    def __init__(
        self,
        *,
        manager: Optional[SessionManager] = None,
        capturer: Optional[ScreenCapturer] = None,
        settings_service: Optional[SettingsService] = None,
        default_options: Optional[SessionOptions] = None,
    ) -> None:
        self._manager = manager or SessionManager()
        self._capturer = capturer or ScreenCapturer()
        self._settings_service = settings_service or SettingsService()
        self._default_options = default_options or SessionOptions()
        self._output_file: Optional[Path] = None

    @property
    def manager(self) -> SessionManager:
        return self._manager

    # Settings -------------------------------------------------------------------
    def settings(self) -> SeedshotSettings:
        return self._settings_service.load()

    def update_settings(
        self,
        *,
        log_file: Any = _UNSET,
        output_file: Any = _UNSET,
        label: Any = _UNSET,
    ) -> SeedshotSettings:
        """Persist the given fields, leaving the others as stored."""

        current = self.settings()
        changes: Dict[str, Any] = {}
        if log_file is not self._UNSET:
            changes["log_file"] = Path(log_file) if log_file else None
        if output_file is not self._UNSET:
            changes["output_file"] = Path(output_file) if output_file else current.output_file
        if label is not self._UNSET:
            changes["label"] = label if label is not None else current.label
        updated = replace(current, **changes)
        self._settings_service.save(updated)
        return updated

    # Session lifecycle ------------------------------------------------------------
    def start(
        self,
        log_file: Optional[PathLike] = None,
        output_file: Optional[PathLike] = None,
        *,
        trigger: Optional[str] = None,
        strategy: Optional[Union[str, WatchStrategy]] = None,
        poll_interval: Optional[float] = None,
        on_capture: Optional[CaptureListener] = None,
        on_error: Optional[ErrorReporter] = None,
    ) -> SessionHandle:
        """
        Start a session, falling back to the stored settings for any path
        not given. The paths actually used are saved for the next run.
        """

        settings = self.settings()
        log_path = Path(log_file) if log_file else settings.log_file
        if log_path is None:
            raise StartupError("No log file selected.")
        output_path = Path(output_file) if output_file else settings.output_file

        options = replace(self._default_options)
        if trigger is not None:
            options.trigger = trigger
        if strategy is not None:
            options.strategy = strategy
        if poll_interval is not None:
            options.poll_interval = poll_interval

        handle = self._manager.start(
            log_path,
            self._capture_callback(output_path, on_capture),
            options=options,
            on_error=on_error,
        )
        self._output_file = output_path

        try:
            self._settings_service.save(
                replace(settings, log_file=log_path, output_file=output_path)
            )
        except SettingsError:
            logger.warning("Session started but settings could not be saved", exc_info=True)
        return handle

    def stop(self, *, wait: bool = False, timeout: Optional[float] = None) -> bool:
        """
        Request a stop of the active session, optionally blocking up to
        ``timeout`` for teardown. Returns True once no session is running.
        """

        handle = self._manager.active
        if handle is None:
            return True
        self._manager.stop(handle)
        if wait:
            return handle.wait(timeout)
        return handle.is_finished()

    def is_running(self) -> bool:
        return self._manager.is_running()

    def status(self) -> Dict[str, Any]:
        handle = self._manager.active
        if handle is None:
            return {
                "running": False,
                "state": None,
                "log_file": None,
                "output_file": None,
                "trigger": None,
                "strategy": None,
                "started_at": None,
                "stop_requested": False,
                "stats": None,
                "errors": [],
            }

        target = handle.target
        return {
            "running": not handle.is_finished(),
            "state": handle.state.value,
            "log_file": str(target.file_path) if target else None,
            "output_file": str(self._output_file) if self._output_file else None,
            "trigger": handle.options.trigger,
            "strategy": handle.options.strategy.value,
            "started_at": handle.started_at,
            "stop_requested": handle.stop_requested,
            "stats": asdict(handle.stats),
            "errors": [
                {
                    "occurred_at": occurred_at,
                    "kind": type(error).__name__,
                    "message": str(error),
                }
                for occurred_at, error in handle.errors
            ],
        }

    def _capture_callback(
        self, output_path: Path, on_capture: Optional[CaptureListener]
    ) -> Callable[[str], None]:
        def capture(line: str) -> None:
            logger.info("Trigger line seen: %s", line.strip())
            saved = self._capturer.capture_and_save(output_path)
            if on_capture is not None:
                on_capture(saved)

        return capture


__all__ = ["SeedshotService"]
