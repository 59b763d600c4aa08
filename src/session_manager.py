"""Starts and stops at most one watch session at a time."""

from __future__ import annotations

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Deque, List, Optional, Tuple, Union

from cancellation import CancellationToken, Canceller, new_cancellation
from errors import AppError, SessionAlreadyRunningError
from models import SessionOptions, WatchTarget
from watch_session import (
    ErrorReporter,
    SessionState,
    SessionStats,
    TriggerCallback,
    WatchSession,
)

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., WatchSession]

MAX_REPORTED_ERRORS = 50


class SessionHandle:
    """
    What the owner of a session gets back: a way to stop it, to wait for
    it, and to read its status and reported errors from any thread.
    """

    def __init__(self, session: WatchSession, canceller: Canceller, token: CancellationToken):
        self._session = session
        self._canceller = canceller
        self.token = token
        self.started_at = datetime.now(timezone.utc)
        self._errors: Deque[Tuple[datetime, AppError]] = deque(maxlen=MAX_REPORTED_ERRORS)
        self._errors_lock = threading.Lock()

    @property
    def state(self) -> SessionState:
        return self._session.state

    @property
    def stats(self) -> SessionStats:
        return self._session.stats

    @property
    def target(self) -> Optional[WatchTarget]:
        return self._session.target

    @property
    def options(self) -> SessionOptions:
        return self._session.options

    @property
    def stop_requested(self) -> bool:
        return self._canceller.cancelled

    @property
    def errors(self) -> List[Tuple[datetime, AppError]]:
        with self._errors_lock:
            return list(self._errors)

    def record_error(self, error: AppError) -> None:
        with self._errors_lock:
            self._errors.append((datetime.now(timezone.utc), error))

    def stop(self) -> None:
        """Request a stop and return without waiting. No-op once finished."""
        if self._session.is_finished():
            return
        if self._canceller.cancel():
            logger.info("Stop requested for %s", self.target.file_path if self.target else "session")
            self._session.request_shutdown()

    def is_finished(self) -> bool:
        return self._session.is_finished()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._session.join(timeout)


class SessionManager:
    """Owns the single active session for one logical run."""

    def __init__(
        self,
        session_factory: Optional[SessionFactory] = None,
        teardown_timeout: float = 5.0,
    ):
        self._session_factory = session_factory or WatchSession
        self._teardown_timeout = teardown_timeout
        self._lock = threading.Lock()
        self._active: Optional[SessionHandle] = None

    @property
    def active(self) -> Optional[SessionHandle]:
        return self._active

    def is_running(self) -> bool:
        handle = self._active
        return handle is not None and not handle.is_finished()

    def start(
        self,
        file_path: Union[str, Path],
        callback: TriggerCallback,
        options: Optional[SessionOptions] = None,
        on_error: Optional[ErrorReporter] = None,
    ) -> SessionHandle:
        """
        Start watching ``file_path``. Raises SessionAlreadyRunningError if a
        session is still active and StartupError if this one cannot start.
        """
        with self._lock:
            self._ensure_previous_torn_down()

            canceller, token = new_cancellation()
            handle: Optional[SessionHandle] = None

            def report(error: AppError) -> None:
                if handle is not None:
                    handle.record_error(error)
                if on_error is not None:
                    on_error(error)

            session = self._session_factory(
                file_path, callback, token, options=options, on_error=report
            )
            handle = SessionHandle(session, canceller, token)
            self._active = handle
            try:
                session.start()
            except Exception:
                self._active = None
                raise
            return handle

    def stop(self, handle: Optional[SessionHandle] = None) -> None:
        """Request a stop of ``handle`` (default: the active session)."""
        handle = handle or self._active
        if handle is None:
            return
        handle.stop()

    def _ensure_previous_torn_down(self) -> None:
        previous = self._active
        if previous is None or previous.is_finished():
            return
        ending = previous.stop_requested or previous.state in (
            SessionState.STOPPING,
            SessionState.STOPPED,
        )
        if ending and previous.wait(self._teardown_timeout):
            return
        raise SessionAlreadyRunningError(
            "A seedshotter session is already running; stop it before starting another."
        )
