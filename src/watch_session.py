"""The watch session: one background thread tailing one log file."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Union

from cancellation import CancellationToken
from errors import AppError, CaptureError, StartupError, TailReadError, WatchSourceError
from events import ChangeEvent, ShutdownRequested
from models import SessionOptions, WatchTarget
from tail_reader import TailReader
from trigger import matching_lines
from watch_bridge import WatchBridge

logger = logging.getLogger(__name__)

TriggerCallback = Callable[[str], None]
ErrorReporter = Callable[[AppError], None]
BridgeFactory = Callable[[SessionOptions], WatchBridge]


class SessionState(str, Enum):
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


@dataclass
class SessionStats:
    """Counters kept by the session thread for status reporting."""

    events_handled: int = 0
    events_discarded: int = 0
    lines_read: int = 0
    triggers_matched: int = 0
    callbacks_succeeded: int = 0
    callbacks_failed: int = 0
    read_errors: int = 0


def _default_bridge_factory(options: SessionOptions) -> WatchBridge:
    return WatchBridge(strategy=options.strategy, poll_interval=options.poll_interval)


class WatchSession:
    """
    Tails ``file_path`` and calls ``callback(line)`` once for every appended
    line containing the trigger text.

    ``start()`` performs the starting phase on the caller's thread so that
    startup failures surface synchronously; the running loop then lives on
    a dedicated daemon thread until the token is cancelled, a shutdown event
    arrives or the event source dies.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        callback: TriggerCallback,
        token: CancellationToken,
        *,
        options: Optional[SessionOptions] = None,
        on_error: Optional[ErrorReporter] = None,
        bridge_factory: Optional[BridgeFactory] = None,
    ):
        self._options = options or SessionOptions()
        try:
            self._options.validate()
        except ValueError as exc:
            raise StartupError(str(exc), underlying=exc) from exc

        self._file_path = file_path
        self._callback = callback
        self._token = token
        self._on_error = on_error
        self._bridge = (bridge_factory or _default_bridge_factory)(self._options)
        self._reader: Optional[TailReader] = None
        self._events: Optional["queue.Queue[ChangeEvent]"] = None
        self._thread: Optional[threading.Thread] = None
        self._finished = threading.Event()
        self._stats = SessionStats()
        self._state = SessionState.STARTING
        self.target: Optional[WatchTarget] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def options(self) -> SessionOptions:
        return self._options

    @property
    def stats(self) -> SessionStats:
        return replace(self._stats)

    @property
    def offset(self) -> Optional[int]:
        return self._reader.offset if self._reader is not None else None

    def start(self) -> None:
        if self._state is not SessionState.STARTING or self._thread is not None:
            raise RuntimeError("A watch session can only be started once.")

        try:
            target = WatchTarget.from_path(self._file_path)
            target.validate()
            self.target = target
            self._reader = TailReader.open(target.file_path, encoding=self._options.encoding)
            self._events = self._bridge.start(target)
        except StartupError as exc:
            logger.error("Could not start watching %s: %s", self._file_path, exc)
            self._teardown()
            raise
        except Exception as exc:
            logger.exception("Unexpected failure while starting to watch %s", self._file_path)
            self._teardown()
            raise StartupError(f"Could not start watching {self._file_path}", underlying=exc) from exc

        if self._token.should_cancel():
            logger.info("Stop requested before %s finished starting", target.file_path)
            self._teardown()
            return

        self._state = SessionState.RUNNING
        self._thread = threading.Thread(
            target=self._run, name=f"watch-session:{target.file_path.name}", daemon=True
        )
        self._thread.start()
        logger.info(
            "Watching file %s in dir %s for %r",
            target.file_path, target.directory_path, self._options.trigger,
        )

    def request_shutdown(self) -> None:
        """Wake the session thread so it observes cancellation promptly."""
        self._bridge.inject_shutdown()

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def is_finished(self) -> bool:
        return self._state is SessionState.STOPPED and not self.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the session to reach STOPPED. Returns True if it did."""
        if not self._finished.wait(timeout):
            return False
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        return self.is_finished()

    def _run(self) -> None:
        try:
            self._loop()
        except WatchSourceError as exc:
            self._report(exc)
        except Exception as exc:
            logger.exception("Watch session for %s crashed", self._file_path)
            self._report(AppError("Watch session crashed", underlying=exc))
        finally:
            self._state = SessionState.STOPPING
            self._teardown()
            logger.info("Closing seedshotter for %s", self._file_path)

    def _loop(self) -> None:
        assert self._events is not None and self.target is not None
        while True:
            try:
                event = self._events.get(timeout=self._options.liveness_interval)
            except queue.Empty:
                if self._token.should_cancel():
                    return
                if not self._bridge.is_alive():
                    raise WatchSourceError(
                        f"Event source for {self.target.directory_path} stopped unexpectedly"
                    )
                continue

            if isinstance(event, ShutdownRequested):
                logger.debug("Shutdown event received")
                return
            if self._token.should_cancel():
                return

            if self.target.matches(event.path):
                self._scan()
            else:
                self._stats.events_discarded += 1
                logger.debug("Ignoring change to %s", event.path)
            self._stats.events_handled += 1

    def _scan(self) -> None:
        assert self._reader is not None
        try:
            lines = list(self._reader.poll_new_lines())
        except TailReadError as exc:
            self._stats.read_errors += 1
            self._report(exc)
            return

        self._stats.lines_read += len(lines)
        for line in matching_lines(lines, self._options.trigger):
            self._stats.triggers_matched += 1
            self._fire(line)

    def _fire(self, line: str) -> None:
        try:
            self._callback(line)
        except Exception as exc:
            self._stats.callbacks_failed += 1
            if isinstance(exc, AppError):
                self._report(exc)
            else:
                self._report(CaptureError("Trigger callback failed", underlying=exc))
            return
        self._stats.callbacks_succeeded += 1

    def _report(self, error: AppError) -> None:
        logger.error("%s", error)
        if self._on_error is None:
            return
        try:
            self._on_error(error)
        except Exception:
            logger.exception("Error reporter failed while handling %r", error)

    def _teardown(self) -> None:
        if self._reader is not None:
            self._reader.close()
        self._bridge.stop()
        self._state = SessionState.STOPPED
        self._finished.set()
