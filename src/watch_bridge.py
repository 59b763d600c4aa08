"""Bridge between filesystem notifications and the session event queue."""

from __future__ import annotations

import logging
import os
import queue
import threading
from pathlib import Path
from typing import Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from errors import StartupError
from events import ChangeEvent, PathChanged, ShutdownRequested
from models import WatchStrategy, WatchTarget

logger = logging.getLogger(__name__)

# Notifications that never change file contents.
_IGNORED_EVENT_TYPES = frozenset({"opened", "closed_no_write"})


class _QueueingEventHandler(FileSystemEventHandler):
    """Turns every watchdog event into one PathChanged per path it names."""

    def __init__(self, events: "queue.Queue[ChangeEvent]"):
        super().__init__()
        self._events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.event_type in _IGNORED_EVENT_TYPES:
            return
        self._events.put(PathChanged(Path(os.fsdecode(event.src_path))))
        dest_path = getattr(event, "dest_path", None)
        if dest_path:
            self._events.put(PathChanged(Path(os.fsdecode(dest_path))))


class WatchBridge:
    """
    Watches the directory holding the log file and feeds a queue of
    ChangeEvents. The strategy is picked by configuration: the platform's
    native observer, or a timed poller for filesystems where native
    notification is unreliable.
    """

    def __init__(
        self,
        strategy: WatchStrategy = WatchStrategy.NATIVE,
        poll_interval: float = 0.05,
        observer_factory: Optional[Callable[[], BaseObserver]] = None,
    ):
        self.strategy = WatchStrategy(strategy)
        self.poll_interval = poll_interval
        self._observer_factory = observer_factory or self._default_observer_factory
        self._events: "queue.Queue[ChangeEvent]" = queue.Queue()
        self._observer: Optional[BaseObserver] = None
        self._lock = threading.Lock()

    @property
    def events(self) -> "queue.Queue[ChangeEvent]":
        return self._events

    def start(self, target: WatchTarget) -> "queue.Queue[ChangeEvent]":
        """
        Begin watching ``target.directory_path`` (non-recursive).
        Raises StartupError if the watch cannot be established.
        """
        directory = target.directory_path
        if not directory.is_dir():
            raise StartupError(f"Cannot watch missing directory: {directory}")

        with self._lock:
            if self._observer is not None:
                raise StartupError("Watch bridge has already been started.")
            observer = self._observer_factory()
            try:
                observer.schedule(
                    _QueueingEventHandler(self._events), str(directory), recursive=False
                )
                observer.start()
            except OSError as exc:
                raise StartupError(f"Could not watch directory {directory}", underlying=exc) from exc
            self._observer = observer

        logger.info("Watching %s (%s strategy)", directory, self.strategy.value)
        return self._events

    def inject_shutdown(self) -> None:
        """Enqueue a ShutdownRequested event to wake a blocked consumer."""
        self._events.put(ShutdownRequested())

    def is_alive(self) -> bool:
        observer = self._observer
        return observer is not None and observer.is_alive()

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        if observer.is_alive() and observer is not threading.current_thread():
            observer.join(timeout=timeout)
        logger.info("Stopped watching (%s strategy)", self.strategy.value)

    def _default_observer_factory(self) -> BaseObserver:
        if self.strategy is WatchStrategy.POLLING:
            return PollingObserver(timeout=self.poll_interval)
        return Observer()
