"""Cooperative cancellation shared between a watch session and its owner."""

from __future__ import annotations

import threading
from typing import Tuple


class CancellationToken:
    """Read half of a cancellation flag, polled by the session loop."""

    def __init__(self, flag: threading.Event) -> None:
        self._flag = flag

    def should_cancel(self) -> bool:
        return self._flag.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.should_cancel()})"


class Canceller:
    """Write half of a cancellation flag. Only the stop path holds one."""

    def __init__(self, flag: threading.Event) -> None:
        self._flag = flag
        self._lock = threading.Lock()

    def cancel(self) -> bool:
        """
        Request cancellation. Safe to call repeatedly and from any thread.
        Returns True only for the call that actually flipped the flag.
        """
        with self._lock:
            if self._flag.is_set():
                return False
            self._flag.set()
            return True

    @property
    def cancelled(self) -> bool:
        return self._flag.is_set()


def new_cancellation() -> Tuple[Canceller, CancellationToken]:
    """Create a fresh, not-yet-cancelled writer/reader pair."""

    flag = threading.Event()
    return Canceller(flag), CancellationToken(flag)


__all__ = ["CancellationToken", "Canceller", "new_cancellation"]
