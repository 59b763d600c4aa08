# src/errors.py

from typing import Optional

class AppError(Exception):
    """
    Base exception for the seedshotter.
    All other exceptions should inherit from this.
    """
    def __init__(self, message: str, *, underlying: Optional[Exception] = None):
        super().__init__(message)
        self.underlying = underlying

    def __str__(self):
        if self.underlying:
            return f"{self.args[0]} (caused by {self.underlying})"
        return self.args[0]


class StartupError(AppError):
    """
    Raised when a watch session cannot start: the log file is missing,
    cannot be opened, or its directory cannot be watched.
    """


class TailReadError(AppError):
    """
    Raised when reading or stat-ing the watched log file fails mid-session.
    The session reports it and keeps watching.
    """


class CaptureError(AppError):
    """
    Raised when capturing or saving the screenshot fails.
    """


class WatchSourceError(AppError):
    """
    Raised when the filesystem event source dies underneath a running session.
    """


class SessionAlreadyRunningError(AppError):
    """
    Raised when a session is started while another one is still active.
    """


class SettingsError(AppError):
    """
    Raised when the persisted settings cannot be written.
    """
