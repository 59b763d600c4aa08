"""Event models passed from the watch bridge to a watch session."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class PathChanged:
    """Something happened to ``path`` inside the watched directory."""

    path: Path


@dataclass(frozen=True)
class ShutdownRequested:
    """Wakes a session blocked on an empty queue so it can stop."""


ChangeEvent = Union[PathChanged, ShutdownRequested]
