import codecs
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Union

from errors import StartupError
from trigger import DEFAULT_TRIGGER

DEFAULT_OUTPUT_FILE = Path("seedshot.png")
DEFAULT_LABEL = "LC Seedshotter"


class WatchStrategy(str, Enum):
    """How the watch bridge learns about changes in the log directory."""

    NATIVE = "native"
    POLLING = "polling"


def absolute_path(path: Union[str, Path]) -> Path:
    """Absolute, normalised path without resolving symlinks."""
    return Path(os.path.normcase(os.path.abspath(os.fspath(path))))


@dataclass(frozen=True)
class WatchTarget:
    file_path: Path
    directory_path: Path

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "WatchTarget":
        file_path = absolute_path(path)
        return cls(file_path=file_path, directory_path=file_path.parent)

    def validate(self) -> None:
        """
        Ensure the log file exists and its parent directory can be watched.
        """
        if not self.file_path.is_file():
            raise StartupError(f"Log file not found: {self.file_path}")
        if not self.directory_path.is_dir():
            raise StartupError(f"Log directory not found: {self.directory_path}")

    def matches(self, path: Union[str, Path]) -> bool:
        return absolute_path(path) == self.file_path


@dataclass
class SessionOptions:
    """Runtime knobs for a watch session. Never persisted."""

    trigger: str = DEFAULT_TRIGGER
    strategy: WatchStrategy = WatchStrategy.NATIVE
    poll_interval: float = 0.05
    liveness_interval: float = 0.5
    encoding: str = "utf-8"

    def validate(self) -> None:
        if not self.trigger:
            raise ValueError("Trigger text cannot be empty.")
        if not isinstance(self.strategy, WatchStrategy):
            try:
                self.strategy = WatchStrategy(self.strategy)
            except ValueError:
                choices = ", ".join(s.value for s in WatchStrategy)
                raise ValueError(
                    f"Invalid watch strategy '{self.strategy}'. Use one of: {choices}."
                )
        if self.poll_interval <= 0:
            raise ValueError("Poll interval must be positive.")
        if self.liveness_interval <= 0:
            raise ValueError("Liveness interval must be positive.")
        if not self.encoding:
            raise ValueError("Encoding cannot be empty.")
        try:
            newline = "\n".encode(codecs.lookup(self.encoding).name)
        except LookupError:
            raise ValueError(f"Unknown text encoding '{self.encoding}'.")
        # Lines are split on the raw newline byte.
        if newline != b"\n":
            raise ValueError(
                f"Encoding '{self.encoding}' is not supported: lines must end with a single newline byte."
            )


@dataclass
class SeedshotSettings:
    """The only state that survives a restart: two paths and a label."""

    log_file: Optional[Path] = None
    output_file: Path = field(default=DEFAULT_OUTPUT_FILE)
    label: str = DEFAULT_LABEL

    def to_dict(self) -> Dict[str, Any]:
        return {
            'log_file': str(self.log_file) if self.log_file else None,
            'output_file': str(self.output_file),
            'label': self.label,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SeedshotSettings":
        log_file = data.get('log_file')
        output_file = data.get('output_file') or DEFAULT_OUTPUT_FILE
        label = data.get('label')
        return cls(
            log_file=Path(log_file) if log_file else None,
            output_file=Path(output_file),
            label=str(label) if label is not None else DEFAULT_LABEL,
        )
