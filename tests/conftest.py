import queue
import sys
import time
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from errors import StartupError  # noqa: E402
from events import PathChanged, ShutdownRequested  # noqa: E402

TRIGGER = "Players finished generating the new floor"


class FakeBridge:
    """Hand-driven stand-in for WatchBridge."""

    def __init__(self, fail_start: bool = False):
        self.events = queue.Queue()
        self.fail_start = fail_start
        self.alive = False
        self.started_with = None
        self.stop_calls = 0

    def start(self, target):
        if self.fail_start:
            raise StartupError(f"Could not watch directory {target.directory_path}")
        self.started_with = target
        self.alive = True
        return self.events

    def inject_shutdown(self):
        self.events.put(ShutdownRequested())

    def is_alive(self):
        return self.alive

    def stop(self):
        self.alive = False
        self.stop_calls += 1

    def notify(self, path):
        self.events.put(PathChanged(Path(path)))


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def append(path: Path, text: str) -> None:
    with path.open("a", encoding="utf-8", newline="") as f:
        f.write(text)


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "Player.log"
    path.write_text("", encoding="utf-8")
    return path


@pytest.fixture
def bridge():
    return FakeBridge()
