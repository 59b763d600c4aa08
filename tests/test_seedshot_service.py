import functools
import sys
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from conftest import TRIGGER, FakeBridge, append, wait_for  # noqa: E402
from errors import CaptureError, StartupError  # noqa: E402
from models import SeedshotSettings, SessionOptions, WatchStrategy  # noqa: E402
from services import SeedshotService, SettingsService  # noqa: E402
from session_manager import SessionManager  # noqa: E402
from watch_session import WatchSession  # noqa: E402


class FakeCapturer:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.saved = []

    def capture_and_save(self, output_path):
        if self.fail:
            raise CaptureError("no display")
        self.saved.append(Path(output_path))
        return Path(output_path)


class Bridges:
    def __init__(self):
        self.last = None

    def __call__(self, options):
        self.last = FakeBridge()
        return self.last


@pytest.fixture
def bridges():
    return Bridges()


@pytest.fixture
def capturer():
    return FakeCapturer()


@pytest.fixture
def settings_service(tmp_path):
    return SettingsService(settings_path=tmp_path / "settings.json")


@pytest.fixture
def service(bridges, capturer, settings_service):
    svc = SeedshotService(
        manager=SessionManager(
            session_factory=functools.partial(WatchSession, bridge_factory=bridges)
        ),
        capturer=capturer,
        settings_service=settings_service,
        default_options=SessionOptions(liveness_interval=0.05),
    )
    yield svc
    svc.stop(wait=True, timeout=2.0)


def test_start_without_any_log_file_fails(service):
    with pytest.raises(StartupError):
        service.start()
    assert service.is_running() is False


def test_trigger_captures_to_output_file(service, capturer, bridges, log_file, tmp_path):
    output = tmp_path / "shots" / "seed.png"
    captured = []

    service.start(log_file, output, on_capture=captured.append)
    append(log_file, f"foo\n{TRIGGER}\nbar\n")
    bridges.last.notify(log_file)

    assert wait_for(lambda: captured == [output])
    assert capturer.saved == [output]


def test_start_persists_the_paths_used(service, settings_service, log_file, tmp_path):
    output = tmp_path / "seed.png"
    service.start(log_file, output)

    stored = settings_service.load()
    assert stored.log_file == log_file
    assert stored.output_file == output


def test_start_falls_back_to_stored_settings(service, settings_service, log_file, tmp_path):
    output = tmp_path / "stored.png"
    settings_service.save(SeedshotSettings(log_file=log_file, output_file=output, label="x"))

    service.start()

    status = service.status()
    assert status["running"] is True
    assert Path(status["log_file"]).name == log_file.name
    assert status["output_file"] == str(output)


def test_status_when_idle(service):
    status = service.status()
    assert status["running"] is False
    assert status["state"] is None
    assert status["stats"] is None
    assert status["errors"] == []


def test_status_reports_capture_failures(bridges, settings_service, log_file, tmp_path):
    service = SeedshotService(
        manager=SessionManager(
            session_factory=functools.partial(WatchSession, bridge_factory=bridges)
        ),
        capturer=FakeCapturer(fail=True),
        settings_service=settings_service,
        default_options=SessionOptions(liveness_interval=0.05),
    )
    try:
        service.start(log_file, tmp_path / "seed.png")
        append(log_file, f"{TRIGGER}\n")
        bridges.last.notify(log_file)

        assert wait_for(lambda: len(service.status()["errors"]) == 1)
        status = service.status()
        assert status["running"] is True
        assert status["errors"][0]["kind"] == "CaptureError"
        assert "no display" in status["errors"][0]["message"]
        assert status["stats"]["callbacks_failed"] == 1
    finally:
        assert service.stop(wait=True, timeout=2.0) is True


def test_option_overrides_do_not_leak_into_defaults(service, log_file):
    service.start(log_file, trigger="Custom trigger", strategy="polling")

    status = service.status()
    assert status["trigger"] == "Custom trigger"
    assert status["strategy"] == WatchStrategy.POLLING.value

    assert service.stop(wait=True, timeout=2.0) is True
    service.start(log_file)
    assert service.status()["trigger"] == TRIGGER


def test_stop_when_idle_reports_nothing_running(service):
    assert service.stop() is True
    assert service.stop(wait=True, timeout=0.1) is True


def test_stop_and_wait(service, log_file):
    service.start(log_file)

    assert service.stop(wait=True, timeout=2.0) is True
    assert service.is_running() is False
    assert service.status()["state"] == "stopped"


def test_update_settings_changes_only_given_fields(service, settings_service, tmp_path):
    settings_service.save(
        SeedshotSettings(log_file=tmp_path / "a.log", output_file=tmp_path / "a.png", label="A")
    )

    updated = service.update_settings(label="B")

    assert updated.label == "B"
    assert updated.log_file == tmp_path / "a.log"
    assert settings_service.load() == updated

    cleared = service.update_settings(log_file=None)
    assert cleared.log_file is None
    assert cleared.output_file == tmp_path / "a.png"
