"""Integration tests for the session and settings API."""

from __future__ import annotations

import functools
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from api import create_app  # noqa: E402
from conftest import TRIGGER, FakeBridge, append, wait_for  # noqa: E402
from models import SessionOptions  # noqa: E402
from services import SeedshotService, SettingsService  # noqa: E402
from session_manager import SessionManager  # noqa: E402
from watch_session import WatchSession  # noqa: E402


class RecordingCapturer:
    def __init__(self):
        self.saved = []

    def capture_and_save(self, output_path):
        self.saved.append(Path(output_path))
        return Path(output_path)


@pytest.fixture
def bridges():
    return []


@pytest.fixture
def capturer():
    return RecordingCapturer()


@pytest.fixture
def client(tmp_path, bridges, capturer):
    def bridge_factory(options):
        bridge = FakeBridge()
        bridges.append(bridge)
        return bridge

    service = SeedshotService(
        manager=SessionManager(
            session_factory=functools.partial(WatchSession, bridge_factory=bridge_factory)
        ),
        capturer=capturer,
        settings_service=SettingsService(settings_path=tmp_path / "settings.json"),
        default_options=SessionOptions(liveness_interval=0.05),
    )
    app = create_app(seedshot_service=service)
    with TestClient(app) as test_client:
        yield test_client


def test_healthcheck(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_session_lifecycle(client, bridges, capturer, log_file, tmp_path):
    response = client.get("/api/session")
    assert response.status_code == 200
    assert response.json()["running"] is False

    output = tmp_path / "seed.png"
    response = client.post(
        "/api/session", json={"log_file": str(log_file), "output_file": str(output)}
    )
    assert response.status_code == 201, response.text
    started = response.json()
    assert started["running"] is True
    assert started["state"] == "running"
    assert started["trigger"] == TRIGGER
    assert started["strategy"] == "native"

    append(log_file, f"foo\n{TRIGGER}\nbar\n")
    bridges[-1].notify(log_file)
    assert wait_for(lambda: capturer.saved == [output])

    status = client.get("/api/session").json()
    assert status["stats"]["callbacks_succeeded"] == 1
    assert status["errors"] == []

    response = client.post("/api/session/stop")
    assert response.status_code == 202
    assert response.json()["stop_requested"] is True

    assert wait_for(lambda: client.get("/api/session").json()["running"] is False)
    assert client.get("/api/session").json()["state"] == "stopped"

    # Stopping again is harmless.
    assert client.post("/api/session/stop").status_code == 202


def test_second_start_conflicts(client, log_file):
    payload = {"log_file": str(log_file)}
    assert client.post("/api/session", json=payload).status_code == 201

    response = client.post("/api/session", json=payload)

    assert response.status_code == 409
    assert "already running" in response.json()["detail"]


def test_start_with_missing_file_is_rejected(client, tmp_path):
    response = client.post("/api/session", json={"log_file": str(tmp_path / "missing.log")})

    assert response.status_code == 400
    assert "not found" in response.json()["detail"].lower()
    assert client.get("/api/session").json()["running"] is False


def test_start_without_log_file_is_rejected(client):
    response = client.post("/api/session", json={})

    assert response.status_code == 400
    assert "No log file" in response.json()["detail"]


def test_start_payload_is_validated(client, log_file):
    response = client.post(
        "/api/session", json={"log_file": str(log_file), "strategy": "inotify"}
    )
    assert response.status_code == 422

    response = client.post("/api/session", json={"log_file": str(log_file), "trigger": ""})
    assert response.status_code == 422


def test_settings_roundtrip(client, tmp_path):
    response = client.get("/api/settings")
    assert response.status_code == 200
    assert response.json() == {
        "log_file": None,
        "output_file": "seedshot.png",
        "label": "LC Seedshotter",
    }

    log_path = str(tmp_path / "Player.log")
    response = client.put("/api/settings", json={"log_file": log_path, "label": "Floor 3"})
    assert response.status_code == 200, response.text
    assert response.json()["log_file"] == log_path
    assert response.json()["label"] == "Floor 3"
    assert response.json()["output_file"] == "seedshot.png"

    assert client.get("/api/settings").json()["label"] == "Floor 3"


def test_start_uses_stored_settings(client, log_file):
    client.put("/api/settings", json={"log_file": str(log_file)})

    response = client.post("/api/session", json={})

    assert response.status_code == 201
    assert Path(response.json()["log_file"]).name == log_file.name
