import pytest
from fastapi.testclient import TestClient

from pulsebrew.config import BrewConfig
from pulsebrew.main import create_app
from pulsebrew.session import BrewSession

from .conftest import ManualScheduler


@pytest.fixture
def client(settings):
    session = BrewSession(
        settings=settings,
        config=BrewConfig(bloom_duration=30, pulse_interval=5),
        scheduler=ManualScheduler(),
    )
    app = create_app(settings=settings, session=session)
    with TestClient(app) as test_client:
        yield test_client


def test_healthcheck_reports_phase(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "phase": "idle"}


def test_phase_lexicon(client):
    body = client.get("/phases").json()
    assert body["idle"] == {"label": "READY", "hint": "Begin your ritual"}
    assert body["pour"]["label"] == "POUR"
    assert set(body) == {"idle", "bloom", "pour", "wait"}


def test_start_stop_reset_cycle(client):
    started = client.post("/brew/start").json()
    assert (started["phase"], started["phase_time_remaining"], started["is_active"]) == ("bloom", 30, True)

    stopped = client.post("/brew/stop").json()
    assert (stopped["phase"], stopped["is_active"]) == ("bloom", False)

    reset = client.post("/brew/reset").json()
    assert (reset["phase"], reset["phase_time_remaining"], reset["total_time"], reset["is_active"]) == (
        "idle", 30, 0, False,
    )


def test_update_config_while_idle(client):
    payload = {"bloom_duration": 45, "pulse_interval": 7, "is_muted": False, "coffee_weight": 18, "water_ratio": 16}
    body = client.put("/config", json=payload).json()

    assert body["phase_time_remaining"] == 45
    assert body["display_time"] == 45
    assert body["recipe"]["total_water"] == 288
    assert client.get("/config").json()["pulse_interval"] == 7


@pytest.mark.parametrize(
    "payload",
    [
        {"bloom_duration": 0},
        {"pulse_interval": -1},
        {"coffee_weight": 0},
        {"water_ratio": "lots"},
    ],
)
def test_invalid_config_is_rejected(client, payload):
    response = client.put("/config", json=payload)
    assert response.status_code == 422
    assert client.get("/config").json()["bloom_duration"] == 30


def test_mute_toggle_and_explicit_set(client):
    assert client.post("/brew/mute", json={}).json() == {"is_muted": True}
    assert client.post("/brew/mute", json={}).json() == {"is_muted": False}
    assert client.post("/brew/mute", json={"muted": True}).json() == {"is_muted": True}
    assert client.get("/config").json()["is_muted"] is True


def test_visibility_report_reacquires_held_lock(client):
    assert client.post("/wake-lock/visibility", json={"visible": True}).json()["re_requested"] is False
    client.post("/brew/start")
    assert client.post("/wake-lock/visibility", json={"visible": True}).json()["re_requested"] is True


def test_ui_socket_streams_start_directives(client):
    with client.websocket_connect("/ws/ui") as ws:
        initial = ws.receive_json()
        assert initial["type"] == "state"
        assert initial["phase"] == "idle"

        client.post("/brew/start")
        events = [ws.receive_json() for _ in range(4)]

    assert [event["type"] for event in events] == ["audio", "wake_lock", "haptic", "state"]
    assert events[0]["data"] == {"action": "initialize"}
    assert events[1]["data"] == {"action": "request"}
    assert events[2]["data"] == {"pattern": [50]}
    assert events[3]["phase"] == "bloom"
