import pytest
from fastapi.testclient import TestClient

from fireworks_engine.api import app


@pytest.fixture
def client():
    # No lifespan: the clock stays stopped and ticks come from /step
    client = TestClient(app)
    client.post("/reset")
    client.post("/presets/classic")
    yield client
    client.post("/reset")
    client.post("/presets/classic")


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_get_config_returns_engine_and_launch_values(client):
    response = client.get("/config")
    assert response.status_code == 200
    data = response.json()
    assert data["engine"]["burst_count"] == 30
    assert data["launch"] == {
        "size": 3,
        "color": "#ffffff",
        "explosion_duration": 3.0,
        "explosion_radius": 30.0,
    }


def test_post_config_updates_only_given_fields(client):
    response = client.post("/config", json={"size": 7, "color": "#00ff00"})
    assert response.status_code == 200
    launch = response.json()["launch"]
    assert launch["size"] == 7
    assert launch["color"] == "#00ff00"
    assert launch["explosion_duration"] == 3.0


@pytest.mark.parametrize(
    "payload",
    [{"size": 0}, {"color": "red"}, {"explosion_duration": 0}, {"explosion_radius": -1}],
)
def test_post_config_rejects_invalid_values(client, payload):
    assert client.post("/config", json=payload).status_code == 422


def test_launch_then_step_shows_firework(client):
    response = client.post("/launch", json={"x": 400.0, "y": 100.0})
    assert response.status_code == 200
    firework_id = response.json()["id"]

    state = client.post("/step").json()
    assert [f["id"] for f in state["fireworks"]] == [firework_id]
    assert state["fireworks"][0]["state"] == "flying"


def test_config_change_does_not_touch_launched_firework(client):
    client.post("/launch", json={"x": 400.0, "y": 100.0})
    client.post("/config", json={"size": 9, "color": "#123456"})

    state = client.post("/step").json()
    firework = state["fireworks"][0]
    assert firework["size"] == 3
    assert firework["color"] == "#ffffff"


def test_launch_at_emitter_explodes_on_next_step(client):
    engine = client.get("/config").json()["engine"]
    client.post("/launch", json={"x": engine["width"] / 2, "y": engine["height"]})

    state = client.post("/step").json()
    firework = state["fireworks"][0]
    assert firework["state"] == "exploded"
    assert len(firework["particles"]) == engine["burst_count"]


def test_step_rejects_out_of_range_ticks(client):
    assert client.post("/step", params={"ticks": 0}).status_code == 422


def test_reset_clears_fireworks(client):
    client.post("/launch", json={"x": 10.0, "y": 10.0})
    client.post("/step")
    assert client.post("/reset").json() == {"status": "reset"}
    assert client.get("/state").json()["fireworks"] == []


def test_presets_can_be_listed_and_applied(client):
    names = [p["name"] for p in client.get("/presets").json()]
    assert "grand" in names

    response = client.post("/presets/grand")
    assert response.status_code == 200
    assert client.get("/config").json()["launch"]["color"] == "#ffd700"


def test_unknown_preset_is_404(client):
    assert client.post("/presets/nope").status_code == 404


def test_websocket_sends_state_on_connect_and_after_commands(client):
    with client.websocket_connect("/ws") as websocket:
        message = websocket.receive_json()
        assert message["type"] == "state"
        assert "fireworks" in message["payload"]

        websocket.send_json({"type": "update_config", "config": {"size": 5}})
        assert websocket.receive_json()["type"] == "state"
        assert client.get("/config").json()["launch"]["size"] == 5

        websocket.send_json({"type": "launch", "x": 100.0, "y": 100.0})
        assert websocket.receive_json()["type"] == "state"

    state = client.post("/step").json()
    assert len(state["fireworks"]) == 1
    assert state["fireworks"][0]["size"] == 5


def test_websocket_reports_bad_commands(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()

        websocket.send_json({"type": "launch"})
        message = websocket.receive_json()
        assert message["type"] == "error"

        websocket.send_json({"type": "use_preset", "name": "nope"})
        assert websocket.receive_json()["type"] == "error"

        websocket.send_json({"type": "update_config", "config": {"size": -3}})
        assert websocket.receive_json()["type"] == "error"


@pytest.mark.parametrize(
    "body",
    [
        '{"explosion_radius": Infinity}',
        '{"explosion_radius": NaN}',
        '{"explosion_duration": Infinity}',
        '{"explosion_duration": -Infinity}',
    ],
)
def test_post_config_rejects_non_finite_values(client, body):
    response = client.post("/config", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 422
    assert client.get("/config").json()["launch"]["explosion_radius"] == 30.0


@pytest.mark.parametrize(
    "body",
    ['{"x": NaN, "y": 1}', '{"x": 10, "y": Infinity}'],
)
def test_launch_rejects_non_finite_target(client, body):
    response = client.post("/launch", content=body, headers={"Content-Type": "application/json"})
    assert response.status_code == 422
    assert client.post("/step").json()["fireworks"] == []


def test_step_notifies_websocket_subscribers(client):
    from fireworks_engine.api import _clock

    received = []
    _clock.on_tick(received.append)
    try:
        client.post("/step", params={"ticks": 3})
    finally:
        _clock._listeners.remove(received.append)
    assert [state["tick"] for state in received] == [1, 2, 3]


def test_websocket_rejects_non_finite_launch(client):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()
        websocket.send_text('{"type": "launch", "x": NaN, "y": 1}')
        assert websocket.receive_json()["type"] == "error"

    assert client.post("/step").json()["fireworks"] == []


@pytest.mark.parametrize("frame", ["[]", "42", "not json", '{"type": '])
def test_websocket_survives_malformed_frames(client, frame):
    with client.websocket_connect("/ws") as websocket:
        websocket.receive_json()

        websocket.send_text(frame)
        assert websocket.receive_json()["type"] == "error"

        websocket.send_json({"type": "reset"})
        assert websocket.receive_json()["type"] == "state"
