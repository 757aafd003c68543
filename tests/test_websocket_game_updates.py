from __future__ import annotations

from fastapi.testclient import TestClient

from tilemerge.api.models import GameConfig
from tilemerge.session import GameSession
from tilemerge.session_store import SessionStore


def test_ws_turn_broadcast(client: TestClient) -> None:
    state = client.post("/game", json={"seed": 21}).json()
    game_id = state["game_id"]

    with client.websocket_connect(f"/ws/game/{game_id}") as ws:
        res = client.post(f"/game/{game_id}/turn", json={"direction": "left"})
        assert res.status_code == 200

        started = ws.receive_json()
        assert started["type"] == "move_started"
        assert started["game_id"] == game_id

        resolved = ws.receive_json()
        assert resolved["type"] == "turn_resolved"
        assert resolved["turn"] == 1
        assert resolved["direction"] == "left"


def test_ws_move_and_ack_are_published_separately(client: TestClient, store: SessionStore) -> None:
    session = store.add_game(GameSession.restore(config=GameConfig(seed=2), board={(0, 0): 2, (3, 0): 2}))
    game_id = str(session.game_id)

    with client.websocket_connect(f"/ws/game/{game_id}") as ws:
        client.post(f"/game/{game_id}/move", json={"direction": "left"})
        started = ws.receive_json()
        assert started["type"] == "move_started"
        assert started["accepted"] is True
        assert any(m["merged"] for m in started["moves"])

        client.post(f"/game/{game_id}/ack")
        resolved = ws.receive_json()
        assert resolved["type"] == "turn_resolved"
        assert resolved["score_delta"] == 4
