from __future__ import annotations

from uuid import uuid4

import pytest

from tilemerge.api.models import MoveAccepted, MoveRecord, Phase, SpawnRecord, TurnResult
from tilemerge.core.grid import Direction
from tilemerge.websocket_hub import GameWebSocketHub


class _FakeSocket:
    def __init__(self, *, broken: bool = False) -> None:
        self.accepted = False
        self.sent: list[dict] = []
        self.broken = broken

    async def accept(self) -> None:
        self.accepted = True

    async def send_json(self, payload: dict) -> None:
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(payload)


def _move(*, accepted: bool = True) -> MoveAccepted:
    return MoveAccepted(
        accepted=accepted,
        phase=Phase.resolving_move if accepted else Phase.won,
        direction=Direction.left,
        moves=[MoveRecord(tile_id=2, from_cell=(1, 0), to_cell=(0, 0), merged=True)] if accepted else [],
    )


def _turn() -> TurnResult:
    return TurnResult(
        turn=3,
        direction=Direction.left,
        spawned=[SpawnRecord(tile_id=5, cell=(0, 0), value=4, source="merge")],
        phase=Phase.awaiting_input,
        score_delta=4,
        score=12,
    )


@pytest.mark.asyncio
async def test_turn_resolved_reaches_only_that_session() -> None:
    hub = GameWebSocketHub()
    g1, g2 = uuid4(), uuid4()
    a, b = _FakeSocket(), _FakeSocket()
    await hub.connect(g1, a)  # type: ignore[arg-type]
    await hub.connect(g2, b)  # type: ignore[arg-type]

    delivered = await hub.turn_resolved(g1, _turn())

    assert delivered == 1
    assert a.accepted
    [msg] = a.sent
    assert msg["type"] == "turn_resolved"
    assert msg["game_id"] == str(g1)
    assert msg["score"] == 12
    assert msg["spawned"][0]["source"] == "merge"
    assert b.sent == []


@pytest.mark.asyncio
async def test_move_started_carries_moves_and_skips_ignored_input() -> None:
    hub = GameWebSocketHub()
    gid = uuid4()
    ws = _FakeSocket()
    await hub.connect(gid, ws)  # type: ignore[arg-type]

    assert await hub.move_started(gid, _move(accepted=False)) == 0
    assert await hub.move_started(gid, _move()) == 1

    [msg] = ws.sent
    assert msg["type"] == "move_started"
    assert msg["direction"] == "left"
    assert msg["moves"][0]["merged"] is True


@pytest.mark.asyncio
async def test_dead_sockets_are_dropped() -> None:
    hub = GameWebSocketHub()
    gid = uuid4()
    good, dead = _FakeSocket(), _FakeSocket(broken=True)
    await hub.connect(gid, good)  # type: ignore[arg-type]
    await hub.connect(gid, dead)  # type: ignore[arg-type]

    assert await hub.turn_resolved(gid, _turn()) == 1
    assert await hub.turn_resolved(gid, _turn()) == 1
    assert len(good.sent) == 2


@pytest.mark.asyncio
async def test_connect_counts_watchers_and_disconnect_forgets_them() -> None:
    hub = GameWebSocketHub()
    gid = uuid4()
    first, second = _FakeSocket(), _FakeSocket()
    assert await hub.connect(gid, first) == 1  # type: ignore[arg-type]
    assert await hub.connect(gid, second) == 2  # type: ignore[arg-type]

    await hub.disconnect(gid, first)  # type: ignore[arg-type]
    await hub.disconnect(gid, second)  # type: ignore[arg-type]

    assert await hub.turn_resolved(gid, _turn()) == 0
