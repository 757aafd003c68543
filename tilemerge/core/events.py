from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "LEVEL_GENERATED",
    "TILES_SPAWNED",
    "MOVE_RESOLVED",
    "MERGES_APPLIED",
    "INPUT_IGNORED",
    "GAME_WON",
    "GAME_LOST",
]


@dataclass(frozen=True, slots=True)
class GameEvent:
    type: EventType
    turn_id: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, turn_id: int, payload: dict[str, Any]) -> "GameEvent":
        return GameEvent(type=type, turn_id=turn_id, payload=payload, ts=datetime.now(timezone.utc))
