from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import Literal
from uuid import UUID

from fastapi import WebSocket
from pydantic import BaseModel

from tilemerge.api.models import MoveAccepted, TurnResult

logger = logging.getLogger(__name__)

HubMessageType = Literal["move_started", "turn_resolved"]


class GameWebSocketHub:
    """Pushes turn progress to presentation clients watching a session.

    Every message is a JSON object with `type` and `game_id` plus the fields of
    the model it carries:
      - `move_started`: an accepted MoveAccepted, so slides and merges can be animated.
      - `turn_resolved`: the TurnResult once the turn settled (spawns, score, terminal phase).
    """

    def __init__(self) -> None:
        self._watchers: dict[UUID, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, game_id: UUID, websocket: WebSocket) -> int:
        await websocket.accept()
        async with self._lock:
            self._watchers[game_id].add(websocket)
            return len(self._watchers[game_id])

    async def disconnect(self, game_id: UUID, websocket: WebSocket) -> None:
        async with self._lock:
            watchers = self._watchers.get(game_id)
            if not watchers:
                return
            watchers.discard(websocket)
            if not watchers:
                self._watchers.pop(game_id, None)

    async def move_started(self, game_id: UUID, move: MoveAccepted) -> int:
        """Ignored input is not animated, so nothing is sent for it."""

        if not move.accepted:
            return 0
        return await self._publish(game_id, "move_started", move)

    async def turn_resolved(self, game_id: UUID, turn: TurnResult) -> int:
        return await self._publish(game_id, "turn_resolved", turn)

    async def _publish(self, game_id: UUID, kind: HubMessageType, body: BaseModel) -> int:
        async with self._lock:
            watchers = list(self._watchers.get(game_id, set()))

        if not watchers:
            return 0

        message = {"type": kind, "game_id": str(game_id), **body.model_dump(mode="json")}
        dead: list[WebSocket] = []
        for ws in watchers:
            try:
                await ws.send_json(message)
            except Exception:
                dead.append(ws)

        if dead:
            logger.debug("Dropping %d dead watcher(s) of session %s", len(dead), game_id)
            async with self._lock:
                for ws in dead:
                    self._watchers.get(game_id, set()).discard(ws)
        return len(watchers) - len(dead)


hub = GameWebSocketHub()
