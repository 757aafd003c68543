from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from fastapi.responses import PlainTextResponse

from tilemerge.actions import ACTION_NAMES, ActionName, ActionResult, dispatch_action
from tilemerge.api.deps import get_session_store
from tilemerge.api.models import (
    DirectionRequest,
    GameCreateRequest,
    GameListResponse,
    GameSnapshot,
    MoveAccepted,
    TurnResult,
)
from tilemerge.core.board_text import board_to_text
from tilemerge.errors import SessionNotFound
from tilemerge.infra.settings import config_from_request
from tilemerge.session import GameSession
from tilemerge.session_store import SessionStore
from tilemerge.websocket_hub import hub

logger = logging.getLogger(__name__)

router = APIRouter()


def _require_session(store: SessionStore, game_id: UUID) -> GameSession:
    try:
        return store.require_game(game_id=game_id)
    except SessionNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e


async def _dispatch_and_publish(
    *,
    session: GameSession,
    action: ActionName,
    payload: dict[str, Any],
) -> ActionResult:
    try:
        result = dispatch_action(session=session, action=action, payload=payload)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e

    if result.move is not None:
        await hub.move_started(session.game_id, result.move)
    if result.turn is not None:
        await hub.turn_resolved(session.game_id, result.turn)
    return result


@router.websocket("/ws/game/{game_id}")
async def game_updates_ws(websocket: WebSocket, game_id: UUID) -> None:
    watchers = await hub.connect(game_id, websocket)
    logger.info("Session %s has %d watcher(s)", game_id, watchers)

    try:
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(game_id, websocket)
    except Exception:
        await hub.disconnect(game_id, websocket)
        raise


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/game", response_model=GameSnapshot, status_code=status.HTTP_201_CREATED)
async def create_game_route(payload: GameCreateRequest, store: SessionStore = Depends(get_session_store)) -> GameSnapshot:
    try:
        session = store.create_game(config=config_from_request(payload))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e)) from e
    return session.snapshot()


@router.get("/game", response_model=GameListResponse)
async def list_games_route(store: SessionStore = Depends(get_session_store)) -> GameListResponse:
    return GameListResponse(games=[s.snapshot() for s in store.list_games()])


@router.get("/game/{game_id}", response_model=GameSnapshot)
async def get_game_route(game_id: UUID, store: SessionStore = Depends(get_session_store)) -> GameSnapshot:
    return _require_session(store, game_id).snapshot()


@router.get("/game/{game_id}/board", response_class=PlainTextResponse)
async def get_board_route(game_id: UUID, store: SessionStore = Depends(get_session_store)) -> str:
    session = _require_session(store, game_id)
    return board_to_text(width=session.config.width, height=session.config.height, values=session.values_by_coord())


@router.post("/game/{game_id}/move", response_model=MoveAccepted)
async def move_route(
    game_id: UUID,
    payload: DirectionRequest,
    store: SessionStore = Depends(get_session_store),
) -> MoveAccepted:
    session = _require_session(store, game_id)
    result = await _dispatch_and_publish(session=session, action="move", payload={"direction": payload.direction.value})
    if result.move is None:
        raise RuntimeError("move action produced no move result")
    return result.move


@router.post("/game/{game_id}/ack", response_model=TurnResult | None)
async def ack_route(game_id: UUID, store: SessionStore = Depends(get_session_store)) -> TurnResult | None:
    """Presentation finished animating the pending move; resolve the rest of the turn."""

    session = _require_session(store, game_id)
    result = await _dispatch_and_publish(session=session, action="ack", payload={})
    return result.turn


@router.post("/game/{game_id}/turn", response_model=TurnResult | None)
async def turn_route(
    game_id: UUID,
    payload: DirectionRequest,
    store: SessionStore = Depends(get_session_store),
) -> TurnResult | None:
    session = _require_session(store, game_id)
    result = await _dispatch_and_publish(session=session, action="turn", payload={"direction": payload.direction.value})
    return result.turn


@router.post("/games/{game_id}/actions/{action}")
async def generic_action_route(
    game_id: UUID,
    action: str,
    body: dict[str, Any],
    store: SessionStore = Depends(get_session_store),
) -> dict[str, Any]:
    if action not in ACTION_NAMES:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=f"Unknown action: {action}")
    act: ActionName = action  # type: ignore[assignment]

    session = _require_session(store, game_id)
    result = await _dispatch_and_publish(session=session, action=act, payload=body)
    return {
        "game_id": str(game_id),
        "action": action,
        "phase": session.phase.value,
        "move": result.move.model_dump(mode="json") if result.move is not None else None,
        "turn": result.turn.model_dump(mode="json") if result.turn is not None else None,
    }
