from __future__ import annotations

import logging
from uuid import UUID

from tilemerge.api.models import GameConfig
from tilemerge.errors import SessionNotFound
from tilemerge.session import GameSession

logger = logging.getLogger(__name__)


class SessionStore:
    """In-process registry of live sessions keyed by game id.

    Nothing is persisted: sessions live as long as the process does.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, GameSession] = {}

    def create_game(self, *, config: GameConfig) -> GameSession:
        """Create a session and run it through level generation and the first spawn.

        Raises InvalidConfiguration before anything is registered.
        """

        session = GameSession(config=config)
        session.start()
        self._sessions[session.game_id] = session
        logger.info("Created session %s (phase=%s)", session.game_id, session.phase.value)
        return session

    def add_game(self, session: GameSession) -> GameSession:
        """Register an already-built session (e.g. one restored from a known board)."""

        self._sessions[session.game_id] = session
        return session

    def get_game(self, *, game_id: UUID) -> GameSession | None:
        return self._sessions.get(game_id)

    def require_game(self, *, game_id: UUID) -> GameSession:
        session = self.get_game(game_id=game_id)
        if session is None:
            raise SessionNotFound("Game not found")
        return session

    def list_games(self) -> list[GameSession]:
        out = list(self._sessions.values())
        out.sort(key=lambda s: s.created_at, reverse=True)
        return out


_STORE: SessionStore | None = None


def get_store() -> SessionStore:
    global _STORE
    if _STORE is None:
        _STORE = SessionStore()
    return _STORE
