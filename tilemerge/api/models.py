from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from tilemerge.core.grid import Direction
from tilemerge.core.spawner import DEFAULT_SPAWN_WEIGHTS


class Phase(StrEnum):
    generating_level = "generating_level"
    spawning_tiles = "spawning_tiles"
    awaiting_input = "awaiting_input"
    resolving_move = "resolving_move"
    won = "won"
    lost = "lost"


TERMINAL_PHASES: frozenset[Phase] = frozenset({Phase.won, Phase.lost})


class LossRule(StrEnum):
    # One free cell before the spawn step counts as a loss; every move spawns.
    reference = "reference"
    # Lost only when no direction changes the board; no-op moves don't spawn.
    no_legal_moves = "no_legal_moves"


class GameConfig(BaseModel):
    width: int = 4
    height: int = 4
    win_value: int = 2048
    spawn_weights: dict[int, float] = Field(default_factory=lambda: dict(DEFAULT_SPAWN_WEIGHTS))
    initial_spawns: int = 2
    loss_rule: LossRule = LossRule.reference

    # For reproducibility/debugging. Drawn at session creation when unset.
    seed: int | None = None


class GameCreateRequest(BaseModel):
    # Unset fields fall back to process defaults (see tilemerge.infra.settings).
    width: int | None = Field(default=None, ge=1, le=16)
    height: int | None = Field(default=None, ge=1, le=16)
    win_value: int | None = None
    spawn_weights: dict[int, float] | None = None
    initial_spawns: int | None = Field(default=None, ge=1)
    loss_rule: LossRule | None = None
    seed: int | None = None


class DirectionRequest(BaseModel):
    direction: Direction


class TileView(BaseModel):
    tile_id: int
    x: int
    y: int
    value: int


class MoveRecord(BaseModel):
    tile_id: int
    from_cell: tuple[int, int]
    to_cell: tuple[int, int]
    merged: bool = False


class SpawnRecord(BaseModel):
    tile_id: int
    cell: tuple[int, int]
    value: int
    # "merge" records are the tiles created by merge application.
    source: Literal["spawn", "merge"] = "spawn"


class MoveAccepted(BaseModel):
    accepted: bool
    phase: Phase
    direction: Direction | None = None
    moves: list[MoveRecord] = Field(default_factory=list)


class TurnResult(BaseModel):
    """Everything a presentation layer needs to render one resolved turn."""

    turn: int
    direction: Direction | None = None
    moves: list[MoveRecord] = Field(default_factory=list)
    spawned: list[SpawnRecord] = Field(default_factory=list)
    terminal: Phase | None = None
    phase: Phase
    score_delta: int = 0
    score: int = 0


class GameSnapshot(BaseModel):
    game_id: UUID
    created_at: datetime
    last_updated_at: datetime

    config: GameConfig
    seed: int
    phase: Phase
    turn: int
    score: int
    tiles: list[TileView]


class GameListResponse(BaseModel):
    games: list[GameSnapshot]
