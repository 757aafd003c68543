from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID, uuid4

from tilemerge.api.models import (
    TERMINAL_PHASES,
    GameConfig,
    GameSnapshot,
    LossRule,
    MoveRecord,
    Phase,
    SpawnRecord,
    TileView,
    TurnResult,
)
from tilemerge.core.events import EventType, GameEvent
from tilemerge.core.grid import Coord, Direction, Grid
from tilemerge.core.merge_engine import PlannedMove, TurnPlan, has_legal_move, resolve_move
from tilemerge.core.spawner import Spawner
from tilemerge.core.tiles import Tile, TileIds, create_tile
from tilemerge.errors import InputIgnored, InvalidConfiguration, NoSpaceToSpawn
from tilemerge.fsm import GameFSM
from tilemerge.turn_processing.validators import ValidationContext, pipeline_for_action

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(tz=UTC)


def _is_power_of_two(n: int) -> bool:
    return n > 0 and n & (n - 1) == 0


def _merge_target(move: PlannedMove) -> int:
    if move.merge_into is None:
        raise RuntimeError(f"Tile {move.tile_id} has no merge partner.")
    return move.merge_into


def validate_config(config: GameConfig) -> None:
    if config.width <= 0 or config.height <= 0:
        raise InvalidConfiguration(f"Grid must be at least 1x1 (got {config.width}x{config.height})")
    if config.win_value < 4 or not _is_power_of_two(config.win_value):
        raise InvalidConfiguration(f"win_value must be a power of two reachable by doubling from 2 (got {config.win_value})")
    if not config.spawn_weights:
        raise InvalidConfiguration("spawn_weights must not be empty")
    for value, weight in config.spawn_weights.items():
        if not _is_power_of_two(value) or value < 2:
            raise InvalidConfiguration(f"Spawn value {value} is not a power of two >= 2")
        if weight < 0:
            raise InvalidConfiguration(f"Spawn weight for {value} must not be negative")
    if sum(config.spawn_weights.values()) <= 0:
        raise InvalidConfiguration("spawn_weights must have a positive total")
    if config.initial_spawns < 1:
        raise InvalidConfiguration("initial_spawns must be at least 1")


class GameSession:
    """One playthrough: owns the grid, the live tile list and the turn FSM.

    Driving a turn:
      1. `submit_move(direction)` -> TurnPlan to animate (or None when ignored)
      2. `acknowledge_presentation()` -> TurnResult once the animation is done

    `play_turn` does both for presentation layers that render synchronously.
    """

    def __init__(self, *, config: GameConfig, game_id: UUID | None = None) -> None:
        self.game_id = game_id or uuid4()
        self.config = config
        self.seed = config.seed if config.seed is not None else random.SystemRandom().randint(1, 2**31 - 1)
        self.rng = random.Random(self.seed)
        self.spawner = Spawner(rng=self.rng, weights=dict(config.spawn_weights))

        self.grid: Grid | None = None
        self.tiles: list[Tile] = []
        self.turn = 0
        self.score = 0
        self.history: list[GameEvent] = []
        self.created_at = _now()
        self.last_updated_at = self.created_at

        self._ids = TileIds()
        self._pending: TurnPlan | None = None
        self.fsm = GameFSM(self)

    @classmethod
    def restore(
        cls,
        *,
        config: GameConfig,
        board: Mapping[Coord, int],
        score: int = 0,
        turn: int = 1,
        game_id: UUID | None = None,
    ) -> "GameSession":
        """Build a session already awaiting input on a given board.

        Used to replay positions (tests, debugging); the initial spawn step is skipped.
        """

        validate_config(config)
        session = cls(config=config, game_id=game_id)
        session.grid = Grid.generate(width=config.width, height=config.height)
        for coord, value in sorted(board.items()):
            if value < 2 or not _is_power_of_two(value):
                raise InvalidConfiguration(f"Tile value at {coord} must be a power of two >= 2 (got {value})")
            cell = session.grid.cell_at(coord)
            if cell is None:
                raise ValueError(f"Coordinate {coord} is outside the {config.width}x{config.height} grid")
            session.tiles.append(create_tile(ids=session._ids, value=value, cell=cell))
        session.score = score
        session.turn = turn
        session.fsm = GameFSM(session, start_phase=Phase.awaiting_input)
        return session

    @property
    def phase(self) -> Phase:
        return self.fsm.phase

    @property
    def pending_plan(self) -> TurnPlan | None:
        return self._pending

    def values_by_coord(self) -> dict[Coord, int]:
        return {t.coord: t.value for t in self.tiles}

    def start(self) -> TurnResult | None:
        """GeneratingLevel -> SpawningTiles -> first settle. Fails fast on bad config."""

        if not self._accept("start"):
            return None

        validate_config(self.config)
        self.grid = Grid.generate(width=self.config.width, height=self.config.height)
        self._record("LEVEL_GENERATED", {"width": self.grid.width, "height": self.grid.height, "seed": self.seed})
        logger.info("Session %s generated %dx%d level (seed=%d)", self.game_id, self.grid.width, self.grid.height, self.seed)

        self.fsm.send("level_generated")
        spawned = self._spawn_step(count=self.config.initial_spawns)
        return self._turn_result(direction=None, moves=[], spawned=spawned, score_delta=0)

    def submit_move(self, direction: Direction) -> TurnPlan | None:
        if not self._accept("move", direction=direction.value):
            return None

        grid = self._require_grid()
        plan = resolve_move(tiles=self.tiles, grid=grid, direction=direction)

        by_id = self._tiles_by_id()
        for m in plan.merges():
            by_id[m.tile_id].bind_merge(by_id[_merge_target(m)])

        self._pending = plan
        self.fsm.send("move_received")
        self._record(
            "MOVE_RESOLVED",
            {"direction": direction.value, "changed": plan.changed, "merges": len(plan.merges())},
        )
        logger.debug("Session %s resolving %s (%d merge(s))", self.game_id, direction.value, len(plan.merges()))
        return plan

    def acknowledge_presentation(self) -> TurnResult | None:
        """The presentation layer finished showing the pending move; finish the turn."""

        if not self._accept("ack"):
            return None

        plan = self._pending
        if plan is None:
            raise RuntimeError("No move pending presentation.")
        self._pending = None

        moves, created, score_delta = self._apply_plan(plan)
        self.turn += 1
        self.score += score_delta

        self.fsm.send("presentation_done")
        count = 1
        if self.config.loss_rule == LossRule.no_legal_moves and not plan.changed:
            count = 0
        spawned = self._spawn_step(count=count)

        return self._turn_result(direction=plan.direction, moves=moves, spawned=created + spawned, score_delta=score_delta)

    def play_turn(self, direction: Direction) -> TurnResult | None:
        if self.submit_move(direction) is None:
            return None
        return self.acknowledge_presentation()

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            game_id=self.game_id,
            created_at=self.created_at,
            last_updated_at=self.last_updated_at,
            config=self.config,
            seed=self.seed,
            phase=self.phase,
            turn=self.turn,
            score=self.score,
            tiles=[
                TileView(tile_id=t.tile_id, x=t.coord[0], y=t.coord[1], value=t.value)
                for t in sorted(self.tiles, key=lambda t: t.tile_id)
            ],
        )

    def _accept(self, action: str, **details: Any) -> bool:
        ctx = ValidationContext(game_id=str(self.game_id), action=action)
        try:
            pipeline_for_action(action).validate(ctx=ctx, phase=self.phase)
        except InputIgnored as e:
            logger.debug("Session %s: %s", self.game_id, e)
            self._record("INPUT_IGNORED", {"action": action, "phase": self.phase.value, **details})
            return False
        return True

    def _apply_plan(self, plan: TurnPlan) -> tuple[list[MoveRecord], list[SpawnRecord], int]:
        grid = self._require_grid()
        by_id = self._tiles_by_id()

        moves: list[MoveRecord] = []
        for m in plan.moves:
            if not m.merged:
                by_id[m.tile_id].place(grid.index[m.to_coord])
            moves.append(MoveRecord(tile_id=m.tile_id, from_cell=m.from_coord, to_cell=m.visible_to, merged=m.merged))

        # Merge pairs are disjoint, so the order here doesn't matter.
        created: list[SpawnRecord] = []
        score_delta = 0
        for m in plan.merges():
            mover = by_id[m.tile_id]
            base = by_id[_merge_target(m)]
            cell = base.cell
            value = base.value * 2

            for t in (base, mover):
                t.detach()
                t.clear_merge()
                self.tiles.remove(t)

            tile = create_tile(ids=self._ids, value=value, cell=cell)
            self.tiles.append(tile)
            created.append(SpawnRecord(tile_id=tile.tile_id, cell=cell.coord, value=value, source="merge"))
            score_delta += value

        if created:
            self._record("MERGES_APPLIED", {"count": len(created), "values": [c.value for c in created]})
        return moves, created, score_delta

    def _spawn_step(self, *, count: int) -> list[SpawnRecord]:
        grid = self._require_grid()
        free_before = len(grid.free_cells())

        try:
            placements = self.spawner.spawn(grid=grid, count=count)
        except NoSpaceToSpawn as e:
            logger.info("Session %s: %s", self.game_id, e)
            self._finish(Phase.lost, reason="no_space")
            return []

        spawned: list[SpawnRecord] = []
        for p in placements:
            tile = create_tile(ids=self._ids, value=p.value, cell=grid.index[p.coord])
            self.tiles.append(tile)
            spawned.append(SpawnRecord(tile_id=tile.tile_id, cell=p.coord, value=p.value))
        if spawned:
            self._record("TILES_SPAWNED", {"tiles": [s.model_dump() for s in spawned]})

        if self.config.loss_rule == LossRule.reference and free_before == 1:
            # Reference policy: a board one cell from full before spawning counts as lost.
            self._finish(Phase.lost, reason="one_free_cell")
        elif any(t.value == self.config.win_value for t in self.tiles):
            self._finish(Phase.won, reason="win_value")
        elif self.config.loss_rule == LossRule.no_legal_moves and not has_legal_move(tiles=self.tiles, grid=grid):
            self._finish(Phase.lost, reason="no_legal_moves")
        else:
            self.fsm.send("spawn_settled")
        return spawned

    def _finish(self, phase: Phase, *, reason: str) -> None:
        if phase == Phase.won:
            self.fsm.send("reach_win")
            self._record("GAME_WON", {"reason": reason, "score": self.score})
        else:
            self.fsm.send("run_out_of_space")
            self._record("GAME_LOST", {"reason": reason, "score": self.score})
        logger.info("Session %s finished: %s (%s) after %d turn(s)", self.game_id, phase.value, reason, self.turn)

    def _turn_result(
        self,
        *,
        direction: Direction | None,
        moves: list[MoveRecord],
        spawned: list[SpawnRecord],
        score_delta: int,
    ) -> TurnResult:
        phase = self.phase
        return TurnResult(
            turn=self.turn,
            direction=direction,
            moves=moves,
            spawned=spawned,
            terminal=phase if phase in TERMINAL_PHASES else None,
            phase=phase,
            score_delta=score_delta,
            score=self.score,
        )

    def _record(self, type: EventType, payload: dict[str, Any]) -> None:
        self.history.append(GameEvent.now(type=type, turn_id=self.turn, payload=payload))
        self.last_updated_at = _now()

    def _require_grid(self) -> Grid:
        if self.grid is None:
            raise RuntimeError("Level not generated. Call start() first.")
        return self.grid

    def _tiles_by_id(self) -> dict[int, Tile]:
        return {t.tile_id: t for t in self.tiles}
