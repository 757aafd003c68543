"""Slide/merge resolution for one directional input.

Pure: works on a local occupancy snapshot and returns a `TurnPlan`; tiles and cells
are only mutated later, when the session applies the plan.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from tilemerge.core.grid import Coord, Direction, Grid, step
from tilemerge.core.tiles import Tile


@dataclass(frozen=True, slots=True)
class PlannedMove:
    tile_id: int
    value: int
    from_coord: Coord
    # Last empty cell reached; equals from_coord when the tile did not slide.
    to_coord: Coord
    merge_into: int | None = None
    merge_coord: Coord | None = None

    @property
    def merged(self) -> bool:
        return self.merge_into is not None

    @property
    def moved(self) -> bool:
        return self.to_coord != self.from_coord

    @property
    def visible_to(self) -> Coord:
        """Where the tile ends up on screen: the partner's cell for a merge."""

        return self.merge_coord if self.merge_coord is not None else self.to_coord


@dataclass(frozen=True, slots=True)
class TurnPlan:
    direction: Direction
    # Processing order, furthest-along tiles first.
    moves: tuple[PlannedMove, ...]

    @property
    def changed(self) -> bool:
        return any(m.moved or m.merged for m in self.moves)

    def merges(self) -> list[PlannedMove]:
        return [m for m in self.moves if m.merged]


def processing_order(tiles: Sequence[Tile], direction: Direction) -> list[Tile]:
    ordered = sorted(tiles, key=lambda t: (t.coord[0], t.coord[1]))
    if direction.is_positive:
        ordered.reverse()
    return ordered


def resolve_move(*, tiles: Sequence[Tile], grid: Grid, direction: Direction) -> TurnPlan:
    occupied: dict[Coord, Tile] = {t.coord: t for t in tiles}
    resolved: dict[int, Coord] = {}
    # Tiles already chosen as a merge target this turn.
    absorbing: set[int] = set()
    moves: list[PlannedMove] = []

    for tile in processing_order(tiles, direction):
        start = tile.coord
        current = start
        partner: Tile | None = None

        del occupied[start]
        while True:
            ahead = step(current, direction)
            if grid.cell_at(ahead) is None:
                break

            other = occupied.get(ahead)
            if other is None:
                current = ahead
                continue

            if other.value == tile.value and other.tile_id not in absorbing:
                partner = other
            break

        if partner is None:
            occupied[current] = tile
            resolved[tile.tile_id] = current
            moves.append(PlannedMove(tile_id=tile.tile_id, value=tile.value, from_coord=start, to_coord=current))
            continue

        # The mover vacates its cell; its partner keeps the one it already resolved to.
        absorbing.add(partner.tile_id)
        moves.append(
            PlannedMove(
                tile_id=tile.tile_id,
                value=tile.value,
                from_coord=start,
                to_coord=current,
                merge_into=partner.tile_id,
                merge_coord=resolved.get(partner.tile_id, partner.coord),
            )
        )

    return TurnPlan(direction=direction, moves=tuple(moves))


def has_legal_move(*, tiles: Sequence[Tile], grid: Grid) -> bool:
    return any(resolve_move(tiles=tiles, grid=grid, direction=d).changed for d in Direction)
