from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Iterator

from tilemerge.core.grid import Cell


@dataclass(slots=True, eq=False)
class Tile:
    """A mergeable value living on exactly one cell.

    - `merge_target`: the tile this one combines into, only set while a move resolves.
    - `merging`: set on the *target* of a merge so nothing else can merge into it this turn.
    """

    tile_id: int
    value: int
    cell: Cell
    merge_target: Tile | None = None
    merging: bool = False

    @property
    def coord(self) -> tuple[int, int]:
        return self.cell.coord

    def can_merge(self, value: int) -> bool:
        return value == self.value and not self.merging and self.merge_target is None

    def bind_merge(self, target: Tile) -> None:
        if target is self:
            raise ValueError("A tile cannot merge into itself")
        if target.merge_target is not None:
            raise ValueError(f"Tile {target.tile_id} is already merging into another tile")
        if not target.can_merge(self.value):
            raise ValueError(f"Tile {target.tile_id} cannot absorb tile {self.tile_id} this turn")
        self.merge_target = target
        target.merging = True

    def clear_merge(self) -> None:
        self.merge_target = None
        self.merging = False

    def place(self, cell: Cell) -> None:
        if self.cell.occupant is self:
            self.cell.occupant = None
        self.cell = cell
        cell.occupant = self

    def detach(self) -> None:
        if self.cell.occupant is self:
            self.cell.occupant = None


@dataclass(slots=True)
class TileIds:
    """Monotonic per-session tile id source."""

    _counter: Iterator[int] = field(default_factory=lambda: count(1))

    def next(self) -> int:
        return next(self._counter)


def create_tile(*, ids: TileIds, value: int, cell: Cell) -> Tile:
    if cell.occupant is not None:
        raise ValueError(f"Cell {cell.coord} is already occupied by tile {cell.occupant.tile_id}")
    tile = Tile(tile_id=ids.next(), value=value, cell=cell)
    cell.occupant = tile
    return tile
