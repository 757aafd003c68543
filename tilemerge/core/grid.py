from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tilemerge.core.tiles import Tile

Coord = tuple[int, int]


class Direction(StrEnum):
    left = "left"
    right = "right"
    down = "down"
    up = "up"

    @property
    def vector(self) -> Coord:
        return _VECTORS[self]

    @property
    def is_positive(self) -> bool:
        """True when travel goes toward the larger coordinate of its axis."""

        dx, dy = self.vector
        return dx > 0 or dy > 0


# y grows upward: "up" moves toward height - 1.
_VECTORS: dict[Direction, Coord] = {
    Direction.left: (-1, 0),
    Direction.right: (1, 0),
    Direction.down: (0, -1),
    Direction.up: (0, 1),
}


def step(coord: Coord, direction: Direction) -> Coord:
    dx, dy = direction.vector
    return (coord[0] + dx, coord[1] + dy)


@dataclass(slots=True, eq=False)
class Cell:
    """One addressable position. `occupant` is a lookup-only back-reference."""

    coord: Coord
    occupant: Tile | None = field(default=None, repr=False)


@dataclass(slots=True)
class Grid:
    width: int
    height: int
    cells: list[Cell] = field(default_factory=list)
    index: dict[Coord, Cell] = field(default_factory=dict)

    @staticmethod
    def generate(*, width: int, height: int) -> "Grid":
        """Build every cell once, column by column.

        Callers validate dimensions beforehand; see `tilemerge.session.validate_config`.
        """

        cells = [Cell(coord=(x, y)) for x in range(width) for y in range(height)]
        return Grid(width=width, height=height, cells=cells, index={c.coord: c for c in cells})

    def cell_at(self, coord: Coord) -> Cell | None:
        # Out-of-range lookups are a normal "not found", the merge engine uses them as walls.
        return self.index.get(coord)

    def is_occupied(self, cell: Cell) -> bool:
        return cell.occupant is not None

    def free_cells(self) -> list[Cell]:
        return [c for c in self.cells if c.occupant is None]

    @property
    def size(self) -> int:
        return self.width * self.height
