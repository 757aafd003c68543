from __future__ import annotations

import random
from collections.abc import Mapping
from dataclasses import dataclass

from tilemerge.core.grid import Coord, Grid
from tilemerge.errors import NoSpaceToSpawn

DEFAULT_SPAWN_WEIGHTS: dict[int, float] = {2: 0.8, 4: 0.2}


@dataclass(frozen=True, slots=True)
class SpawnPlacement:
    coord: Coord
    value: int


@dataclass(slots=True)
class Spawner:
    """Pick free cells and starting values for new tiles.

    Selection only: the session turns placements into tiles.
    """

    rng: random.Random
    weights: Mapping[int, float]

    def draw_value(self) -> int:
        values = list(self.weights)
        return self.rng.choices(values, weights=[self.weights[v] for v in values], k=1)[0]

    def spawn(self, *, grid: Grid, count: int) -> list[SpawnPlacement]:
        free = grid.free_cells()
        if count > len(free):
            raise NoSpaceToSpawn(requested=count, available=len(free))

        # Uniform without replacement; values drawn independently per placement.
        picked = self.rng.sample(free, count)
        return [SpawnPlacement(coord=cell.coord, value=self.draw_value()) for cell in picked]
