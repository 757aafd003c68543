from __future__ import annotations

from collections.abc import Callable, Generator, Mapping

import pytest
from fastapi.testclient import TestClient

from tilemerge.api.deps import get_session_store
from tilemerge.core.grid import Coord, Grid
from tilemerge.core.tiles import Tile, TileIds, create_tile
from tilemerge.main import app
from tilemerge.session_store import SessionStore

BoardFactory = Callable[..., tuple[Grid, list[Tile]]]


@pytest.fixture()
def make_board() -> BoardFactory:
    """Build a grid plus live tiles from a {(x, y): value} mapping."""

    def _make(values: Mapping[Coord, int], *, width: int = 4, height: int = 4) -> tuple[Grid, list[Tile]]:
        grid = Grid.generate(width=width, height=height)
        ids = TileIds()
        tiles = [create_tile(ids=ids, value=v, cell=grid.index[c]) for c, v in sorted(values.items())]
        return grid, tiles

    return _make


def _checkerboard(width: int = 4, height: int = 4, *, skip: set[Coord] | None = None) -> dict[Coord, int]:
    skip = skip or set()
    return {
        (x, y): 2 if (x + y) % 2 == 0 else 4
        for x in range(width)
        for y in range(height)
        if (x, y) not in skip
    }


@pytest.fixture()
def checkerboard() -> Callable[..., dict[Coord, int]]:
    """A board where no two neighbours share a value."""

    return _checkerboard


@pytest.fixture()
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture()
def client(store: SessionStore) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to a fresh, test-local session store."""

    def _override() -> SessionStore:
        return store

    app.dependency_overrides[get_session_store] = _override
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
