from __future__ import annotations

import pytest

from tilemerge.core.grid import Grid
from tilemerge.core.tiles import TileIds, create_tile


def _three_tiles(values: tuple[int, int, int] = (2, 2, 2)):
    grid = Grid.generate(width=3, height=1)
    ids = TileIds()
    return [create_tile(ids=ids, value=v, cell=grid.index[(x, 0)]) for x, v in enumerate(values)]


def test_ids_are_unique_and_increasing() -> None:
    a, b, c = _three_tiles()
    assert a.tile_id < b.tile_id < c.tile_id


def test_bind_merge_marks_target() -> None:
    a, b, _ = _three_tiles()

    b.bind_merge(a)

    assert b.merge_target is a
    assert a.merging is True
    assert not a.can_merge(2)


def test_target_cannot_be_merged_into_twice() -> None:
    a, b, c = _three_tiles()
    b.bind_merge(a)

    with pytest.raises(ValueError):
        c.bind_merge(a)


def test_no_merge_chains() -> None:
    a, b, c = _three_tiles()
    b.bind_merge(a)

    # b already merges into a; nothing may merge into b this turn.
    with pytest.raises(ValueError):
        c.bind_merge(b)


def test_bind_merge_requires_equal_values() -> None:
    a, b, _ = _three_tiles((2, 4, 8))

    with pytest.raises(ValueError):
        b.bind_merge(a)


def test_clear_merge_resets_link() -> None:
    a, b, _ = _three_tiles()
    b.bind_merge(a)

    a.clear_merge()
    b.clear_merge()

    assert a.can_merge(2)
    assert b.merge_target is None
