from __future__ import annotations

from collections.abc import Mapping

from tilemerge.core.grid import Coord


def _cell_width(values: Mapping[Coord, int]) -> int:
    return max([len(str(v)) for v in values.values()] + [1])


def board_to_text(*, width: int, height: int, values: Mapping[Coord, int], empty: str = ".") -> str:
    """Render a board as fixed-width rows, top row first.

    y grows upward, so the first printed line is y == height - 1.
    """

    w = _cell_width(values)
    lines: list[str] = []
    for y in range(height - 1, -1, -1):
        row = [str(values[(x, y)]).rjust(w) if (x, y) in values else empty.rjust(w) for x in range(width)]
        lines.append(" ".join(row))
    return "\n".join(lines)
