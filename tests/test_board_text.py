from __future__ import annotations

from tilemerge.core.board_text import board_to_text


def test_top_row_is_printed_first() -> None:
    text = board_to_text(width=3, height=2, values={(0, 0): 2, (2, 1): 16})

    assert text.splitlines() == [
        " .  . 16",
        " 2  .  .",
    ]


def test_empty_board() -> None:
    assert board_to_text(width=2, height=2, values={}) == ". .\n. ."
