"""Play a session in the terminal.

Contract
- Inputs: W/A/S/D (up/left/down/right), Q to quit.
- Drives a GameSession directly: each accepted move is "animated" by printing the
  planned moves, then acknowledged so the turn finishes.
- With `--auto N`, plays N random moves instead of reading stdin.

Usage:
    uv run python scripts/play_cli.py --seed 7
    uv run python scripts/play_cli.py --auto 200 --win-value 256

Seeded runs are deterministic.
"""

from __future__ import annotations

import argparse
import logging
import random

from tilemerge.api.models import GameConfig, LossRule, Phase
from tilemerge.core.board_text import board_to_text
from tilemerge.core.grid import Direction
from tilemerge.session import GameSession

KEYS: dict[str, Direction] = {
    "W": Direction.up,
    "A": Direction.left,
    "S": Direction.down,
    "D": Direction.right,
}


def _print_board(session: GameSession) -> None:
    print(board_to_text(width=session.config.width, height=session.config.height, values=session.values_by_coord()))
    print(f"turn={session.turn} score={session.score} phase={session.phase.value}")
    print()


def _play_one(session: GameSession, direction: Direction, *, verbose: bool) -> None:
    plan = session.submit_move(direction)
    if plan is None:
        return
    if verbose:
        for m in plan.moves:
            if m.moved or m.merged:
                suffix = f" -> merges into #{m.merge_into}" if m.merged else ""
                print(f"  #{m.tile_id} {m.from_coord} -> {m.visible_to}{suffix}")
    session.acknowledge_presentation()


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--width", type=int, default=4)
    parser.add_argument("--height", type=int, default=4)
    parser.add_argument("--win-value", type=int, default=2048)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--loss-rule", choices=[r.value for r in LossRule], default=LossRule.reference.value)
    parser.add_argument("--auto", type=int, default=0, help="play N random moves")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    config = GameConfig(
        width=args.width,
        height=args.height,
        win_value=args.win_value,
        seed=args.seed,
        loss_rule=LossRule(args.loss_rule),
    )
    session = GameSession(config=config)
    session.start()
    print(f"seed={session.seed}")
    _print_board(session)

    if args.auto:
        mover = random.Random(session.seed)
        for _ in range(args.auto):
            if session.phase != Phase.awaiting_input:
                break
            _play_one(session, mover.choice(list(Direction)), verbose=args.verbose)
        _print_board(session)
        return

    while session.phase == Phase.awaiting_input:
        key = input("Move (W/A/S/D, Q to quit): ").strip().upper()
        if key == "Q":
            print("Quitting game.")
            return
        direction = KEYS.get(key)
        if direction is None:
            print("Invalid input. Use W, A, S, D.")
            continue
        _play_one(session, direction, verbose=args.verbose)
        _print_board(session)

    print("You win!" if session.phase == Phase.won else "Game over.")


if __name__ == "__main__":
    main()
