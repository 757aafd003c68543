from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

from tilemerge.api.models import MoveAccepted, MoveRecord, TurnResult
from tilemerge.core.grid import Direction
from tilemerge.session import GameSession

ActionName = Literal["move", "ack", "turn"]
ACTION_NAMES: frozenset[str] = frozenset({"move", "ack", "turn"})


@dataclass(frozen=True, slots=True)
class ActionResult:
    """Outcome of one dispatched action.

    - `move`: set for `move` and `turn`; `accepted=False` when the input was dropped.
    - `turn`: set once a turn is fully resolved (`ack`, `turn`); None when nothing was resolved.
    """

    move: MoveAccepted | None = None
    turn: TurnResult | None = None


def _parse_direction(payload: dict[str, Any]) -> Direction:
    raw = payload.get("direction")
    try:
        return Direction(str(raw))
    except ValueError as e:
        allowed = ",".join(d.value for d in Direction)
        raise ValueError(f"Unknown direction: {raw} (allowed: {allowed})") from e


def _submit(session: GameSession, direction: Direction) -> MoveAccepted:
    plan = session.submit_move(direction)
    if plan is None:
        return MoveAccepted(accepted=False, phase=session.phase, direction=direction)
    records = [
        MoveRecord(tile_id=m.tile_id, from_cell=m.from_coord, to_cell=m.visible_to, merged=m.merged)
        for m in plan.moves
    ]
    return MoveAccepted(accepted=True, phase=session.phase, direction=direction, moves=records)


def dispatch_action(*, session: GameSession, action: ActionName, payload: dict[str, Any]) -> ActionResult:
    """Entry point for the HTTP adapter.

    Out-of-phase input is not an error: the session drops it and the result says so.
    `turn` is `move` immediately followed by `ack`, for clients that don't animate.
    """

    if action == "move":
        return ActionResult(move=_submit(session, _parse_direction(payload)))

    if action == "ack":
        return ActionResult(turn=session.acknowledge_presentation())

    if action == "turn":
        move = _submit(session, _parse_direction(payload))
        if not move.accepted:
            return ActionResult(move=move)
        return ActionResult(move=move, turn=session.acknowledge_presentation())

    raise ValueError(f"Unknown action: {action}")
