from __future__ import annotations

import pytest
from statemachine.exceptions import TransitionNotAllowed

from tilemerge.api.models import Phase
from tilemerge.fsm import GameFSM


def _fsm(start: Phase = Phase.generating_level) -> GameFSM:
    # The FSM only keeps a handle on its session; transitions don't touch it.
    return GameFSM(object(), start_phase=start)  # type: ignore[arg-type]


def test_full_turn_cycle() -> None:
    fsm = _fsm()
    assert fsm.phase == Phase.generating_level

    fsm.send("level_generated")
    assert fsm.phase == Phase.spawning_tiles

    fsm.send("spawn_settled")
    assert fsm.phase == Phase.awaiting_input

    fsm.send("move_received")
    assert fsm.phase == Phase.resolving_move

    fsm.send("presentation_done")
    assert fsm.phase == Phase.spawning_tiles


@pytest.mark.parametrize(("event", "phase"), [("reach_win", Phase.won), ("run_out_of_space", Phase.lost)])
def test_terminal_phases_are_final(event: str, phase: Phase) -> None:
    fsm = _fsm(Phase.spawning_tiles)
    fsm.send(event)

    assert fsm.phase == phase
    assert fsm.current_state.final

    with pytest.raises(TransitionNotAllowed):
        fsm.send("move_received")


def test_moves_only_accepted_while_awaiting_input() -> None:
    for start in (Phase.generating_level, Phase.spawning_tiles, Phase.resolving_move):
        with pytest.raises(TransitionNotAllowed):
            _fsm(start).send("move_received")


def test_presentation_done_requires_resolving_move() -> None:
    with pytest.raises(TransitionNotAllowed):
        _fsm(Phase.awaiting_input).send("presentation_done")


def test_start_phase_restores_state() -> None:
    fsm = _fsm(Phase.awaiting_input)
    assert fsm.current_state == fsm.awaiting_input
