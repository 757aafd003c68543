from __future__ import annotations

from typing import TYPE_CHECKING

from statemachine import State, StateMachine

from tilemerge.api.models import Phase

if TYPE_CHECKING:
    from tilemerge.session import GameSession


class GameFSM(StateMachine):
    """Turn sequencing for one session.

    generating_level -> spawning_tiles -> awaiting_input -> resolving_move -> spawning_tiles ...
    until spawning_tiles settles into won or lost. The FSM only guards transitions;
    GameSession does the grid/tile work between them.
    """

    generating_level = State(Phase.generating_level.value, value=Phase.generating_level.value, initial=True)
    spawning_tiles = State(Phase.spawning_tiles.value, value=Phase.spawning_tiles.value)
    awaiting_input = State(Phase.awaiting_input.value, value=Phase.awaiting_input.value)
    resolving_move = State(Phase.resolving_move.value, value=Phase.resolving_move.value)
    won = State(Phase.won.value, value=Phase.won.value, final=True)
    lost = State(Phase.lost.value, value=Phase.lost.value, final=True)

    level_generated = generating_level.to(spawning_tiles)
    spawn_settled = spawning_tiles.to(awaiting_input)
    reach_win = spawning_tiles.to(won)
    run_out_of_space = spawning_tiles.to(lost)
    move_received = awaiting_input.to(resolving_move)
    presentation_done = resolving_move.to(spawning_tiles)

    def __init__(self, session: GameSession, start_phase: Phase = Phase.generating_level):
        self.session = session
        super().__init__(start_value=start_phase.value)

    @property
    def phase(self) -> Phase:
        return Phase(str(self.current_state.value))
