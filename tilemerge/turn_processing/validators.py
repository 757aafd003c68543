from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from tilemerge.api.models import TERMINAL_PHASES, Phase
from tilemerge.errors import InputIgnored


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    game_id: str
    action: str


class TurnValidator(ABC):
    """A small, composable validation unit for an incoming action."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, phase: Phase) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class PhaseValidator(TurnValidator):
    """Only accept the action in the listed phases."""

    allowed_phases: frozenset[Phase]

    def validate(self, *, ctx: ValidationContext, phase: Phase) -> None:
        if phase not in self.allowed_phases:
            raise InputIgnored(action=ctx.action, phase=phase.value)


@dataclass(frozen=True, slots=True)
class FinishedGameValidator(TurnValidator):
    """Deny everything once the game is won or lost."""

    def validate(self, *, ctx: ValidationContext, phase: Phase) -> None:
        if phase in TERMINAL_PHASES:
            raise InputIgnored(action=ctx.action, phase=phase.value)


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[TurnValidator, ...]

    def validate(self, *, ctx: ValidationContext, phase: Phase) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, phase=phase)


DEFAULT_ACTION_PIPELINES: dict[str, ValidatorPipeline] = {
    "start": ValidatorPipeline(
        validators=(PhaseValidator(allowed_phases=frozenset({Phase.generating_level})),)
    ),
    "move": ValidatorPipeline(
        validators=(
            FinishedGameValidator(),
            PhaseValidator(allowed_phases=frozenset({Phase.awaiting_input})),
        )
    ),
    "ack": ValidatorPipeline(
        validators=(
            FinishedGameValidator(),
            PhaseValidator(allowed_phases=frozenset({Phase.resolving_move})),
        )
    ),
}


def pipeline_for_action(action: str) -> ValidatorPipeline:
    pipe = DEFAULT_ACTION_PIPELINES.get(action)
    if pipe is None:
        raise ValueError(f"Unknown action: {action}")
    return pipe
