from __future__ import annotations


class TileMergeError(ValueError):
    """Base class for domain errors.

    Subclasses ValueError so API adapters can keep mapping domain failures to 422.
    """


class InvalidConfiguration(TileMergeError):
    pass


class NoSpaceToSpawn(TileMergeError):
    def __init__(self, *, requested: int, available: int) -> None:
        super().__init__(f"No space to spawn {requested} tile(s); {available} free cell(s)")
        self.requested = requested
        self.available = available


class InputIgnored(TileMergeError):
    """Input arrived outside the phase that accepts it.

    Never surfaced to callers: the session drops the input and records it.
    """

    def __init__(self, *, action: str, phase: str) -> None:
        super().__init__(f"Action '{action}' ignored in phase '{phase}'")
        self.action = action
        self.phase = phase


class SessionNotFound(TileMergeError):
    pass
