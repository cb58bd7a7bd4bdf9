"""
Errors raised while folding a Squad server log into game state.

Lines that do not parse are skipped silently. The errors here mark data the
model assumes a well-formed log can never produce, such as damage to a player
who never spawned. Callers decide whether to abort or skip the line.
"""


class GameLogError(Exception):
    """Base class for game log processing errors."""


class SessionNotFoundError(GameLogError, LookupError):
    """No game session starts at the current-session instant."""

    def __init__(self, start_time):
        self.start_time = start_time
        super().__init__(f"No game session started at {start_time}")


class UnknownPlayerError(GameLogError, LookupError):
    """A player name could not be resolved or is not in the current game."""

    def __init__(self, name: str, reason: str = "is not a player in the current game"):
        self.name = name
        super().__init__(f"Player '{name}' {reason}")


class StateFileError(GameLogError, ValueError):
    """A state document does not have the expected structure."""
