"""
Immutable game state snapshots.

Every event handler takes a GameState and returns a new one. Snapshots are
frozen dataclasses and their dict fields are never modified after
construction; updates copy the dict and build a new snapshot with
``dataclasses.replace``.
"""

from bisect import bisect_right
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from .errors import SessionNotFoundError
from .timestamps import EPOCH_DEFAULT

# (short name, resolved tagged name or None)
NameEntry = Tuple[str, Optional[str]]

SPAWN_HITPOINTS = 100.0
REVIVE_HITPOINTS = 5.0


class PlayerState(Enum):
    PLAYING = "Playing"
    INACTIVE = "Inactive"


def increment(counts: Dict[str, int], key: str, amount: int = 1) -> Dict[str, int]:
    """Return a copy of ``counts`` with ``key`` increased by ``amount``."""
    updated = dict(counts)
    updated[key] = updated.get(key, 0) + amount
    return updated


@dataclass(frozen=True)
class Player:
    """One player's record within a single game."""
    name: str
    state: PlayerState = PlayerState.INACTIVE
    hitpoints: float = SPAWN_HITPOINTS
    last_damaged: Optional[str] = None
    last_spawn_time: Optional[datetime] = None
    last_down_time: Optional[datetime] = None
    players_killed_by: Dict[str, int] = field(default_factory=dict)
    players_killed: Dict[str, int] = field(default_factory=dict)
    classes_played: FrozenSet[str] = frozenset()
    players_revived_by: Dict[str, int] = field(default_factory=dict)
    players_revived: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class Game:
    """A session on one map, keyed by its start instant."""
    map: str
    start_time: datetime
    players: Dict[str, Player] = field(default_factory=dict)

    def with_player(self, player: Player) -> 'Game':
        """Return a copy of the game with ``player`` added or replaced."""
        players = dict(self.players)
        players[player.name] = player
        return replace(self, players=players)


@dataclass(frozen=True)
class GameState:
    """
    Everything accumulated from the logs processed so far.

    Attributes:
        games: Sessions ordered by start time, earliest first.
        current_game_start_time: Start instant of the current session.
        last_timestamp: Latest log instant accepted.
        player_names: The name registry for the current session.
        current_index: Position of the current session in ``games``. Not
            persisted; re-derived from ``current_game_start_time`` when absent.
    """
    games: Tuple[Game, ...] = ()
    current_game_start_time: datetime = EPOCH_DEFAULT
    last_timestamp: datetime = EPOCH_DEFAULT
    player_names: Tuple[NameEntry, ...] = ()
    current_index: Optional[int] = field(default=None, compare=False)

    def current_game_index(self) -> int:
        """
        Locate the current session.

        Raises:
            SessionNotFoundError: If no session starts at ``current_game_start_time``.
        """
        idx = self.current_index
        if idx is not None and 0 <= idx < len(self.games) \
                and self.games[idx].start_time == self.current_game_start_time:
            return idx
        return find_game_index(self.games, self.current_game_start_time)

    def current_game(self) -> Game:
        return self.games[self.current_game_index()]

    def with_current_game(self, game: Game) -> 'GameState':
        """Return a new state with the current session replaced by ``game``."""
        idx = self.current_game_index()
        games = self.games[:idx] + (game,) + self.games[idx + 1:]
        return replace(self, games=games, current_index=idx)


def find_game_index(games: Tuple[Game, ...], start_time: datetime) -> int:
    """
    Binary search for the game that started at ``start_time``.

    When several games share the instant the latest one wins.

    Raises:
        SessionNotFoundError: If no game started at that instant.
    """
    start_times = [game.start_time for game in games]
    idx = bisect_right(start_times, start_time) - 1
    if idx < 0 or start_times[idx] != start_time:
        raise SessionNotFoundError(start_time)
    return idx
