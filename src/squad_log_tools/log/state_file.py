"""
Conversion between GameState and its JSON document form.
"""

import logging
from dataclasses import replace
from typing import Any, Dict

from .errors import SessionNotFoundError, StateFileError
from .models import Game, GameState, Player, PlayerState, find_game_index
from .timestamps import EPOCH_DEFAULT, from_iso, to_iso

logger = logging.getLogger(__name__)


def initial_state() -> GameState:
    """State used when there is no state file to resume from."""
    return GameState(
        games=(),
        current_game_start_time=EPOCH_DEFAULT,
        last_timestamp=EPOCH_DEFAULT,
        player_names=(),
    )


def _optional_iso(value):
    return to_iso(value) if value is not None else None


def _optional_instant(value):
    return from_iso(value) if value is not None else None


def player_to_dict(player: Player) -> Dict[str, Any]:
    return {
        "name": player.name,
        "state": player.state.value,
        "hitpoints": player.hitpoints,
        "last_damaged": player.last_damaged,
        "last_spawn_time": _optional_iso(player.last_spawn_time),
        "last_down_time": _optional_iso(player.last_down_time),
        "players_killed_by": dict(player.players_killed_by),
        "players_killed": dict(player.players_killed),
        "classes_played": sorted(player.classes_played),
        "players_revived_by": dict(player.players_revived_by),
        "players_revived": dict(player.players_revived),
    }


def player_from_dict(data: Dict[str, Any]) -> Player:
    return Player(
        name=data["name"],
        state=PlayerState(data["state"]),
        hitpoints=float(data["hitpoints"]),
        last_damaged=data.get("last_damaged"),
        last_spawn_time=_optional_instant(data.get("last_spawn_time")),
        last_down_time=_optional_instant(data.get("last_down_time")),
        players_killed_by=dict(data.get("players_killed_by", {})),
        players_killed=dict(data.get("players_killed", {})),
        classes_played=frozenset(data.get("classes_played", [])),
        players_revived_by=dict(data.get("players_revived_by", {})),
        players_revived=dict(data.get("players_revived", {})),
    )


def game_to_dict(game: Game) -> Dict[str, Any]:
    return {
        "map": game.map,
        "start_time": to_iso(game.start_time),
        "players": {name: player_to_dict(player) for name, player in game.players.items()},
    }


def game_from_dict(data: Dict[str, Any]) -> Game:
    return Game(
        map=data["map"],
        start_time=from_iso(data["start_time"]),
        players={name: player_from_dict(player) for name, player in data.get("players", {}).items()},
    )


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Convert a GameState to a JSON-serializable dictionary."""
    return {
        "games": [game_to_dict(game) for game in state.games],
        "current_game_start_time": to_iso(state.current_game_start_time),
        "last_timestamp": to_iso(state.last_timestamp),
        "player_names": [[short, tagged] for short, tagged in state.player_names],
    }


def state_from_dict(data: Dict[str, Any]) -> GameState:
    """
    Rebuild a GameState from :func:`state_to_dict` output.

    Raises:
        StateFileError: If the document is missing fields or holds invalid values.
    """
    try:
        games = tuple(game_from_dict(game) for game in data["games"])
        current_game_start_time = from_iso(data["current_game_start_time"])
        state = GameState(
            games=games,
            current_game_start_time=current_game_start_time,
            last_timestamp=from_iso(data["last_timestamp"]),
            player_names=tuple(
                (short, tagged) for short, tagged in data.get("player_names", [])
            ),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StateFileError(f"Invalid state document: {e!r}") from e

    if any(later.start_time < earlier.start_time for earlier, later in zip(games, games[1:])):
        raise StateFileError("Games in the state document are not ordered by start time")

    if not games:
        return state

    try:
        current_index = find_game_index(games, current_game_start_time)
    except SessionNotFoundError:
        logger.warning(f"No saved game starts at {current_game_start_time}")
        return state

    return replace(state, current_index=current_index)
