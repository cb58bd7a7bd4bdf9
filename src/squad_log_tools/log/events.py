"""
Game state event handlers.

Each handler takes the event fields and the previous GameState and returns a
new GameState. The previous snapshot is never modified.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional

from .errors import UnknownPlayerError
from .models import (
    Game, GameState, Player, PlayerState, SPAWN_HITPOINTS, REVIVE_HITPOINTS, increment
)
from .names import observe, resolve

logger = logging.getLogger(__name__)

# Shooter name the server logs for environmental damage (falls, suicide).
NULL_ENTITY = "nullptr"


def _get_player(game: Game, name: str) -> Player:
    try:
        return game.players[name]
    except KeyError:
        raise UnknownPlayerError(name) from None


def starting_game(timestamp: datetime, map_name: str, state: GameState) -> GameState:
    """A new map was loaded: append an empty game and make it current."""
    new_game = Game(map=map_name, start_time=timestamp)
    logger.info(f"Starting game on {map_name} at {timestamp}")
    return replace(
        state,
        games=state.games + (new_game,),
        current_game_start_time=timestamp,
        current_index=len(state.games),
    )


def game_ended(timestamp: datetime, state: GameState) -> Optional[GameState]:
    """
    The match moved to WaitingPostMatch.

    Returns:
        The state with an empty name registry, or None if no game was ever started.
    """
    if not state.games:
        return None
    game = state.current_game()
    logger.info(
        f"Game on {game.map} started at {game.start_time} ended at {timestamp} "
        f"with {len(game.players)} players"
    )
    return replace(state, player_names=())


def player_spawned(timestamp: datetime, name: str, player_class: str, state: GameState) -> GameState:
    """
    A player took a role in the current game.

    First sight of a player creates the record; later spawns mark them
    playing, restore their hitpoints and add the class to those played.
    """
    game = state.current_game()
    existing = game.players.get(name)

    if existing is None:
        player = Player(
            name=name,
            state=PlayerState.INACTIVE,
            hitpoints=SPAWN_HITPOINTS,
            last_spawn_time=timestamp,
            classes_played=frozenset([player_class]),
        )
    else:
        player = replace(
            existing,
            state=PlayerState.PLAYING,
            hitpoints=SPAWN_HITPOINTS,
            last_damaged=None,
            last_spawn_time=timestamp,
            classes_played=existing.classes_played | {player_class},
        )

    return state.with_current_game(game.with_player(player))


def player_damaged(timestamp: datetime, shooter: str, damage: float, target: str,
                   weapon: str, state: GameState) -> GameState:
    """
    A player took damage.

    Raises:
        UnknownPlayerError: If the target cannot be resolved to a player in
            the current game.
    """
    game = state.current_game()
    resolved_name, player_names = resolve(target, state.player_names)
    victim = _get_player(game, resolved_name)

    # Null-entity damage keeps whoever hurt the player last.
    last_damaged = victim.last_damaged if shooter == NULL_ENTITY else shooter

    victim = replace(victim, last_damaged=last_damaged, hitpoints=victim.hitpoints - damage)
    logger.debug(f"{resolved_name} took {damage} from {shooter} with {weapon}")

    return replace(
        state.with_current_game(game.with_player(victim)),
        player_names=player_names,
    )


def player_down(timestamp: datetime, target: str, state: GameState) -> GameState:
    """
    A player was downed.

    The kill goes to the player who last damaged the target, if anyone did.

    Raises:
        UnknownPlayerError: If the target or the killer cannot be resolved to
            a player in the current game.
    """
    game = state.current_game()
    resolved_name, player_names = resolve(target, state.player_names)
    downed = _get_player(game, resolved_name)

    if downed.last_damaged is None:
        downed = replace(downed, last_down_time=timestamp)
        return replace(
            state.with_current_game(game.with_player(downed)),
            player_names=player_names,
        )

    killer_name, player_names = resolve(downed.last_damaged, player_names)
    _get_player(game, killer_name)

    downed = replace(
        downed,
        last_damaged=None,
        last_down_time=timestamp,
        players_killed_by=increment(downed.players_killed_by, killer_name),
    )
    game = game.with_player(downed)

    # Re-read the killer so a self-kill keeps the downed update.
    killer = game.players[killer_name]
    killer = replace(killer, players_killed=increment(killer.players_killed, resolved_name))
    game = game.with_player(killer)

    logger.debug(f"{killer_name} downed {resolved_name}")
    return replace(state.with_current_game(game), player_names=player_names)


def player_revived(timestamp: datetime, reviver_name: str, revivee_name: str,
                   state: GameState) -> GameState:
    """
    One player revived another.

    Both names must already be player keys; otherwise nothing changes. The
    revivee's revived-by counter is keyed by the revivee's own name.
    """
    game = state.current_game()
    if reviver_name not in game.players or revivee_name not in game.players:
        logger.debug(f"Ignoring revive of {revivee_name} by {reviver_name}: unknown player")
        return state

    reviver = game.players[reviver_name]
    game = game.with_player(
        replace(reviver, players_revived=increment(reviver.players_revived, revivee_name))
    )

    revivee = game.players[revivee_name]
    game = game.with_player(
        replace(
            revivee,
            players_revived_by=increment(revivee.players_revived_by, revivee_name),
            hitpoints=REVIVE_HITPOINTS,
        )
    )

    return state.with_current_game(game)


def player_state_changed(timestamp: datetime, name: str, state: GameState) -> GameState:
    """A controller changed state: register its short name for later resolution."""
    return replace(state, player_names=observe(name, state.player_names))
