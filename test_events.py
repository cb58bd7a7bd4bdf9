#!/usr/bin/env python3
"""
Tests for the game state event handlers.
"""

import itertools
from datetime import datetime, timedelta, timezone

import pytest

from squad_log_tools.log.errors import SessionNotFoundError, UnknownPlayerError
from squad_log_tools.log.events import (
    game_ended, player_damaged, player_down, player_revived, player_spawned,
    player_state_changed, starting_game,
)
from squad_log_tools.log.models import PlayerState
from squad_log_tools.log.state_file import initial_state

T0 = datetime(2021, 1, 1, tzinfo=timezone.utc)


def at(seconds: int) -> datetime:
    return T0 + timedelta(seconds=seconds)


@pytest.fixture
def game_with_players():
    """A game on Narva with Alice and Bob spawned and registered."""
    state = starting_game(at(0), "Narva", initial_state())
    for name in ("Alice", "Bob"):
        state = player_state_changed(at(1), name, state)
        state = player_spawned(at(2), name, "Rifleman", state)
    return state


def test_starting_game_creates_empty_current_game():
    state = starting_game(at(0), "Narva", initial_state())
    assert len(state.games) == 1
    game = state.current_game()
    assert game.map == "Narva"
    assert game.players == {}
    assert game.start_time == at(0)
    assert state.current_game_start_time == at(0)


def test_starting_game_appends_after_existing_games():
    state = starting_game(at(0), "Narva", initial_state())
    state = starting_game(at(100), "Yehorivka", state)
    assert [g.map for g in state.games] == ["Narva", "Yehorivka"]
    assert state.current_game().map == "Yehorivka"


def test_first_spawn_creates_inactive_player():
    state = starting_game(at(0), "Narva", initial_state())
    state = player_spawned(at(1), "Alice", "Rifleman", state)
    alice = state.current_game().players["Alice"]
    assert alice.state == PlayerState.INACTIVE
    assert alice.hitpoints == 100.0
    assert alice.classes_played == frozenset({"Rifleman"})
    assert alice.last_spawn_time == at(1)
    assert alice.players_killed == {}
    assert alice.players_revived == {}


def test_second_spawn_marks_player_playing():
    state = starting_game(at(0), "Narva", initial_state())
    state = player_spawned(at(1), "Alice", "Rifleman", state)
    state = player_spawned(at(2), "Alice", "Rifleman", state)
    alice = state.current_game().players["Alice"]
    assert alice.state == PlayerState.PLAYING
    assert alice.hitpoints == 100.0
    assert alice.last_spawn_time == at(2)


def test_respawn_resets_hitpoints_and_keeps_counters(game_with_players):
    state = player_damaged(at(3), "Bob", 40.0, "Alice", "Rifle", game_with_players)
    state = player_down(at(4), "Alice", state)
    state = player_spawned(at(5), "Alice", "Medic", state)
    alice = state.current_game().players["Alice"]
    assert alice.hitpoints == 100.0
    assert alice.last_damaged is None
    assert alice.players_killed_by == {"Bob": 1}
    assert alice.last_down_time == at(4)
    assert alice.classes_played == frozenset({"Rifleman", "Medic"})


def test_class_set_is_union_regardless_of_order():
    classes = ["Rifleman", "Medic", "Rifleman", "Sniper"]
    for order in itertools.permutations(classes):
        state = starting_game(at(0), "Narva", initial_state())
        for seconds, player_class in enumerate(order, 1):
            state = player_spawned(at(seconds), "Alice", player_class, state)
        assert state.current_game().players["Alice"].classes_played == frozenset(classes)


def test_spawn_without_game_raises():
    with pytest.raises(SessionNotFoundError):
        player_spawned(at(1), "Alice", "Rifleman", initial_state())


def test_damage_reduces_hitpoints_and_records_shooter(game_with_players):
    state = player_damaged(at(3), "Bob", 25.0, "Alice", "Rifle", game_with_players)
    alice = state.current_game().players["Alice"]
    assert alice.hitpoints == 75.0
    assert alice.last_damaged == "Bob"


def test_damage_resolves_tagged_name(game_with_players):
    state = player_damaged(at(3), "[CLAN] Bob", 30.0, "[TAG] Alice", "Rifle", game_with_players)
    assert state.current_game().players["Alice"].hitpoints == 70.0
    assert ("Alice", "[TAG] Alice") in state.player_names


def test_damage_is_not_clamped_at_zero(game_with_players):
    state = player_damaged(at(3), "Bob", 80.0, "Alice", "Rifle", game_with_players)
    state = player_damaged(at(4), "Bob", 80.0, "Alice", "Rifle", state)
    assert state.current_game().players["Alice"].hitpoints == -60.0


def test_null_shooter_keeps_previous_attribution(game_with_players):
    state = player_damaged(at(3), "Bob", 10.0, "Alice", "Rifle", game_with_players)
    state = player_damaged(at(4), "nullptr", 10.0, "Alice", "Fall", state)
    state = player_damaged(at(5), "nullptr", 10.0, "Alice", "Fall", state)
    alice = state.current_game().players["Alice"]
    assert alice.last_damaged == "Bob"
    assert alice.hitpoints == 70.0


def test_null_shooter_without_previous_attribution(game_with_players):
    state = player_damaged(at(3), "nullptr", 10.0, "Alice", "Fall", game_with_players)
    assert state.current_game().players["Alice"].last_damaged is None


def test_damage_to_unregistered_name_raises(game_with_players):
    with pytest.raises(UnknownPlayerError):
        player_damaged(at(3), "Bob", 10.0, "Mallory", "Rifle", game_with_players)


def test_damage_to_registered_name_without_spawn_raises():
    state = starting_game(at(0), "Narva", initial_state())
    state = player_state_changed(at(1), "Alice", state)
    with pytest.raises(UnknownPlayerError):
        player_damaged(at(2), "Bob", 10.0, "Alice", "Rifle", state)


def test_down_credits_last_damager(game_with_players):
    state = player_damaged(at(3), "Bob", 25.0, "Alice", "Rifle", game_with_players)
    state = player_down(at(4), "Alice", state)
    players = state.current_game().players
    assert players["Bob"].players_killed == {"Alice": 1}
    assert players["Alice"].players_killed_by == {"Bob": 1}
    assert players["Alice"].last_damaged is None
    assert players["Alice"].last_down_time == at(4)


def test_down_without_damager_records_no_kill(game_with_players):
    state = player_down(at(3), "Alice", game_with_players)
    players = state.current_game().players
    assert players["Alice"].players_killed_by == {}
    assert players["Bob"].players_killed == {}
    assert players["Alice"].last_down_time == at(3)


def test_down_with_unknown_killer_raises(game_with_players):
    state = player_damaged(at(3), "Mallory", 25.0, "Alice", "Rifle", game_with_players)
    with pytest.raises(UnknownPlayerError):
        player_down(at(4), "Alice", state)


def test_self_kill_counts_both_sides(game_with_players):
    state = player_damaged(at(3), "Alice", 25.0, "Alice", "Grenade", game_with_players)
    state = player_down(at(4), "Alice", state)
    alice = state.current_game().players["Alice"]
    assert alice.players_killed == {"Alice": 1}
    assert alice.players_killed_by == {"Alice": 1}


def test_revive_sets_hitpoints_and_counters(game_with_players):
    state = player_damaged(at(3), "Bob", 100.0, "Alice", "Rifle", game_with_players)
    state = player_revived(at(4), "Bob", "Alice", state)
    players = state.current_game().players
    assert players["Alice"].hitpoints == 5.0
    assert players["Bob"].players_revived == {"Alice": 1}
    # Revived-by is keyed by the revivee's own name
    assert players["Alice"].players_revived_by == {"Alice": 1}


def test_revive_with_unknown_player_is_noop(game_with_players):
    state = player_revived(at(3), "Mallory", "Alice", game_with_players)
    assert state == game_with_players


def test_handlers_do_not_modify_previous_state(game_with_players):
    before = game_with_players.current_game().players["Alice"]
    player_damaged(at(3), "Bob", 25.0, "Alice", "Rifle", game_with_players)
    player_revived(at(4), "Bob", "Alice", game_with_players)
    assert game_with_players.current_game().players["Alice"] is before
    assert before.hitpoints == 100.0
    assert game_with_players.current_game().players["Bob"].players_revived == {}


def test_game_ended_clears_registry_and_freezes_game(game_with_players):
    state = player_damaged(at(3), "Bob", 25.0, "[TAG] Alice", "Rifle", game_with_players)
    ended = game_ended(at(10), state)
    assert ended.player_names == ()
    assert ended.games == state.games

    after = starting_game(at(20), "Yehorivka", ended)
    after = player_spawned(at(21), "Alice", "Medic", after)
    assert after.games[0] == state.games[0]
    assert after.games[1].players["Alice"].classes_played == frozenset({"Medic"})


def test_game_ended_without_games_is_noop():
    assert game_ended(at(10), initial_state()) is None
