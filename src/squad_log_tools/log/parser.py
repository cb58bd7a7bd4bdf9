"""
Squad server log parser.

Splits each line into timestamp, channel and message, drops lines older than
the last accepted instant, and hands the message to the sub-parser for its
channel. Sub-parsers return a new GameState, or None when the message matches
none of their patterns.
"""

import logging
import re
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Iterable, Optional

from .errors import GameLogError
from .events import (
    NULL_ENTITY, game_ended, player_damaged, player_down, player_revived,
    player_spawned, player_state_changed, starting_game,
)
from .models import GameState
from .timestamps import parse_timestamp

logger = logging.getLogger(__name__)

LOG_LINE_PATTERN = re.compile(
    r'^\[(?P<timestamp>\d+.\d+.\d+-\d+.\d+.\d+:\d+)\]\[.*\](?P<channel>\w+): (?P<message>.*)'
)

# LogSquad
REVIVE_PATTERN = re.compile(r'(?P<reviver>.*) has revived (?P<revivee>.*)\.$')
DAMAGE_PATTERN = re.compile(
    r'Player:(?P<target>.*) ActualDamage=(?P<damage>\d+\.\d+) from (?P<shooter>.*) caused by (?P<weapon>.*)$'
)

# LogSquadTrace
ROLE_PATTERN = re.compile(
    r'ASQPlayerController::SetCurrentRole\(\): On Server PC=(?P<name>.*) NewRole=(?P<role>.*)'
)
WOUND_PATTERN = re.compile(
    r'ASQSoldier::Wound\(\): Player:(?P<target>.*) KillingDamage=(?P<damage>\d+.\d+) '
    r'from (?P<shooter>.*) caused by (?P<weapon>.*)'
)
CHANGE_STATE_PATTERN = re.compile(
    r'ASQPlayerController::ChangeState\(\): PC=(?P<name>.*) OldState=(?P<old>.*) NewState=(?P<new>.*)'
)

# LogGameState
MATCH_STATE_PATTERN = re.compile(r'Match State Changed from (?P<old>\w+) to (?P<new>\w+)$')
POST_MATCH_STATE = "WaitingPostMatch"

# LogWorld
MAP_LOAD_PATTERN = re.compile(r'StartLoadingDestination to: /Game/Maps/(?P<map>.*)')

NULL_ROLE = "nullptr"


def parse_logsquad(timestamp: datetime, message: str, state: GameState) -> Optional[GameState]:
    """Revive and damage messages."""
    result = None

    revive = REVIVE_PATTERN.search(message)
    if revive:
        result = player_revived(timestamp, revive.group('reviver'), revive.group('revivee'), state)

    damage = DAMAGE_PATTERN.search(message)
    # Sometimes the server reports damage to nullptr. Ignore that.
    if damage and damage.group('target') != NULL_ENTITY:
        result = player_damaged(
            timestamp,
            damage.group('shooter'),
            float(damage.group('damage')),
            damage.group('target'),
            damage.group('weapon'),
            result or state,
        )

    return result


def parse_logsquadtrace(timestamp: datetime, message: str, state: GameState) -> Optional[GameState]:
    """Role assignment, wound and controller state messages."""
    result = None

    role = ROLE_PATTERN.search(message)
    if role and role.group('role') != NULL_ROLE:
        result = player_spawned(timestamp, role.group('name'), role.group('role'), state)

    wound = WOUND_PATTERN.search(message)
    if wound and wound.group('target') != NULL_ENTITY:
        result = player_down(timestamp, wound.group('target'), result or state)

    change = CHANGE_STATE_PATTERN.search(message)
    if change:
        result = player_state_changed(timestamp, change.group('name'), result or state)

    return result


def parse_game_state(timestamp: datetime, message: str, state: GameState) -> Optional[GameState]:
    """Match state transitions; only the move to post-match matters."""
    match = MATCH_STATE_PATTERN.search(message)
    if match and match.group('new') == POST_MATCH_STATE:
        return game_ended(timestamp, state)
    return None


def parse_world(timestamp: datetime, message: str, state: GameState) -> Optional[GameState]:
    """Map loads."""
    match = MAP_LOAD_PATTERN.search(message)
    if match:
        return starting_game(timestamp, match.group('map'), state)
    return None


CHANNEL_PARSERS: Dict[str, Callable[[datetime, str, GameState], Optional[GameState]]] = {
    "LogSquad": parse_logsquad,
    "LogSquadTrace": parse_logsquadtrace,
    "LogGameState": parse_game_state,
    "LogWorld": parse_world,
}


def parse_line(line: str, state: GameState) -> Optional[GameState]:
    """
    Fold one log line into the game state.

    Args:
        line: Raw log line.
        state: State before the line.

    Returns:
        The new state, or None if the line is not a log entry, has a bad
        timestamp, or is older than ``state.last_timestamp``.

    Raises:
        GameLogError: If the line references a game or player that does not exist.
    """
    match = LOG_LINE_PATTERN.match(line.rstrip('\r\n'))
    if not match:
        return None

    timestamp = parse_timestamp(match.group('timestamp'))
    if timestamp is None:
        return None

    # Stale lines are dropped whole, watermark included.
    if timestamp < state.last_timestamp:
        logger.debug(f"Skipping out-of-order line at {timestamp}")
        return None

    current = replace(state, last_timestamp=timestamp)

    channel_parser = CHANNEL_PARSERS.get(match.group('channel'))
    if channel_parser is None:
        return current

    return channel_parser(timestamp, match.group('message'), current) or current


def fold_lines(lines: Iterable[str], state: GameState, strict: bool = True,
               progress: Optional[Callable[[int], None]] = None) -> GameState:
    """
    Fold log lines into the game state in order.

    Args:
        lines: Log lines in file order.
        state: Starting state.
        strict: Raise on lines referencing unknown games or players. When
            False, such lines are logged and skipped.
        progress: Optional callback receiving each line's UTF-8 byte length.

    Returns:
        The final state.
    """
    for line_num, line in enumerate(lines, 1):
        try:
            new_state = parse_line(line, state)
        except GameLogError as e:
            if strict:
                raise
            logger.error(f"Skipping line {line_num}: {e}")
            new_state = None

        if new_state is not None:
            state = new_state
        if progress is not None:
            progress(len(line.encode('utf-8')))

    return state
