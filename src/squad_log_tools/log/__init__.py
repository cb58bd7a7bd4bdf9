"""
Squad Log Processing

This package folds Squad dedicated server logs into a persistent history of
games, players and combat events: line classification, player name
resolution, the event handlers and the lifetime statistics built from them.
"""

__all__ = ['errors', 'events', 'lifetime', 'models', 'names', 'parser', 'state_file', 'timestamps']

from .errors import GameLogError, SessionNotFoundError, UnknownPlayerError, StateFileError
from .models import Game, GameState, Player, PlayerState
from .parser import parse_line, fold_lines
from .state_file import initial_state, state_from_dict, state_to_dict
from .lifetime import build_lifetime_stats, lifetime_dataframe
