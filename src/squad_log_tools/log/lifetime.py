"""
Lifetime player statistics across every recorded game.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Set

import pandas as pd

from .models import GameState

LIFETIME_COLUMNS = ["player", "kills", "deaths", "revives", "times_revived", "classes_played"]


@dataclass
class LifetimeRecord:
    """Counters for one player merged over all games."""
    name: str
    kills: Counter = field(default_factory=Counter)
    killed_by: Counter = field(default_factory=Counter)
    revives: Counter = field(default_factory=Counter)
    revived_by: Counter = field(default_factory=Counter)
    classes: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "kills": dict(self.kills),
            "killed_by": dict(self.killed_by),
            "revives": dict(self.revives),
            "revived_by": dict(self.revived_by),
            "classes": sorted(self.classes),
        }


def build_lifetime_stats(state: GameState) -> Dict[str, LifetimeRecord]:
    """
    Merge every game's player records into one record per player name.

    Counters are summed and class sets are unioned. The state is not modified.

    Args:
        state: Accumulated game state.

    Returns:
        Dictionary of player name to lifetime record.
    """
    lifetime: Dict[str, LifetimeRecord] = {}

    for game in state.games:
        for name, player in game.players.items():
            record = lifetime.setdefault(name, LifetimeRecord(name=name))
            record.kills.update(player.players_killed)
            record.killed_by.update(player.players_killed_by)
            record.revives.update(player.players_revived)
            record.revived_by.update(player.players_revived_by)
            record.classes |= player.classes_played

    return lifetime


def lifetime_report(lifetime: Dict[str, LifetimeRecord]) -> List[Dict[str, Any]]:
    """Lifetime records as plain dictionaries, sorted by player name."""
    return [lifetime[name].to_dict() for name in sorted(lifetime)]


def lifetime_dataframe(lifetime: Dict[str, LifetimeRecord]) -> pd.DataFrame:
    """
    Summarize lifetime records as a table ranked by kills.

    Returns:
        DataFrame with one row per player and the LIFETIME_COLUMNS columns.
    """
    rows = [
        {
            "player": record.name,
            "kills": sum(record.kills.values()),
            "deaths": sum(record.killed_by.values()),
            "revives": sum(record.revives.values()),
            "times_revived": sum(record.revived_by.values()),
            "classes_played": ", ".join(sorted(record.classes)),
        }
        for record in lifetime.values()
    ]
    df = pd.DataFrame(rows, columns=LIFETIME_COLUMNS)
    if df.empty:
        return df
    return df.sort_values(["kills", "player"], ascending=[False, True]).reset_index(drop=True)
