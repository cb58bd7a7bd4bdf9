"""
Squad Analysis Tools

This package provides the command line tools built on the log processing
package.
"""

from .game_tracker import GameTracker

__all__ = [
    'GameTracker',
]
