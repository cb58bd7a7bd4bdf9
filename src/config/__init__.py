# Configuration package initialization
"""
Squad Log Tools - Configuration System

This package provides a lightweight configuration system for the Squad Log Tools.

Quick Usage:
    from config import Config

    tracker_config = Config(profile='my_server')
    value = tracker_config.get('some.nested.key')
"""

from config.config import Config, DEFAULT_SETTINGS

__all__ = ['Config', 'DEFAULT_SETTINGS']
