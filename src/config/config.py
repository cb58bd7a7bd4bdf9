"""
Minimal Configuration Reader for Squad Log Tools

A lightweight configuration system that provides:
- Profile-based configuration management
- JSON-based configuration storage
- Hierarchical configuration with dot-notation access
- Defaults for every key the tools read

Usage:
    from config import Config
    tracker_config = Config(profile='my_server')
    value = tracker_config.get('tracker.show_progress')

The configuration is loaded from profiles/<profile>.json and deep-merged over
DEFAULT_SETTINGS, so a profile only needs to name the values it changes.
"""

import copy
from typing import Dict, Any, Optional
from pathlib import Path

from squad_log_tools.base import JSONTool, logger


DEFAULT_SETTINGS: Dict[str, Any] = {
    "general": {
        "log_level": "INFO",
        "output_path": "output",
    },
    "tracker": {
        "show_progress": True,
        "strict": True,
    },
    "report": {
        "csv": False,
        "excel": False,
    },
}


class Config(JSONTool):
    """
    A minimal JSON-based configuration reader for Squad log tools.

    Attributes:
        config_dir (str): Directory containing profile JSON files
        profile (str): Currently active profile name
        data (dict): Loaded configuration data
    """

    DEFAULT_CONFIG_DIR = str(Path(__file__).parent / 'profiles')
    DEFAULT_PROFILE = "default"

    def __init__(self, config_dir: str = None, profile: str = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Initialize the Config instance.

        Args:
            config_dir (str, optional): Directory for config profiles.
                Defaults to 'profiles' subdirectory relative to this file.
            profile (str, optional): Profile name to use. Defaults to 'default'.
            config (dict, optional): Base configuration dictionary for JSONTool compatibility.
        """
        super().__init__(config)

        self.config_dir = config_dir or self.DEFAULT_CONFIG_DIR
        self.profile = profile or self.DEFAULT_PROFILE
        self.data = {}

        Path(self.config_dir).mkdir(parents=True, exist_ok=True)

        self._load()

    def run(self) -> Dict[str, Any]:
        """
        Run the config tool (implementation of abstract method from SquadTool).

        Returns:
            The full configuration dictionary.
        """
        return self.data

    def _load(self):
        """
        Load configuration from the profile JSON file over the defaults.

        A missing default profile is created; a missing named profile or an
        unreadable file leaves the defaults in place.
        """
        self.data = copy.deepcopy(DEFAULT_SETTINGS)
        profile_path = Path(self.config_dir) / f"{self.profile}.json"

        if not profile_path.exists():
            if self.profile == self.DEFAULT_PROFILE:
                self._create_default_profile(str(profile_path))
            else:
                logger.warning(f"Profile '{self.profile}' not found. Using default configuration.")
            return

        try:
            profile_data = self.read_json(str(profile_path))
            if isinstance(profile_data, dict):
                self._deep_merge(self.data, profile_data)
            logger.info(f"Loaded configuration from '{self.profile}'")
        except Exception as e:
            logger.error(f"Error loading configuration: {e}")
            self.data = copy.deepcopy(DEFAULT_SETTINGS)

    def _create_default_profile(self, profile_path: str):
        """
        Create a default profile configuration file.

        Args:
            profile_path (str): Path where the default profile will be created
        """
        try:
            self.write_json(DEFAULT_SETTINGS, profile_path)
            logger.info(f"Created default profile at '{profile_path}'")
        except Exception as e:
            logger.error(f"Error creating default configuration: {e}")

    def _deep_merge(self, target: Dict[str, Any], source: Dict[str, Any]):
        """
        Deep merge two dictionaries.

        Args:
            target (dict): The target dictionary to merge into
            source (dict): The source dictionary to merge from
        """
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._deep_merge(target[key], value)
            else:
                target[key] = value

    def get(self, path: str = None, default: Any = None) -> Any:
        """
        Get a configuration value by path using dot notation.

        Args:
            path (str, optional): Dot notation path to the value
                (e.g., "general.output_path", "tracker.strict").
                If None, returns the entire configuration dictionary.
            default (Any, optional): Value to return if path not found.

        Returns:
            Any: The configuration value at the specified path, or default if not found.

        Examples:
            >>> config.get('tracker.strict', True)
            True
            >>> config.get()
            {'general': {...}, 'tracker': {...}, 'report': {...}}
        """
        if path is None:
            return self.data

        current = self.data
        if path:
            for key in path.split('.'):
                if isinstance(current, dict) and key in current:
                    current = current[key]
                else:
                    return default

        return current
