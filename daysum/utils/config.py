"""
Configuration management for daysum.

Handles loading and merging configuration from:
- Built-in defaults
- A YAML configuration file
- Environment variables
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG: Dict[str, Any] = {
    "logging": {
        "level": "WARNING",
        "format": "console",
        "output": "stderr",
    },
    "dates": {
        "input_format": "%d.%m.%Y %H:%M",
    },
    "summary": {
        "order": "duration",
        "label_width": 16,
    },
}

USER_CONFIG_PATH = Path.home() / ".config" / "daysum" / "config.yaml"


class Config:
    """Configuration manager for daysum."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file. If None, falls back to
                ``$DAYSUM_CONFIG`` and then the per-user config file.
        """
        self._config: Dict[str, Any] = copy.deepcopy(DEFAULT_CONFIG)

        config_file = config_file or os.getenv("DAYSUM_CONFIG")
        if config_file:
            self._load_config_file(config_file)
        elif USER_CONFIG_PATH.exists():
            self._load_config_file(str(USER_CONFIG_PATH))

        self._apply_env_overrides()

    def _load_config_file(self, config_file: str) -> None:
        """
        Load configuration from YAML file.

        Args:
            config_file: Path to YAML configuration file
        """
        with open(config_file, "r") as f:
            file_config = yaml.safe_load(f)
        if file_config:
            self._merge_config(file_config)

    def _merge_config(self, new_config: Dict[str, Any]) -> None:
        """
        Deep merge new configuration into existing configuration.

        Args:
            new_config: Configuration dictionary to merge
        """
        self._config = self._deep_merge(self._config, new_config)

    def _deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """
        Deep merge two dictionaries.

        Args:
            base: Base dictionary
            override: Override dictionary

        Returns:
            Merged dictionary
        """
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        if log_level := os.getenv("DAYSUM_LOG_LEVEL"):
            self.set("logging.level", log_level)

        if log_format := os.getenv("DAYSUM_LOG_FORMAT"):
            self.set("logging.format", log_format)

        if order := os.getenv("DAYSUM_SUMMARY_ORDER"):
            self.set("summary.order", order)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key: Configuration key in dot notation (e.g., "summary.order")
            default: Default value if key not found

        Returns:
            Configuration value
        """
        keys = key.split(".")
        value = self._config
        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set configuration value using dot notation.

        Args:
            key: Configuration key in dot notation
            value: Value to set
        """
        keys = key.split(".")
        config = self._config
        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]
        config[keys[-1]] = value
