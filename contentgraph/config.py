"""
Configuration management for contentgraph.

This module handles loading and accessing configuration values from config.yaml.
It provides a centralized way to manage store settings and makes it easy to
modify behavior without changing code.
"""

import yaml
import sys
import logging
from pathlib import Path
from typing import Any, Dict, Optional


class ConfigManager:
    """
    Manages configuration loading and access for contentgraph.
    """

    def __init__(self, config_path: str = "config.yaml"):
        """
        Initialize the configuration manager.

        Args:
            config_path: Path to the configuration file
        """
        self.config_path = Path(config_path)
        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        if not self.config_path.exists():
            logging.info(f"No configuration file at {self.config_path}, using defaults")
            self._config = self._get_default_config()
            return

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f) or {}

            self._config = _merge(self._get_default_config(), loaded)
            logging.info(f"Configuration loaded from {self.config_path}")

        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration: {e}")
            # Fall back to default configuration
            self._config = self._get_default_config()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration values as fallback."""
        return {
            "store": {
                "database": ":memory:"
            },
            "nodes": {
                "resolve_absolute_paths": False,
                "default_route": "/:typeName/:slug"
            },
            "paths": {
                "log_file": None
            },
            "logging": {
                "level": "INFO",
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            }
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the configuration value (e.g., "store.database")
            default: Default value if key is not found

        Returns:
            The configuration value

        Examples:
            config.get("store.database")        # Returns ":memory:"
            config.get("nodes.default_route")   # Returns "/:typeName/:slug"
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get an entire configuration section.

        Args:
            section: Name of the configuration section

        Returns:
            Dictionary containing the section configuration
        """
        return self._config.get(section, {})

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    # Convenience properties for commonly used values

    @property
    def database_path(self) -> str:
        """Get the DuckDB database path of the node index."""
        return self.get("store.database", ":memory:")

    @property
    def resolve_absolute_paths(self) -> bool:
        """Whether file paths in node fields resolve to absolute paths."""
        return bool(self.get("nodes.resolve_absolute_paths", False))

    @property
    def default_route(self) -> str:
        """Get the route used by content types that declare none."""
        return self.get("nodes.default_route", "/:typeName/:slug")

    @property
    def log_filename(self) -> Optional[str]:
        """Get log file name."""
        return self.get("paths.log_file")


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


# Global configuration instance
config = ConfigManager()


def get_config() -> ConfigManager:
    """
    Get the global configuration instance.

    Returns:
        The global ConfigManager instance
    """
    return config


def setup_logging(manager: Optional[ConfigManager] = None) -> None:
    """Configure logging for the application."""
    manager = manager or config
    level = getattr(logging, str(manager.get("logging.level", "INFO")).upper(), logging.INFO)
    format_str = manager.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    handlers: list = [logging.StreamHandler(sys.stdout)]
    if manager.log_filename:
        handlers.append(logging.FileHandler(manager.log_filename))

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=handlers
    )
