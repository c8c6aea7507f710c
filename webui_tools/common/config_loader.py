"""
================================================================================
Configuration Loader
================================================================================

Settings of the UI test-support layer, read once per process from
config/config.yaml.

Lookup order for a dotted key such as "wait.timeout":
    1. Environment variable named after the key (WAIT_TIMEOUT)
    2. The YAML file
    3. The caller's default

Environment values are strings; they are converted to the type of the
caller's default (bool, int, float) when one is given.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from loguru import logger


# Repository root /config
DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config" / "config.yaml"

_TRUE_VALUES = ("true", "1", "yes", "on")


class ConfigurationError(Exception):
    """Raised when the configuration file cannot be parsed."""
    pass


def _env_name(key: str) -> str:
    """wait.poll_interval -> WAIT_POLL_INTERVAL"""
    return key.upper().replace(".", "_")


def _coerce(raw: str, default: Any) -> Any:
    """Convert an environment string to the type of default, if possible."""
    # bool first: bool is a subclass of int
    if isinstance(default, bool):
        return raw.strip().lower() in _TRUE_VALUES
    for kind in (int, float):
        if isinstance(default, kind):
            try:
                return kind(raw)
            except ValueError:
                logger.warning(f"Expected {kind.__name__}, got {raw!r}; keeping the raw string")
                return raw
    return raw


class ConfigLoader:
    """
    Process-wide settings (singleton).

    Usage:
        >>> ConfigLoader().get("wait.timeout", 25.0)
        25.0

    Tests point the loader at another file with ConfigLoader.reset()
    followed by ConfigLoader(config_path=...).
    """

    _instance: Optional["ConfigLoader"] = None

    def __new__(cls, config_path: Optional[Path] = None) -> "ConfigLoader":
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._settings = _read_settings(Path(config_path or DEFAULT_CONFIG_PATH))
            cls._instance = instance
        return cls._instance

    def get(self, key: str, default: Any = None) -> Any:
        """Value of a dotted key, see the module docstring for the lookup order."""
        raw = os.environ.get(_env_name(key))
        if raw is not None:
            return _coerce(raw, default)

        node: Any = self._settings
        for part in key.split("."):
            if not isinstance(node, dict) or node.get(part) is None:
                return default
            node = node[part]
        return node

    @classmethod
    def reset(cls) -> None:
        """Forget the loaded settings; the next ConfigLoader() reads the file again."""
        cls._instance = None


def _read_settings(path: Path) -> Dict[str, Any]:
    if not path.exists():
        logger.warning(f"Configuration file not found: {path}. Using defaults and environment only.")
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            settings = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in configuration file {path}: {e}") from e
    if not isinstance(settings, dict):
        raise ConfigurationError(f"Configuration file {path} must hold a mapping")
    logger.debug(f"Loaded configuration from: {path}")
    return settings


def get_config(key: str, default: Any = None) -> Any:
    """
    Shortcut for ConfigLoader().get().

    Example:
        timeout = get_config("wait.timeout", 25.0)
    """
    return ConfigLoader().get(key, default)


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "DEFAULT_CONFIG_PATH",
    "get_config",
]
