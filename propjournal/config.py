"""Configuration loading for propjournal.

Settings live in ``~/.config/propjournal/config.toml``::

    [storage]
    path = "~/trading/propjournal.json"

    [logging]
    level = "INFO"

A missing or unreadable file means defaults.
"""

import logging
from pathlib import Path
from typing import Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "propjournal"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "propjournal.json"
DEFAULT_LOG_LEVEL = "WARNING"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load the TOML configuration.

    Args:
        config_path: Config file to read (default: ``CONFIG_PATH``).

    Returns:
        The parsed configuration, or an empty dict.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        return {}
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}


def get_db_path(config: dict, override: Optional[str] = None) -> Path:
    """Resolve the JSON database path from an override or the config."""
    if override:
        return Path(override).expanduser()
    configured = config.get("storage", {}).get("path")
    if configured:
        return Path(str(configured)).expanduser()
    return DEFAULT_DB_PATH


def get_log_level(config: dict) -> int:
    """Logging level from the config, falling back to WARNING."""
    name = str(config.get("logging", {}).get("level", DEFAULT_LOG_LEVEL)).upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.WARNING
