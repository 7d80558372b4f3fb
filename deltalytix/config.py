"""Configuration for Deltalytix.

Settings live in ``~/.config/deltalytix/config.toml``:

    [database]
    path = "~/.config/deltalytix/deltalytix.db"

    [ai]
    model = "gpt-4o-mini"

A missing file means defaults. ``DELTALYTIX_DB`` overrides the database path.
"""

import logging
import os
from pathlib import Path
from typing import Any, Optional

import toml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "deltalytix"
CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "deltalytix.db"


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load the TOML config file.

    Returns:
        Parsed configuration, or an empty dict if the file does not exist.
        An unreadable file is logged and treated as empty.
    """
    path = config_path or CONFIG_PATH
    if not path.exists():
        return {}
    try:
        return toml.load(path)
    except (OSError, toml.TomlDecodeError) as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return {}


def get_setting(section: str, key: str, default: Any = None, config: Optional[dict] = None) -> Any:
    """Read ``[section] key`` from the config, with a default."""
    config = load_config() if config is None else config
    return config.get(section, {}).get(key, default)


def get_db_path(config: Optional[dict] = None) -> Path:
    """Resolve the database path from the environment or config file."""
    env_path = os.environ.get("DELTALYTIX_DB")
    if env_path:
        return Path(env_path).expanduser()
    configured = get_setting("database", "path", None, config)
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_DB_PATH


def get_data_store(config: Optional[dict] = None):
    """Get the data store for the configured database."""
    from deltalytix.db.store import DataStore

    return DataStore(get_db_path(config))
