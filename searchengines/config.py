"""
Settings - Load searchengines settings from TOML.

Settings are read from data/settings.toml (or an explicit path) and merged
over built-in defaults, so a settings file only needs the keys it changes.
The resulting dict is passed explicitly to whatever needs it, e.g.:

    settings = load_settings()
    registry = SearchEngineRegistry.from_settings(settings)
"""

from pathlib import Path
from typing import Any, Dict, Optional

import toml
from loguru import logger

PACKAGE_DIR = Path(__file__).parent
DEFAULT_SETTINGS_PATH = PACKAGE_DIR / "data" / "settings.toml"
DEFAULT_PLUGINS_DIR = PACKAGE_DIR / "data" / "plugins"
DEFAULT_DATA_DIR = Path.home() / ".local" / "share" / "searchengines"


def default_settings() -> Dict[str, Any]:
    return {
        "search": {
            "language": "",
            "fallback_language": "en",
            "plugins_dir": "",
        },
        "storage": {
            "db_path": "",
        },
    }


def load_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load settings from a TOML file.

    Args:
        path: Settings file; defaults to data/settings.toml in the package

    Returns:
        Dictionary containing settings with defaults applied
    """
    defaults = default_settings()
    settings_path = Path(path) if path is not None else DEFAULT_SETTINGS_PATH

    if not settings_path.exists():
        logger.info(f"Settings file not found at {settings_path}, using defaults")
        return defaults

    try:
        loaded = toml.load(settings_path)
    except (OSError, toml.TomlDecodeError):
        logger.warning(f"Could not load settings from {settings_path}, using defaults")
        return defaults

    return _deep_merge(defaults, loaded)


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary with defaults
        override: Dictionary with overrides

    Returns:
        Merged dictionary (override takes precedence)
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def resolve_plugins_dir(settings: Dict[str, Any]) -> Path:
    """Bundled plugins directory, honoring search.plugins_dir when set."""
    configured = settings.get("search", {}).get("plugins_dir")
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_PLUGINS_DIR


def resolve_db_path(settings: Dict[str, Any]) -> Path:
    """Preference database path (XDG data dir unless storage.db_path is set)."""
    configured = settings.get("storage", {}).get("db_path")
    if configured:
        return Path(configured).expanduser()
    return DEFAULT_DATA_DIR / "prefs.db"
