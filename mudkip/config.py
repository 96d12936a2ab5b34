"""JSON config loading helpers.

Reads default startup options, the editor command, and the log level.
Malformed or missing config falls back to "not configured".
"""

from __future__ import annotations

import json
import os
from pathlib import Path

from platformdirs import user_config_dir, user_runtime_dir

from .args import StartupOptions, parse_theme_value

APP_NAME = "mudkip"
CONFIG_FILENAME = "config.json"
CONFIG_ENV = "MUDKIP_CONFIG"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH
INSTANCE_PORT_FILENAME = "instance.port"


def config_path() -> Path:
    """Return the active config path, honoring ``$MUDKIP_CONFIG``."""
    override = os.environ.get(CONFIG_ENV, "").strip()
    if override:
        return Path(override).expanduser()
    return CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(config_path().read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _load_bool(data: dict[str, object], key: str) -> bool | None:
    value = data.get(key)
    return value if isinstance(value, bool) else None


def load_default_startup_options() -> StartupOptions:
    """Startup options used where the command line leaves a field unset.

    ``theme`` accepts the same words as ``--theme``; booleans must be JSON
    booleans. Anything else is treated as absent.
    """
    data = load_config()
    raw_theme = data.get("theme")
    theme = parse_theme_value(raw_theme.strip()) if isinstance(raw_theme, str) else None
    return StartupOptions(
        theme=theme,
        toc_open=_load_bool(data, "toc_open"),
        auto_refresh=_load_bool(data, "auto_refresh"),
    )


def load_editor_command() -> list[str] | None:
    """Load the editor command template (``{path}``/``{line}`` placeholders).

    Only a non-empty list of strings is accepted.
    """
    value = load_config().get("editor_command")
    if not isinstance(value, list) or not value:
        return None
    if not all(isinstance(part, str) and part for part in value):
        return None
    return list(value)


def load_log_level() -> object:
    """Return the raw ``log_level`` value for ``mudkip.log.resolve_level``."""
    return load_config().get("log_level")


def instance_port_path() -> Path:
    """Location of the file recording the primary instance's port."""
    return Path(user_runtime_dir(APP_NAME, appauthor=False)) / INSTANCE_PORT_FILENAME


__all__ = [
    "APP_NAME",
    "CONFIG_ENV",
    "CONFIG_PATH",
    "DEFAULT_CONFIG_PATH",
    "config_path",
    "instance_port_path",
    "load_config",
    "load_default_startup_options",
    "load_editor_command",
    "load_log_level",
]
