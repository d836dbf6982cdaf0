"""Persistent visualizer configuration (voiceviz.config.json).

The file lives in the per-user config directory:

    Windows : %APPDATA%\\voiceviz\\
    macOS   : ~/Library/Application Support/voiceviz/
    Linux   : $XDG_CONFIG_HOME/voiceviz/  (default ~/.config/voiceviz/)

It is written with defaults on first use.  On load, stored values are
laid over the current defaults (keys this version does not know are
dropped) and validated; a file that cannot be parsed or holds invalid
values is moved aside to ``*.bak`` and replaced by the defaults.
"""

from __future__ import annotations

import json
import logging
import os
import platform
from typing import Any

from voicevizlib.config import (
    VISUALIZER_PARAMS,
    default_config,
    validate_param_values,
)

log = logging.getLogger(__name__)

APP_DIRNAME = "voiceviz"
CONFIG_FILENAME = "voiceviz.config.json"


def _config_dir() -> str:
    home = os.path.expanduser("~")
    system = platform.system()
    if system == "Windows":
        root = os.environ.get("APPDATA") or home
    elif system == "Darwin":
        root = os.path.join(home, "Library", "Application Support")
    else:
        root = os.environ.get("XDG_CONFIG_HOME") or os.path.join(home, ".config")
    return os.path.join(root, APP_DIRNAME)


def config_path() -> str:
    """Full path of the config file (the file may not exist yet)."""
    return os.path.join(_config_dir(), CONFIG_FILENAME)


def load_config() -> dict[str, Any]:
    """Return the stored visualizer config, merged over the defaults."""
    path = config_path()
    if not os.path.isfile(path):
        log.info("No config at %s, writing defaults", path)
        return _reset(path, backup=False)

    try:
        with open(path, "r", encoding="utf-8") as f:
            stored = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Unreadable config %s: %s", path, exc)
        return _reset(path)
    if not isinstance(stored, dict):
        log.warning("Config %s holds a %s, not an object", path,
                    type(stored).__name__)
        return _reset(path)

    config = default_config()
    config.update((k, v) for k, v in stored.items() if k in config)

    errors = validate_param_values(VISUALIZER_PARAMS, config)
    if errors:
        log.warning("Invalid config values (%s)",
                    "; ".join(e.message for e in errors))
        return _reset(path)

    if config != stored:
        save_config(config)
    return config


def save_config(config: dict[str, Any]) -> str:
    """Write *config* as indented JSON.  Returns the path written."""
    path = config_path()
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=4, ensure_ascii=False)
        f.write("\n")
    log.info("Config saved to %s", path)
    return path


def _reset(path: str, backup: bool = True) -> dict[str, Any]:
    if backup:
        _move_aside(path)
    defaults = default_config()
    save_config(defaults)
    return defaults


def _move_aside(path: str) -> None:
    """Keep a broken config as ``*.bak`` so the user can recover edits."""
    backup = path + ".bak"
    try:
        os.replace(path, backup)
    except OSError as exc:
        log.warning("Could not move %s aside: %s", path, exc)
    else:
        log.info("Moved unusable config to %s", backup)
