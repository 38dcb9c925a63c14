"""Persistent JSON config helpers.

Holds user-level defaults for polling interval, extra ignore patterns, and
command timeout. All access is defensive: malformed or missing config falls
back to built-in defaults. pollrun only reads this file.
"""

from __future__ import annotations

import json
import math
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "pollrun"
CONFIG_FILENAME = "config.json"
DEFAULT_CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME
CONFIG_PATH = DEFAULT_CONFIG_PATH


def load_config() -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    try:
        data = json.loads(CONFIG_PATH.read_text(encoding="utf-8"))
    except (OSError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


def _positive_float(value: object) -> float | None:
    """Accept finite positive JSON numbers; booleans are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


def load_poll_interval_seconds() -> float | None:
    """Return ``poll_interval_ms`` converted to seconds, or ``None`` if unset/invalid."""
    value = _positive_float(load_config().get("poll_interval_ms"))
    return None if value is None else value / 1000.0


def load_extra_ignore_patterns() -> frozenset[str]:
    """Return user-configured ignore substrings.

    Non-list values yield an empty set; non-string and empty items are dropped.
    """
    value = load_config().get("ignore")
    if not isinstance(value, list):
        return frozenset()
    return frozenset(item for item in value if isinstance(item, str) and item)


def load_command_timeout_seconds() -> float | None:
    """Return the configured child-process timeout, ``None`` meaning unbounded."""
    return _positive_float(load_config().get("command_timeout_seconds"))
