"""Per-player settings (read-only consumer side).

The settings themselves are owned by whatever UI edits them. This module
only validates the mapping and can read it from the JSON settings file:

    {
        "elisa": {"enabled": true, "priority": 0},
        "vlc": {"enabled": false, "priority": 1}
    }

Player names are MPRIS interface names (org.mpris.MediaPlayer2.<name>)
and are matched case-insensitively, so keys are stored lowercased.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from . import config

logger = logging.getLogger("media_controls")


@dataclass(frozen=True)
class PlayerSetting:
    """Settings for one media player."""

    enabled: bool
    priority: int


MediaPlayerSettings = dict[str, PlayerSetting]


def parse_settings(raw: Mapping[str, Any]) -> MediaPlayerSettings:
    """Validate a player-name -> {enabled, priority} mapping.

    Args:
        raw: Mapping whose values are dicts or PlayerSetting instances.

    Returns:
        Settings keyed by lowercased player name.

    Raises:
        ValueError: If an entry is malformed.
    """
    settings: MediaPlayerSettings = {}
    for name, value in raw.items():
        key = str(name).strip().lower()
        if not key:
            raise ValueError("Player name must not be empty")

        if isinstance(value, PlayerSetting):
            setting = value
        elif isinstance(value, Mapping):
            enabled = value.get("enabled", False)
            priority = value.get("priority", 0)
            if not isinstance(enabled, bool):
                raise ValueError(f"{key}: 'enabled' must be true or false")
            if isinstance(priority, bool) or not isinstance(priority, int):
                raise ValueError(f"{key}: 'priority' must be an integer")
            setting = PlayerSetting(enabled=enabled, priority=priority)
        else:
            raise ValueError(f"{key}: expected an object with enabled/priority")

        if setting.priority < 0:
            raise ValueError(f"{key}: 'priority' must be >= 0")
        settings[key] = setting
    return settings


def load_settings(path: Path | None = None) -> MediaPlayerSettings:
    """Load player settings from a JSON file.

    A missing file means no players are configured (listen to all).
    """
    path = path or config.SETTINGS_FILE
    if not path.exists():
        logger.debug(f"No player settings at {path}, listening to all players")
        return {}

    data = json.loads(path.read_text())
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a JSON object")
    return parse_settings(data)
