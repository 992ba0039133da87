"""
Configuration for media-controls.

Values come from the environment, falling back to
~/.media-controls/media-controls.env and then to built-in defaults.
Variables already set in the shell always win over the env file.

Example media-controls.env:

    # Use a playerctl build outside PATH
    MEDIA_CONTROLS_PLAYERCTL=/opt/playerctl/bin/playerctl
    MEDIA_CONTROLS_SEEK_DEBOUNCE_MS=300
"""

import logging
import os
from pathlib import Path

BASE_DIR = Path.home() / ".media-controls"
ENV_FILE = BASE_DIR / "media-controls.env"


def load_env_file(path: Path = ENV_FILE) -> dict[str, str]:
    """Read KEY=value lines from an env file into os.environ.

    Existing environment variables are not overwritten.

    Returns:
        The key/value pairs found in the file (empty if it doesn't exist).
    """
    values: dict[str, str] = {}
    if not path.exists():
        return values

    for line in path.read_text().splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or "=" not in stripped:
            continue
        key, val = stripped.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")
        values[key] = val
        os.environ.setdefault(key, val)
    return values


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


load_env_file()

# playerctl binary (name on PATH or absolute path)
PLAYERCTL_BIN = os.environ.get("MEDIA_CONTROLS_PLAYERCTL", "playerctl")

# Timeout for one-shot playerctl commands (seconds)
COMMAND_TIMEOUT = float(os.environ.get("MEDIA_CONTROLS_COMMAND_TIMEOUT", "5"))

# Grace period for follow listeners to exit after SIGTERM (seconds)
KILL_TIMEOUT = float(os.environ.get("MEDIA_CONTROLS_KILL_TIMEOUT", "2"))

# Seek requests closer together than this collapse into the last one
SEEK_DEBOUNCE_MS = int(os.environ.get("MEDIA_CONTROLS_SEEK_DEBOUNCE_MS", "250"))

# "Previous" restarts the current track once it has played this long
PREVIOUS_RESTARTS_TRACK = _env_bool("MEDIA_CONTROLS_PREVIOUS_RESTARTS_TRACK", True)
PREVIOUS_RESTART_THRESHOLD_MS = int(
    os.environ.get("MEDIA_CONTROLS_PREVIOUS_RESTART_THRESHOLD_MS", "3000")
)

# Per-player enabled/priority settings (JSON)
SETTINGS_FILE = Path(
    os.environ.get("MEDIA_CONTROLS_SETTINGS_FILE", str(BASE_DIR / "players.json"))
).expanduser()

LOG_LEVEL = os.environ.get("MEDIA_CONTROLS_LOG_LEVEL", "WARNING").upper()

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | int | None = None) -> logging.Logger:
    """Attach a stderr handler to the media_controls logger.

    Args:
        level: Log level name or number. Defaults to LOG_LEVEL.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger("media_controls")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level if level is not None else LOG_LEVEL)
    return logger
