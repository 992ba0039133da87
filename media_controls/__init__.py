"""
media-controls - now-playing state and controls for local media players

This package follows the MPRIS players on a Linux desktop through
playerctl and turns their event streams into a single, normalized
"now playing" state:

- PlayerctlSupervisor runs the `playerctl --follow` listeners and emits events
- PlayerctlCommands runs one-shot commands (play, seek, volume, ...)
- MediaStore is the consumer-side state with position extrapolation

Example usage:
    >>> from media_controls import MediaStore, PlayerctlSupervisor, parse_settings
    >>> store = MediaStore(commands=None)
    >>> supervisor = PlayerctlSupervisor(sink=store)
    >>> store.commands = supervisor
    >>> supervisor.start(parse_settings({"elisa": {"enabled": True, "priority": 0}}))
    >>> store.track.title, store.position
    >>> supervisor.kill()
"""

from .version import __version__

from .clock import PositionClock
from .commands import Command, PlayerctlCommands
from .cover import PLACEHOLDER_COVER, resolve_cover
from .errors import (
    BinaryNotFound,
    CommandTimedOut,
    ExecutionError,
    ParseAnomaly,
    PlayerctlError,
    UnknownCommand,
)
from .events import (
    CallbackSink,
    Event,
    EventSink,
    JsonLinesSink,
    LoopStatusChanged,
    PlaybackInfoChanged,
    PlaybackStatusChanged,
    PlayerctlNotFound,
    PositionChanged,
    ShuffleChanged,
    VolumeChanged,
)
from .metadata import METADATA_FORMAT, parse_metadata
from .models import (
    LoopStatus,
    MediaPlayer,
    PlaybackInfo,
    PlaybackStatus,
    PlayerctlMetadata,
    ShuffleArg,
    TrackInfo,
)
from .runner import CommandRunner, PlayerctlRunner
from .selector import DEFAULT_PLAYER_ARG, PlayerSelector, compute_filter_arg
from .settings import MediaPlayerSettings, PlayerSetting, load_settings, parse_settings
from .store import MediaStore
from .supervisor import PlayerctlSupervisor, SupervisorState

__all__ = [
    "__version__",
    # Supervisor and commands
    "PlayerctlSupervisor",
    "SupervisorState",
    "PlayerctlCommands",
    "Command",
    "CommandRunner",
    "PlayerctlRunner",
    # Consumer side
    "MediaStore",
    "PositionClock",
    # Events
    "Event",
    "EventSink",
    "CallbackSink",
    "JsonLinesSink",
    "PlaybackInfoChanged",
    "PlaybackStatusChanged",
    "PositionChanged",
    "ShuffleChanged",
    "LoopStatusChanged",
    "VolumeChanged",
    "PlayerctlNotFound",
    # Models
    "TrackInfo",
    "PlaybackInfo",
    "PlayerctlMetadata",
    "PlaybackStatus",
    "LoopStatus",
    "ShuffleArg",
    "MediaPlayer",
    # Settings and selection
    "PlayerSetting",
    "MediaPlayerSettings",
    "parse_settings",
    "load_settings",
    "PlayerSelector",
    "compute_filter_arg",
    "DEFAULT_PLAYER_ARG",
    # Parsing
    "METADATA_FORMAT",
    "parse_metadata",
    "resolve_cover",
    "PLACEHOLDER_COVER",
    # Errors
    "PlayerctlError",
    "ExecutionError",
    "BinaryNotFound",
    "CommandTimedOut",
    "UnknownCommand",
    "ParseAnomaly",
]
