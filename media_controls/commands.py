"""
One-shot playerctl commands.

PlayerctlCommands wraps every single-shot playerctl operation and exposes
them through a closed Command set. `invoke` looks the command up in an
explicit dispatch table, so the consumer can only reach the operations
listed here. Arguments may arrive as strings (from the CLI) and are
coerced by each operation.
"""

import logging
import math
import re
import subprocess
from enum import Enum
from typing import Any, Callable

from .cover import local_path
from .errors import ExecutionError, ParseAnomaly, UnknownCommand
from .metadata import METADATA_FORMAT, parse_metadata
from .models import LoopStatus, PlaybackStatus, PlayerctlMetadata, ShuffleArg
from .runner import CommandRunner, PlayerctlRunner

logger = logging.getLogger("media_controls")

_VOLUME_PATTERN = re.compile(r"^\d+(\.\d+)?[+-]?$")


class Command(str, Enum):
    """Operations a consumer may invoke."""

    GET_METADATA = "GetMetadata"
    PLAY = "Play"
    PAUSE = "Pause"
    PLAY_PAUSE = "PlayPause"
    NEXT = "Next"
    PREVIOUS = "Previous"
    SEEK = "Seek"
    GET_POSITION = "GetPosition"
    SET_POSITION = "SetPosition"
    SET_POSITION_DELTA = "SetPositionDelta"
    GET_LOOP_STATUS = "GetLoopStatus"
    SET_LOOP_STATUS = "SetLoopStatus"
    GET_PLAYBACK_STATUS = "GetPlaybackStatus"
    GET_SHUFFLE = "GetShuffle"
    SET_SHUFFLE = "SetShuffle"
    GET_VOLUME = "GetVolume"
    SET_VOLUME = "SetVolume"
    OPEN_EXTERNAL = "OpenExternal"


def format_seconds(value: float) -> str:
    """Format seconds for playerctl without exponent notation."""
    text = f"{value:.3f}".rstrip("0").rstrip(".")
    return text or "0"


def _finite(value: Any, what: str) -> float:
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{what} must be a finite number, got {value!r}")
    return number


class PlayerctlCommands:
    """playerctl operations plus name-based dispatch.

    The runner can be injected for testing purposes.
    """

    def __init__(self, runner: CommandRunner | None = None):
        """Initialize the command set.

        Args:
            runner: Optional runner. If None, creates a PlayerctlRunner.
        """
        self.runner = runner or PlayerctlRunner()
        self._handlers: dict[Command, Callable[..., Any]] = {
            Command.GET_METADATA: self.get_metadata,
            Command.PLAY: self.play,
            Command.PAUSE: self.pause,
            Command.PLAY_PAUSE: self.play_pause,
            Command.NEXT: self.next,
            Command.PREVIOUS: self.previous,
            Command.SEEK: self.seek,
            Command.GET_POSITION: self.get_position,
            Command.SET_POSITION: self.set_position,
            Command.SET_POSITION_DELTA: self.set_position_delta,
            Command.GET_LOOP_STATUS: self.get_loop_status,
            Command.SET_LOOP_STATUS: self.set_loop_status,
            Command.GET_PLAYBACK_STATUS: self.get_playback_status,
            Command.GET_SHUFFLE: self.get_shuffle,
            Command.SET_SHUFFLE: self.set_shuffle,
            Command.GET_VOLUME: self.get_volume,
            Command.SET_VOLUME: self.set_volume,
            Command.OPEN_EXTERNAL: self.open_external,
        }

    # Dispatch

    def invoke(self, command: Command | str, *args: Any) -> Any:
        """Run a command by name.

        Args:
            command: A Command or its name (e.g. "SetVolume").
            *args: Arguments for the command.

        Returns:
            Whatever the command returns (None for setters).

        Raises:
            UnknownCommand: If the name is not a known command.
        """
        try:
            key = Command(command)
        except ValueError:
            logger.error(f"Unknown command {command}")
            raise UnknownCommand(str(command))
        return self._handlers[key](*args)

    # Metadata

    def get_metadata(self) -> PlayerctlMetadata:
        """Fetch and parse metadata of the active player."""
        output = self.runner.run(["metadata", "--format", METADATA_FORMAT])
        return parse_metadata(output.split("\n"))

    # Playback control

    def play(self) -> None:
        self.runner.run(["play"])

    def pause(self) -> None:
        self.runner.run(["pause"])

    def play_pause(self) -> None:
        self.runner.run(["play-pause"])

    def next(self) -> None:
        self.runner.run(["next"])

    def previous(self) -> None:
        self.runner.run(["previous"])

    def get_playback_status(self) -> PlaybackStatus:
        return PlaybackStatus.parse(self.runner.run(["status"]))

    # Position

    def seek(self, offset_seconds: float | str) -> None:
        """Seek relative to the current position.

        Args:
            offset_seconds: Offset in seconds, negative to seek backwards.
        """
        offset = _finite(offset_seconds, "Seek offset")
        sign = "+" if offset >= 0 else "-"
        self.runner.run(["position", f"{format_seconds(abs(offset))}{sign}"])

    def get_position(self) -> int:
        """Get the position in milliseconds."""
        output = self.runner.run(["position"])
        try:
            seconds = float(output)
        except ValueError:
            raise ParseAnomaly(f"Unexpected position output: {output!r}")
        if not math.isfinite(seconds):
            raise ParseAnomaly(f"Unexpected position output: {output!r}")
        return int(seconds * 1000)

    def set_position(self, position_milli: float | str) -> None:
        """Set the absolute position.

        Args:
            position_milli: Position in milliseconds.
        """
        milli = max(0.0, _finite(position_milli, "Position"))
        self.runner.run(["position", format_seconds(milli / 1000)])

    def set_position_delta(self, delta_milli: float | str) -> None:
        """Move the position by a delta in milliseconds."""
        self.seek(_finite(delta_milli, "Position delta") / 1000)

    # Loop

    def get_loop_status(self) -> LoopStatus:
        """Get loop status ("None", "Track" or "Playlist")."""
        output = self.runner.run(["loop"])
        try:
            return LoopStatus(output)
        except ValueError:
            raise ParseAnomaly(f"Unexpected loop status: {output!r}")

    def set_loop_status(self, status: LoopStatus | str) -> None:
        self.runner.run(["loop", LoopStatus(status).value])

    # Shuffle

    def get_shuffle(self) -> bool:
        return parse_shuffle(self.runner.run(["shuffle"]))

    def set_shuffle(self, shuffle: ShuffleArg | str | bool) -> None:
        """Set shuffle mode.

        Args:
            shuffle: "On", "Off", "Toggle", or a bool for On/Off.
        """
        if isinstance(shuffle, bool):
            arg = ShuffleArg.ON if shuffle else ShuffleArg.OFF
        else:
            arg = ShuffleArg(shuffle)
        self.runner.run(["shuffle", arg.value])

    # Volume

    def get_volume(self) -> float:
        """Get volume (0.0 - 1.0)."""
        output = self.runner.run(["volume"])
        try:
            return float(output)
        except ValueError:
            raise ParseAnomaly(f"Unexpected volume output: {output!r}")

    def set_volume(self, volume: float | str) -> None:
        """Set volume.

        Args:
            volume: Level between 0.0 and 1.0, or a string delta such as
                "0.1+" / "0.2-".
        """
        if isinstance(volume, str):
            arg = volume.strip()
            if not _VOLUME_PATTERN.match(arg):
                raise ValueError(f"Invalid volume: {volume!r}")
        else:
            level = max(0.0, min(1.0, _finite(volume, "Volume")))
            arg = format_seconds(level)
        self.runner.run(["volume", arg])

    # Files

    def open_external(self, url: str) -> None:
        """Show the folder containing a local track in the file manager."""
        folder = local_path(url).parent
        argv = ["xdg-open", str(folder)]
        try:
            subprocess.Popen(
                argv,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise ExecutionError(argv[1:], None, str(e), program="xdg-open")


def parse_shuffle(text: str) -> bool:
    """playerctl prints On/Off for queries and true/false on follow streams."""
    return text.strip().lower() in ("true", "on")
