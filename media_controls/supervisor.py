"""
Supervision of the playerctl follow listeners.

This module provides the PlayerctlSupervisor class, which owns every
long-running `playerctl --follow` process, turns their output lines into
consumer events, and applies per-player quirks. It is the only component
allowed to start, signal or forget those processes.

Listener set:
    status, position, shuffle, loop, volume   always, while running
    metadata                                  only while a player whose
                                              quirk profile asks for it
                                              is active

Example:
    supervisor = PlayerctlSupervisor(sink=CallbackSink(print))
    supervisor.start({"elisa": PlayerSetting(enabled=True, priority=0)})
    ...
    supervisor.kill()
"""

import atexit
import logging
import math
import subprocess
import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any, Callable

from . import config
from .commands import Command, PlayerctlCommands, parse_shuffle
from .cover import resolve_cover
from .errors import ParseAnomaly, PlayerctlError
from .events import (
    Event,
    EventSink,
    LoopStatusChanged,
    PlaybackInfoChanged,
    PlaybackStatusChanged,
    PlayerctlNotFound,
    PositionChanged,
    ShuffleChanged,
    VolumeChanged,
)
from .metadata import METADATA_FORMAT, MetadataBlockReader
from .models import (
    LoopStatus,
    MediaPlayer,
    PlaybackInfo,
    PlaybackStatus,
    PlayerctlMetadata,
    TrackInfo,
)
from .quirks import profile_for
from .runner import CommandRunner, FollowProcess, PlayerctlRunner
from .selector import PlayerSelector
from .settings import parse_settings

logger = logging.getLogger("media_controls.supervisor")


class SupervisorState(Enum):
    """Lifecycle state of the listener set."""

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"


# Follow channels that run for as long as the supervisor runs
CHANNELS = ("status", "position", "shuffle", "loop", "volume")
METADATA_CHANNEL = "metadata"


def parse_position_line(line: str) -> int:
    """Seconds (as printed by playerctl) -> integer milliseconds."""
    try:
        seconds = float(line.strip())
    except ValueError:
        raise ParseAnomaly(f"Non-numeric position: {line!r}")
    if not math.isfinite(seconds):
        raise ParseAnomaly(f"Non-numeric position: {line!r}")
    return int(seconds * 1000)


def parse_loop_line(line: str) -> LoopStatus:
    """Loop status, rejecting anything else.

    playerctl prints an empty line on the loop stream when a player
    closes; that is not a new loop state.
    """
    try:
        return LoopStatus(line.strip())
    except ValueError:
        raise ParseAnomaly(f"Unexpected loop status: {line!r}")


def parse_volume_line(line: str) -> float:
    """Volume (0.0 - 1.0) -> display range (0 - 100)."""
    try:
        volume = float(line.strip())
    except ValueError:
        raise ParseAnomaly(f"Non-numeric volume: {line!r}")
    if not math.isfinite(volume):
        raise ParseAnomaly(f"Non-numeric volume: {line!r}")
    return volume * 100


def parse_shuffle_line(line: str) -> bool:
    if not line.strip():
        raise ParseAnomaly("Empty shuffle line")
    return parse_shuffle(line)


class Listener:
    """One follow process plus the thread that reads its output.

    Each stdout line is passed to `handler`. Errors raised by the handler
    are logged and the listener keeps reading, so one bad line or one
    failed refetch never takes the stream down.
    """

    def __init__(
        self,
        channel: str,
        process: FollowProcess,
        handler: Callable[[str], Any],
    ):
        self.channel = channel
        self.process = process
        self._handler = handler
        self._stopping = threading.Event()
        self._thread = threading.Thread(
            target=self._read_loop,
            name=f"playerctl-{channel}",
            daemon=True,
        )

    def start(self) -> None:
        self._thread.start()

    def is_alive(self) -> bool:
        return self._thread.is_alive()

    def join(self, timeout: float | None = None) -> None:
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _read_loop(self) -> None:
        stdout = self.process.stdout
        if stdout is None:
            logger.error(f"{self.channel} listener has no stdout")
            return

        for line in stdout:
            if self._stopping.is_set():
                break
            line = line.rstrip("\r\n")
            try:
                self._handler(line)
            except ParseAnomaly as e:
                logger.debug(f"{self.channel}: discarded line ({e})")
            except PlayerctlError as e:
                logger.warning(f"{self.channel}: {e}")
            except Exception:
                logger.exception(f"{self.channel}: handler failed")

        if not self._stopping.is_set():
            logger.debug(f"{self.channel} listener stream ended")

    def stop(self, timeout: float) -> None:
        """Terminate the process (SIGTERM, then SIGKILL after `timeout`)."""
        self._stopping.set()
        terminate_process(self.process, timeout)
        self.join(timeout)
        # A listener stopped from its own handler finishes after this returns
        if self._thread.is_alive() and self._thread is not threading.current_thread():
            logger.warning(f"{self.channel} reader thread did not stop cleanly")


def terminate_process(process: FollowProcess, timeout: float) -> None:
    """Terminate a process, killing it if it ignores SIGTERM."""
    if process.poll() is not None:
        return
    try:
        process.terminate()
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait(timeout=timeout)
    except ProcessLookupError:
        pass
    except subprocess.TimeoutExpired:
        logger.warning("playerctl listener did not exit after SIGKILL")


class PlayerctlSupervisor:
    """Owns the playerctl listener set and emits consumer events.

    The command runner can be injected for testing purposes. All
    lifecycle operations (start, kill, restart) hold one lock, so
    overlapping restarts run one after the other rather than
    interleaving.
    """

    def __init__(
        self,
        sink: EventSink,
        runner: CommandRunner | None = None,
        commands: PlayerctlCommands | None = None,
        kill_timeout: float | None = None,
    ):
        """Initialize the supervisor.

        Args:
            sink: Receiver of consumer events.
            runner: Optional runner. If None, creates a PlayerctlRunner.
            commands: Optional command set. If None, one is built on the runner.
            kill_timeout: Seconds a listener gets to exit after SIGTERM.
        """
        self.sink = sink
        self.runner = runner or (commands.runner if commands else PlayerctlRunner())
        self.commands = commands or PlayerctlCommands(self.runner)
        self.selector = PlayerSelector(self.runner.player_arg)
        self.kill_timeout = kill_timeout if kill_timeout is not None else config.KILL_TIMEOUT

        self.state = SupervisorState.STOPPED
        self.current_player = MediaPlayer.UNKNOWN

        self._listeners: dict[str, Listener] = {}
        self._lifecycle_lock = threading.Lock()
        self._metadata_lock = threading.Lock()
        self._binary_present = False
        self._metadata_reader = MetadataBlockReader()
        self._atexit_registered = False

    # Lifecycle

    def start(self, settings: Mapping) -> None:
        """Start listening with the given player settings.

        If the filter argument derived from `settings` differs from the
        current one, the listeners are restarted with the new argument.
        If they are already running with the same argument, the current
        playback info is re-sent instead (the consumer was probably
        reloaded).

        Args:
            settings: Player name -> PlayerSetting, or the equivalent
                JSON-style mapping of {"enabled": ..., "priority": ...}.

        Raises:
            ValueError: If the settings are malformed.
        """
        settings = parse_settings(settings)
        with self._lifecycle_lock:
            self._start_locked(settings)

    def apply_settings(self, settings: Mapping) -> None:
        """React to a settings change; restarts only if the filter changed."""
        self.start(settings)

    def kill(self) -> None:
        """Terminate every listener. Safe to call when already stopped."""
        with self._lifecycle_lock:
            self._kill_locked()

    def restart(self, settings: Mapping) -> None:
        """Kill all listeners, then start them again with `settings`."""
        settings = parse_settings(settings)
        with self._lifecycle_lock:
            self._kill_locked()
            self._start_locked(settings)

    def is_running(self) -> bool:
        return self.state is SupervisorState.RUNNING

    @property
    def player_arg(self) -> str:
        return self.selector.player_arg

    def listener_channels(self) -> list[str]:
        """Channels that currently have a live listener handle."""
        return list(self._listeners)

    def _start_locked(self, settings: Mapping) -> None:
        if not self._binary_present:
            if not self.runner.is_available():
                logger.error(
                    "playerctl is not installed. Install playerctl and make sure "
                    "it is on your PATH."
                )
                self._emit(PlayerctlNotFound())
                return
            self._binary_present = True

        if self.selector.update(settings):
            self.runner.player_arg = self.selector.player_arg
            if self._listeners:
                logger.info(
                    f"Player settings changed, restarting listeners with {self.player_arg}"
                )
                self._kill_locked()

        if self._listeners:
            logger.debug("Listeners already running, sending current playback info")
            try:
                self.emit_playback_info()
            except PlayerctlError as e:
                logger.warning(f"Could not send current playback info: {e}")
            return

        self.state = SupervisorState.STARTING
        logger.debug(f"Starting playerctl listeners with {self.player_arg}")
        handlers = {
            "status": self.on_status,
            "position": self.on_position,
            "shuffle": self.on_shuffle,
            "loop": self.on_loop,
            "volume": self.on_volume,
        }
        try:
            # Held so that an early status line cannot look at a half-built set
            with self._metadata_lock:
                for channel in CHANNELS:
                    self._spawn(channel, [channel], handlers[channel])
                self.state = SupervisorState.RUNNING
        except PlayerctlError:
            self._kill_locked()
            raise

        if not self._atexit_registered:
            atexit.register(self.kill)
            self._atexit_registered = True
        logger.info(f"playerctl listeners started ({self.player_arg})")

    def _kill_locked(self) -> None:
        with self._metadata_lock:
            listeners, self._listeners = self._listeners, {}
            self.state = SupervisorState.STOPPED
        if self._atexit_registered:
            atexit.unregister(self.kill)
            self._atexit_registered = False
        for listener in listeners.values():
            listener.stop(self.kill_timeout)
        if listeners:
            logger.debug(f"Stopped listeners: {', '.join(listeners)}")
        self._metadata_reader.reset()
        self.current_player = MediaPlayer.UNKNOWN

    def _spawn(self, channel: str, args: list[str], handler: Callable[[str], Any]) -> None:
        process = self.runner.follow(args)
        listener = Listener(channel, process, handler)
        self._listeners[channel] = listener
        listener.start()

    def __enter__(self) -> "PlayerctlSupervisor":
        return self

    def __exit__(self, *exc_info) -> None:
        self.kill()

    # Active player and quirks

    def set_current_player(self, player: MediaPlayer) -> None:
        """Record the active player and start/stop its extra listener."""
        self.current_player = player
        needs_metadata = profile_for(player).needs_metadata_follow

        with self._metadata_lock:
            if self.state is not SupervisorState.RUNNING:
                return
            listener = self._listeners.get(METADATA_CHANNEL)

            if needs_metadata and listener is None:
                logger.debug(f"Starting metadata listener for {player.value}")
                self._metadata_reader.reset()
                self._spawn(
                    METADATA_CHANNEL,
                    ["metadata", "--format", METADATA_FORMAT],
                    self.on_metadata,
                )
                return

            if not needs_metadata and listener is not None:
                del self._listeners[METADATA_CHANNEL]

        if not needs_metadata and listener is not None:
            logger.debug("Stopping metadata listener")
            listener.stop(self.kill_timeout)

    # Line handlers

    def on_status(self, line: str) -> None:
        status = PlaybackStatus.parse(line)
        if profile_for(self.current_player).status_fast_path:
            # Track changes come from the metadata listener for this player
            position = self.commands.get_position()
            self._emit(PlaybackStatusChanged(status=status, position_milli=position))
            return

        metadata = self.commands.get_metadata()
        self.emit_playback_info(status=status, metadata=metadata)
        self.set_current_player(metadata.player)

    def on_position(self, line: str) -> None:
        self._emit(PositionChanged(position_milli=parse_position_line(line)))

    def on_shuffle(self, line: str) -> None:
        self._emit(ShuffleChanged(shuffle=parse_shuffle_line(line)))

    def on_loop(self, line: str) -> None:
        self._emit(LoopStatusChanged(loop_status=parse_loop_line(line)))

    def on_volume(self, line: str) -> None:
        self._emit(VolumeChanged(volume=parse_volume_line(line)))

    def on_metadata(self, line: str) -> None:
        metadata = self._metadata_reader.feed(line)
        if metadata is None:
            return
        # Status events take the fast path while this listener runs, so a
        # switch to another player is only visible here.
        self.set_current_player(metadata.player)

        # The first block after a track change has no artUrl; the second
        # one (with the cover) follows right after, so only emit that one.
        if profile_for(metadata.player).needs_metadata_follow and not metadata.art_url:
            return
        self.emit_playback_info(metadata=metadata)

    # Snapshots

    def snapshot(
        self,
        status: PlaybackStatus | None = None,
        metadata: PlayerctlMetadata | None = None,
    ) -> PlaybackInfo:
        """Build a complete PlaybackInfo, querying whatever wasn't given.

        Only the metadata query is required. Players that reject one of
        the other queries (many don't support loop or shuffle) get a
        default for that field.

        Raises:
            PlayerctlError: If the metadata can't be fetched.
        """
        if metadata is None:
            metadata = self.commands.get_metadata()
        if status is None:
            status = self._query("status", self.commands.get_playback_status,
                                 PlaybackStatus.UNKNOWN)

        track = TrackInfo.from_metadata(metadata, resolve_cover(metadata.art_url))
        return PlaybackInfo(
            track_info=track,
            shuffle=self._query("shuffle", self.commands.get_shuffle, False),
            loop_status=self._query("loop", self.commands.get_loop_status, LoopStatus.NONE),
            playback_status=status,
            volume=self._query("volume", self.commands.get_volume, 0.0),
            position_milli=self._query("position", self.commands.get_position, 0),
        )

    def _query(self, what: str, func: Callable[[], Any], default: Any) -> Any:
        try:
            return func()
        except PlayerctlError as e:
            logger.warning(f"Could not read {what}, using {default!r}: {e}")
            return default

    def emit_playback_info(
        self,
        status: PlaybackStatus | None = None,
        metadata: PlayerctlMetadata | None = None,
    ) -> PlaybackInfo:
        """Build a snapshot and push it as PlaybackInfoChanged."""
        info = self.snapshot(status=status, metadata=metadata)
        self._emit(PlaybackInfoChanged(info=info))
        return info

    # Commands

    def invoke(self, command: Command | str, *args: Any) -> Any:
        """Run a one-shot command against the active player.

        Raises:
            UnknownCommand: If the command name is not recognized.
            ExecutionError: If playerctl rejects the command.
        """
        return self.commands.invoke(command, *args)

    def _emit(self, event: Event) -> None:
        try:
            self.sink.emit(event)
        except Exception:
            logger.exception(f"Event sink failed on {event.name}")
