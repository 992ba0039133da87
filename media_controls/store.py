"""
Consumer-side playback state.

MediaStore receives supervisor events (it is an EventSink), keeps the
"now playing" state a UI renders from, and sends user actions back as
commands. Command failures are logged and never raised: a UI should not
break because one click failed.

Example:
    store = MediaStore(commands=None)
    supervisor = PlayerctlSupervisor(sink=store)
    store.commands = supervisor
    supervisor.start(settings)
    store.subscribe(lambda: redraw(store.track, store.position))
"""

import logging
import threading
from typing import Any, Callable, Protocol

from . import config
from .clock import PositionClock
from .commands import Command
from .debounce import Debouncer
from .errors import PlayerctlError
from .events import (
    Event,
    LoopStatusChanged,
    PlaybackInfoChanged,
    PlaybackStatusChanged,
    PlayerctlNotFound,
    PositionChanged,
    ShuffleChanged,
    VolumeChanged,
)
from .models import LoopStatus, PlaybackStatus, ShuffleArg, TrackInfo

logger = logging.getLogger("media_controls.store")


class CommandTarget(Protocol):
    """Anything that can run a named command (supervisor or command set)."""

    def invoke(self, command: Any, *args: Any) -> Any: ...


class MediaStore:
    """Now-playing state plus user actions.

    Attributes:
        track: Current track, or None before the first update.
        is_playing: Whether the player reports Playing.
        shuffle: Shuffle state.
        repeat: Loop mode.
        volume: Volume in display range (0-100).
        is_dirty: Set on every playback info update, cleared by mark_clean().
        track_changed: Whether the last playback info carried a new track.
        playerctl_missing: Set once PlayerctlNotFound has been received.
    """

    def __init__(
        self,
        commands: CommandTarget | None,
        clock: PositionClock | None = None,
        seek_debounce_ms: int | None = None,
        previous_restarts_track: bool | None = None,
        restart_threshold_ms: int | None = None,
    ):
        """Initialize the store.

        Args:
            commands: Where user actions are sent.
            clock: Position clock. Defaults to a monotonic one.
            seek_debounce_ms: Window for request_seek. Defaults to SEEK_DEBOUNCE_MS.
            previous_restarts_track: Whether previous() restarts a track that
                has played past the threshold. Defaults to PREVIOUS_RESTARTS_TRACK.
            restart_threshold_ms: That threshold. Defaults to
                PREVIOUS_RESTART_THRESHOLD_MS.
        """
        self.commands = commands
        self.clock = clock or PositionClock()
        self.previous_restarts_track = (
            previous_restarts_track if previous_restarts_track is not None
            else config.PREVIOUS_RESTARTS_TRACK
        )
        self.restart_threshold_ms = (
            restart_threshold_ms if restart_threshold_ms is not None
            else config.PREVIOUS_RESTART_THRESHOLD_MS
        )
        debounce_ms = seek_debounce_ms if seek_debounce_ms is not None else config.SEEK_DEBOUNCE_MS

        self.track: TrackInfo | None = None
        self.is_playing = False
        self.shuffle = False
        self.repeat = LoopStatus.NONE
        self.volume = 0.0
        self.is_dirty = False
        self.track_changed = False
        self.playerctl_missing = False

        self._seek_lock = threading.Lock()
        self._setting_position = False
        self._listeners: list[Callable[[], None]] = []
        self._seek_debouncer = Debouncer(self.seek, debounce_ms / 1000)

    # Change notification

    def subscribe(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register a change callback. Returns a function that unsubscribes."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def emit_change(self) -> None:
        for listener in list(self._listeners):
            try:
                listener()
            except Exception:
                logger.exception("Store listener failed")

    def mark_clean(self) -> None:
        self.is_dirty = False

    # Position

    @property
    def position(self) -> int:
        """Displayed position in milliseconds (extrapolated while playing)."""
        return self.clock.position()

    @property
    def is_setting_position(self) -> bool:
        return self._setting_position

    # Events

    def emit(self, event: Event) -> None:
        """EventSink entry point."""
        if isinstance(event, PlaybackInfoChanged):
            self.on_playback_info_changed(event)
        elif isinstance(event, PlaybackStatusChanged):
            self._set_playing(event.status is PlaybackStatus.PLAYING)
            self.clock.record_position(event.position_milli)
        elif isinstance(event, PositionChanged):
            self.clock.record_position(event.position_milli)
        elif isinstance(event, ShuffleChanged):
            self.shuffle = event.shuffle
        elif isinstance(event, LoopStatusChanged):
            self.repeat = event.loop_status
        elif isinstance(event, VolumeChanged):
            self.volume = event.volume
        elif isinstance(event, PlayerctlNotFound):
            self.on_playerctl_not_found()
            return
        else:
            logger.debug(f"Ignoring event {event.name}")
            return
        self.emit_change()

    def on_playback_info_changed(self, event: PlaybackInfoChanged) -> None:
        info = event.info
        self.track_changed = not info.track_info.same_track_as(self.track)
        self.track = info.track_info
        self.volume = info.volume * 100
        self.repeat = info.loop_status
        self.shuffle = info.shuffle
        self._set_playing(info.playback_status is PlaybackStatus.PLAYING)
        self.clock.record_position(info.position_milli)
        self.is_dirty = True

    def on_playerctl_not_found(self) -> None:
        if not self.playerctl_missing:
            logger.error(
                "playerctl not found! Please install playerctl and make sure it "
                "is on your PATH for the media player controls to work."
            )
        self.playerctl_missing = True
        self.emit_change()

    def _set_playing(self, playing: bool) -> None:
        self.is_playing = playing
        self.clock.set_playing(playing)

    # Actions

    def _invoke(self, what: str, command: Command, *args: Any) -> bool:
        if self.commands is None:
            logger.error(f"Failed to {what}: no command target")
            return False
        try:
            self.commands.invoke(command, *args)
        except (PlayerctlError, ValueError) as e:
            logger.error(f"Failed to {what}: {e}")
            return False
        return True

    def seek(self, position_milli: int) -> bool:
        """Seek to an absolute position.

        Only one seek runs at a time; a seek requested while another is in
        flight is dropped.

        Returns:
            True if the seek was sent and accepted.
        """
        with self._seek_lock:
            if self._setting_position:
                return False
            self._setting_position = True
        self.clock.freeze()
        try:
            ok = self._invoke("seek", Command.SET_POSITION, position_milli)
            if ok:
                self.clock.record_position(position_milli)
            return ok
        finally:
            self.clock.thaw()
            with self._seek_lock:
                self._setting_position = False

    def request_seek(self, position_milli: int) -> None:
        """Debounced seek: a burst of requests sends only the last one."""
        self._seek_debouncer(position_milli)

    def flush_seek(self) -> None:
        """Send a pending debounced seek right away."""
        self._seek_debouncer.flush()

    def set_playing(self, playing: bool) -> bool:
        if playing:
            return self._invoke("play", Command.PLAY)
        return self._invoke("pause", Command.PAUSE)

    def next(self) -> bool:
        return self._invoke("go to next track", Command.NEXT)

    def previous(self) -> bool:
        """Go to the previous track, or restart the current one.

        With previous_restarts_track enabled and more than
        restart_threshold_ms played, the current track is restarted.
        """
        if self.previous_restarts_track and self.position > self.restart_threshold_ms:
            return self.seek(0)
        return self._invoke("go to previous track", Command.PREVIOUS)

    def set_shuffle(self, state: bool) -> bool:
        ok = self._invoke(
            "set shuffle", Command.SET_SHUFFLE, ShuffleArg.ON if state else ShuffleArg.OFF
        )
        if ok:
            self.shuffle = state
            self.emit_change()
        return ok

    def set_repeat(self, state: LoopStatus) -> bool:
        return self._invoke("set repeat mode", Command.SET_LOOP_STATUS, state)

    def set_volume(self, volume: float) -> bool:
        """Set volume in display range (0-100)."""
        ok = self._invoke("set volume", Command.SET_VOLUME, volume / 100)
        if ok:
            self.volume = volume
            self.emit_change()
        return ok

    def open_external(self, url: str) -> bool:
        return self._invoke("open external link", Command.OPEN_EXTERNAL, url)

    def close(self) -> None:
        """Drop any pending debounced seek."""
        self._seek_debouncer.cancel()
