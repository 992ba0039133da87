"""
Events pushed to the consumer.

All events are one-way notifications. A consumer implements the
EventSink protocol (a single `emit` method); CallbackSink and
JsonLinesSink cover the in-process and command-line cases.
"""

import json
import threading
from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Protocol, TextIO

from .models import LoopStatus, PlaybackInfo, PlaybackStatus


@dataclass(frozen=True)
class Event:
    """Base class for consumer events."""

    name: ClassVar[str] = "Event"

    def payload(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Serializable form: {"event": name, **payload}."""
        return {"event": self.name, **self.payload()}


@dataclass(frozen=True)
class PlaybackInfoChanged(Event):
    name: ClassVar[str] = "PlaybackInfoChanged"
    info: PlaybackInfo

    def payload(self) -> dict[str, Any]:
        return {"info": self.info.to_dict()}


@dataclass(frozen=True)
class PlaybackStatusChanged(Event):
    """Status plus fresh position, for players whose status event is not
    followed by a metadata refetch."""

    name: ClassVar[str] = "PlaybackStatusChanged"
    status: PlaybackStatus
    position_milli: int

    def payload(self) -> dict[str, Any]:
        return {"status": self.status.value, "position_milli": self.position_milli}


@dataclass(frozen=True)
class PositionChanged(Event):
    name: ClassVar[str] = "PositionChanged"
    position_milli: int

    def payload(self) -> dict[str, Any]:
        return {"position_milli": self.position_milli}


@dataclass(frozen=True)
class ShuffleChanged(Event):
    name: ClassVar[str] = "ShuffleChanged"
    shuffle: bool

    def payload(self) -> dict[str, Any]:
        return {"shuffle": self.shuffle}


@dataclass(frozen=True)
class LoopStatusChanged(Event):
    name: ClassVar[str] = "LoopStatusChanged"
    loop_status: LoopStatus

    def payload(self) -> dict[str, Any]:
        return {"loop_status": self.loop_status.value}


@dataclass(frozen=True)
class VolumeChanged(Event):
    """Volume in display range (0-100)."""

    name: ClassVar[str] = "VolumeChanged"
    volume: float

    def payload(self) -> dict[str, Any]:
        return {"volume": self.volume}


@dataclass(frozen=True)
class PlayerctlNotFound(Event):
    name: ClassVar[str] = "PlayerctlNotFound"


class EventSink(Protocol):
    """Receiver of consumer events."""

    def emit(self, event: Event) -> None:
        """Deliver one event. Must not block for long."""
        ...


class CallbackSink:
    """Forwards every event to a plain callable."""

    def __init__(self, callback: Callable[[Event], None]):
        self._callback = callback

    def emit(self, event: Event) -> None:
        self._callback(event)


class JsonLinesSink:
    """Writes each event as one JSON object per line.

    Listener threads emit concurrently, so writes are serialized.
    """

    def __init__(self, stream: TextIO):
        self._stream = stream
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        line = json.dumps(event.to_dict())
        with self._lock:
            self._stream.write(line + "\n")
            self._stream.flush()
