"""
Data models for media-controls.

These dataclasses and enums describe what playerctl reports about the
active media player and what gets pushed to the consumer. Enum values are
the exact spellings playerctl reads and writes.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any


class PlaybackStatus(str, Enum):
    """Playback state as reported by `playerctl status`."""

    PLAYING = "Playing"
    PAUSED = "Paused"
    STOPPED = "Stopped"
    UNKNOWN = "Unknown"

    @classmethod
    def parse(cls, text: str) -> "PlaybackStatus":
        """Map playerctl output to a status, UNKNOWN for anything else."""
        try:
            return cls(text.strip())
        except ValueError:
            return cls.UNKNOWN


class LoopStatus(str, Enum):
    """Loop mode as reported by `playerctl loop`."""

    NONE = "None"
    TRACK = "Track"
    PLAYLIST = "Playlist"


class ShuffleArg(str, Enum):
    """Argument accepted by `playerctl shuffle`."""

    ON = "On"
    OFF = "Off"
    TOGGLE = "Toggle"


class MediaPlayer(str, Enum):
    """Players with known behavior. Only used to pick quirk handling."""

    STRAWBERRY = "strawberry"
    AMAROK = "amarok"
    ELISA = "elisa"
    UNKNOWN = "unknown"

    @classmethod
    def from_name(cls, name: str | None) -> "MediaPlayer":
        """Resolve a playerctl player name, case-insensitively."""
        if not name:
            return cls.UNKNOWN
        wanted = name.strip().lower()
        for player in cls:
            if player.value == wanted:
                return player
        return cls.UNKNOWN


@dataclass
class PlayerctlMetadata:
    """Raw result of parsing a playerctl metadata block.

    Attributes:
        title: xesam:title, or None if the player did not report one.
        artist: xesam:artist.
        album: xesam:album.
        url: xesam:url, possibly a percent-encoded file:// URL.
        length: Track length in milliseconds (converted from microseconds).
        art_url: mpris:artUrl.
        track_id: mpris:trackid.
        player: The player that produced this block.
        extra: Any keys this module does not know about, kept verbatim.
    """

    title: str | None = None
    artist: str | None = None
    album: str | None = None
    url: str | None = None
    length: float | None = None
    art_url: str | None = None
    track_id: str | None = None
    player: MediaPlayer = MediaPlayer.UNKNOWN
    extra: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TrackInfo:
    """Display-ready information about the current track."""

    title: str
    artist: str
    album: str
    url: str
    length_milli: int
    cover: str
    track_id: str

    @classmethod
    def from_metadata(cls, metadata: PlayerctlMetadata, cover: str) -> "TrackInfo":
        """Build a TrackInfo, substituting readable defaults for missing fields."""
        return cls(
            title=metadata.title or "Unknown Title",
            artist=metadata.artist or "Unknown Artist",
            album=metadata.album or "Unknown Album",
            url=metadata.url or "",
            length_milli=int(metadata.length) if metadata.length else 0,
            cover=cover,
            track_id=metadata.track_id or "",
        )

    def same_track_as(self, other: "TrackInfo | None") -> bool:
        """Whether both describe the same track.

        Track ids are compared when both sides have one, titles otherwise.
        """
        if other is None:
            return False
        if self.track_id and other.track_id:
            return self.track_id == other.track_id
        return self.title == other.title


@dataclass(frozen=True)
class PlaybackInfo:
    """Complete playback snapshot pushed to the consumer.

    Attributes:
        track_info: The current track.
        shuffle: Whether shuffle is on.
        loop_status: Current loop mode.
        playback_status: Playing, paused, stopped or unknown.
        volume: Volume level (0.0 - 1.0).
        position_milli: Playback position in milliseconds.
    """

    track_info: TrackInfo
    shuffle: bool
    loop_status: LoopStatus
    playback_status: PlaybackStatus
    volume: float
    position_milli: int

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with enum values flattened to their strings."""
        data = asdict(self)
        data["loop_status"] = self.loop_status.value
        data["playback_status"] = self.playback_status.value
        return data
