"""
Parsing of playerctl metadata blocks.

`playerctl metadata --format METADATA_FORMAT` prints one key:value pair
per line. The same format is used with `--follow`, where each change
produces a new block; MetadataBlockReader reassembles those blocks from
the line stream.
"""

import math
from collections.abc import Iterable

from .models import MediaPlayer, PlayerctlMetadata

METADATA_FORMAT = "\n".join(
    [
        "title:{{xesam:title}}",
        "artist:{{xesam:artist}}",
        "album:{{xesam:album}}",
        "url:{{xesam:url}}",
        "length:{{mpris:length}}",
        "artUrl:{{mpris:artUrl}}",
        "trackid:{{mpris:trackid}}",
        "player:{{playerName}}",
    ]
)

# The last key of METADATA_FORMAT; it terminates a block on follow streams
BLOCK_TERMINATOR = "player"

_FIELDS = {
    "title": "title",
    "artist": "artist",
    "album": "album",
    "url": "url",
    "artUrl": "art_url",
    "trackid": "track_id",
}


def parse_length(raw: str) -> float | None:
    """Convert an mpris:length value (microseconds) to milliseconds."""
    try:
        micros = float(raw)
    except ValueError:
        return None
    if not math.isfinite(micros) or micros < 0:
        return None
    return micros / 1000


def parse_metadata(lines: Iterable[str]) -> PlayerctlMetadata:
    """Parse key:value lines into PlayerctlMetadata.

    Lines are split at the first colon so values may contain colons
    (URLs). Empty values count as absent. Unknown keys are kept in
    `extra`.

    Args:
        lines: Lines of a metadata block, with or without trailing newlines.

    Returns:
        The parsed metadata.
    """
    metadata = PlayerctlMetadata()
    for line in lines:
        line = line.rstrip("\r\n")
        if ":" not in line:
            continue
        key, value = line.split(":", 1)
        key = key.strip()
        if not value:
            continue

        if key == "length":
            metadata.length = parse_length(value)
        elif key == "player":
            metadata.player = MediaPlayer.from_name(value)
        elif key in _FIELDS:
            setattr(metadata, _FIELDS[key], value)
        else:
            metadata.extra[key] = value
    return metadata


class MetadataBlockReader:
    """Reassembles metadata blocks from a follow stream, line by line."""

    def __init__(self):
        self._lines: list[str] = []

    def feed(self, line: str) -> PlayerctlMetadata | None:
        """Add one line.

        Returns:
            The parsed block once its terminating `player:` line arrives,
            None while the block is still incomplete.
        """
        line = line.rstrip("\r\n")
        if not line and not self._lines:
            return None
        self._lines.append(line)
        if line.split(":", 1)[0] != BLOCK_TERMINATOR:
            return None
        block, self._lines = self._lines, []
        return parse_metadata(block)

    def reset(self) -> None:
        """Drop any partially read block."""
        self._lines.clear()
