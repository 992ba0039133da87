"""Cover art resolution.

Players report cover art as an mpris:artUrl. Remote URLs can be shown
as-is; local file:// URLs are read and embedded as base64 data URLs so
the consumer never needs filesystem access.
"""

import base64
import logging
from pathlib import Path
from urllib.parse import unquote

logger = logging.getLogger("media_controls")

FILE_SCHEME = "file://"

_PLACEHOLDER_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="64" height="64" viewBox="0 0 64 64">'
    '<rect width="64" height="64" rx="6" fill="#313437"/>'
    '<circle cx="32" cy="32" r="20" fill="#c6cdd1"/>'
    '<circle cx="32" cy="32" r="6" fill="#313437"/>'
    "</svg>"
)

PLACEHOLDER_COVER = "data:image/svg+xml;base64," + base64.b64encode(
    _PLACEHOLDER_SVG.encode()
).decode("ascii")


def local_path(url: str) -> Path:
    """Turn a (possibly percent-encoded) file:// URL into a path."""
    if url.startswith(FILE_SCHEME):
        url = url[len(FILE_SCHEME):]
    return Path(unquote(url))


def guess_mime_type(path: Path) -> str:
    """Guess an image MIME type from the file extension, PNG by default."""
    suffix = path.suffix.lower()
    if suffix in (".jpg", ".jpeg"):
        return "image/jpeg"
    if suffix == ".gif":
        return "image/gif"
    return "image/png"


def resolve_cover(art_url: str | None) -> str:
    """Produce a displayable image reference for an art URL.

    Args:
        art_url: mpris:artUrl as reported by the player, or None.

    Returns:
        The placeholder when there is no art, a data URL for local files
        (the placeholder if the file can't be read), or the URL unchanged.
    """
    if not art_url:
        return PLACEHOLDER_COVER

    if not art_url.startswith(FILE_SCHEME):
        return art_url

    path = local_path(art_url)
    try:
        data = path.read_bytes()
    except OSError as e:
        logger.error(f"Failed to read cover art file {path}: {e}")
        return PLACEHOLDER_COVER

    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{guess_mime_type(path)};base64,{encoded}"
