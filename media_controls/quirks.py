"""Per-player behavioral differences.

Most players emit a status change whenever the track changes, so a
status event is a good moment to re-read the full metadata. Players that
don't get an entry here describing how to listen to them instead.
"""

from dataclasses import dataclass

from .models import MediaPlayer


@dataclass(frozen=True)
class QuirkProfile:
    """How to listen to a particular player.

    Attributes:
        needs_metadata_follow: Run an extra `--follow metadata` listener
            while this player is active, because status events don't fire
            on track changes.
        status_fast_path: Treat a status event as status + position only
            (no metadata refetch); the metadata listener covers tracks.
    """

    needs_metadata_follow: bool = False
    status_fast_path: bool = False


DEFAULT_PROFILE = QuirkProfile()

QUIRKS: dict[MediaPlayer, QuirkProfile] = {
    # Strawberry keeps its status on track change and reports each new
    # track twice: first without artUrl, then with a /tmp cover file.
    MediaPlayer.STRAWBERRY: QuirkProfile(
        needs_metadata_follow=True,
        status_fast_path=True,
    ),
}


def profile_for(player: MediaPlayer) -> QuirkProfile:
    """Return the quirk profile for a player (the default if none)."""
    return QUIRKS.get(player, DEFAULT_PROFILE)
