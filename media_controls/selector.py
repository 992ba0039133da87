"""Player selection: settings -> playerctl `--player=` filter argument."""

import logging
from collections.abc import Mapping

logger = logging.getLogger("media_controls")

# An empty argument makes playerctl fail with "Command not recognized",
# while a bare --player= listens to every player.
DEFAULT_PLAYER_ARG = "--player="


def ordered_players(settings: Mapping) -> list[str]:
    """Enabled player names, by priority then case-insensitive name."""
    enabled = [name for name, setting in settings.items() if setting.enabled]
    return sorted(
        enabled,
        key=lambda name: (settings[name].priority, name.casefold(), name),
    )


def compute_filter_arg(settings: Mapping, previous: str = DEFAULT_PLAYER_ARG) -> str:
    """Build the player filter argument for the given settings.

    Args:
        settings: Player name -> PlayerSetting mapping.
        previous: The argument currently in use.

    Returns:
        "--player=a,b,..." in priority order, or `previous` unchanged when
        no player is enabled, so that an empty selection never turns into
        "listen to nothing".
    """
    players = ordered_players(settings)
    if not players:
        return previous
    return DEFAULT_PLAYER_ARG + ",".join(players)


class PlayerSelector:
    """Keeps the current filter argument and reports when it changes."""

    def __init__(self, player_arg: str = DEFAULT_PLAYER_ARG):
        self.player_arg = player_arg

    def update(self, settings: Mapping) -> bool:
        """Recompute the argument from settings.

        Returns:
            True if the argument changed (listeners must be restarted).
        """
        new_arg = compute_filter_arg(settings, self.player_arg)
        if new_arg == self.player_arg:
            return False
        logger.debug(f"Player filter changed: {self.player_arg!r} -> {new_arg!r}")
        self.player_arg = new_arg
        return True
