"""Client-side playback position extrapolation.

playerctl only reports the position on seeks, track changes and explicit
queries. Between those reports the displayed position is the last known
value plus the time elapsed since it was recorded, but only while
playing.
"""

import threading
import time
from typing import Callable


class PositionClock:
    """Extrapolates the playback position from a recorded anchor.

    All timestamps are in seconds from the injected `now` function
    (time.monotonic by default); positions are in milliseconds.
    """

    def __init__(self, now: Callable[[], float] = time.monotonic):
        self._now = now
        self._lock = threading.Lock()
        self._last_known = 0
        self._anchor = now()
        self._playing = False
        self._frozen = False

    @property
    def last_known(self) -> int:
        """The last authoritative position, without extrapolation."""
        return self._last_known

    @property
    def playing(self) -> bool:
        return self._playing

    @property
    def frozen(self) -> bool:
        return self._frozen

    def record_position(self, position_milli: int, observed_at: float | None = None) -> None:
        """Store an authoritative position and reset the anchor.

        Args:
            position_milli: Position reported by the player.
            observed_at: When it was observed. Defaults to now.
        """
        with self._lock:
            self._last_known = int(position_milli)
            self._anchor = self._now() if observed_at is None else observed_at

    def set_playing(self, playing: bool) -> None:
        """Switch extrapolation on or off.

        Pausing folds the elapsed time into the last known position so
        that time spent paused is never counted.
        """
        with self._lock:
            if playing == self._playing:
                return
            now = self._now()
            if self._playing and not self._frozen:
                self._last_known += self._elapsed_milli(now)
            self._anchor = now
            self._playing = playing

    def freeze(self) -> None:
        """Stop extrapolating (a seek is in flight)."""
        with self._lock:
            if self._frozen:
                return
            now = self._now()
            if self._playing:
                self._last_known += self._elapsed_milli(now)
            self._anchor = now
            self._frozen = True

    def thaw(self) -> None:
        """Resume extrapolating from now."""
        with self._lock:
            self._anchor = self._now()
            self._frozen = False

    def position(self, at: float | None = None) -> int:
        """Displayed position in milliseconds.

        Args:
            at: Time to compute the position for. Defaults to now.
        """
        with self._lock:
            if not self._playing or self._frozen:
                return self._last_known
            now = self._now() if at is None else at
            return self._last_known + self._elapsed_milli(now)

    def _elapsed_milli(self, now: float) -> int:
        return max(0, round((now - self._anchor) * 1000))
