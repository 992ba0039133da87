"""Trailing-edge debouncing for rapid-fire calls (seek bar drags)."""

import logging
import threading
from typing import Any, Callable

logger = logging.getLogger("media_controls")


class Debouncer:
    """Delay calls to `func` until `wait` seconds pass without a new call.

    Only the arguments of the last call in a burst are used.

    Example:
        seek = Debouncer(store.seek, 0.25)
        for pos in drag_positions:
            seek(pos)      # one store.seek(drag_positions[-1]) later
    """

    def __init__(self, func: Callable[..., Any], wait: float):
        self._func = func
        self.wait = wait
        self._lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._pending: tuple[tuple, dict] | None = None

    def __call__(self, *args: Any, **kwargs: Any) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = (args, kwargs)
            self._timer = threading.Timer(self.wait, self._fire)
            self._timer.daemon = True
            self._timer.start()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._pending is not None

    def flush(self) -> None:
        """Run the pending call immediately, if any."""
        self._fire()

    def cancel(self) -> None:
        """Drop the pending call."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            self._pending = None

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = None
            pending, self._pending = self._pending, None
        if pending is None:
            return
        args, kwargs = pending
        try:
            self._func(*args, **kwargs)
        except Exception:
            logger.exception("Debounced call failed")
