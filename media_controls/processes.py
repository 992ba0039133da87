"""Process discovery helpers for diagnostics."""

import logging
from typing import Optional

import psutil

logger = logging.getLogger("media_controls")


def find_process_by_name(name: str) -> Optional[psutil.Process]:
    """Find a running process whose name matches, case-insensitively.

    MPRIS names are usually the lowercased executable name
    ("strawberry", "elisa", "vlc"), but some executables are capitalized.

    Returns the first matching process, or None.
    """
    wanted = name.lower()
    try:
        for proc in psutil.process_iter(['pid', 'name']):
            try:
                if proc.name().lower() == wanted and proc.is_running():
                    return proc
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                continue
    except Exception as e:
        logger.error(f"Error finding process by name: {e}")
    return None


def player_process_status(names: list[str]) -> dict[str, Optional[int]]:
    """Map each player name to the PID of a running process, or None."""
    status: dict[str, Optional[int]] = {}
    for name in names:
        proc = find_process_by_name(name)
        status[name] = proc.pid if proc else None
    return status
