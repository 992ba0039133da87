"""
Low-level playerctl invocation layer.

This module provides the PlayerctlRunner class, which spawns the
playerctl binary either once (run) or as a long-lived `--follow`
listener (follow). Every invocation is prefixed with the current player
filter argument. The supervisor and the command set only talk to the
CommandRunner protocol, so a fake runner can be injected for tests.
"""

import logging
import subprocess
from typing import IO, Protocol

from . import config
from .errors import BinaryNotFound, CommandTimedOut, ExecutionError
from .selector import DEFAULT_PLAYER_ARG

logger = logging.getLogger("media_controls")


class FollowProcess(Protocol):
    """The parts of subprocess.Popen the supervisor relies on."""

    stdout: IO[str] | None

    def poll(self) -> int | None: ...

    def terminate(self) -> None: ...

    def kill(self) -> None: ...

    def wait(self, timeout: float | None = None) -> int: ...


class CommandRunner(Protocol):
    """Protocol for running playerctl.

    Attributes:
        player_arg: Player filter argument prepended to every invocation,
            e.g. "--player=elisa,vlc".
    """

    player_arg: str

    def run(self, args: list[str]) -> str:
        """Run playerctl once and return its trimmed stdout.

        Raises:
            BinaryNotFound: playerctl is not installed.
            CommandTimedOut: playerctl did not exit in time.
            ExecutionError: playerctl exited with a nonzero status.
        """
        ...

    def is_available(self) -> bool:
        """Check whether playerctl is installed.

        Returns:
            False if the binary is missing, True if it runs.

        Raises:
            ExecutionError: playerctl exists but failed.
        """
        ...

    def follow(self, args: list[str]) -> FollowProcess:
        """Start a `--follow` listener streaming one value per line."""
        ...


class PlayerctlRunner:
    """Default CommandRunner backed by the playerctl binary."""

    def __init__(
        self,
        binary: str | None = None,
        timeout: float | None = None,
        player_arg: str = DEFAULT_PLAYER_ARG,
    ):
        """Initialize the runner.

        Args:
            binary: playerctl executable. Defaults to PLAYERCTL_BIN.
            timeout: Seconds a one-shot command may take. Defaults to
                COMMAND_TIMEOUT.
            player_arg: Initial player filter argument.
        """
        self.binary = binary or config.PLAYERCTL_BIN
        self.timeout = timeout if timeout is not None else config.COMMAND_TIMEOUT
        self.player_arg = player_arg

    def _exec(self, argv: list[str]) -> str:
        args = argv[1:]
        try:
            result = subprocess.run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise BinaryNotFound(args, f"{self.binary} not found")
        except subprocess.TimeoutExpired:
            logger.warning(f"playerctl {' '.join(args)} timed out after {self.timeout}s")
            raise CommandTimedOut(args, self.timeout)
        except OSError as e:
            raise ExecutionError(args, None, str(e))

        if result.returncode == BinaryNotFound.EXIT_CODE:
            raise BinaryNotFound(args, result.stderr)
        if result.returncode != 0:
            raise ExecutionError(args, result.returncode, result.stderr)
        return result.stdout.strip()

    def run(self, args: list[str]) -> str:
        """Run `playerctl <player_arg> <args>` exactly once."""
        return self._exec([self.binary, self.player_arg, *args])

    def run_unfiltered(self, args: list[str]) -> str:
        """Run playerctl without the player filter (e.g. --version)."""
        return self._exec([self.binary, *args])

    def is_available(self) -> bool:
        """Check for the playerctl binary with `playerctl --version`."""
        try:
            self.run_unfiltered(["--version"])
        except BinaryNotFound:
            return False
        return True

    def version(self) -> str | None:
        """Return the installed playerctl version, or None if missing."""
        try:
            return self.run_unfiltered(["--version"])
        except BinaryNotFound:
            return None

    def follow(self, args: list[str]) -> subprocess.Popen:
        """Spawn `playerctl <player_arg> --follow <args>`.

        stdout is line-buffered text; stderr is discarded since follow
        streams only ever report "No players found" there.

        Raises:
            BinaryNotFound: playerctl is not installed.
        """
        argv = [self.binary, self.player_arg, "--follow", *args]
        logger.debug(f"Spawning listener: {' '.join(argv)}")
        try:
            return subprocess.Popen(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                stdin=subprocess.DEVNULL,
                text=True,
                bufsize=1,
            )
        except FileNotFoundError:
            raise BinaryNotFound(argv[1:], f"{self.binary} not found")
