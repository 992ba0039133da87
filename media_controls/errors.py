"""Exceptions raised by the playerctl layer."""


class PlayerctlError(Exception):
    """Base class for every playerctl related failure."""


class ExecutionError(PlayerctlError):
    """playerctl exited with a nonzero status or could not be spawned.

    Attributes:
        args_used: The argument list passed to playerctl (without the binary).
        exit_code: The process exit code, or None if it never ran.
        stderr: Whatever playerctl wrote to stderr.
    """

    def __init__(
        self,
        args_used: list[str],
        exit_code: int | None,
        stderr: str = "",
        program: str = "playerctl",
    ):
        self.args_used = list(args_used)
        self.program = program
        self.exit_code = exit_code
        self.stderr = stderr.strip()
        detail = f": {self.stderr}" if self.stderr else ""
        super().__init__(
            f"{program} {' '.join(self.args_used)} failed (exit code {exit_code}){detail}"
        )


class BinaryNotFound(ExecutionError):
    """playerctl is not installed or not on PATH (exit code 127)."""

    EXIT_CODE = 127

    def __init__(self, args_used: list[str], stderr: str = ""):
        super().__init__(args_used, self.EXIT_CODE, stderr)


class CommandTimedOut(ExecutionError):
    """A one-shot playerctl invocation did not finish in time."""

    def __init__(self, args_used: list[str], timeout: float):
        self.timeout = timeout
        super().__init__(args_used, None, f"timed out after {timeout}s")


class UnknownCommand(PlayerctlError):
    """A command name that is not part of the supported command set."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown command: {name}")


class ParseAnomaly(PlayerctlError):
    """playerctl output outside the expected domain.

    Follow-stream lines like this are transient noise (players closing or
    restarting); the supervisor discards them.
    """
