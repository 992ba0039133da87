"""Shared test fixtures for media-controls tests."""

import logging
import queue
import subprocess
import threading
import time
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from media_controls.events import Event
from media_controls.metadata import METADATA_FORMAT
from media_controls.runner import FollowProcess
from media_controls.selector import DEFAULT_PLAYER_ARG
from media_controls.settings import PlayerSetting


# Commands that should never run in tests - they talk to the real desktop
BLOCKED_COMMANDS = {
    "playerctl",
    "xdg-open",
}


def _is_blocked(args, kwargs) -> bool:
    cmd = args[0] if args else kwargs.get("args", [])
    if isinstance(cmd, str):
        cmd_parts = cmd.split()
    else:
        cmd_parts = list(cmd) if cmd else []
    return bool(cmd_parts) and Path(str(cmd_parts[0])).name in BLOCKED_COMMANDS


def _safe_subprocess_run(original_run):
    """Wrapper that blocks playerctl and xdg-open during tests."""
    def wrapper(*args, **kwargs):
        if _is_blocked(args, kwargs):
            mock_result = MagicMock()
            mock_result.returncode = 0
            mock_result.stdout = ""
            mock_result.stderr = ""
            return mock_result
        return original_run(*args, **kwargs)
    return wrapper


def _safe_subprocess_popen(original_popen):
    """Wrapper that blocks playerctl and xdg-open during tests."""
    def wrapper(*args, **kwargs):
        if _is_blocked(args, kwargs):
            mock_proc = MagicMock()
            mock_proc.pid = 99999
            mock_proc.poll.return_value = 0
            mock_proc.returncode = 0
            mock_proc.stdout = iter(())
            return mock_proc
        return original_popen(*args, **kwargs)
    return wrapper


@pytest.fixture(autouse=True)
def block_desktop_commands(monkeypatch):
    """
    Automatically block real playerctl and xdg-open invocations.

    Tests that need to verify these commands are called should use
    explicit mocking with monkeypatch.
    """
    original_run = subprocess.run
    original_popen = subprocess.Popen

    monkeypatch.setattr("subprocess.run", _safe_subprocess_run(original_run))
    monkeypatch.setattr("subprocess.Popen", _safe_subprocess_popen(original_popen))


def wait_for(predicate, timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll until predicate() is true (listener threads run asynchronously)."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


METADATA_KEY = ("metadata", "--format", METADATA_FORMAT)

ELISA_METADATA = "\n".join(
    [
        "title:Foo",
        "artist:Bar",
        "album:Baz",
        "url:file:///music/Bar/Baz/01%20Foo.flac",
        "length:180000000",
        "artUrl:https://covers.example.org/baz.png",
        "trackid:/org/kde/elisa/playlist/1",
        "player:elisa",
    ]
)

STRAWBERRY_METADATA = "\n".join(
    [
        "title:Song",
        "artist:Someone",
        "album:Record",
        "url:file:///music/Someone/Record/02.ogg",
        "length:200000000",
        "trackid:/org/strawberrymb/strawberry/Track/2",
        "player:strawberry",
    ]
)


class FakeStdout:
    """Line iterator fed from the test; ends when the process is terminated."""

    _EOF = object()

    def __init__(self):
        self._lines: queue.Queue = queue.Queue()

    def push(self, line: str) -> None:
        self._lines.put(line + "\n")

    def close(self) -> None:
        self._lines.put(self._EOF)

    def __iter__(self):
        while True:
            line = self._lines.get()
            if line is self._EOF:
                return
            yield line


class FakeProcess:
    """Stand-in for a `playerctl --follow` Popen object."""

    def __init__(self, player_arg: str, args: list[str]):
        self.player_arg = player_arg
        self.args = args
        self.stdout = FakeStdout()
        self.returncode = None
        self.terminated = False
        self.killed = False

    @property
    def channel(self) -> str:
        return self.args[0]

    def push(self, *lines: str) -> None:
        for line in lines:
            self.stdout.push(line)

    def poll(self):
        return self.returncode

    def terminate(self) -> None:
        self.terminated = True
        self._exit(-15)

    def kill(self) -> None:
        self.killed = True
        self._exit(-9)

    def wait(self, timeout=None) -> int:
        return self.returncode

    def _exit(self, code: int) -> None:
        if self.returncode is None:
            self.returncode = code
            self.stdout.close()


class FakeRunner:
    """Controllable CommandRunner.

    One-shot commands answer from `responses` (keyed by the argument
    tuple) and are recorded in `calls`; follow listeners are FakeProcess
    objects the test feeds lines into.
    """

    def __init__(self, installed: bool = True):
        self.player_arg = DEFAULT_PLAYER_ARG
        self.installed = installed
        self.check_count = 0
        self.responses: dict[tuple, str] = {
            METADATA_KEY: ELISA_METADATA,
            ("status",): "Playing",
            ("position",): "12.5",
            ("shuffle",): "Off",
            ("loop",): "None",
            ("volume",): "0.5",
        }
        self.errors: dict[tuple, Exception] = {}
        self.calls: list[list[str]] = []
        self.processes: list[FakeProcess] = []
        self._lock = threading.Lock()

    def run(self, args: list[str]) -> str:
        key = tuple(args)
        with self._lock:
            self.calls.append(list(args))
        if key in self.errors:
            raise self.errors[key]
        return self.responses.get(key, "")

    def is_available(self) -> bool:
        self.check_count += 1
        return self.installed

    def follow(self, args: list[str]) -> FollowProcess:
        process = FakeProcess(self.player_arg, list(args))
        with self._lock:
            self.processes.append(process)
        return process

    # Test helper methods

    def live(self, channel: str) -> FakeProcess | None:
        """The most recent not-terminated process for a channel."""
        with self._lock:
            for process in reversed(self.processes):
                if process.channel == channel and process.returncode is None:
                    return process
        return None

    def live_channels(self) -> list[str]:
        with self._lock:
            return sorted(p.channel for p in self.processes if p.returncode is None)


class RecordingSink:
    """EventSink that keeps every event it receives."""

    def __init__(self):
        self._events: list[Event] = []
        self._lock = threading.Lock()

    def emit(self, event: Event) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> list[Event]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: type) -> list:
        return [e for e in self.events if isinstance(e, event_type)]


class FakeTime:
    """Manually advanced clock for PositionClock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_runner():
    """Create a fake runner with playerctl installed."""
    return FakeRunner()


@pytest.fixture
def missing_runner():
    """Create a fake runner that simulates playerctl not being installed."""
    return FakeRunner(installed=False)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def fake_time():
    return FakeTime()


@pytest.fixture
def elisa_settings():
    return {"elisa": PlayerSetting(enabled=True, priority=0)}


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers added by setup_logging (they may hold CliRunner streams)."""
    yield
    logger = logging.getLogger("media_controls")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
