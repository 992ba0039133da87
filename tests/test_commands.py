"""Tests for the playerctl command set."""

import subprocess
from unittest.mock import MagicMock

import pytest

from conftest import FakeRunner
from media_controls.commands import Command, PlayerctlCommands, format_seconds
from media_controls.errors import ExecutionError, ParseAnomaly, UnknownCommand
from media_controls.models import LoopStatus, MediaPlayer, PlaybackStatus, ShuffleArg


@pytest.fixture
def commands(fake_runner):
    return PlayerctlCommands(fake_runner)


class TestDispatch:
    """Tests for name-based dispatch."""

    def test_every_command_has_a_handler(self, commands):
        assert set(commands._handlers) == set(Command)

    def test_invoke_by_name(self, commands, fake_runner):
        commands.invoke("PlayPause")
        assert fake_runner.calls == [["play-pause"]]

    def test_invoke_by_enum(self, commands, fake_runner):
        commands.invoke(Command.NEXT)
        assert fake_runner.calls == [["next"]]

    def test_unknown_command(self, commands, fake_runner):
        with pytest.raises(UnknownCommand) as exc_info:
            commands.invoke("Rewind")
        assert exc_info.value.name == "Rewind"
        assert fake_runner.calls == []

    def test_invoke_returns_result(self, commands):
        assert commands.invoke("GetVolume") == 0.5

    def test_runner_errors_propagate(self, commands, fake_runner):
        fake_runner.errors[("play",)] = ExecutionError(["play"], 1)
        with pytest.raises(ExecutionError):
            commands.invoke("Play")


class TestQueries:
    """Tests for getters."""

    def test_get_metadata(self, commands):
        metadata = commands.get_metadata()
        assert metadata.title == "Foo"
        assert metadata.length == 180000.0
        assert metadata.player is MediaPlayer.ELISA

    def test_get_position(self, commands):
        assert commands.get_position() == 12500

    def test_get_position_garbage(self, commands, fake_runner):
        fake_runner.responses[("position",)] = ""
        with pytest.raises(ParseAnomaly):
            commands.get_position()

    def test_get_playback_status(self, commands):
        assert commands.get_playback_status() is PlaybackStatus.PLAYING

    def test_get_loop_status(self, commands, fake_runner):
        fake_runner.responses[("loop",)] = "Playlist"
        assert commands.get_loop_status() is LoopStatus.PLAYLIST

    def test_get_loop_status_garbage(self, commands, fake_runner):
        fake_runner.responses[("loop",)] = "Sometimes"
        with pytest.raises(ParseAnomaly):
            commands.get_loop_status()

    @pytest.mark.parametrize("output,expected", [
        ("On", True), ("Off", False), ("true", True), ("false", False),
    ])
    def test_get_shuffle(self, commands, fake_runner, output, expected):
        fake_runner.responses[("shuffle",)] = output
        assert commands.get_shuffle() is expected

    def test_get_volume_garbage(self, commands, fake_runner):
        fake_runner.responses[("volume",)] = "loud"
        with pytest.raises(ParseAnomaly):
            commands.get_volume()


class TestPosition:
    """Tests for seek and position arguments."""

    def test_seek_forward(self, commands, fake_runner):
        commands.seek(5)
        assert fake_runner.calls == [["position", "5+"]]

    def test_seek_backward(self, commands, fake_runner):
        """Backward seeks use the magnitude with a trailing minus."""
        commands.seek(-5)
        assert fake_runner.calls == [["position", "5-"]]

    def test_seek_from_string(self, commands, fake_runner):
        commands.invoke("Seek", "-2.5")
        assert fake_runner.calls == [["position", "2.5-"]]

    def test_set_position(self, commands, fake_runner):
        commands.set_position(90500)
        assert fake_runner.calls == [["position", "90.5"]]

    def test_set_position_clamps_negative(self, commands, fake_runner):
        commands.set_position(-100)
        assert fake_runner.calls == [["position", "0"]]

    def test_set_position_delta(self, commands, fake_runner):
        commands.set_position_delta(-10000)
        assert fake_runner.calls == [["position", "10-"]]

    def test_non_finite_rejected(self, commands, fake_runner):
        with pytest.raises(ValueError):
            commands.set_position(float("nan"))
        assert fake_runner.calls == []

    def test_format_seconds(self):
        assert format_seconds(1.0) == "1"
        assert format_seconds(0.25) == "0.25"
        assert format_seconds(1e-7) == "0"


class TestSetters:
    """Tests for loop, shuffle and volume setters."""

    def test_set_loop_status(self, commands, fake_runner):
        commands.invoke("SetLoopStatus", "Track")
        assert fake_runner.calls == [["loop", "Track"]]

    def test_set_loop_status_invalid(self, commands):
        with pytest.raises(ValueError):
            commands.set_loop_status("Forever")

    @pytest.mark.parametrize("value,expected", [
        (True, "On"), (False, "Off"), (ShuffleArg.TOGGLE, "Toggle"), ("Off", "Off"),
    ])
    def test_set_shuffle(self, commands, fake_runner, value, expected):
        commands.set_shuffle(value)
        assert fake_runner.calls == [["shuffle", expected]]

    def test_set_volume_level(self, commands, fake_runner):
        commands.set_volume(0.75)
        assert fake_runner.calls == [["volume", "0.75"]]

    def test_set_volume_clamped(self, commands, fake_runner):
        commands.set_volume(1.5)
        assert fake_runner.calls == [["volume", "1"]]

    def test_set_volume_relative_string(self, commands, fake_runner):
        commands.invoke("SetVolume", "0.1+")
        assert fake_runner.calls == [["volume", "0.1+"]]

    def test_set_volume_invalid_string(self, commands, fake_runner):
        with pytest.raises(ValueError):
            commands.set_volume("max")
        assert fake_runner.calls == []


class TestOpenExternal:
    """Tests for revealing a track's folder."""

    def test_opens_parent_folder(self, monkeypatch):
        popen = MagicMock()
        monkeypatch.setattr(subprocess, "Popen", popen)
        runner = FakeRunner()

        PlayerctlCommands(runner).open_external("file:///music/My%20Album/01.flac")

        assert popen.call_args.args[0] == ["xdg-open", "/music/My Album"]
        assert runner.calls == []

    def test_spawn_failure(self, monkeypatch):
        monkeypatch.setattr(subprocess, "Popen", MagicMock(side_effect=OSError("nope")))
        with pytest.raises(ExecutionError) as exc_info:
            PlayerctlCommands(FakeRunner()).open_external("file:///music/a.flac")
        assert exc_info.value.program == "xdg-open"
