"""
Command-line interface for media-controls.

    media-controls watch                 stream events as JSON lines
    media-controls invoke SetVolume 0.5  run one command
    media-controls players               show the player filter
    media-controls doctor                check the playerctl setup
"""

import json
import signal
import sys
import threading
from dataclasses import asdict
from enum import Enum
from pathlib import Path

import click

from . import config
from .commands import PlayerctlCommands
from .errors import PlayerctlError
from .events import JsonLinesSink
from .models import PlayerctlMetadata
from .processes import player_process_status
from .runner import PlayerctlRunner
from .selector import DEFAULT_PLAYER_ARG, compute_filter_arg, ordered_players
from .settings import load_settings
from .supervisor import PlayerctlSupervisor
from .version import __version__


def _load(ctx: click.Context) -> dict:
    try:
        return load_settings(ctx.obj['settings_path'])
    except (ValueError, OSError) as e:
        raise click.ClickException(f"Invalid player settings: {e}")


def _format_result(result) -> str | None:
    if result is None:
        return None
    if isinstance(result, PlayerctlMetadata):
        data = asdict(result)
        data['player'] = result.player.value
        return json.dumps(data, indent=2)
    if isinstance(result, Enum):
        return str(result.value)
    return str(result)


@click.group(name='media-controls')
@click.option('--settings', 'settings_path', type=click.Path(path_type=Path),
              default=None, help='Player settings JSON file')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(__version__, prog_name='media-controls')
@click.pass_context
def cli(ctx, settings_path, debug):
    """Now-playing state and controls for local MPRIS players (via playerctl)."""
    ctx.ensure_object(dict)
    ctx.obj['settings_path'] = settings_path or config.SETTINGS_FILE
    config.setup_logging('DEBUG' if debug else None)


@cli.command()
@click.pass_context
def watch(ctx):
    """Follow the active player and print events as JSON lines.

    Runs until interrupted (Ctrl-C or SIGTERM).
    """
    settings = _load(ctx)
    stop = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stop.set())

    sink = JsonLinesSink(click.get_text_stream('stdout'))
    with PlayerctlSupervisor(sink=sink) as supervisor:
        try:
            supervisor.start(settings)
        except PlayerctlError as e:
            raise click.ClickException(str(e))
        if not supervisor.is_running():
            # PlayerctlNotFound has already been printed
            sys.exit(1)
        try:
            while not stop.wait(0.5):
                pass
        except KeyboardInterrupt:
            pass


@cli.command()
@click.argument('command')
@click.argument('args', nargs=-1)
@click.pass_context
def invoke(ctx, command, args):
    """Run one playerctl command against the active player.

    COMMAND is one of: GetMetadata, Play, Pause, PlayPause, Next, Previous,
    Seek, GetPosition, SetPosition, SetPositionDelta, GetLoopStatus,
    SetLoopStatus, GetPlaybackStatus, GetShuffle, SetShuffle, GetVolume,
    SetVolume, OpenExternal.
    """
    settings = _load(ctx)
    runner = PlayerctlRunner(player_arg=compute_filter_arg(settings))
    commands = PlayerctlCommands(runner)
    try:
        result = commands.invoke(command, *args)
    except (PlayerctlError, ValueError) as e:
        raise click.ClickException(str(e))
    except TypeError:
        raise click.ClickException(f"Wrong number of arguments for {command}")

    output = _format_result(result)
    if output is not None:
        click.echo(output)


@cli.command()
@click.pass_context
def players(ctx):
    """Show enabled players in priority order and the resulting filter."""
    settings = _load(ctx)
    order = ordered_players(settings)
    if not order:
        click.echo("No players enabled, listening to all players")
    for index, name in enumerate(order, start=1):
        click.echo(f"{index}. {name} (priority {settings[name].priority})")
    click.echo(f"Filter: {compute_filter_arg(settings, DEFAULT_PLAYER_ARG)}")


@cli.command()
@click.pass_context
def doctor(ctx):
    """Check that playerctl works and which configured players are running."""
    runner = PlayerctlRunner()
    problems = 0

    try:
        version = runner.version()
    except PlayerctlError as e:
        click.echo(f"❌ playerctl failed: {e}")
        problems += 1
    else:
        if version is None:
            click.echo(f"❌ playerctl not found ({runner.binary})")
            problems += 1
        else:
            click.echo(f"✅ playerctl {version}")

    settings_path = ctx.obj['settings_path']
    try:
        settings = load_settings(settings_path)
    except (ValueError, OSError) as e:
        click.echo(f"❌ {settings_path}: {e}")
        sys.exit(1)
    click.echo(f"Settings: {settings_path}" + ("" if settings_path.exists() else " (missing)"))

    for name, pid in player_process_status(sorted(settings)).items():
        state = "enabled" if settings[name].enabled else "disabled"
        running = f"running (PID {pid})" if pid else "not running"
        click.echo(f"  {name}: {state}, {running}")

    if problems:
        sys.exit(1)


def main():
    cli(obj={})


if __name__ == '__main__':
    main()
