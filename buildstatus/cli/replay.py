"""Replay command - watch a recorded JSON event log."""

import click
from rich.console import Console

from buildstatus.cli.logging import configure_cli_logging
from buildstatus.errors import ProgressBarError
from buildstatus.events import replay_events
from buildstatus.logger import LoggerSlot
from buildstatus.session import progress_bar_session

console = Console(stderr=True)


@click.command()
@click.argument("log_file", type=click.File("r", encoding="utf-8"))
@click.option(
    "--skip-invalid",
    is_flag=True,
    help="Skip lines that are not well-formed events instead of failing",
)
def replay(log_file, skip_invalid: bool) -> None:
    """Replay a JSON event log through the status line.

    LOG_FILE is a file of ``@nix {...}`` event lines, or ``-`` for stdin.

    \b
    Examples:
      build-status replay build.log
      nix build --log-format internal-json 2>&1 | build-status replay -
    """
    configure_cli_logging("replay")
    slot = LoggerSlot()

    try:
        with progress_bar_session(slot) as target:
            count = replay_events(log_file, target, skip_invalid=skip_invalid)
    except ProgressBarError as e:
        raise click.ClickException(str(e)) from e

    console.print(f"[dim]Replayed {count} events[/dim]")
