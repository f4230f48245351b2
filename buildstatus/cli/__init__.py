"""CLI interface for build-status.

Command groups are registered at import time.
"""

import logging

import click
from dotenv import load_dotenv

from buildstatus import __version__

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


@click.group(invoke_without_command=True)
@click.option(
    "--version",
    is_flag=True,
    help="Show the build-status version and exit.",
)
@click.pass_context
def main(ctx: click.Context, version: bool) -> None:
    """build-status - live status line for concurrent build activity.

    \b
      build-status demo            Simulate concurrent builds and downloads
      build-status replay FILE     Replay a JSON event log through the status line
    """
    if version:
        click.echo(__version__)
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def register_commands() -> None:
    """Register all commands with the main CLI."""
    from buildstatus.cli.demo import demo
    from buildstatus.cli.replay import replay

    main.add_command(demo)
    main.add_command(replay)


# Register commands at import time
register_commands()

__all__ = ["main"]
