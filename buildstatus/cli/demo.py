"""Demo command - simulated concurrent builds through the status line."""

import click
from rich.console import Console

from buildstatus.cli.logging import configure_cli_logging
from buildstatus.errors import ProgressBarError
from buildstatus.logger import LoggerSlot
from buildstatus.session import progress_bar_session
from buildstatus.simulate import Simulation

console = Console(stderr=True)


@click.command()
@click.option("--workers", "-w", default=4, show_default=True, help="Worker threads")
@click.option(
    "--builds", "-n", default=12, show_default=True, help="Packages to build"
)
@click.option("--seed", type=int, default=None, help="Random seed for a repeatable run")
@click.option(
    "--delay",
    type=float,
    default=0.2,
    show_default=True,
    help="Maximum pause between progress reports (seconds)",
)
@click.option(
    "--failure-rate",
    type=click.FloatRange(0.0, 1.0),
    default=0.1,
    show_default=True,
    help="Probability that a build fails",
)
def demo(
    workers: int, builds: int, seed: int | None, delay: float, failure_rate: float
) -> None:
    """Simulate concurrent downloads, builds and copies.

    \b
    Examples:
      build-status demo
      build-status demo --workers 8 --builds 40 --seed 1
    """
    configure_cli_logging("demo")
    slot = LoggerSlot()

    try:
        with progress_bar_session(slot) as target:
            summary = Simulation(
                target,
                workers=workers,
                builds=builds,
                seed=seed,
                delay=delay,
                failure_rate=failure_rate,
            ).run()
    except ProgressBarError as e:
        raise click.ClickException(str(e)) from e

    console.print(
        f"[green]{summary.built} built[/green], "
        f"[red]{summary.failed} failed[/red], "
        f"{summary.bytes_downloaded / (1024 * 1024):.1f} MiB downloaded"
    )
