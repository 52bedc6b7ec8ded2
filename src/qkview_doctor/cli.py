"""
Click-based CLI for qkview-doctor.

This module only ORCHESTRATES: it loads settings, runs the pipeline and
hands the result to a reporter.
"""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from qkview_doctor import __version__
from qkview_doctor.actions.reporters.json_reporter import JsonReporter
from qkview_doctor.actions.reporters.rich_reporter import RichReporter
from qkview_doctor.config import load_settings
from qkview_doctor.errors import QkviewDoctorError
from qkview_doctor.parser.bigip_conf import BigIPConfigParser
from qkview_doctor.pipeline import run_local_analysis

console = Console()
err_console = Console(stderr=True)

DEFAULT_OUTPUT_NAME = "metadata.json"


def _setup_logging(verbose: bool) -> None:
    """Route package logs through Rich on stderr."""
    logger = logging.getLogger("qkview_doctor")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.addHandler(RichHandler(console=err_console, show_path=False, markup=False))
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False


@click.group()
@click.version_option(version=__version__, prog_name="qkview-doctor")
def main() -> None:
    """qkview-doctor: offline diagnostics for F5 BIG-IP qkview archives.

    Classifies the archive's logs, checks virtual server health against
    bigip.conf and produces a prioritized report.
    """


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Write the JSON report here")
@click.option("--stdout", "to_stdout", is_flag=True, help="Print the JSON report to stdout")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "rich"]),
    default="json",
    show_default=True,
    help="rich also renders a terminal summary",
)
@click.option("--default-year", type=int, help="Year for log dates written without one")
@click.option("--reference-time", help="ISO-8601 'now' used to infer missing years")
@click.option("--config", "config_file", type=click.Path(exists=True, dir_okay=False), help="YAML settings file")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def analyze(
    file: str,
    output: str | None,
    to_stdout: bool,
    output_format: str,
    default_year: int | None,
    reference_time: str | None,
    config_file: str | None,
    verbose: bool,
) -> None:
    """Analyze a qkview archive and write metadata.json.

    Read-only: the archive is unpacked into a scratch directory.
    """
    _setup_logging(verbose)
    try:
        settings = load_settings(
            config_file,
            output_path=output,
            stdout=to_stdout or None,
            default_year=default_year,
            reference_time=reference_time,
        )

        with err_console.status("[bold blue]Analyzing qkview...[/]"):
            result = run_local_analysis(file, settings)

        output_path = settings.output_path or str(Path(file).parent / DEFAULT_OUTPUT_NAME)
        JsonReporter(path=output_path, stdout=settings.stdout, console=console).report(result)

        if output_format == "rich":
            RichReporter(err_console if settings.stdout else console).report(result)
        if not settings.stdout:
            err_console.print(f"[green]Report written to[/] {output_path}")
    except QkviewDoctorError as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)


@main.command("parse-config")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def parse_config(file: str, as_json: bool) -> None:
    """Parse a bigip.conf and list its virtual servers and pools."""
    parser = BigIPConfigParser()
    try:
        config = parser.parse_file(file)
    except OSError as e:
        err_console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({**asdict(config), "errors": parser.errors}, indent=2))
        return

    vs_table = Table(title=f"Virtual Servers ({len(config.virtual_servers)})")
    vs_table.add_column("Name", style="bold")
    vs_table.add_column("Destination")
    vs_table.add_column("Pool")
    vs_table.add_column("Disabled")
    for name in sorted(config.virtual_servers):
        vs = config.virtual_servers[name]
        vs_table.add_row(vs.name, vs.destination, vs.pool, "yes" if vs.disabled else "")
    console.print(vs_table)

    pool_table = Table(title=f"Pools ({len(config.pools)})")
    pool_table.add_column("Name", style="bold")
    pool_table.add_column("Monitor")
    pool_table.add_column("Members", justify="right")
    for name in sorted(config.pools):
        pool = config.pools[name]
        pool_table.add_row(pool.name, pool.monitor, f"{pool.active_members()}/{pool.total_members()}")
    console.print(pool_table)

    for err in parser.errors:
        err_console.print(f"[yellow]Warning:[/] {err}")


if __name__ == "__main__":
    main()
