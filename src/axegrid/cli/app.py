"""axegrid CLI — Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from axegrid import __version__

TAGLINE = "axe-core accessibility audits on local browsers or a remote grid."

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold cyan]axegrid[/bold cyan] v{__version__}")
        console.print(f"  {TAGLINE}", style="dim")
        raise typer.Exit()


app = typer.Typer(
    name="axegrid",
    help=TAGLINE,
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show axegrid version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """axegrid -- accessibility testing with axe-core.

    Configured through environment variables, a .env file or a YAML file.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# ── Register subcommands ──────────────────────────────────────────────────

from axegrid.cli.config_cmd import config_app  # noqa: E402
from axegrid.cli.install import install  # noqa: E402
from axegrid.cli.report import report  # noqa: E402
from axegrid.cli.run import run  # noqa: E402

app.command(name="run", help="Run an accessibility audit against TEST_URL.")(run)
app.command(name="report", help="Show the summary of a saved axe report.")(report)
app.command(name="install", help="Install browser dependencies (Playwright).")(install)
app.add_typer(config_app, name="config", help="View the resolved axegrid configuration.")
