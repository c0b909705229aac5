"""axegrid config — View the resolved axegrid configuration.

Subcommands: show.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from axegrid.cli.run import load_cli_config
from axegrid.errors import ConfigurationError

console = Console()

config_app = typer.Typer(
    name="config",
    help="View the resolved axegrid configuration.",
    no_args_is_help=True,
)


@config_app.command(name="show")
def config_show(
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with environment-style keys.",
    ),
    env_file: Path = typer.Option(
        Path(".env"),
        "--env-file",
        help="Dotenv file to read if present.",
    ),
) -> None:
    """Show the effective configuration after merging file, .env and environment.

    Access keys are masked for safety.
    """
    try:
        config = load_cli_config(config_file, env_file)
    except ConfigurationError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)

    table = Table(title="axegrid configuration", border_style="cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in config.as_display_dict().items():
        table.add_row(key, str(value))
    console.print(table)

    try:
        config.validate()
    except ConfigurationError as exc:
        console.print(f"\n[yellow]Warning:[/yellow] {exc}")
