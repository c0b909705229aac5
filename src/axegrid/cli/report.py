"""axegrid report — Show the summary of a saved axe report.

Reads an ``axe-report.json`` written by ``axegrid run`` and prints the same
summary and violation details the run printed.
"""

from __future__ import annotations

import sys
from pathlib import Path

import typer
from rich.console import Console

from axegrid.engine.reporter import ConsoleReporter, load_report
from axegrid.models import DEFAULT_OUTPUT_DIR, DEFAULT_OUTPUT_FILENAME

console = Console()


def report(
    path: Path = typer.Argument(
        Path(DEFAULT_OUTPUT_DIR) / DEFAULT_OUTPUT_FILENAME,
        help="Report file to read.  [default: .tmp/axe-report.json]",
    ),
    fail_on_violations: bool = typer.Option(
        False,
        "--fail-on-violations",
        help="Exit 1 when the report contains violations.",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Use plain ASCII output.",
    ),
) -> None:
    """Print the summary and violations recorded in a saved report."""
    if not sys.stdout.isatty():
        plain = True
    reporter = ConsoleReporter(console=console, plain=plain)

    if not path.is_file():
        reporter.print_error(f"Report not found: {path}\n\nTo fix: axegrid run", "Report Error")
        raise typer.Exit(code=1)

    try:
        saved = load_report(path)
    except (ValueError, OSError) as exc:
        reporter.print_error(f"Could not read report {path}: {exc}", "Report Error")
        raise typer.Exit(code=1)

    reporter.step(f"{saved.url} -- \"{saved.page_title}\"")
    reporter.step(
        f"{saved.timestamp}  {saved.browser_info.name} {saved.browser_info.version} "
        f"({saved.browser_info.platform})  axe-core {saved.axe_version}  session {saved.session_id}"
    )
    reporter.step("")
    reporter.print_summary(saved)
    reporter.print_violations(saved.results.violations)
    reporter.print_outcome(saved)

    if fail_on_violations and not saved.passed:
        raise typer.Exit(code=1)
