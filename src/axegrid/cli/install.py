"""axegrid install — Download the Playwright browser builds a run needs.

Browser names go through the same resolution as ``axegrid run``, so
``--browsers chrome,safari`` installs the chromium and webkit builds.  The
webdriver transport has no install step: Selenium Manager fetches local
drivers and the grid provides remote ones.
"""

from __future__ import annotations

import os
import subprocess
import sys

import typer
from rich.console import Console
from rich.panel import Panel

from axegrid.engine.browser_session import resolve_browser_type
from axegrid.models import DEFAULT_BROWSER_NAME

console = Console()

_INSTALL_TIMEOUT = 600  # seconds


def playwright_engines(browsers: str) -> list[str]:
    """Resolve comma-separated browser names to unique Playwright engines, in order."""
    engines: list[str] = []
    for name in browsers.split(","):
        name = name.strip()
        if not name:
            continue
        engine = resolve_browser_type(name)
        if engine not in engines:
            engines.append(engine)
    return engines


def install_command(engines: list[str], with_deps: bool = False) -> list[str]:
    cmd = [sys.executable, "-m", "playwright", "install"]
    if with_deps:
        cmd.append("--with-deps")
    return cmd + engines


def install(
    browsers: str | None = typer.Option(
        None,
        "--browsers",
        "-b",
        help="Comma-separated browser names. Defaults to BROWSER_NAME, or chrome.",
    ),
    with_deps: bool = typer.Option(
        False,
        "--with-deps",
        help="Also install the system libraries the browsers need (Linux CI images).",
    ),
    ci: bool = typer.Option(
        False,
        "--ci",
        help="No spinner or success message; failures are still reported.",
    ),
) -> None:
    """Install the Playwright browsers used by the playwright transport."""
    engines = playwright_engines(browsers or os.environ.get("BROWSER_NAME") or DEFAULT_BROWSER_NAME)
    cmd = install_command(engines, with_deps)

    def _run() -> subprocess.CompletedProcess[str]:
        return subprocess.run(cmd, capture_output=True, text=True, timeout=_INSTALL_TIMEOUT)

    try:
        if ci:
            result = _run()
        else:
            with console.status(f"[bold blue]Downloading {', '.join(engines)}...[/bold blue]", spinner="dots"):
                result = _run()
    except subprocess.TimeoutExpired:
        console.print(f"[red]playwright install did not finish within {_INSTALL_TIMEOUT // 60} minutes.[/red]")
        raise typer.Exit(code=1)
    except FileNotFoundError:
        console.print("[red]Could not start the Python interpreter to run playwright.[/red]")
        raise typer.Exit(code=1)

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip() or "no output"
        console.print(
            Panel(
                f"{detail}\n\n[dim]Command:[/dim] {' '.join(cmd)}",
                title=f"[red]playwright install exited with {result.returncode}[/red]",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)

    if not ci:
        console.print(f"[green]Ready:[/green] {', '.join(engines)}")
        console.print("Try it: [bold]axegrid run --no-grid --url https://example.com[/bold]")
