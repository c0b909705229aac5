"""axegrid run — Execute one accessibility audit.

Resolves configuration (YAML file, .env, environment, CLI options), runs
the audit and exits 0 when no violations were found, 1 on violations or on
any fatal error.

Features:
- TTY-aware output: Rich formatting only in interactive terminals; plain
  ASCII line-by-line output in CI/pipes (auto-detected or via --plain).
- --output json: print the report JSON on stdout for piping into jq.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path

import typer
from rich.console import Console

from axegrid.config import AxeGridConfig
from axegrid.engine.reporter import ConsoleReporter, render_report_json
from axegrid.engine.runner import AccessibilityRun
from axegrid.errors import (
    AuditError,
    AxeGridError,
    ConfigurationError,
    ConnectivityError,
    NavigationError,
    SessionError,
)

console = Console(stderr=True)
output_console = Console()  # stdout for machine-readable output

logger = logging.getLogger("axegrid.cli.run")

_ERROR_TITLES: dict[type[AxeGridError], str] = {
    ConfigurationError: "Config Error",
    ConnectivityError: "Connectivity Error",
    SessionError: "Session Error",
    NavigationError: "Navigation Error",
    AuditError: "Audit Error",
}

# LOG_LEVEL accepts the WebDriver-style names as well as Python's
_LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "silent": logging.CRITICAL + 10,
}


def configure_logging(config: AxeGridConfig, verbose: bool = False) -> None:
    """Apply LOG_LEVEL / DEBUG / --verbose to the root logger."""
    if verbose or config.system.debug:
        level = logging.DEBUG
    else:
        level = _LOG_LEVELS.get(config.system.log_level.lower(), logging.ERROR)
    logging.basicConfig(level=level, format="%(name)s  %(message)s")
    logging.getLogger().setLevel(level)


def load_cli_config(
    config_file: Path | None,
    env_file: Path | None,
    overrides: dict[str, str | None] | None = None,
) -> AxeGridConfig:
    """Resolve the run configuration the same way for every subcommand."""
    return AxeGridConfig.load(
        environ=os.environ,
        config_file=config_file,
        env_file=env_file,
        overrides=overrides,
    )


def _toggle(value: bool | None) -> str | None:
    if value is None:
        return None
    return "true" if value else "false"


def run(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Page to audit. Overrides TEST_URL.",
    ),
    browser: str | None = typer.Option(
        None,
        "--browser",
        "-b",
        help="Browser name (chrome, firefox, safari, webkit, edge). Overrides BROWSER_NAME.",
    ),
    transport: str | None = typer.Option(
        None,
        "--transport",
        "-t",
        help="Automation transport: playwright or webdriver. Overrides TRANSPORT.",
    ),
    rules: str | None = typer.Option(
        None,
        "--rules",
        "-r",
        help="Comma-separated axe rule tags. Overrides AXE_RULES.  [default: wcag2a,wcag2aa]",
    ),
    output_dir: Path | None = typer.Option(
        None,
        "--output-dir",
        help="Directory for the report and screenshot. Overrides OUTPUT_DIR.",
    ),
    grid: bool | None = typer.Option(
        None,
        "--grid/--no-grid",
        help="Run on / upload to Sauce Labs. Overrides RUN_ON_SAUCELABS.",
    ),
    headless: bool | None = typer.Option(
        None,
        "--headless/--no-headless",
        help="Run the local browser headless. Overrides HEADLESS.",
    ),
    config_file: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with environment-style keys (lowest priority).",
    ),
    env_file: Path = typer.Option(
        Path(".env"),
        "--env-file",
        help="Dotenv file to read if present.  [default: .env]",
    ),
    junit_xml: Path | None = typer.Option(
        None,
        "--junit-xml",
        help="Path to write a JUnit XML report (for CI integration).",
    ),
    output_format: str = typer.Option(
        "text",
        "--output",
        "-o",
        help="Output format: text or json.  [default: text]",
    ),
    plain: bool = typer.Option(
        False,
        "--plain",
        help="Use plain ASCII output -- no Rich formatting, colors, or Unicode.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging.",
    ),
) -> None:
    """Run an axe-core audit against the configured URL.

    \b
    Examples:
      axegrid run --no-grid --url https://example.com
      axegrid run --transport webdriver --browser firefox
      axegrid run --config axegrid.yaml --junit-xml reports/a11y.xml
      axegrid run --no-grid --output json | jq '.summary'
    """
    # Non-TTY context (CI/pipe) -- plain output keeps log files readable
    if not sys.stdout.isatty() and not plain:
        plain = True

    reporter = ConsoleReporter(console=console, plain=plain)

    if output_format not in ("text", "json"):
        reporter.print_error(f"Invalid output format: {output_format!r}\n\nValid formats: text, json", "Config Error")
        raise typer.Exit(code=1)

    overrides = {
        "TEST_URL": url,
        "BROWSER_NAME": browser,
        "TRANSPORT": transport,
        "AXE_RULES": rules,
        "OUTPUT_DIR": str(output_dir) if output_dir else None,
        "RUN_ON_SAUCELABS": _toggle(grid),
        "HEADLESS": _toggle(headless),
        "JUNIT_XML": str(junit_xml) if junit_xml else None,
    }

    try:
        config = load_cli_config(config_file, env_file, overrides)
    except ConfigurationError as exc:
        reporter.print_error(str(exc), "Config Error")
        raise typer.Exit(code=1)

    configure_logging(config, verbose)

    try:
        outcome = AccessibilityRun(config, reporter=reporter).execute()
    except KeyboardInterrupt:
        reporter.print_error("Run interrupted by user.", "Interrupted")
        raise typer.Exit(code=1)
    except AxeGridError as exc:
        if config.system.debug:
            logger.exception("Fatal error during accessibility testing")
        reporter.print_error(str(exc), _ERROR_TITLES.get(type(exc), "Error"))
        raise typer.Exit(code=1)
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=config.system.debug)
        reporter.print_error(
            f"Unexpected error: {exc}\n\nSet DEBUG=true for the full traceback.",
            "Fatal Error",
        )
        raise typer.Exit(code=1)

    if output_format == "json":
        output_console.print(render_report_json(outcome.report), markup=False, highlight=False, soft_wrap=True, end="")

    for warning in outcome.warnings:
        logger.warning("Run completed with warning: %s", warning)

    raise typer.Exit(code=outcome.exit_code)
