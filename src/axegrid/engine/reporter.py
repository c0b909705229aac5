"""axegrid Reporter — console output and run artifacts.

Console output comes in two flavours, like the rest of the CLI: Rich
formatting for interactive terminals, plain ASCII lines for CI logs and
screen readers.  Artifacts are the JSON report, the violations screenshot
and an optional JUnit XML file.
"""

from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from axegrid.config import AxeGridConfig, OutputConfig
from axegrid.engine.browser_session import BrowserSession
from axegrid.engine.report_builder import AuditFinding, Report
from axegrid.models import MAX_NODES_SHOWN, SCREENSHOT_FILENAME, TRANSPORT_WEBDRIVER

logger = logging.getLogger("axegrid.engine.reporter")

_IMPACT_STYLES = {
    "critical": "bold red",
    "serious": "red",
    "moderate": "yellow",
    "minor": "cyan",
}


def violation_lines(index: int, violation: AuditFinding, max_nodes: int = MAX_NODES_SHOWN) -> list[str]:
    """Plain-text detail block for one violation (1-based ``index``)."""
    impact = (violation.impact or "unknown").upper()
    lines = [
        f"{index}. {violation.description}",
        f"   Impact: {impact}",
        f"   Help: {violation.help}",
        f"   More info: {violation.help_url}",
        f"   Affected elements: {len(violation.nodes)}",
    ]
    paths = violation.node_paths()
    for path in paths[:max_nodes]:
        lines.append(f"     - {path}")
    if len(paths) > max_nodes:
        lines.append(f"     ... and {len(paths) - max_nodes} more")
    return lines


class ConsoleReporter:
    """Prints run progress, the summary and violation details."""

    def __init__(self, console: Console | None = None, plain: bool = False) -> None:
        self._console = console or Console()
        self._plain = plain

    def _line(self, message: str = "", style: str | None = None) -> None:
        if self._plain:
            self._console.print(message, markup=False, highlight=False, soft_wrap=True)
        else:
            self._console.print(escape(message), style=style, soft_wrap=True)

    def step(self, message: str) -> None:
        self._line(message, style="dim")

    def print_header(self, config: AxeGridConfig) -> None:
        lines = [
            f"URL: {config.test.url}",
            f"Browser: {config.browser.name} {config.browser.version}",
            f"Platform: {config.browser.platform}",
            f"Transport: {config.browser.transport}",
            f"Accessibility Rules: {', '.join(config.audit.rule_tags)}",
            f"Saucelabs: {'ENABLED' if config.grid.enabled else 'DISABLED'}",
        ]
        if config.grid.hub_url_raw:
            lines.append(f"Custom Hub: {config.grid.hub_url.base_url if config.grid.hub_url else '(invalid)'}")

        if self._plain:
            self._line("Starting accessibility testing with axe-core")
            for line in lines:
                self._line(f"  - {line}")
            self._line()
            return

        self._console.print()
        self._console.print(
            Panel(
                "\n".join(escape(line) for line in lines),
                title="[bold cyan]axegrid Accessibility Run[/bold cyan]",
                border_style="cyan",
            )
        )
        self._console.print()

    def print_summary(self, report: Report) -> None:
        s = report.summary
        if self._plain:
            self._line("Accessibility Test Summary:")
            self._line(f"  Violations: {s['violations']}")
            self._line(f"  Passes: {s['passes']}")
            self._line(f"  Incomplete: {s['incomplete']}")
            self._line(f"  Inapplicable: {s['inapplicable']}")
            self._line()
            return

        table = Table(title="Accessibility Test Summary", border_style="cyan")
        table.add_column("Category", style="bold")
        table.add_column("Count", justify="right")
        table.add_row("[red]Violations[/red]", str(s["violations"]))
        table.add_row("[green]Passes[/green]", str(s["passes"]))
        table.add_row("[yellow]Incomplete[/yellow]", str(s["incomplete"]))
        table.add_row("[dim]Inapplicable[/dim]", str(s["inapplicable"]))
        self._console.print(table)
        self._console.print()

    def print_violations(self, violations: list[AuditFinding]) -> None:
        if not violations:
            return
        self._line("Accessibility Violations Found:", style="bold yellow")
        self._line()
        for index, violation in enumerate(violations, 1):
            lines = violation_lines(index, violation)
            style = _IMPACT_STYLES.get(violation.impact or "", None)
            self._line(lines[0], style="bold")
            self._line(lines[1], style=style)
            for line in lines[2:]:
                self._line(line)
            self._line()

    def print_outcome(self, report: Report, dashboard_url: str | None = None) -> None:
        if dashboard_url:
            self._line(f"Saucelabs Dashboard: {dashboard_url}")
        count = report.summary["violations"]
        if report.passed:
            self._line("All accessibility tests passed!", style="bold green")
        else:
            self._line(f"Found {count} accessibility violation(s)", style="bold red")

    def print_error(self, message: str, title: str = "Error") -> None:
        if self._plain:
            self._line(f"[{title}] {message}")
        else:
            self._console.print(
                Panel(f"[red]{escape(message)}[/red]", title=f"[red]{escape(title)}[/red]", border_style="red")
            )


# ── Artifacts ─────────────────────────────────────────────────────────────


def render_report_json(report: Report) -> str:
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"


def save_report(report: Report, output: OutputConfig) -> Path:
    """Write the report to ``<dir>/<filename>``, replacing any earlier file."""
    output.dir.mkdir(parents=True, exist_ok=True)
    path = output.report_path
    path.write_text(render_report_json(report), encoding="utf-8")
    logger.info("Report saved to %s", path)
    return path


def load_report(path: Path) -> Report:
    """Read a saved report.

    Raises:
        ValueError: if the file is not JSON or does not hold a report object.
        OSError: if the file cannot be read.
    """
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return Report.from_dict(data)
    except (AttributeError, TypeError) as exc:
        raise ValueError(f"malformed report: {exc}") from exc


def capture_screenshot(session: BrowserSession, output: OutputConfig) -> Path:
    """Save a full-page screenshot to ``<dir>/violations-screenshot.png``."""
    output.dir.mkdir(parents=True, exist_ok=True)
    path = output.dir / SCREENSHOT_FILENAME
    if session.transport == TRANSPORT_WEBDRIVER:
        if not session.driver.save_screenshot(str(path)):
            raise OSError(f"WebDriver could not write screenshot to {path}")
    else:
        session.page.screenshot(path=str(path), full_page=True)
    logger.info("Screenshot saved to %s", path)
    return path


def write_junit_xml(report: Report, junit_path: Path) -> Path:
    """One testcase per violated rule, or a single passing testcase."""
    testsuite = ET.Element("testsuite")
    testsuite.set("name", f"axegrid-{report.url}")
    testsuite.set("timestamp", report.timestamp)
    testsuite.set("time", report.test_duration.rstrip("s"))

    violations = report.results.violations
    if violations:
        for violation in violations:
            testcase = ET.SubElement(testsuite, "testcase")
            testcase.set("name", violation.id)
            testcase.set("classname", "axegrid.violations")
            failure = ET.SubElement(testcase, "failure")
            failure.set("message", violation.help)
            failure.set("type", violation.impact or "unknown")
            failure.text = "\n".join(violation_lines(1, violation, max_nodes=len(violation.nodes))[1:])
    else:
        testcase = ET.SubElement(testsuite, "testcase")
        testcase.set("name", "accessibility")
        testcase.set("classname", "axegrid.violations")

    testsuite.set("tests", str(max(len(violations), 1)))
    testsuite.set("failures", str(len(violations)))

    junit_path.parent.mkdir(parents=True, exist_ok=True)
    tree = ET.ElementTree(testsuite)
    ET.indent(tree, space="  ")
    tree.write(str(junit_path), xml_declaration=True, encoding="utf-8")
    logger.info("JUnit XML written to %s", junit_path)
    return junit_path
