"""axegrid Run Controller — drives one accessibility run end to end.

Phases run strictly in order::

    IDLE -> CONFIGURING -> PROBING* -> SESSION_STARTING -> NAVIGATING
         -> AUDITING -> REPORTING -> PUBLISHING* -> TEARING_DOWN -> DONE

(* grid mode only).  A failure in any phase up to AUDITING jumps to
TEARING_DOWN, releases whatever browser handles exist, and re-raises the
original error.  REPORTING and PUBLISHING failures are logged and do not
change the outcome, which is ``passed`` iff there are no violations.
"""

from __future__ import annotations

import dataclasses
import enum
import logging
import time
from collections.abc import Callable
from pathlib import Path
from typing import Any

import requests

from axegrid.config import AxeGridConfig
from axegrid.engine.auditor import AccessibilityAuditor, auditor_for
from axegrid.engine.axe_source import load_axe_source
from axegrid.engine.browser_session import BrowserSession, create_session
from axegrid.engine.connectivity import probe
from axegrid.engine.http_client import build_http_session
from axegrid.engine.navigator import navigate
from axegrid.engine.publisher import ResultPublisher, dashboard_url
from axegrid.engine.report_builder import Report, build_report
from axegrid.engine.reporter import ConsoleReporter, capture_screenshot, save_report, write_junit_xml

logger = logging.getLogger("axegrid.engine.runner")


class RunPhase(enum.Enum):
    IDLE = "idle"
    CONFIGURING = "configuring"
    PROBING = "probing"
    SESSION_STARTING = "session_starting"
    NAVIGATING = "navigating"
    AUDITING = "auditing"
    REPORTING = "reporting"
    PUBLISHING = "publishing"
    TEARING_DOWN = "tearing_down"
    DONE = "done"


@dataclasses.dataclass
class RunOutcome:
    """What a completed run produced."""

    passed: bool
    report: Report
    report_path: Path | None = None
    screenshot_path: Path | None = None
    junit_path: Path | None = None
    result_id: str | None = None
    dashboard_url: str | None = None
    warnings: list[str] = dataclasses.field(default_factory=list)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


class AccessibilityRun:
    """Coordinates a complete run: probe, browse, audit, report, publish, clean up.

    Collaborators are injectable so the sequence can be exercised without a
    real browser or network.
    """

    def __init__(
        self,
        config: AxeGridConfig,
        reporter: ConsoleReporter | None = None,
        http_session: requests.Session | None = None,
        session_factory: Callable[[AxeGridConfig], BrowserSession] = create_session,
        prober: Callable[..., bool] = probe,
        publisher: ResultPublisher | None = None,
        axe_source_loader: Callable[..., str] = load_axe_source,
        auditor_factory: Callable[[BrowserSession, str], AccessibilityAuditor] = auditor_for,
        navigator: Callable[..., Any] = navigate,
    ) -> None:
        self._config = config
        self._reporter = reporter or ConsoleReporter()
        self._owns_http = http_session is None
        self._http = http_session or build_http_session(config)
        self._session_factory = session_factory
        self._prober = prober
        self._publisher = publisher or ResultPublisher(self._http)
        self._axe_source_loader = axe_source_loader
        self._auditor_factory = auditor_factory
        self._navigator = navigator

        self.phase = RunPhase.IDLE
        self.history: list[RunPhase] = [RunPhase.IDLE]

    def _enter(self, phase: RunPhase) -> None:
        logger.debug("Phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase
        self.history.append(phase)

    # -- Main entry point --------------------------------------------------------

    def execute(self) -> RunOutcome:
        """Run the workflow once.

        Raises:
            AxeGridError: subclasses for configuration, connectivity, session,
                navigation and audit failures, after cleanup has run.
        """
        config = self._config
        session: BrowserSession | None = None

        try:
            self._enter(RunPhase.CONFIGURING)
            config.validate()
            self._reporter.print_header(config)

            if config.grid.enabled:
                self._enter(RunPhase.PROBING)
                self._prober(config, self._http)

            # duration covers the run from the browser launch on, not the grid check
            started_at = time.monotonic()

            self._enter(RunPhase.SESSION_STARTING)
            self._reporter.step("Launching browser...")
            session = self._session_factory(config)

            self._enter(RunPhase.NAVIGATING)
            self._reporter.step(f"Navigating to {config.test.url}...")
            navigation = self._navigator(session, config.test.url)

            self._enter(RunPhase.AUDITING)
            axe_source = self._axe_source_loader(config, self._http)
            auditor = self._auditor_factory(session, axe_source)
            self._reporter.step(f"Running accessibility tests ({', '.join(config.audit.rule_tags)})...")
            results = auditor.audit(session, config.audit.rule_tags)

            report = build_report(config, session.session_id, navigation, results, started_at)
            logger.info("Tests completed in %s", report.test_duration)

            self._enter(RunPhase.REPORTING)
            outcome = self._report(report, session)

            if config.grid.enabled:
                self._enter(RunPhase.PUBLISHING)
                self._publish(outcome)

            self._reporter.print_outcome(report, outcome.dashboard_url)
            return outcome

        except Exception as exc:
            logger.debug("Run failed during %s: %s", self.phase.value, exc)
            raise

        finally:
            self._enter(RunPhase.TEARING_DOWN)
            if session is not None:
                self._reporter.step("Closing browser...")
                session.close()
            if self._owns_http:
                self._http.close()
            self._enter(RunPhase.DONE)

    # -- Phases ----------------------------------------------------------------

    def _report(self, report: Report, session: BrowserSession) -> RunOutcome:
        config = self._config
        outcome = RunOutcome(passed=report.passed, report=report)

        self._reporter.print_summary(report)
        if config.output.console_enabled:
            self._reporter.print_violations(report.results.violations)

        try:
            outcome.report_path = save_report(report, config.output)
            self._reporter.step(f"Report saved to: {outcome.report_path}")
        except OSError as exc:
            logger.error("Failed to save report to %s: %s", config.output.report_path, exc)
            outcome.warnings.append(f"report not saved: {exc}")

        if report.results.violations:
            try:
                outcome.screenshot_path = capture_screenshot(session, config.output)
                self._reporter.step(f"Screenshot saved to: {outcome.screenshot_path}")
            except Exception as exc:
                logger.warning("Failed to capture screenshot: %s", exc)
                outcome.warnings.append(f"screenshot not captured: {exc}")

        if config.output.junit_xml is not None:
            try:
                outcome.junit_path = write_junit_xml(report, config.output.junit_xml)
            except OSError as exc:
                logger.warning("Failed to write JUnit XML: %s", exc)
                outcome.warnings.append(f"JUnit XML not written: {exc}")

        return outcome

    def _publish(self, outcome: RunOutcome) -> None:
        try:
            result_id = self._publisher.publish(self._config, outcome.report, outcome.passed)
        except Exception as exc:
            logger.warning("Failed to upload results to Saucelabs: %s", exc)
            outcome.warnings.append(f"results not uploaded: {exc}")
            return
        if result_id:
            outcome.result_id = result_id
            outcome.dashboard_url = dashboard_url(result_id)
        elif self._publisher.last_warning is not None:
            outcome.warnings.append(str(self._publisher.last_warning))
