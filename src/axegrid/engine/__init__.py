"""axegrid engine — the modules behind one accessibility run.

- connectivity: grid status probe
- browser_session: Playwright / WebDriver session provider
- navigator: page load with a settled-network wait
- auditor: axe-core strategies per transport
- report_builder: audit data model and the persisted report
- reporter: console output, JSON report, screenshot, JUnit XML
- publisher: grid result upload
- runner: the run controller
"""

from axegrid.engine.auditor import AccessibilityAuditor, PlaywrightAxeAuditor, WebDriverAxeAuditor, auditor_for
from axegrid.engine.browser_session import BrowserSession, create_session, resolve_browser_type
from axegrid.engine.report_builder import AuditFinding, AuditResultSet, Report, build_report
from axegrid.engine.runner import AccessibilityRun, RunOutcome, RunPhase

__all__ = [
    "AccessibilityAuditor",
    "AccessibilityRun",
    "AuditFinding",
    "AuditResultSet",
    "BrowserSession",
    "PlaywrightAxeAuditor",
    "Report",
    "RunOutcome",
    "RunPhase",
    "WebDriverAxeAuditor",
    "auditor_for",
    "build_report",
    "create_session",
    "resolve_browser_type",
]
