"""axegrid Accessibility Auditor — runs axe-core against the loaded page.

Two strategies implement the same :class:`AccessibilityAuditor` contract:

- :class:`PlaywrightAxeAuditor` adds the axe-core script to the live page
  and awaits ``axe.run`` through ``page.evaluate``.
- :class:`WebDriverAxeAuditor` injects the script with ``execute_script``
  and calls ``axe.run`` via ``execute_async_script``.

In both, the in-page code checks that ``window.axe`` is usable before
calling it, so a hostile page or a blocked injection surfaces as an
:class:`~axegrid.errors.AuditError` rather than a raw script exception.
The audit runs exactly once.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from axegrid.engine.browser_session import BrowserSession
from axegrid.engine.report_builder import AuditResultSet
from axegrid.errors import AuditError
from axegrid.models import AUDIT_SCRIPT_TIMEOUT, TRANSPORT_WEBDRIVER

logger = logging.getLogger("axegrid.engine.auditor")

AXE_UNAVAILABLE = "axe-core is not available on this page"

_PLAYWRIGHT_RUN_SCRIPT = """
async (tags) => {
  if (typeof window.axe === 'undefined' || typeof window.axe.run !== 'function') {
    return { error: '%s' };
  }
  try {
    const results = await window.axe.run(document, { runOnly: { type: 'tag', values: tags } });
    return { error: null, results: results };
  } catch (e) {
    return { error: String((e && e.message) || e) };
  }
}
""" % AXE_UNAVAILABLE

_WEBDRIVER_RUN_SCRIPT = """
var tags = arguments[0];
var done = arguments[arguments.length - 1];
if (typeof window.axe === 'undefined' || typeof window.axe.run !== 'function') {
  return done(['%s', null]);
}
window.axe
  .run(window.document, { runOnly: { type: 'tag', values: tags } })
  .then(function (results) { done([null, results]); })
  .catch(function (e) { done([String((e && e.message) || e), null]); });
""" % AXE_UNAVAILABLE


@runtime_checkable
class AccessibilityAuditor(Protocol):
    """Runs axe-core in a browser session and returns grouped findings."""

    def audit(self, session: BrowserSession, rule_tags: Sequence[str]) -> AuditResultSet: ...


def _check_payload(error: Any, results: Any) -> AuditResultSet:
    if error:
        raise AuditError(str(error))
    if not isinstance(results, dict):
        raise AuditError(f"Unexpected axe-core result: {type(results).__name__}")
    return AuditResultSet.from_axe(results)


class PlaywrightAxeAuditor:
    """Audits a Playwright page."""

    def __init__(self, axe_source: str) -> None:
        self._axe_source = axe_source

    def audit(self, session: BrowserSession, rule_tags: Sequence[str]) -> AuditResultSet:
        page = session.page
        logger.info("Running accessibility tests (%s)", ", ".join(rule_tags))
        try:
            page.add_script_tag(content=self._axe_source)
            payload = page.evaluate(_PLAYWRIGHT_RUN_SCRIPT, list(rule_tags))
        except Exception as exc:
            raise AuditError(f"axe-core failed in page: {exc}") from exc

        if not isinstance(payload, dict):
            raise AuditError(f"Unexpected axe-core result: {type(payload).__name__}")
        return _check_payload(payload.get("error"), payload.get("results"))


class WebDriverAxeAuditor:
    """Audits the current document of a WebDriver session."""

    def __init__(self, axe_source: str, script_timeout: float = AUDIT_SCRIPT_TIMEOUT) -> None:
        self._axe_source = axe_source
        self._script_timeout = script_timeout

    def audit(self, session: BrowserSession, rule_tags: Sequence[str]) -> AuditResultSet:
        driver = session.driver
        try:
            logger.info("Injecting axe-core")
            driver.execute_script(self._axe_source)
            logger.info("Running accessibility tests (%s)", ", ".join(rule_tags))
            driver.set_script_timeout(self._script_timeout)
            payload = driver.execute_async_script(_WEBDRIVER_RUN_SCRIPT, list(rule_tags))
        except Exception as exc:
            raise AuditError(f"axe-core failed in page: {exc}") from exc

        if not isinstance(payload, (list, tuple)) or len(payload) != 2:
            raise AuditError(f"Unexpected axe-core result: {payload!r:.200}")
        return _check_payload(payload[0], payload[1])


def auditor_for(session: BrowserSession, axe_source: str) -> AccessibilityAuditor:
    """Pick the auditor strategy matching the session's transport."""
    if session.transport == TRANSPORT_WEBDRIVER:
        return WebDriverAxeAuditor(axe_source)
    return PlaywrightAxeAuditor(axe_source)
