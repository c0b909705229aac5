"""axegrid Result Publisher — uploads the run outcome to the Sauce Labs dashboard.

- ``playwright`` transport: the browser ran locally, so a result record is
  created through the Test Composer reports API.
- ``webdriver`` transport: the grid already holds a job for the session, so
  that job is updated with the pass/fail flag, build, tags and custom data.

Publishing never fails a run.  Any error is logged as a warning and the
publisher returns None.
"""

from __future__ import annotations

import logging
import time

import requests

from axegrid.config import AxeGridConfig
from axegrid.engine.report_builder import Report
from axegrid.errors import PublishWarning
from axegrid.models import (
    API_HOST_TEMPLATE,
    DASHBOARD_URL_TEMPLATE,
    FRAMEWORK_NAMES,
    RESULT_TAGS,
    TRANSPORT_WEBDRIVER,
)

logger = logging.getLogger("axegrid.engine.publisher")

_PUBLISH_TIMEOUT = 30  # seconds


def dashboard_url(result_id: str) -> str:
    return DASHBOARD_URL_TEMPLATE.format(id=result_id)


def build_identifier(config: AxeGridConfig) -> str:
    return config.system.build_id or f"build-{int(time.time() * 1000)}"


class ResultPublisher:
    """Creates or updates the grid's record of this run."""

    def __init__(self, session: requests.Session | None = None) -> None:
        self._session = session or requests.Session()
        self.last_warning: PublishWarning | None = None

    def publish(self, config: AxeGridConfig, report: Report, passed: bool) -> str | None:
        """Upload the result. Returns the record id, or None if skipped or failed.

        A failure is recorded in :attr:`last_warning`.
        """
        self.last_warning = None
        if not config.grid.enabled:
            return None

        transport = config.browser.transport
        try:
            if transport == TRANSPORT_WEBDRIVER:
                return self._update_job(config, report, passed)
            return self._create_result(config, report, passed)
        except Exception as exc:
            message = f"Failed to upload results to Saucelabs: {exc}"
            logger.warning(message)
            self.last_warning = PublishWarning(message)
            return None

    # -- Internals -------------------------------------------------------------

    def _api_base(self, config: AxeGridConfig) -> str:
        return "https://" + API_HOST_TEMPLATE.format(region=config.grid.region)

    def _auth(self, config: AxeGridConfig) -> tuple[str, str]:
        return (config.grid.username or "", config.grid.access_key or "")

    def _tags(self, config: AxeGridConfig) -> list[str]:
        return [*RESULT_TAGS, config.browser.transport]

    def _custom_data(self, config: AxeGridConfig, report: Report) -> dict[str, object]:
        return {
            "axeVersion": report.axe_version,
            "violations": report.summary["violations"],
            "passes": report.summary["passes"],
            "incomplete": report.summary["incomplete"],
            "inapplicable": report.summary["inapplicable"],
            "url": config.test.url,
        }

    def _create_result(self, config: AxeGridConfig, report: Report, passed: bool) -> str:
        body = {
            "name": config.test.name,
            "user": config.grid.username,
            "framework": FRAMEWORK_NAMES[config.browser.transport],
            "passed": passed,
            "public": "public",
            "build": build_identifier(config),
            "tags": self._tags(config),
            "browserName": report.browser_info.name,
            "browserVersion": report.browser_info.version,
            "platformName": report.browser_info.platform,
            "customData": self._custom_data(config, report),
        }
        url = f"{self._api_base(config)}/v1/testcomposer/reports"
        logger.info("Creating result record at %s", url)
        response = self._session.post(url, json=body, auth=self._auth(config), timeout=_PUBLISH_TIMEOUT)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected response body: {data!r:.100}")
        result_id = data.get("id") or data.get("ID")
        if not result_id:
            raise KeyError("response did not include a result id")
        return str(result_id)

    def _update_job(self, config: AxeGridConfig, report: Report, passed: bool) -> str:
        body = {
            "passed": passed,
            "build": build_identifier(config),
            "tags": self._tags(config),
            "custom-data": self._custom_data(config, report),
        }
        url = f"{self._api_base(config)}/rest/v1/{config.grid.username}/jobs/{report.session_id}"
        logger.info("Updating job %s", report.session_id)
        response = self._session.put(url, json=body, auth=self._auth(config), timeout=_PUBLISH_TIMEOUT)
        response.raise_for_status()
        return report.session_id
