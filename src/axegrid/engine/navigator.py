"""Page navigation with a bounded timeout and a settled-network wait."""

from __future__ import annotations

import dataclasses
import logging

from axegrid.engine.browser_session import BrowserSession
from axegrid.errors import NavigationError
from axegrid.models import NAVIGATION_TIMEOUT_MS, TRANSPORT_WEBDRIVER

logger = logging.getLogger("axegrid.engine.navigator")


@dataclasses.dataclass(frozen=True)
class NavigationResult:
    url: str
    title: str


def navigate(session: BrowserSession, url: str, timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> NavigationResult:
    """Load ``url`` and return the document title.

    Raises:
        NavigationError: on timeout or any load failure.
    """
    logger.info("Navigating to %s", url)
    try:
        if session.transport == TRANSPORT_WEBDRIVER:
            driver = session.driver
            driver.set_page_load_timeout(timeout_ms / 1000)
            driver.get(url)
            title = driver.title
        else:
            page = session.page
            page.goto(url, wait_until="networkidle", timeout=timeout_ms)
            title = page.title()
    except Exception as exc:
        raise NavigationError(f"Failed to load {url}: {exc}") from exc

    logger.info('Page loaded: "%s"', title)
    return NavigationResult(url=url, title=title)
