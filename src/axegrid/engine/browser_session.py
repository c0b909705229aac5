"""axegrid Browser Session Provider.

Resolves a logical browser name to an automation engine and opens one
session for the run:

- ``playwright`` transport: launches a local Playwright browser, creates an
  isolated context (2048x1536 viewport, HTTPS errors ignored) and a page.
- ``webdriver`` transport: opens a Selenium session, on the remote grid
  (with ``sauce:options`` capabilities) when grid mode is enabled, or with a
  local driver otherwise.

The returned :class:`BrowserSession` is owned by the run controller, which
must call :meth:`BrowserSession.close` on every exit path.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any

from axegrid.config import AxeGridConfig
from axegrid.errors import SessionError
from axegrid.models import (
    DEFAULT_HUB_PATH,
    DEFAULT_VIEWPORT,
    ONDEMAND_HOST_TEMPLATE,
    TRANSPORT_PLAYWRIGHT,
    TRANSPORT_WEBDRIVER,
)

logger = logging.getLogger("axegrid.engine.browser_session")

# Logical browser name -> Playwright engine attribute
_PLAYWRIGHT_ENGINES = {
    "chrome": "chromium",
    "chromium": "chromium",
    "firefox": "firefox",
    "webkit": "webkit",
    "safari": "webkit",
}
_DEFAULT_PLAYWRIGHT_ENGINE = "chromium"

# Logical browser name -> Selenium browser family
_WEBDRIVER_BROWSERS = {
    "chrome": "chrome",
    "chromium": "chrome",
    "firefox": "firefox",
    "safari": "safari",
    "webkit": "safari",
    "edge": "edge",
    "microsoftedge": "edge",
}
_DEFAULT_WEBDRIVER_BROWSER = "chrome"


def resolve_browser_type(browser_name: str) -> str:
    """Map a browser name (case-insensitive) to a Playwright engine.

    Unknown names fall back to chromium instead of failing.
    """
    engine = _PLAYWRIGHT_ENGINES.get(browser_name.lower())
    if engine is None:
        logger.debug("Unknown browser %r -- falling back to %s", browser_name, _DEFAULT_PLAYWRIGHT_ENGINE)
        return _DEFAULT_PLAYWRIGHT_ENGINE
    return engine


def resolve_webdriver_browser(browser_name: str) -> str:
    """Map a browser name (case-insensitive) to a Selenium browser family."""
    family = _WEBDRIVER_BROWSERS.get(browser_name.lower())
    if family is None:
        logger.debug("Unknown browser %r -- falling back to %s", browser_name, _DEFAULT_WEBDRIVER_BROWSER)
        return _DEFAULT_WEBDRIVER_BROWSER
    return family


@dataclasses.dataclass
class BrowserSession:
    """Live browser handles for one run.

    Only the handles that were actually created are set; :meth:`close`
    releases whatever subset exists.
    """

    transport: str
    engine: str
    session_id: str | None = None
    playwright: Any = None
    browser: Any = None
    context: Any = None
    page: Any = None
    driver: Any = None

    def close(self) -> list[str]:
        """Release page -> context -> browser -> driver.

        Each release is attempted even if an earlier one failed.  Returns the
        names of the handles that failed to close.
        """
        failures: list[str] = []
        for name, closer in (
            ("page", lambda h: h.close()),
            ("context", lambda h: h.close()),
            ("browser", lambda h: h.close()),
            ("playwright", lambda h: h.stop()),
            ("driver", lambda h: h.quit()),
        ):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                closer(handle)
                logger.debug("Closed %s", name)
            except Exception as exc:
                logger.warning("Failed to close %s: %s", name, exc)
                failures.append(name)
            finally:
                setattr(self, name, None)
        return failures


def create_session(config: AxeGridConfig) -> BrowserSession:
    """Open a browser session for the configured transport.

    Raises:
        SessionError: if the browser cannot be launched or connected.
    """
    if config.browser.transport == TRANSPORT_WEBDRIVER:
        return _open_webdriver_session(config)
    return _launch_playwright_session(config)


# ── Playwright (local launch) ─────────────────────────────────────────────


def _launch_playwright_session(config: AxeGridConfig) -> BrowserSession:
    from playwright.sync_api import sync_playwright

    engine = resolve_browser_type(config.browser.name)
    session = BrowserSession(transport=TRANSPORT_PLAYWRIGHT, engine=engine)

    logger.info("Launching %s (headless=%s)", engine, config.browser.headless)
    try:
        session.playwright = sync_playwright().start()
        browser_type = getattr(session.playwright, engine)
        session.browser = browser_type.launch(headless=config.browser.headless)

        context_options: dict[str, Any] = {
            "viewport": {"width": DEFAULT_VIEWPORT[0], "height": DEFAULT_VIEWPORT[1]},
            "ignore_https_errors": True,
        }
        if config.grid.enabled:
            context_options["record_video_dir"] = str(config.output.dir / "videos")
        session.context = session.browser.new_context(**context_options)
        session.page = session.context.new_page()
    except Exception as exc:
        session.close()
        raise SessionError(f"Failed to launch {engine}: {exc}") from exc

    if config.system.debug:
        session.page.on("console", lambda msg: logger.debug("Browser console: %s", msg.text))
        session.page.on("pageerror", lambda err: logger.error("Page error: %s", err))

    return session


# ── WebDriver (remote grid or local driver) ───────────────────────────────


def command_executor_url(config: AxeGridConfig) -> str:
    """Hub endpoint for the remote session; parsed hub values override defaults."""
    hub = config.grid.hub_url
    if hub is not None:
        return f"{hub.base_url}{hub.path}"
    host = ONDEMAND_HOST_TEMPLATE.format(region=config.grid.region)
    return f"https://{host}:443{DEFAULT_HUB_PATH}"


def sauce_options(config: AxeGridConfig) -> dict[str, Any]:
    """Grid extension capabilities attached as ``sauce:options``."""
    hub = config.grid.hub_url
    return {
        "username": (hub.username if hub else None) or config.grid.username,
        "accessKey": (hub.password if hub else None) or config.grid.access_key,
        "region": config.grid.data_center,
        "name": config.test.name,
        "custom-data": {
            "tool": "axe-core",
            "version": config.audit.axe_version,
        },
        "public": "public",
        "recordScreenshots": True,
        "screenResolution": f"{DEFAULT_VIEWPORT[0]}x{DEFAULT_VIEWPORT[1]}",
        "extendedDebugging": True,
        "capturePerformance": True,
    }


def _webdriver_options(family: str, config: AxeGridConfig) -> Any:
    from selenium import webdriver

    options_cls = {
        "chrome": webdriver.ChromeOptions,
        "firefox": webdriver.FirefoxOptions,
        "safari": webdriver.SafariOptions,
        "edge": webdriver.EdgeOptions,
    }[family]
    options = options_cls()

    if config.grid.enabled:
        options.browser_version = config.browser.version
        options.platform_name = config.browser.platform
        options.set_capability("sauce:options", sauce_options(config))
    elif config.browser.headless:
        if family in ("chrome", "edge"):
            options.add_argument("--headless=new")
        elif family == "firefox":
            options.add_argument("-headless")
    return options


def _open_webdriver_session(config: AxeGridConfig) -> BrowserSession:
    from selenium import webdriver

    family = resolve_webdriver_browser(config.browser.name)
    session = BrowserSession(transport=TRANSPORT_WEBDRIVER, engine=family)

    try:
        options = _webdriver_options(family, config)
        if config.grid.enabled:
            url = command_executor_url(config)
            logger.info("Connecting to remote %s session at %s", family, url)
            session.driver = webdriver.Remote(command_executor=url, options=options)
        else:
            logger.info("Starting local %s driver (headless=%s)", family, config.browser.headless)
            driver_cls = {
                "chrome": webdriver.Chrome,
                "firefox": webdriver.Firefox,
                "safari": webdriver.Safari,
                "edge": webdriver.Edge,
            }[family]
            session.driver = driver_cls(options=options)
            session.driver.set_window_size(DEFAULT_VIEWPORT[0], DEFAULT_VIEWPORT[1])
    except Exception as exc:
        session.close()
        raise SessionError(f"Failed to start {family} WebDriver session: {exc}") from exc

    session.session_id = session.driver.session_id
    return session
