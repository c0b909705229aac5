"""Unit tests for axegrid.engine.browser_session — session provider and cleanup."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from axegrid.config import AxeGridConfig
from axegrid.engine.browser_session import (
    BrowserSession,
    command_executor_url,
    create_session,
    resolve_browser_type,
    resolve_webdriver_browser,
    sauce_options,
)
from axegrid.errors import SessionError


# ---------------------------------------------------------------------------
# 1. Browser name resolution
# ---------------------------------------------------------------------------

class TestResolveBrowser:

    @pytest.mark.parametrize(
        "name, engine",
        [
            ("chrome", "chromium"),
            ("Chrome", "chromium"),
            ("chromium", "chromium"),
            ("firefox", "firefox"),
            ("FIREFOX", "firefox"),
            ("webkit", "webkit"),
            ("safari", "webkit"),
        ],
    )
    def test_known_names(self, name, engine):
        assert resolve_browser_type(name) == engine

    def test_unknown_name_falls_back_to_chromium(self):
        assert resolve_browser_type("netscape") == "chromium"

    def test_webdriver_families(self):
        assert resolve_webdriver_browser("Safari") == "safari"
        assert resolve_webdriver_browser("edge") == "edge"
        assert resolve_webdriver_browser("netscape") == "chrome"


# ---------------------------------------------------------------------------
# 2. Cleanup
# ---------------------------------------------------------------------------

class TestClose:

    def _make_session(self) -> tuple[BrowserSession, MagicMock]:
        tracker = MagicMock()
        session = BrowserSession(
            transport="playwright",
            engine="chromium",
            playwright=tracker.playwright,
            browser=tracker.browser,
            context=tracker.context,
            page=tracker.page,
        )
        return session, tracker

    def test_releases_in_order(self):
        session, tracker = self._make_session()
        assert session.close() == []
        assert [c[0] for c in tracker.mock_calls] == [
            "page.close",
            "context.close",
            "browser.close",
            "playwright.stop",
        ]

    def test_failures_do_not_stop_later_releases(self):
        session, tracker = self._make_session()
        tracker.context.close.side_effect = RuntimeError("context gone")
        tracker.browser.close.side_effect = RuntimeError("browser gone")

        failures = session.close()

        assert failures == ["context", "browser"]
        tracker.playwright.stop.assert_called_once()
        assert session.context is None
        assert session.browser is None

    def test_partial_session(self):
        driver = MagicMock()
        session = BrowserSession(transport="webdriver", engine="chrome", driver=driver)
        assert session.close() == []
        driver.quit.assert_called_once()

    def test_close_twice_is_a_noop(self):
        session, tracker = self._make_session()
        session.close()
        session.close()
        tracker.page.close.assert_called_once()


# ---------------------------------------------------------------------------
# 3. Playwright launch
# ---------------------------------------------------------------------------

def _make_playwright() -> MagicMock:
    pw = MagicMock()
    starter = MagicMock()
    starter.start.return_value = pw
    factory = MagicMock(return_value=starter)
    return factory


class TestPlaywrightLaunch:

    def test_launch_creates_context_and_page(self, local_config):
        factory = _make_playwright()
        with patch("playwright.sync_api.sync_playwright", factory):
            session = create_session(local_config)

        pw = factory.return_value.start.return_value
        pw.chromium.launch.assert_called_once_with(headless=True)
        context_kwargs = pw.chromium.launch.return_value.new_context.call_args.kwargs
        assert context_kwargs["viewport"] == {"width": 2048, "height": 1536}
        assert context_kwargs["ignore_https_errors"] is True
        assert "record_video_dir" not in context_kwargs
        assert session.transport == "playwright"
        assert session.engine == "chromium"
        assert session.page is not None

    def test_grid_mode_records_video(self, grid_config):
        factory = _make_playwright()
        with patch("playwright.sync_api.sync_playwright", factory):
            create_session(grid_config)
        pw = factory.return_value.start.return_value
        context_kwargs = pw.chromium.launch.return_value.new_context.call_args.kwargs
        assert context_kwargs["record_video_dir"].endswith("videos")

    def test_launch_failure_cleans_up(self, local_config):
        factory = _make_playwright()
        pw = factory.return_value.start.return_value
        pw.chromium.launch.side_effect = RuntimeError("executable doesn't exist")

        with patch("playwright.sync_api.sync_playwright", factory):
            with pytest.raises(SessionError, match="executable"):
                create_session(local_config)

        pw.stop.assert_called_once()


# ---------------------------------------------------------------------------
# 4. WebDriver capabilities
# ---------------------------------------------------------------------------

class TestWebDriver:

    def test_executor_url_from_region(self, grid_config):
        assert command_executor_url(grid_config) == "https://ondemand.us-west-1.saucelabs.com:443/wd/hub"

    def test_executor_url_from_hub(self, grid_env):
        cfg = AxeGridConfig.from_mapping({**grid_env, "SAUCE_LABS_HUB": "http://grid.local:4444/wd/hub"})
        assert command_executor_url(cfg) == "http://grid.local:4444/wd/hub"

    def test_sauce_options(self, grid_config):
        opts = sauce_options(grid_config)
        assert opts["username"] == "alice"
        assert opts["accessKey"] == "abcd-1234-secret-xyz"
        assert opts["region"] == "us-west"
        assert opts["name"] == "Example audit"
        assert opts["screenResolution"] == "2048x1536"
        assert opts["custom-data"] == {"tool": "axe-core", "version": "4.10.2"}

    def test_remote_session(self, grid_env):
        cfg = AxeGridConfig.from_mapping({**grid_env, "TRANSPORT": "webdriver"})
        remote = MagicMock()
        remote.return_value.session_id = "abc123"
        with patch("selenium.webdriver.Remote", remote):
            session = create_session(cfg)

        assert session.session_id == "abc123"
        assert session.transport == "webdriver"
        kwargs = remote.call_args.kwargs
        assert kwargs["command_executor"] == "https://ondemand.us-west-1.saucelabs.com:443/wd/hub"
        assert kwargs["options"].to_capabilities()["sauce:options"]["username"] == "alice"

    def test_remote_failure_raises_session_error(self, grid_env):
        cfg = AxeGridConfig.from_mapping({**grid_env, "TRANSPORT": "webdriver"})
        with patch("selenium.webdriver.Remote", side_effect=RuntimeError("401 unauthorized")):
            with pytest.raises(SessionError, match="401"):
                create_session(cfg)

    def test_local_driver_sets_window_size(self, local_env):
        cfg = AxeGridConfig.from_mapping({**local_env, "TRANSPORT": "webdriver", "BROWSER_NAME": "firefox"})
        firefox = MagicMock()
        with patch("selenium.webdriver.Firefox", firefox):
            session = create_session(cfg)

        firefox.return_value.set_window_size.assert_called_once_with(2048, 1536)
        assert "-headless" in firefox.call_args.kwargs["options"].arguments
        assert session.engine == "firefox"
