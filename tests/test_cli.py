"""Unit tests for the axegrid CLI — run, report, config show, install, --version."""

from __future__ import annotations

import datetime as dt
import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from axegrid import __version__
from axegrid.cli.app import app
from axegrid.config import AxeGridConfig
from axegrid.engine.navigator import NavigationResult
from axegrid.engine.report_builder import AuditResultSet, build_report
from axegrid.engine.reporter import save_report
from axegrid.engine.runner import RunOutcome
from axegrid.errors import ConnectivityError

runner = CliRunner()

_ENV_KEYS = (
    "RUN_ON_SAUCELABS",
    "SAUCE_USERNAME",
    "SAUCE_ACCESS_KEY",
    "SAUCE_LABS_HUB",
    "TEST_URL",
    "BROWSER_NAME",
    "TRANSPORT",
    "AXE_RULES",
    "OUTPUT_DIR",
    "DEBUG",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path: Path):
    """Isolate CLI tests from the developer's environment and .env file."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def _make_outcome(config: AxeGridConfig, raw: dict) -> RunOutcome:
    report = build_report(
        config,
        "sess-1",
        NavigationResult(url=config.test.url, title="Example Domain"),
        AuditResultSet.from_axe(raw),
        started_at=0.0,
        now=dt.datetime(2026, 1, 2, tzinfo=dt.timezone.utc),
        finished_at=1.0,
    )
    return RunOutcome(passed=report.passed, report=report)


def _patch_run(outcome: RunOutcome | None = None, error: Exception | None = None):
    run_cls = MagicMock()
    if error is not None:
        run_cls.return_value.execute.side_effect = error
    else:
        run_cls.return_value.execute.return_value = outcome
    return patch("axegrid.cli.run.AccessibilityRun", run_cls)


# ---------------------------------------------------------------------------
# 1. Global options
# ---------------------------------------------------------------------------

class TestGlobal:

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_no_args_shows_help(self):
        result = runner.invoke(app, [])
        assert "run" in result.output


# ---------------------------------------------------------------------------
# 2. axegrid run
# ---------------------------------------------------------------------------

class TestRunCommand:

    def test_clean_run_exits_zero(self, local_config, axe_clean_results):
        with _patch_run(_make_outcome(local_config, axe_clean_results)) as run_cls:
            result = runner.invoke(app, ["run", "--no-grid", "--url", "https://example.com/"])

        assert result.exit_code == 0
        config = run_cls.call_args.args[0]
        assert config.grid.enabled is False
        assert config.test.url == "https://example.com/"

    def test_violations_exit_one(self, local_config, axe_raw_results):
        with _patch_run(_make_outcome(local_config, axe_raw_results)):
            result = runner.invoke(app, ["run", "--no-grid"])
        assert result.exit_code == 1

    def test_options_override_environment(self, monkeypatch, local_config, axe_clean_results):
        monkeypatch.setenv("TRANSPORT", "playwright")
        monkeypatch.setenv("AXE_RULES", "wcag2a")
        with _patch_run(_make_outcome(local_config, axe_clean_results)) as run_cls:
            runner.invoke(app, ["run", "--no-grid", "-t", "webdriver", "-r", "best-practice"])

        config = run_cls.call_args.args[0]
        assert config.browser.transport == "webdriver"
        assert config.audit.rule_tags == ("best-practice",)

    def test_fatal_error_exits_one(self, local_config):
        with _patch_run(error=ConnectivityError("Failed to connect to Saucelabs (HTTP 401)")):
            result = runner.invoke(app, ["run", "--plain"])
        assert result.exit_code == 1
        assert "[Connectivity Error]" in result.output

    def test_unexpected_error_exits_one(self):
        with _patch_run(error=RuntimeError("boom")):
            result = runner.invoke(app, ["run", "--no-grid", "--plain"])
        assert result.exit_code == 1
        assert "Unexpected error: boom" in result.output

    def test_unknown_transport_is_config_error(self):
        with _patch_run() as run_cls:
            result = runner.invoke(app, ["run", "--no-grid", "--transport", "carrier-pigeon", "--plain"])
        assert result.exit_code == 1
        run_cls.assert_not_called()

    def test_invalid_output_format(self):
        result = runner.invoke(app, ["run", "--no-grid", "--output", "xml", "--plain"])
        assert result.exit_code == 1
        assert "Invalid output format" in result.output

    def test_json_output(self, local_config, axe_raw_results):
        with _patch_run(_make_outcome(local_config, axe_raw_results)):
            result = runner.invoke(app, ["run", "--no-grid", "--output", "json"])
        start = result.output.index("{")
        data = json.loads(result.output[start:])
        assert data["summary"]["violations"] == 3

    def test_config_file_option(self, tmp_path: Path, local_config, axe_clean_results):
        config_file = tmp_path / "axegrid.yaml"
        config_file.write_text("RUN_ON_SAUCELABS: false\nBROWSER_NAME: firefox\n")
        with _patch_run(_make_outcome(local_config, axe_clean_results)) as run_cls:
            result = runner.invoke(app, ["run", "--config", str(config_file)])
        assert result.exit_code == 0
        assert run_cls.call_args.args[0].browser.name == "firefox"


# ---------------------------------------------------------------------------
# 3. axegrid report
# ---------------------------------------------------------------------------

class TestReportCommand:

    def test_shows_saved_report(self, local_config, axe_raw_results):
        path = save_report(_make_outcome(local_config, axe_raw_results).report, local_config.output)
        result = runner.invoke(app, ["report", str(path), "--plain"])
        assert result.exit_code == 0
        assert "Violations: 3" in result.output
        assert "Found 3 accessibility violation(s)" in result.output

    def test_fail_on_violations(self, local_config, axe_raw_results):
        path = save_report(_make_outcome(local_config, axe_raw_results).report, local_config.output)
        result = runner.invoke(app, ["report", str(path), "--fail-on-violations"])
        assert result.exit_code == 1

    def test_missing_report(self, tmp_path: Path):
        result = runner.invoke(app, ["report", str(tmp_path / "missing.json"), "--plain"])
        assert result.exit_code == 1
        assert "Report not found" in result.output

    def test_corrupt_report(self, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json")
        result = runner.invoke(app, ["report", str(bad), "--plain"])
        assert result.exit_code == 1

    def test_non_object_report(self, tmp_path: Path):
        bad = tmp_path / "list.json"
        bad.write_text("[]")
        result = runner.invoke(app, ["report", str(bad), "--plain"])
        assert result.exit_code == 1
        assert "Could not read report" in result.output


# ---------------------------------------------------------------------------
# 4. axegrid config show
# ---------------------------------------------------------------------------

class TestConfigShow:

    def test_masks_access_key(self, monkeypatch):
        monkeypatch.setenv("SAUCE_USERNAME", "alice")
        monkeypatch.setenv("SAUCE_ACCESS_KEY", "abcd-1234-secret-xyz")
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "abcd-1234-secret-xyz" not in result.output
        assert "abcd...xyz" in result.output

    def test_warns_on_missing_credentials(self):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Warning" in result.output


# ---------------------------------------------------------------------------
# 5. axegrid install
# ---------------------------------------------------------------------------

class TestInstall:

    def test_runs_playwright_install(self):
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("axegrid.cli.install.subprocess.run", return_value=completed) as run_mock:
            result = runner.invoke(app, ["install", "--browsers", "chromium,firefox", "--ci"])
        assert result.exit_code == 0
        cmd = run_mock.call_args.args[0]
        assert cmd[1:] == ["-m", "playwright", "install", "chromium", "firefox"]

    def test_failure_exits_one(self):
        completed = subprocess.CompletedProcess(args=[], returncode=1, stdout="", stderr="download failed")
        with patch("axegrid.cli.install.subprocess.run", return_value=completed):
            result = runner.invoke(app, ["install", "--ci"])
        assert result.exit_code == 1

    def test_browser_names_resolve_to_engines(self):
        from axegrid.cli.install import install_command, playwright_engines

        assert playwright_engines("chrome, safari,chromium") == ["chromium", "webkit"]
        assert install_command(["firefox"], with_deps=True)[-2:] == ["--with-deps", "firefox"]

    def test_defaults_to_browser_name(self, monkeypatch):
        monkeypatch.setenv("BROWSER_NAME", "firefox")
        completed = subprocess.CompletedProcess(args=[], returncode=0, stdout="", stderr="")
        with patch("axegrid.cli.install.subprocess.run", return_value=completed) as run_mock:
            runner.invoke(app, ["install", "--ci"])
        assert run_mock.call_args.args[0][-1] == "firefox"
