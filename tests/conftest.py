"""Shared fixtures for axegrid unit tests."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from axegrid.config import AxeGridConfig


# ---------------------------------------------------------------------------
# Fixture: environment mappings
# ---------------------------------------------------------------------------

@pytest.fixture
def local_env(tmp_path: Path) -> dict[str, str]:
    """Environment for a local (non-grid) run writing into tmp_path."""
    return {
        "RUN_ON_SAUCELABS": "false",
        "TEST_URL": "https://example.com/",
        "TEST_NAME": "Example audit",
        "OUTPUT_DIR": str(tmp_path / "out"),
    }


@pytest.fixture
def grid_env(tmp_path: Path) -> dict[str, str]:
    """Environment for a grid run with credentials."""
    return {
        "SAUCE_USERNAME": "alice",
        "SAUCE_ACCESS_KEY": "abcd-1234-secret-xyz",
        "TEST_URL": "https://example.com/",
        "TEST_NAME": "Example audit",
        "OUTPUT_DIR": str(tmp_path / "out"),
        "BUILD_NUMBER": "42",
    }


@pytest.fixture
def local_config(local_env: dict[str, str]) -> AxeGridConfig:
    return AxeGridConfig.from_mapping(local_env)


@pytest.fixture
def grid_config(grid_env: dict[str, str]) -> AxeGridConfig:
    return AxeGridConfig.from_mapping(grid_env)


# ---------------------------------------------------------------------------
# Fixture: axe-core payloads
# ---------------------------------------------------------------------------

def _rule(rule_id: str, impact: str | None, targets: list[list[Any]]) -> dict[str, Any]:
    return {
        "id": rule_id,
        "impact": impact,
        "description": f"Ensures {rule_id} is correct",
        "help": f"{rule_id} must be correct",
        "helpUrl": f"https://dequeuniversity.com/rules/axe/4.10/{rule_id}",
        "tags": ["wcag2a"],
        "nodes": [{"target": target, "html": "<div></div>"} for target in targets],
    }


@pytest.fixture
def axe_raw_results() -> dict[str, Any]:
    """Three violations (2 serious, 1 moderate), the last one on five nodes."""
    return {
        "testEngine": {"name": "axe-core", "version": "4.10.2"},
        "url": "https://example.com/",
        "timestamp": "2026-01-01T00:00:00.000Z",
        "violations": [
            _rule("image-alt", "serious", [["img.hero"]]),
            _rule("color-contrast", "serious", [["#main", "p.lead"], ["footer a"]]),
            _rule(
                "region",
                "moderate",
                [["div.a"], ["div.b"], ["div.c"], ["div.d"], ["div.e"]],
            ),
        ],
        "passes": [_rule("html-has-lang", None, [["html"]]), _rule("document-title", None, [["html"]])],
        "incomplete": [_rule("aria-valid-attr-value", "serious", [["#menu"]])],
        "inapplicable": [_rule("video-caption", None, [])],
    }


@pytest.fixture
def axe_clean_results() -> dict[str, Any]:
    """A page with no violations."""
    return {
        "testEngine": {"name": "axe-core", "version": "4.10.2"},
        "violations": [],
        "passes": [_rule("html-has-lang", None, [["html"]])],
        "incomplete": [],
        "inapplicable": [],
    }
