"""axegrid Report Builder — the canonical report for one run.

Holds the audit data model (:class:`AuditFinding`, :class:`AuditResultSet`)
and assembles the persisted :class:`Report`.  The JSON produced by
:meth:`Report.to_dict` uses the camelCase keys consumers of ``axe-report.json``
expect (``pageTitle``, ``testDuration``, ``browserInfo``, ...).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import random
import string
import time
from typing import Any

from axegrid.config import AxeGridConfig
from axegrid.engine.navigator import NavigationResult
from axegrid.models import RESULT_TYPES, TRANSPORT_PLAYWRIGHT

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def _target_segment(segment: Any) -> str:
    # shadow DOM / iframe targets are nested selector lists
    if isinstance(segment, (list, tuple)):
        return ",".join(str(s) for s in segment)
    return str(segment)


@dataclasses.dataclass(frozen=True)
class AuditFinding:
    """One rule result reported by axe-core."""

    id: str
    description: str
    help: str
    help_url: str
    impact: str | None
    nodes: tuple[tuple[str, ...], ...]
    raw: dict[str, Any] = dataclasses.field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_axe(cls, item: dict[str, Any]) -> AuditFinding:
        nodes = tuple(
            tuple(_target_segment(seg) for seg in node.get("target", []))
            for node in item.get("nodes", [])
        )
        return cls(
            id=item.get("id", ""),
            description=item.get("description", ""),
            help=item.get("help", ""),
            help_url=item.get("helpUrl", ""),
            impact=item.get("impact"),
            nodes=nodes,
            raw=item,
        )

    def node_paths(self) -> list[str]:
        return [" > ".join(target) for target in self.nodes]


@dataclasses.dataclass
class AuditResultSet:
    """Findings grouped by category, in engine order."""

    violations: list[AuditFinding] = dataclasses.field(default_factory=list)
    passes: list[AuditFinding] = dataclasses.field(default_factory=list)
    incomplete: list[AuditFinding] = dataclasses.field(default_factory=list)
    inapplicable: list[AuditFinding] = dataclasses.field(default_factory=list)
    engine_version: str | None = None
    raw: dict[str, Any] = dataclasses.field(default_factory=dict, repr=False)

    @classmethod
    def from_axe(cls, raw: dict[str, Any]) -> AuditResultSet:
        """Wrap the JSON object returned by ``axe.run``."""
        categories = {
            name: [AuditFinding.from_axe(item) for item in raw.get(name) or []]
            for name in RESULT_TYPES
        }
        engine = raw.get("testEngine") or {}
        return cls(**categories, engine_version=engine.get("version"), raw=raw)

    def counts(self) -> dict[str, int]:
        return {name: len(getattr(self, name)) for name in RESULT_TYPES}

    def to_dict(self) -> dict[str, Any]:
        """The engine payload as written into the report."""
        data = dict(self.raw)
        for name in RESULT_TYPES:
            data[name] = [finding.raw for finding in getattr(self, name)]
        return data


@dataclasses.dataclass(frozen=True)
class BrowserInfo:
    name: str
    version: str
    platform: str


@dataclasses.dataclass(frozen=True)
class Report:
    """The persisted artifact. Built once, never mutated."""

    url: str
    page_title: str
    timestamp: str
    test_duration: str
    session_id: str
    browser_info: BrowserInfo
    axe_version: str
    summary: dict[str, int]
    results: AuditResultSet

    @property
    def passed(self) -> bool:
        return self.summary["violations"] == 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "pageTitle": self.page_title,
            "timestamp": self.timestamp,
            "testDuration": self.test_duration,
            "sessionId": self.session_id,
            "browserInfo": dataclasses.asdict(self.browser_info),
            "axeVersion": self.axe_version,
            "summary": dict(self.summary),
            "results": self.results.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Rehydrate a report loaded from ``axe-report.json``."""
        results = AuditResultSet.from_axe(data.get("results") or {})
        info = data.get("browserInfo") or {}
        return cls(
            url=data.get("url", ""),
            page_title=data.get("pageTitle", ""),
            timestamp=data.get("timestamp", ""),
            test_duration=data.get("testDuration", ""),
            session_id=data.get("sessionId", ""),
            browser_info=BrowserInfo(
                name=info.get("name", ""),
                version=info.get("version", ""),
                platform=info.get("platform", ""),
            ),
            axe_version=data.get("axeVersion", ""),
            summary=results.counts(),
            results=results,
        )


def generate_session_id(transport: str = TRANSPORT_PLAYWRIGHT) -> str:
    """Local session id: ``<transport>-<epoch ms>-<9 char suffix>``."""
    suffix = "".join(random.choices(_SUFFIX_ALPHABET, k=9))
    return f"{transport}-{int(time.time() * 1000)}-{suffix}"


def iso_timestamp(now: dt.datetime | None = None) -> str:
    now = now or dt.datetime.now(dt.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_duration(seconds: float) -> str:
    return f"{seconds:.2f}s"


def build_report(
    config: AxeGridConfig,
    session_id: str | None,
    navigation: NavigationResult,
    results: AuditResultSet,
    started_at: float,
    now: dt.datetime | None = None,
    finished_at: float | None = None,
) -> Report:
    """Assemble the report for a finished audit.

    Args:
        config: Run configuration.
        session_id: Engine-supplied session id, or None to generate one.
        navigation: Result of loading the target page.
        results: Audit results.
        started_at: ``time.monotonic()`` reading taken when the run started.
        now: Wall-clock time for the timestamp (defaults to the current UTC time).
        finished_at: ``time.monotonic()`` reading for the end of the run.
    """
    elapsed = (finished_at if finished_at is not None else time.monotonic()) - started_at
    return Report(
        url=config.test.url,
        page_title=navigation.title,
        timestamp=iso_timestamp(now),
        test_duration=format_duration(elapsed),
        session_id=session_id or generate_session_id(config.browser.transport),
        browser_info=BrowserInfo(
            name=config.browser.name,
            version=config.browser.version,
            platform=config.browser.platform,
        ),
        axe_version=results.engine_version or config.audit.axe_version,
        summary=results.counts(),
        results=results,
    )
