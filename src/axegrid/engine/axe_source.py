"""Locate the axe-core script payload injected into the page.

Sources, first match wins:

1. ``AXE_SCRIPT_PATH``
2. the ``axe.min.js`` shipped inside the ``axe_selenium_python`` package,
   unless ``AXE_VERSION`` pins a specific release
3. the pinned release, downloaded once from the CDN and cached under
   ``<output dir>/.cache``
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

import requests
from axe_selenium_python import Axe

from axegrid.config import AxeGridConfig
from axegrid.errors import AuditError
from axegrid.models import AXE_CDN_TEMPLATE, AXE_DOWNLOAD_TIMEOUT

logger = logging.getLogger("axegrid.engine.axe_source")

_BANNER_RE = re.compile(r"axe v(\d+\.\d+\.\d+)")


def cache_path(config: AxeGridConfig) -> Path:
    return config.output.dir / ".cache" / f"axe-{config.audit.axe_version}.min.js"


def packaged_axe_path() -> Path:
    """Path of the axe.min.js bundled with axe-selenium-python."""
    # Axe only stores the driver; no browser is touched here
    return Path(Axe(None).script_url)


def version_from_source(source: str) -> str | None:
    """Read the version from the ``/*! axe vX.Y.Z`` banner, if present."""
    match = _BANNER_RE.search(source[:200])
    return match.group(1) if match else None


def _read_script(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise AuditError(f"Cannot read axe-core script {path}: {exc}") from exc


def load_axe_source(config: AxeGridConfig, session: requests.Session | None = None) -> str:
    """Return the axe-core source text.

    Raises:
        AuditError: if the configured file is unreadable or the download fails.
    """
    if config.audit.script_path is not None:
        return _read_script(config.audit.script_path)

    if not config.audit.version_pinned:
        packaged = packaged_axe_path()
        if packaged.is_file():
            source = _read_script(packaged)
            logger.debug("Using packaged axe-core %s from %s", version_from_source(source) or "?", packaged)
            return source
        logger.warning("Packaged axe-core not found at %s; downloading %s", packaged, config.audit.axe_version)

    cached = cache_path(config)
    if cached.is_file() and cached.stat().st_size > 0:
        logger.debug("Using cached axe-core at %s", cached)
        return cached.read_text(encoding="utf-8")

    source = _download(config, session)
    try:
        cached.parent.mkdir(parents=True, exist_ok=True)
        cached.write_text(source, encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not cache axe-core at %s: %s", cached, exc)
    return source


def _download(config: AxeGridConfig, session: requests.Session | None) -> str:
    url = AXE_CDN_TEMPLATE.format(version=config.audit.axe_version)
    http = session or requests.Session()
    logger.info("Downloading axe-core %s from %s", config.audit.axe_version, url)
    try:
        response = http.get(url, timeout=AXE_DOWNLOAD_TIMEOUT)
        response.raise_for_status()
        return response.text
    except requests.RequestException as exc:
        raise AuditError(f"Failed to download axe-core from {url}: {exc}") from exc
    finally:
        if session is None:
            http.close()
