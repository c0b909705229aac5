"""Grid connectivity probe.

A single authenticated GET against the grid's WebDriver status endpoint,
run before any browser session is created.  This is a precondition check,
not a health monitor: it is never retried.
"""

from __future__ import annotations

import logging

import requests

from axegrid.config import AxeGridConfig
from axegrid.errors import ConnectivityError
from axegrid.models import DEFAULT_HUB_PATH, ONDEMAND_HOST_TEMPLATE

logger = logging.getLogger("axegrid.engine.connectivity")


def status_url(config: AxeGridConfig) -> str:
    """Build the status endpoint from the parsed hub, or from the region."""
    hub = config.grid.hub_url
    if hub is None:
        host = ONDEMAND_HOST_TEMPLATE.format(region=config.grid.region)
        return f"https://{host}{DEFAULT_HUB_PATH}/status"
    path = hub.path.rstrip("/") or DEFAULT_HUB_PATH
    return f"{hub.base_url}{path}/status"


def probe(config: AxeGridConfig, session: requests.Session | None = None) -> bool:
    """Check that the grid accepts our credentials.

    Returns True on a 2xx/3xx response.  Raises ConnectivityError on any
    other status or on a network failure.
    """
    hub = config.grid.hub_url
    username = (hub.username if hub else None) or config.grid.username or ""
    password = (hub.password if hub else None) or config.grid.access_key or ""

    url = status_url(config)
    http = session or requests.Session()
    response: requests.Response | None = None

    logger.info("Probing grid status endpoint %s", url)
    try:
        response = http.get(
            url,
            auth=(username, password),
            timeout=config.system.probe_timeout,
            stream=True,
            allow_redirects=False,
        )
        ok = 200 <= response.status_code < 400
        logger.info("Grid connection: %s (HTTP %d)", "SUCCESS" if ok else "FAILED", response.status_code)
        if not ok:
            raise ConnectivityError(
                f"Failed to connect to Saucelabs at {url} (HTTP {response.status_code}). "
                "Please check your credentials."
            )
        return True
    except requests.RequestException as exc:
        raise ConnectivityError(f"Failed to connect to Saucelabs at {url}: {exc}") from exc
    finally:
        if response is not None:
            response.close()
        if session is None:
            http.close()
