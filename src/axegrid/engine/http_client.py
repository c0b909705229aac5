"""Outgoing HTTP session used by the grid probe, publisher and axe-core download.

Proxy handling is decided once here instead of through ambient process state:
on Jenkins the inherited proxy environment is ignored.
"""

from __future__ import annotations

import logging

import requests

from axegrid import __version__
from axegrid.config import AxeGridConfig

logger = logging.getLogger("axegrid.engine.http_client")


def build_http_session(config: AxeGridConfig) -> requests.Session:
    """Return a requests.Session configured for this run."""
    session = requests.Session()
    session.headers["User-Agent"] = f"axegrid/{__version__}"
    if config.system.on_jenkins:
        logger.debug("Jenkins platform detected -- ignoring proxy environment variables")
        session.trust_env = False
        session.proxies = {}
    return session
