"""Error taxonomy for an accessibility run.

Every fatal phase of a run raises its own subclass of :class:`AxeGridError`
so the CLI can log it and exit non-zero.  Publishing failures are never
raised; they are reported through :class:`PublishWarning` in the log.
"""

from __future__ import annotations


class AxeGridError(Exception):
    """Base class for all fatal run errors."""

    pass


class ConfigurationError(AxeGridError):
    """Raised when the resolved configuration cannot be used for a run."""

    pass


class ConnectivityError(AxeGridError):
    """Raised when the grid status probe fails or returns a non-success status."""

    pass


class SessionError(AxeGridError):
    """Raised when a browser session cannot be launched or connected."""

    pass


class NavigationError(AxeGridError):
    """Raised when the target page fails to load within the navigation timeout."""

    pass


class AuditError(AxeGridError):
    """Raised when axe-core cannot be injected or fails while running."""

    pass


class PublishWarning(UserWarning):
    """Category for recovered failures while uploading results to the grid."""

    pass
