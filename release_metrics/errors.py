"""
Exception hierarchy for release metrics.
"""


class ReleaseMetricsError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(ReleaseMetricsError, ValueError):
    """A configuration value is missing or out of range."""


class RecordFormatError(ReleaseMetricsError, ValueError):
    """A fetched payload does not have the expected shape."""


class CoordinatorClosedError(ReleaseMetricsError, RuntimeError):
    """The refresh coordinator was used after it was stopped."""
