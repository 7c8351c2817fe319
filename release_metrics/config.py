"""
Configuration defaults and environment overrides.
"""

from __future__ import annotations

import os
from typing import Mapping, Optional

from .errors import ConfigurationError


DEFAULT_REFRESH_INTERVAL = 5 * 60.0  # seconds
DEFAULT_HTTP_TIMEOUT = 30.0  # seconds

REFRESH_INTERVAL_ENV = "RELEASE_METRICS_REFRESH_INTERVAL"


def validate_interval(value: float) -> float:
    """Return ``value`` as a float, rejecting non-positive intervals."""
    try:
        interval = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Refresh interval must be a number, got {value!r}")
    if not interval > 0:
        raise ConfigurationError(f"Refresh interval must be positive, got {value!r}")
    return interval


def refresh_interval_from_env(environ: Optional[Mapping[str, str]] = None) -> float:
    """Read the refresh interval in seconds from the environment.

    Falls back to :data:`DEFAULT_REFRESH_INTERVAL` when the variable is unset
    or empty.
    """
    if environ is None:
        environ = os.environ
    raw = environ.get(REFRESH_INTERVAL_ENV, "").strip()
    if not raw:
        return DEFAULT_REFRESH_INTERVAL
    return validate_interval(raw)
