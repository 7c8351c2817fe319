"""
Release Metrics

Orders release versions and aggregates release and download records into the
metrics shown on a release monitoring dashboard.
"""

__version__ = "0.1.0"

from .aggregator import StatsAggregator, aggregate
from .cli import main
from .coordinator import RefreshCoordinator, RefreshState, RefreshStatus
from .models import DownloadEvent, MetricsSnapshot, Release
from .versioning import NumericVersion, compare_versions, parse_version

__all__ = [
    "DownloadEvent",
    "MetricsSnapshot",
    "NumericVersion",
    "RefreshCoordinator",
    "RefreshState",
    "RefreshStatus",
    "Release",
    "StatsAggregator",
    "aggregate",
    "compare_versions",
    "main",
    "parse_version",
]
