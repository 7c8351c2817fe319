"""
Core data models for release metrics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Release:
    """A published release on one platform and channel.

    ``active`` is ``None`` when the data source did not say whether the
    release is the current one for its platform and channel.
    """

    version: str
    platform: str
    channel: str
    active: Optional[bool] = None


@dataclass(frozen=True)
class DownloadEvent:
    """Downloads counted for a single day."""

    date: date
    count: int


def _frozen_mapping(values: Optional[Mapping[str, int]]) -> Mapping[str, int]:
    return MappingProxyType(dict(values or {}))


@dataclass(frozen=True)
class MetricsSnapshot:
    """Aggregate metrics produced by one aggregation pass.

    Distributions map a platform or channel to a whole-number percentage of
    all releases. The mappings are read-only views.
    """

    total_releases: int = 0
    active_releases: int = 0
    active_percentage: int = 0
    total_downloads: int = 0
    platform_distribution: Mapping[str, int] = field(default_factory=dict)
    channel_distribution: Mapping[str, int] = field(default_factory=dict)
    downloads_trend: Tuple[DownloadEvent, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "platform_distribution", _frozen_mapping(self.platform_distribution)
        )
        object.__setattr__(
            self, "channel_distribution", _frozen_mapping(self.channel_distribution)
        )
        object.__setattr__(self, "downloads_trend", tuple(self.downloads_trend))

    @classmethod
    def empty(cls) -> "MetricsSnapshot":
        return cls()

    def to_dict(self) -> Dict:
        """Return a JSON-ready copy of the snapshot."""
        return {
            "total_releases": self.total_releases,
            "active_releases": self.active_releases,
            "active_percentage": self.active_percentage,
            "total_downloads": self.total_downloads,
            "platform_distribution": dict(self.platform_distribution),
            "channel_distribution": dict(self.channel_distribution),
            "downloads_trend": [
                {"date": event.date.isoformat(), "count": event.count}
                for event in self.downloads_trend
            ],
        }
