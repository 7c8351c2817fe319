"""
Aggregate release and download records into dashboard metrics.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Dict, Iterable, List, Sequence, Tuple

from .models import DownloadEvent, MetricsSnapshot, Release
from .versioning import compare_versions


logger = logging.getLogger(__name__)


def percentage(part: int, whole: int) -> int:
    """Whole-number percentage of ``part`` in ``whole``; 0 when ``whole`` is 0.

    Exact halves round up (29 of 200 is 15). Integer arithmetic only.
    """
    if whole == 0:
        return 0
    return (200 * part + whole) // (2 * whole)


def derive_active_flags(releases: Sequence[Release]) -> List[bool]:
    """Resolve the active flag of every release.

    Explicit flags are kept. A release without a flag is active when it has
    the greatest version in its (platform, channel) group; on a tie the
    release listed first wins.
    """
    latest: Dict[Tuple[str, str], int] = {}
    for index, release in enumerate(releases):
        group = (release.platform, release.channel)
        current = latest.get(group)
        if current is None or compare_versions(release.version, releases[current].version) > 0:
            latest[group] = index

    winners = set(latest.values())
    flags = []
    for index, release in enumerate(releases):
        if release.active is None:
            flags.append(index in winners)
        else:
            flags.append(bool(release.active))
    return flags


def _distribution(keys: Iterable[str], total: int) -> Dict[str, int]:
    return {key: percentage(count, total) for key, count in Counter(keys).items()}


class StatsAggregator:
    """Build :class:`MetricsSnapshot` values from raw records.

    The aggregator holds no state; calling :meth:`aggregate` twice with the
    same input returns equal snapshots.
    """

    def aggregate(
        self,
        releases: Sequence[Release],
        download_events: Sequence[DownloadEvent],
    ) -> MetricsSnapshot:
        releases = list(releases)
        trend = tuple(download_events)

        total = len(releases)
        if any(release.active is None for release in releases):
            active = sum(derive_active_flags(releases))
        else:
            active = sum(1 for release in releases if release.active)

        snapshot = MetricsSnapshot(
            total_releases=total,
            active_releases=active,
            active_percentage=percentage(active, total),
            total_downloads=sum(event.count for event in trend),
            platform_distribution=_distribution((r.platform for r in releases), total),
            channel_distribution=_distribution((r.channel for r in releases), total),
            downloads_trend=trend,
        )
        logger.debug(
            "Aggregated %s releases (%s active) and %s download events",
            total, active, len(trend),
        )
        return snapshot


_DEFAULT_AGGREGATOR = StatsAggregator()


def aggregate(
    releases: Sequence[Release], download_events: Sequence[DownloadEvent]
) -> MetricsSnapshot:
    """Aggregate using a shared aggregator instance."""
    return _DEFAULT_AGGREGATOR.aggregate(releases, download_events)
