#!/usr/bin/env python3
"""
Example script showing how to use the release-metrics engine.
"""

import asyncio
from datetime import date

from release_metrics.aggregator import StatsAggregator
from release_metrics.coordinator import RefreshCoordinator, RefreshState
from release_metrics.models import DownloadEvent, Release
from release_metrics.sources import StaticSnapshotSource
from release_metrics.versioning import compare_versions, sort_versions


RELEASES = [
    Release(version="1.2.0", platform="win", channel="stable"),
    Release(version="1.10.0", platform="win", channel="stable"),
    Release(version="2.0.0-beta", platform="win", channel="beta"),
    Release(version="1.9", platform="mac", channel="stable"),
    Release(version="1.9.0", platform="linux", channel="stable"),
]

DOWNLOADS = [
    DownloadEvent(date=date(2025, 1, 1), count=1000),
    DownloadEvent(date=date(2025, 1, 2), count=1500),
    DownloadEvent(date=date(2025, 1, 3), count=2000),
]


def example_version_ordering():
    """Example: Ordering version strings."""
    print("="*60)
    print("Example 1: Version Ordering")
    print("="*60)

    print(f"1.2.3 vs 1.2.10: {compare_versions('1.2.3', '1.2.10')}")
    print(f"1.2 vs 1.2.0: {compare_versions('1.2', '1.2.0')}")
    print(f"1.2.3-rc1 vs 1.2.3: {compare_versions('1.2.3-rc1', '1.2.3')}")
    print(f"Sorted: {sort_versions(['1.10', '1.9', '1.2.0', '2.0'])}")


def example_aggregation():
    """Example: One aggregation pass with derived active flags."""
    print("\n" + "="*60)
    print("Example 2: Aggregation")
    print("="*60)

    snapshot = StatsAggregator().aggregate(RELEASES, DOWNLOADS)

    print(f"Total releases: {snapshot.total_releases}")
    print(f"Active releases: {snapshot.active_releases} ({snapshot.active_percentage}%)")
    print(f"Total downloads: {snapshot.total_downloads:,}")
    print(f"Platforms: {dict(snapshot.platform_distribution)}")
    print(f"Channels: {dict(snapshot.channel_distribution)}")


async def example_refresh_cycle():
    """Example: Polling with a refresh coordinator."""
    print("\n" + "="*60)
    print("Example 3: Refresh Cycle")
    print("="*60)

    source = StaticSnapshotSource(RELEASES, DOWNLOADS)
    ready = asyncio.Event()

    def on_status(status):
        print(f"State: {status.state.value}")
        if status.state is RefreshState.READY:
            ready.set()

    async with RefreshCoordinator(source, interval=60) as coordinator:
        coordinator.subscribe(on_status)
        await ready.wait()
        print(f"Snapshot: {coordinator.snapshot.to_dict()}")


if __name__ == "__main__":
    print("\nRelease Metrics - Usage Examples\n")

    example_version_ordering()
    example_aggregation()
    asyncio.run(example_refresh_cycle())
