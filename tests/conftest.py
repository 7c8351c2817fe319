"""Shared fixtures for the release_metrics tests."""

from datetime import date

import pytest

from release_metrics.models import DownloadEvent, Release


def build_releases(platforms, channels, active_count):
    """Expand {key: count} maps into a list of releases.

    The first ``active_count`` releases are flagged active.
    """
    platform_tags = [tag for tag, count in platforms.items() for _ in range(count)]
    channel_tags = [tag for tag, count in channels.items() for _ in range(count)]
    assert len(platform_tags) == len(channel_tags)
    return [
        Release(
            version=f"1.0.{index}",
            platform=platform,
            channel=channel,
            active=index < active_count,
        )
        for index, (platform, channel) in enumerate(zip(platform_tags, channel_tags))
    ]


@pytest.fixture
def dashboard_releases():
    """100 releases: 80 win / 15 mac / 5 linux, 60 stable / 30 beta / 10 dev, 75 active."""
    return build_releases(
        {"win": 80, "mac": 15, "linux": 5},
        {"stable": 60, "beta": 30, "dev": 10},
        active_count=75,
    )


@pytest.fixture
def download_events():
    return [
        DownloadEvent(date=date(2025, 1, 1), count=1000),
        DownloadEvent(date=date(2025, 1, 2), count=1500),
        DownloadEvent(date=date(2025, 1, 3), count=2000),
    ]


@pytest.fixture
def snapshot_payload():
    return {
        "releases": [
            {"version": "1.2.0", "platform": "win", "channel": "stable", "active": True},
            {"version": "1.1.0", "platform": "win", "channel": "stable", "active": False},
            {"version": "2.0.0-beta", "platform": "mac", "channel": "beta", "active": True},
            {"version": "0.9", "platform": "linux", "channel": "dev", "active": False},
        ],
        "downloads": [
            {"date": "2025-01-01", "count": 1000},
            {"date": "2025-01-02", "count": 1500},
            {"date": "2025-01-03", "count": 2000},
        ],
    }
