"""
Reporting and export utilities.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict

import pandas as pd

from .models import MetricsSnapshot


logger = logging.getLogger(__name__)

PLATFORM_LABELS = {
    "win": "Windows",
    "windows": "Windows",
    "mac": "Mac",
    "macos": "Mac",
    "linux": "Linux",
}


def platform_label(platform: str) -> str:
    return PLATFORM_LABELS.get(platform.lower(), platform.title())


def snapshot_to_dict(snapshot: MetricsSnapshot) -> Dict:
    return snapshot.to_dict()


def trend_frame(snapshot: MetricsSnapshot) -> pd.DataFrame:
    """Downloads trend as a frame with ``date`` and ``count`` columns, input order kept."""
    return pd.DataFrame(
        {
            "date": [event.date for event in snapshot.downloads_trend],
            "count": [event.count for event in snapshot.downloads_trend],
        },
        columns=["date", "count"],
    )


def distribution_frame(snapshot: MetricsSnapshot) -> pd.DataFrame:
    rows = [
        {"dimension": "platform", "key": key, "percentage": value}
        for key, value in snapshot.platform_distribution.items()
    ]
    rows.extend(
        {"dimension": "channel", "key": key, "percentage": value}
        for key, value in snapshot.channel_distribution.items()
    )
    return pd.DataFrame(rows, columns=["dimension", "key", "percentage"])


def print_summary(snapshot: MetricsSnapshot, title: str = "RELEASE METRICS") -> None:
    logger.info("=" * 60)
    logger.info(title)
    logger.info("=" * 60)
    logger.info("Total releases: %s", snapshot.total_releases)
    logger.info(
        "Active releases: %s (%s%%)",
        snapshot.active_releases, snapshot.active_percentage,
    )
    logger.info("Total downloads: %s", snapshot.total_downloads)
    logger.info("-" * 60)
    for platform, share in snapshot.platform_distribution.items():
        logger.info("%s: %s%%", platform_label(platform), share)
    for channel, share in snapshot.channel_distribution.items():
        logger.info("%s: %s%%", channel.title(), share)
    if snapshot.downloads_trend:
        logger.info("-" * 60)
        for event in snapshot.downloads_trend:
            logger.info("%s  %s", event.date.isoformat(), event.count)
    logger.info("=" * 60)


def save_snapshot_json(snapshot: MetricsSnapshot, output_dir: Path, name: str) -> Path:
    output_dir.mkdir(parents=True, exist_ok=True)
    results_file = output_dir / f"{name}_metrics.json"
    with open(results_file, 'w') as f:
        json.dump(snapshot_to_dict(snapshot), f, indent=2)
    return results_file


def export_trend_csv(snapshot: MetricsSnapshot, output_dir: Path, name: str) -> Path | None:
    if not snapshot.downloads_trend:
        return None
    output_dir.mkdir(parents=True, exist_ok=True)
    trend_file = output_dir / f"{name}_trend.csv"
    trend_frame(snapshot).to_csv(trend_file, index=False)
    return trend_file
