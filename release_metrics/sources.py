"""
Snapshot sources: decode raw payloads and fetch them from files or HTTP.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import requests

from .config import DEFAULT_HTTP_TIMEOUT
from .errors import RecordFormatError
from .interfaces import SnapshotRecords
from .models import DownloadEvent, Release
from .time_utils import parse_date


logger = logging.getLogger(__name__)

UNKNOWN = "unknown"


def _as_count(value) -> int:
    """Read a download count; numeric strings truncate like numbers, anything else is 0."""
    try:
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                return int(float(value))
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return 0


def _as_active(value) -> Optional[bool]:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "active"}
    return bool(value)


def _records_list(payload: Mapping, key: str) -> List:
    records = payload.get(key)
    if records is None:
        return []
    if not isinstance(records, list):
        raise RecordFormatError(f"'{key}' must be a list, got {type(records).__name__}")
    return records


def decode_release(record: Mapping) -> Release:
    return Release(
        version=str(record.get("version") or ""),
        platform=str(record.get("platform") or UNKNOWN),
        channel=str(record.get("channel") or UNKNOWN),
        active=_as_active(record.get("active")),
    )


def decode_records(payload: Mapping) -> Tuple[List[Release], List[DownloadEvent]]:
    """Turn a JSON payload into release and download records.

    Individual records are read leniently: missing fields get neutral
    defaults and download entries with an unreadable date are skipped.
    Only a payload of the wrong overall shape is rejected.

    Raises:
        RecordFormatError: If the payload or its record lists have the wrong type
    """
    if not isinstance(payload, Mapping):
        raise RecordFormatError(
            f"Snapshot payload must be an object, got {type(payload).__name__}"
        )

    releases = []
    for record in _records_list(payload, "releases"):
        if not isinstance(record, Mapping):
            logger.warning("Skipping release record that is not an object: %r", record)
            continue
        releases.append(decode_release(record))

    downloads = []
    for record in _records_list(payload, "downloads"):
        if not isinstance(record, Mapping):
            logger.warning("Skipping download record that is not an object: %r", record)
            continue
        day = parse_date(record.get("date"))
        if day is None:
            logger.warning("Skipping download record with unreadable date: %r", record)
            continue
        downloads.append(DownloadEvent(date=day, count=_as_count(record.get("count"))))

    return releases, downloads


class StaticSnapshotSource:
    """Serve fixed records from memory."""

    def __init__(
        self,
        releases: Sequence[Release] = (),
        download_events: Sequence[DownloadEvent] = (),
    ) -> None:
        self.releases = list(releases)
        self.download_events = list(download_events)

    async def fetch_snapshot_records(self) -> SnapshotRecords:
        return list(self.releases), list(self.download_events)


class JsonFileSnapshotSource:
    """Read the snapshot payload from a JSON file on every fetch."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> Dict:
        with open(self.path, encoding="utf-8") as f:
            return json.load(f)

    async def fetch_snapshot_records(self) -> SnapshotRecords:
        logger.debug("Reading snapshot records from %s", self.path)
        payload = await asyncio.to_thread(self._load)
        return decode_records(payload)


class HttpSnapshotSource:
    """Fetch the snapshot payload from an HTTP endpoint.

    The blocking ``requests`` call runs in a worker thread so the event loop
    stays free while the request is in flight.
    """

    def __init__(
        self,
        url: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self) -> Dict:
        logger.info("Fetching snapshot records from %s", self.url)
        with self.session.get(self.url, timeout=self.timeout) as response:
            response.raise_for_status()
            return response.json()

    async def fetch_snapshot_records(self) -> SnapshotRecords:
        payload = await asyncio.to_thread(self._get)
        return decode_records(payload)

    def close(self) -> None:
        """Close the session. Call once the event loop has shut down its worker threads."""
        self.session.close()
