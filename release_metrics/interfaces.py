"""
Interfaces for snapshot sources and status listeners.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Protocol, Sequence, Tuple

from .models import DownloadEvent, Release

if TYPE_CHECKING:
    from .coordinator import RefreshStatus


SnapshotRecords = Tuple[Sequence[Release], Sequence[DownloadEvent]]


class SnapshotSource(Protocol):
    """Fetch the current release and download records."""

    async def fetch_snapshot_records(self) -> SnapshotRecords:
        ...


SnapshotListener = Callable[["RefreshStatus"], None]
