"""
Polling lifecycle for dashboard metrics.

A :class:`RefreshCoordinator` fetches records from a snapshot source,
aggregates them and keeps the latest snapshot for display. It polls on a
fixed interval, never runs two fetches at once, and keeps showing the last
good snapshot while a refresh is loading or after one has failed.

Usage:
    async with RefreshCoordinator(source, interval=60) as coordinator:
        coordinator.subscribe(render)
        ...
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, List, Optional

from .aggregator import StatsAggregator
from .config import DEFAULT_REFRESH_INTERVAL, validate_interval
from .errors import CoordinatorClosedError
from .interfaces import SnapshotListener, SnapshotSource
from .models import MetricsSnapshot
from .time_utils import utc_now


logger = logging.getLogger(__name__)


class RefreshState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


@dataclass(frozen=True)
class RefreshStatus:
    """What a renderer sees at one point in the refresh cycle.

    Attributes:
        state: Current lifecycle state
        snapshot: Last successfully aggregated snapshot, or None before the first success
        error: Failure message, only set in the failed state
        last_success_at: When ``snapshot`` was produced
    """

    state: RefreshState
    snapshot: Optional[MetricsSnapshot] = None
    error: Optional[str] = None
    last_success_at: Optional[datetime] = None

    @property
    def is_loading(self) -> bool:
        return self.state is RefreshState.LOADING

    @property
    def has_error(self) -> bool:
        return self.state is RefreshState.FAILED


def _describe_failure(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class RefreshCoordinator:
    """Own the fetch / aggregate / wait cycle for one dashboard."""

    def __init__(
        self,
        source: SnapshotSource,
        aggregator: Optional[StatsAggregator] = None,
        interval: float = DEFAULT_REFRESH_INTERVAL,
    ) -> None:
        """Initialize the coordinator.

        Args:
            source: Data source queried for release and download records
            aggregator: Aggregator used on each fetch result (default: a new StatsAggregator)
            interval: Seconds to wait after a fetch settles before the next one

        Raises:
            ConfigurationError: If interval is not a positive number
        """
        self.interval = validate_interval(interval)
        self.source = source
        self.aggregator = aggregator or StatsAggregator()
        self.fetch_count = 0

        self._status = RefreshStatus(state=RefreshState.IDLE)
        self._listeners: List[SnapshotListener] = []
        self._inflight: Optional[asyncio.Task] = None
        self._poller: Optional[asyncio.Task] = None
        self._closed = False

    @property
    def status(self) -> RefreshStatus:
        return self._status

    @property
    def state(self) -> RefreshState:
        return self._status.state

    @property
    def snapshot(self) -> Optional[MetricsSnapshot]:
        return self._status.snapshot

    @property
    def error(self) -> Optional[str]:
        return self._status.error

    @property
    def running(self) -> bool:
        return self._poller is not None and not self._poller.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call ``listener`` with every new status. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start(self) -> None:
        """Begin polling. Must be called from a running event loop."""
        if self._closed:
            raise CoordinatorClosedError("Refresh coordinator has been stopped")
        if self.running:
            return
        logger.info("Starting refresh cycle every %.0f seconds", self.interval)
        self._begin_fetch()
        self._poller = asyncio.create_task(self._poll())

    async def refresh(self) -> RefreshStatus:
        """Fetch now, or wait for the fetch already in flight."""
        if self._closed:
            raise CoordinatorClosedError("Refresh coordinator has been stopped")
        task = self._begin_fetch()
        await asyncio.wait({task})
        return self._status

    async def stop(self) -> None:
        """Cancel polling and discard any fetch still in flight."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        tasks = [task for task in (self._poller, self._inflight) if task is not None]
        for task in tasks:
            task.cancel()
        for task in tasks:
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._poller = None
        self._inflight = None
        logger.info("Refresh cycle stopped")

    async def __aenter__(self) -> "RefreshCoordinator":
        self.start()
        return self

    async def __aexit__(self, *args) -> None:
        await self.stop()

    async def _poll(self) -> None:
        while True:
            task = self._inflight
            if task is not None:
                await asyncio.wait({task})
            await asyncio.sleep(self.interval)
            self._begin_fetch()

    def _begin_fetch(self) -> asyncio.Task:
        if self._inflight is not None and not self._inflight.done():
            logger.debug("Fetch already in flight, not starting another")
            return self._inflight
        self.fetch_count += 1
        self._publish(
            RefreshStatus(
                state=RefreshState.LOADING,
                snapshot=self._status.snapshot,
                last_success_at=self._status.last_success_at,
            )
        )
        self._inflight = asyncio.create_task(self._acquire())
        return self._inflight

    async def _acquire(self) -> None:
        try:
            releases, download_events = await self.source.fetch_snapshot_records()
            snapshot = self.aggregator.aggregate(releases, download_events)
        except Exception as exc:
            if self._closed:
                return
            logger.warning("Failed to refresh release metrics: %s", exc)
            self._publish(
                RefreshStatus(
                    state=RefreshState.FAILED,
                    snapshot=self._status.snapshot,
                    error=_describe_failure(exc),
                    last_success_at=self._status.last_success_at,
                )
            )
            return

        if self._closed:
            logger.debug("Discarding fetch result that arrived after stop")
            return
        self._publish(
            RefreshStatus(
                state=RefreshState.READY,
                snapshot=snapshot,
                last_success_at=utc_now(),
            )
        )
        logger.info(
            "Refreshed release metrics: %s releases, %s downloads",
            snapshot.total_releases, snapshot.total_downloads,
        )

    def _publish(self, status: RefreshStatus) -> None:
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Status listener %r failed", listener)
