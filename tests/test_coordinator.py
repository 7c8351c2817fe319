"""Tests for the refresh coordinator lifecycle."""

import asyncio
from datetime import date

import pytest

from release_metrics.coordinator import RefreshCoordinator, RefreshState
from release_metrics.errors import ConfigurationError, CoordinatorClosedError
from release_metrics.models import DownloadEvent, Release
from release_metrics.sources import StaticSnapshotSource


RECORDS = (
    [Release("1.0", "win", "stable", True), Release("0.9", "mac", "beta", False)],
    [DownloadEvent(date(2025, 1, 1), 10)],
)

SETTLED = (RefreshState.READY, RefreshState.FAILED)


class ScriptedSource:
    """Return (or raise) scripted results; the last one repeats.

    Fetches block while ``gate`` is cleared.
    """

    def __init__(self, *results):
        self.results = list(results) or [RECORDS]
        self.calls = 0
        self.gate = asyncio.Event()
        self.gate.set()

    async def fetch_snapshot_records(self):
        self.calls += 1
        await self.gate.wait()
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result


async def wait_for(predicate, timeout=2.0):
    async def _poll():
        while not predicate():
            await asyncio.sleep(0.001)

    await asyncio.wait_for(_poll(), timeout)


@pytest.mark.asyncio
async def test_start_transitions_idle_loading_ready():
    source = ScriptedSource()
    coordinator = RefreshCoordinator(source, interval=60)
    seen = []
    coordinator.subscribe(lambda status: seen.append(status.state))

    assert coordinator.state is RefreshState.IDLE
    assert coordinator.snapshot is None

    coordinator.start()
    assert coordinator.state is RefreshState.LOADING
    assert coordinator.status.is_loading

    await wait_for(lambda: coordinator.state in SETTLED)
    await coordinator.stop()

    assert seen == [RefreshState.LOADING, RefreshState.READY]
    assert coordinator.snapshot.total_releases == 2
    assert coordinator.snapshot.total_downloads == 10
    assert coordinator.error is None
    assert coordinator.status.last_success_at is not None


@pytest.mark.asyncio
async def test_failure_keeps_last_good_snapshot():
    source = ScriptedSource(RECORDS, RuntimeError("Failed to load stats"))
    coordinator = RefreshCoordinator(source, interval=60)

    ready = await coordinator.refresh()
    assert ready.state is RefreshState.READY

    failed = await coordinator.refresh()
    await coordinator.stop()

    assert failed.state is RefreshState.FAILED
    assert failed.has_error
    assert failed.error == "Failed to load stats"
    assert failed.snapshot is ready.snapshot
    assert failed.last_success_at == ready.last_success_at


@pytest.mark.asyncio
async def test_first_failure_has_no_snapshot():
    source = ScriptedSource(ValueError())
    coordinator = RefreshCoordinator(source, interval=60)

    status = await coordinator.refresh()
    await coordinator.stop()

    assert status.state is RefreshState.FAILED
    assert status.snapshot is None
    assert status.error == "ValueError"


@pytest.mark.asyncio
async def test_loading_keeps_previous_snapshot_visible():
    source = ScriptedSource()
    coordinator = RefreshCoordinator(source, interval=60)
    first = await coordinator.refresh()

    source.gate.clear()
    pending = asyncio.ensure_future(coordinator.refresh())
    await wait_for(lambda: source.calls == 2)

    assert coordinator.state is RefreshState.LOADING
    assert coordinator.snapshot is first.snapshot
    assert coordinator.error is None

    source.gate.set()
    await pending
    await coordinator.stop()


@pytest.mark.asyncio
async def test_loading_clears_previous_error():
    source = ScriptedSource(RuntimeError("down"), RECORDS)
    coordinator = RefreshCoordinator(source, interval=60)
    await coordinator.refresh()
    assert coordinator.error == "down"

    source.gate.clear()
    pending = asyncio.ensure_future(coordinator.refresh())
    await wait_for(lambda: source.calls == 2)
    assert coordinator.state is RefreshState.LOADING
    assert coordinator.error is None

    source.gate.set()
    status = await pending
    await coordinator.stop()
    assert status.state is RefreshState.READY


@pytest.mark.asyncio
async def test_timer_never_overlaps_an_inflight_fetch():
    source = ScriptedSource()
    source.gate.clear()
    coordinator = RefreshCoordinator(source, interval=0.01)

    coordinator.start()
    await asyncio.sleep(0.1)

    assert source.calls == 1
    assert coordinator.fetch_count == 1
    assert coordinator.state is RefreshState.LOADING

    source.gate.set()
    await wait_for(lambda: coordinator.state in SETTLED)
    await coordinator.stop()


@pytest.mark.asyncio
async def test_concurrent_refresh_calls_share_one_fetch():
    source = ScriptedSource()
    source.gate.clear()
    coordinator = RefreshCoordinator(source, interval=60)

    first = asyncio.ensure_future(coordinator.refresh())
    second = asyncio.ensure_future(coordinator.refresh())
    await wait_for(lambda: source.calls == 1)
    source.gate.set()
    results = await asyncio.gather(first, second)
    await coordinator.stop()

    assert source.calls == 1
    assert results[0] == results[1]


@pytest.mark.asyncio
async def test_polls_again_after_interval_including_after_failure():
    source = ScriptedSource(RuntimeError("flaky"), RECORDS)
    coordinator = RefreshCoordinator(source, interval=0.01)
    seen = []
    coordinator.subscribe(lambda status: seen.append(status.state))

    coordinator.start()
    await wait_for(lambda: source.calls >= 3)
    await coordinator.stop()

    assert seen[:4] == [
        RefreshState.LOADING,
        RefreshState.FAILED,
        RefreshState.LOADING,
        RefreshState.READY,
    ]


@pytest.mark.asyncio
async def test_stop_while_loading_discards_result():
    source = ScriptedSource()
    source.gate.clear()
    coordinator = RefreshCoordinator(source, interval=60)
    seen = []
    coordinator.subscribe(lambda status: seen.append(status.state))

    coordinator.start()
    await wait_for(lambda: source.calls == 1)
    await coordinator.stop()
    source.gate.set()
    await asyncio.sleep(0.02)

    assert coordinator.closed
    assert not coordinator.running
    assert coordinator.snapshot is None
    assert coordinator.state is RefreshState.LOADING
    assert seen == [RefreshState.LOADING]


@pytest.mark.asyncio
async def test_late_result_after_stop_is_ignored():
    class StubbornSource:
        """Ignores cancellation and returns records after a delay."""

        async def fetch_snapshot_records(self):
            try:
                await asyncio.sleep(0.05)
            except asyncio.CancelledError:
                pass
            return RECORDS

    coordinator = RefreshCoordinator(StubbornSource(), interval=60)
    coordinator.start()
    await asyncio.sleep(0)
    await coordinator.stop()
    await asyncio.sleep(0.1)

    assert coordinator.snapshot is None


@pytest.mark.asyncio
async def test_context_manager_starts_and_stops():
    source = ScriptedSource()

    async with RefreshCoordinator(source, interval=60) as coordinator:
        assert coordinator.running
        await wait_for(lambda: coordinator.state is RefreshState.READY)

    assert coordinator.closed
    assert not coordinator.running


@pytest.mark.asyncio
async def test_start_twice_is_noop():
    source = ScriptedSource()
    coordinator = RefreshCoordinator(source, interval=60)

    coordinator.start()
    coordinator.start()
    await wait_for(lambda: coordinator.state in SETTLED)
    await coordinator.stop()

    assert source.calls == 1


@pytest.mark.asyncio
async def test_use_after_stop_raises():
    coordinator = RefreshCoordinator(ScriptedSource(), interval=60)
    await coordinator.stop()

    with pytest.raises(CoordinatorClosedError):
        coordinator.start()
    with pytest.raises(CoordinatorClosedError):
        await coordinator.refresh()


@pytest.mark.asyncio
async def test_listener_errors_do_not_break_refresh(caplog):
    coordinator = RefreshCoordinator(ScriptedSource(), interval=60)
    seen = []

    def broken(status):
        raise RuntimeError("render failed")

    coordinator.subscribe(broken)
    unsubscribe = coordinator.subscribe(lambda status: seen.append(status.state))

    status = await coordinator.refresh()
    unsubscribe()
    await coordinator.refresh()
    await coordinator.stop()

    assert status.state is RefreshState.READY
    assert seen == [RefreshState.LOADING, RefreshState.READY]
    assert "render failed" in caplog.text


@pytest.mark.parametrize("interval", [0, -5, "soon"])
def test_invalid_interval_is_rejected(interval):
    with pytest.raises(ConfigurationError):
        RefreshCoordinator(StaticSnapshotSource(), interval=interval)


def test_default_interval_is_five_minutes():
    coordinator = RefreshCoordinator(StaticSnapshotSource())
    assert coordinator.interval == 300.0
