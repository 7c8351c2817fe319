"""
Command-line interface for the release metrics engine.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import refresh_interval_from_env, validate_interval
from .coordinator import RefreshCoordinator, RefreshState, RefreshStatus
from .errors import ConfigurationError
from .reporting import export_trend_csv, print_summary, save_snapshot_json
from .sources import HttpSnapshotSource, JsonFileSnapshotSource


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Aggregate release and download records into dashboard metrics"
    )

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--input",
        help="JSON file holding 'releases' and 'downloads' records"
    )
    source.add_argument(
        "--url",
        help="HTTP endpoint returning the same JSON payload"
    )

    parser.add_argument(
        "--watch",
        action="store_true",
        help="Keep refreshing on the refresh interval instead of running once"
    )

    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Refresh interval in seconds. Default: $RELEASE_METRICS_REFRESH_INTERVAL or 300"
    )

    parser.add_argument(
        "--cycles",
        type=int,
        default=None,
        help="With --watch, stop after this many completed refreshes"
    )

    parser.add_argument(
        "--name",
        default="release",
        help="Base name for exported files. Default: release"
    )

    parser.add_argument(
        "--save-json",
        action="store_true",
        help="Write the metrics snapshot to <output-dir>/<name>_metrics.json"
    )

    parser.add_argument(
        "--export-trend",
        action="store_true",
        help="Write the downloads trend to <output-dir>/<name>_trend.csv"
    )

    parser.add_argument(
        "--output-dir",
        default="./output",
        help="Output directory for exported files. Default: ./output"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging"
    )

    return parser


def _build_source(args):
    if args.input:
        return JsonFileSnapshotSource(Path(args.input))
    return HttpSnapshotSource(args.url)


def _export(status: RefreshStatus, args) -> None:
    output_dir = Path(args.output_dir)
    if args.save_json:
        results_file = save_snapshot_json(status.snapshot, output_dir, args.name)
        logger.info("Metrics saved to: %s", results_file)
    if args.export_trend:
        trend_file = export_trend_csv(status.snapshot, output_dir, args.name)
        if trend_file is not None:
            logger.info("Downloads trend saved to: %s", trend_file)


async def run_once(coordinator: RefreshCoordinator, args) -> int:
    status = await coordinator.refresh()
    await coordinator.stop()
    if status.state is not RefreshState.READY:
        print(f"Error: failed to load statistics: {status.error}", file=sys.stderr)
        return 1
    print_summary(status.snapshot)
    _export(status, args)
    return 0


async def run_watch(coordinator: RefreshCoordinator, args) -> int:
    settled = asyncio.Queue()

    def on_status(status: RefreshStatus) -> None:
        if status.state is RefreshState.READY:
            print_summary(status.snapshot)
            _export(status, args)
        elif status.state is RefreshState.FAILED:
            logger.error("Error loading statistics: %s", status.error)
        if status.state in (RefreshState.READY, RefreshState.FAILED):
            settled.put_nowait(status)

    coordinator.subscribe(on_status)
    async with coordinator:
        completed = 0
        while args.cycles is None or completed < args.cycles:
            await settled.get()
            completed += 1
    return 0


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cycles is not None and args.cycles < 1:
        parser.error("--cycles must be at least 1")

    try:
        if args.interval is not None:
            interval = validate_interval(args.interval)
        else:
            interval = refresh_interval_from_env()
    except ConfigurationError as e:
        parser.error(str(e))

    source = _build_source(args)
    coordinator = RefreshCoordinator(source, interval=interval)
    runner = run_watch if args.watch else run_once

    try:
        return asyncio.run(runner(coordinator, args))
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    finally:
        if isinstance(source, HttpSnapshotSource):
            source.close()


if __name__ == "__main__":
    sys.exit(main())
