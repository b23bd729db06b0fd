"""Command-line entry point for cmon."""

import argparse
import signal
import sys
from queue import Queue

from cmon.config import MonitorConfig
from cmon.errors import MonitorError
from cmon.logging_setup import configure_logging
from cmon.models import Snapshot
from cmon.monitor import Sampler, SystemMonitor
from cmon.reporter import ConsoleReporter, CsvReporter


def _non_negative_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value!r}")
    return number


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be >= 0: {value!r}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cmon",
        description="Monitor CPU, memory and disk usage on Linux hosts.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=_non_negative_float,
        default=1.0,
        metavar="N",
        help="monitoring interval in seconds (default: 1)",
    )
    parser.add_argument(
        "-c",
        "--count",
        type=_non_negative_int,
        default=None,
        metavar="N",
        help="run for N iterations (default: infinite)",
    )
    parser.add_argument("-l", "--log", metavar="FILE", help="log results to CSV file")
    parser.add_argument(
        "-d",
        "--disk-path",
        default="/",
        metavar="PATH",
        help="mount path whose disk usage is reported (default: /)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="print diagnostics to stderr")
    parser.add_argument("--tui", action="store_true", help="show a live terminal view")
    return parser


def build_monitor(config: MonitorConfig, update_queue: Queue[Snapshot] | None = None) -> SystemMonitor:
    """Wire a Sampler and its reporters into a SystemMonitor."""
    reporters = []
    if update_queue is None:
        reporters.append(ConsoleReporter())
    if config.log_path is not None:
        reporters.append(CsvReporter(config.log_path))
    return SystemMonitor(
        Sampler(disk_path=config.disk_path),
        reporters=reporters,
        interval=config.interval,
        count=config.count,
        update_queue=update_queue,
    )


def run_console(config: MonitorConfig) -> int:
    monitor = build_monitor(config)

    def stop(*_) -> None:
        monitor.stop()

    previous = {signum: signal.signal(signum, stop) for signum in (signal.SIGINT, signal.SIGTERM)}
    try:
        monitor.run()
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)
    return 0


def run_tui(config: MonitorConfig) -> int:
    from cmon.app import MonitorApp

    update_queue: Queue[Snapshot] = Queue()
    monitor = build_monitor(config, update_queue)
    MonitorApp(monitor, update_queue).run()
    monitor.stop()
    if monitor.error is not None:
        print(f"Error: {monitor.error}", file=sys.stderr)
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the cmon command."""
    args = build_parser().parse_args(argv)
    config = MonitorConfig.from_args(args)
    logger = configure_logging(config.verbose)
    logger.debug("starting with %s", config)

    try:
        if config.tui:
            return run_tui(config)
        return run_console(config)
    except MonitorError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

