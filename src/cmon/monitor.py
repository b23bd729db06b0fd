"""Sampling engine for cmon."""

import logging
import threading
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime
from queue import Queue
from typing import Protocol

from cmon.counters import (
    PROC_MEMINFO,
    PROC_STAT,
    read_cpu_counters,
    read_disk_counters,
    read_memory_counters,
)
from cmon.errors import DiskQueryError, MonitorError, ParseError
from cmon.models import CPUCounterReading, Snapshot
from cmon.tracker import CpuUtilizationTracker

logger = logging.getLogger(__name__)


class Reporter(Protocol):
    """Anything that consumes snapshots."""

    def report(self, snapshot: Snapshot) -> None: ...


class Sampler:
    """
    Produces one Snapshot per tick.

    CPU and memory sources are required: if either cannot be read the tick
    fails. A failed disk query only degrades the disk figure to 0.0.
    """

    def __init__(
        self,
        disk_path: str = "/",
        tracker: CpuUtilizationTracker | None = None,
        stat_path: str = PROC_STAT,
        meminfo_path: str = PROC_MEMINFO,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Initialize the Sampler.

        Args:
            disk_path: Mount path whose usage is reported by default.
            tracker: CPU tracker to feed; a fresh one is created if omitted.
            stat_path: Location of the process-statistics pseudo-file.
            meminfo_path: Location of the memory-info pseudo-file.
            clock: Returns the current local time.
        """
        self.disk_path = disk_path
        self.tracker = tracker if tracker is not None else CpuUtilizationTracker()
        self._stat_path = stat_path
        self._meminfo_path = meminfo_path
        self._clock = clock

    def tick(self, disk_path: str | None = None) -> Snapshot:
        """Sample all three metric families and return the combined snapshot."""
        timestamp = self._clock().replace(microsecond=0)

        try:
            cpu_counters = read_cpu_counters(self._stat_path)
        except ParseError as exc:
            logger.warning("%s, using zeroed CPU counters", exc)
            cpu_counters = CPUCounterReading()
        cpu_percent = self.tracker.observe(cpu_counters)

        memory_percent = read_memory_counters(self._meminfo_path).used_percent

        return Snapshot(
            timestamp=timestamp,
            cpu_percent=cpu_percent,
            memory_percent=memory_percent,
            disk_percent=self._disk_percent(disk_path or self.disk_path),
        )

    def _disk_percent(self, path: str) -> float:
        try:
            return read_disk_counters(path).used_percent
        except DiskQueryError as exc:
            logger.debug("%s, reporting 0%%", exc)
            return 0.0


class SystemMonitor:
    """
    Drives Sampler ticks at a fixed interval.

    ``run()`` loops in the calling thread; ``start()`` runs the same loop on a
    daemon thread and pushes snapshots to ``update_queue``. Either way the
    loop can be stopped between ticks with ``stop()``.
    """

    def __init__(
        self,
        sampler: Sampler,
        reporters: Iterable[Reporter] = (),
        interval: float = 1.0,
        count: int | None = None,
        update_queue: Queue[Snapshot] | None = None,
    ) -> None:
        """
        Initialize the SystemMonitor.

        Args:
            sampler: Produces the snapshots.
            reporters: Receive every snapshot, in order.
            interval: Seconds to wait between ticks.
            count: Number of ticks to run, or None to run until stopped.
            update_queue: Optional thread-safe queue that also receives snapshots.
        """
        if count is not None and count < 0:
            raise ValueError("count must be non-negative or None")
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._sampler = sampler
        self._reporters = list(reporters)
        self._interval = interval
        self._count = count
        self._queue = update_queue
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._history: deque[Snapshot] = deque(maxlen=60)
        self._ticks = 0
        self.error: MonitorError | None = None

    @property
    def interval(self) -> float:
        """Seconds waited between ticks."""
        return self._interval

    @property
    def count(self) -> int | None:
        """Tick bound, or None when running until stopped."""
        return self._count

    @property
    def ticks(self) -> int:
        """Number of ticks completed so far."""
        return self._ticks

    @property
    def history(self) -> list[Snapshot]:
        """Most recent snapshots, oldest first."""
        return list(self._history)

    @property
    def is_running(self) -> bool:
        """Check if the monitor thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def _should_continue(self) -> bool:
        if self._stop_event.is_set():
            return False
        return self._count is None or self._ticks < self._count

    def run(self) -> int:
        """
        Run ticks until the count is reached or ``stop()`` is called.

        Returns the number of ticks completed. Errors from required counter
        sources propagate and end the loop.
        """
        while self._should_continue():
            snapshot = self._sampler.tick()
            self._history.append(snapshot)
            for reporter in self._reporters:
                reporter.report(snapshot)
            if self._queue is not None:
                self._queue.put(snapshot)
            self._ticks += 1

            # No sleep after the final tick
            if self._should_continue():
                self._stop_event.wait(timeout=self._interval)
        return self._ticks

    def stop(self, timeout: float | None = 5.0) -> None:
        """
        Ask the loop to stop after the current tick.

        Args:
            timeout: How long to wait for a background thread to finish (seconds).
        """
        self._stop_event.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)
            self._thread = None

    def start(self) -> None:
        """Start the sampling loop on a daemon thread."""
        if self.is_running:
            return

        self._stop_event.clear()
        self.error = None
        self._thread = threading.Thread(
            target=self._run_in_thread,
            daemon=True,
            name="SystemMonitor",
        )
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the background thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def _run_in_thread(self) -> None:
        try:
            self.run()
        except MonitorError as exc:
            logger.error("monitoring stopped: %s", exc)
            self.error = exc
