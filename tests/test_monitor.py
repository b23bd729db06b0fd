"""Tests for the Sampler and SystemMonitor classes."""

import threading
import time
from datetime import datetime
from queue import Queue

import pytest

from cmon.errors import SourceUnavailable
from cmon.models import Snapshot
from cmon.monitor import Sampler, SystemMonitor
from cmon.tracker import CpuUtilizationTracker


class CollectingReporter:
    def __init__(self) -> None:
        self.snapshots: list[Snapshot] = []

    def report(self, snapshot: Snapshot) -> None:
        self.snapshots.append(snapshot)


class StubSampler:
    """Returns a constant snapshot without touching the host."""

    def __init__(self) -> None:
        self.calls = 0

    def tick(self, disk_path=None) -> Snapshot:
        self.calls += 1
        return Snapshot(
            timestamp=datetime(2026, 10, 18, 0, 0, self.calls % 60),
            cpu_percent=float(self.calls),
            memory_percent=50.0,
            disk_percent=25.0,
        )


@pytest.fixture
def sampler(stat_file, meminfo_file, fixed_clock):
    return Sampler(stat_path=stat_file("cpu 100 0 0 900"), meminfo_path=meminfo_file, clock=fixed_clock)


class TestSampler:
    """Tests for Sampler.tick."""

    def test_first_tick_is_cold_start(self, sampler):
        """Test the first snapshot reports 0% CPU."""
        snapshot = sampler.tick()
        assert snapshot.cpu_percent == 0.0
        assert snapshot.memory_percent == pytest.approx(75.0)
        assert 0.0 <= snapshot.disk_percent <= 100.0

    def test_timestamp_has_second_resolution(self, sampler):
        snapshot = sampler.tick()
        assert snapshot.timestamp == datetime(2026, 10, 18, 9, 14, 2)
        assert snapshot.formatted_timestamp == "2026-10-18 09:14:02"

    def test_second_tick_uses_delta(self, stat_file, sampler):
        """Test CPU percent comes from the difference between ticks."""
        sampler.tick()
        stat_file("cpu 200 0 0 1800 0 0 0 0")
        assert sampler.tick().cpu_percent == pytest.approx(10.0)

    def test_uses_given_tracker(self, stat_file, meminfo_file):
        tracker = CpuUtilizationTracker()
        sampler = Sampler(tracker=tracker, stat_path=stat_file("cpu 1 0 0 1"), meminfo_path=meminfo_file)
        sampler.tick()
        assert sampler.tracker is tracker
        assert tracker.has_baseline

    def test_invalid_disk_path_degrades_to_zero(self, sampler, tmp_path):
        """Test a failing disk query does not fail the tick."""
        snapshot = sampler.tick(disk_path=str(tmp_path / "nope"))
        assert snapshot.disk_percent == 0.0
        assert snapshot.memory_percent == pytest.approx(75.0)

    def test_default_disk_path(self, stat_file, meminfo_file, tmp_path):
        sampler = Sampler(
            disk_path=str(tmp_path / "nope"),
            stat_path=stat_file("cpu 1 0 0 1"),
            meminfo_path=meminfo_file,
        )
        assert sampler.tick().disk_percent == 0.0

    def test_missing_cpu_source_fails_tick(self, meminfo_file, tmp_path):
        """Test an unreadable CPU source propagates."""
        sampler = Sampler(stat_path=str(tmp_path / "missing"), meminfo_path=meminfo_file)
        with pytest.raises(SourceUnavailable):
            sampler.tick()

    def test_missing_memory_source_fails_tick(self, stat_file, tmp_path):
        """Test an unreadable memory source propagates."""
        sampler = Sampler(stat_path=stat_file("cpu 1 0 0 1"), meminfo_path=str(tmp_path / "missing"))
        with pytest.raises(SourceUnavailable):
            sampler.tick()

    def test_empty_cpu_line_degrades_to_zero(self, stat_file, meminfo_file):
        """Test a malformed CPU line is treated as zeroed counters."""
        sampler = Sampler(stat_path=stat_file(""), meminfo_path=meminfo_file)
        snapshot = sampler.tick()
        assert snapshot.cpu_percent == 0.0
        assert sampler.tracker.previous.total == 0

    def test_empty_meminfo_reports_zero(self, stat_file, tmp_path):
        meminfo = tmp_path / "meminfo"
        meminfo.write_text("", encoding="utf-8")
        sampler = Sampler(stat_path=stat_file("cpu 1 0 0 1"), meminfo_path=str(meminfo))
        assert sampler.tick().memory_percent == 0.0


class TestSystemMonitor:
    """Tests for the tick loop."""

    def test_runs_count_ticks(self):
        """Test count=3, interval=0 produces exactly three snapshots."""
        reporter = CollectingReporter()
        monitor = SystemMonitor(StubSampler(), reporters=[reporter], interval=0, count=3)

        assert monitor.run() == 3
        assert len(reporter.snapshots) == 3
        assert monitor.ticks == 3

    def test_zero_count_runs_nothing(self):
        sampler = StubSampler()
        monitor = SystemMonitor(sampler, interval=0, count=0)
        assert monitor.run() == 0
        assert sampler.calls == 0

    def test_negative_count_rejected(self):
        with pytest.raises(ValueError):
            SystemMonitor(StubSampler(), count=-1)

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError):
            SystemMonitor(StubSampler(), interval=-1)

    def test_every_reporter_sees_every_snapshot(self):
        first, second = CollectingReporter(), CollectingReporter()
        SystemMonitor(StubSampler(), reporters=[first, second], interval=0, count=2).run()
        assert first.snapshots == second.snapshots
        assert len(first.snapshots) == 2

    def test_no_sleep_after_last_tick(self):
        """Test a single tick returns without waiting for the interval."""
        monitor = SystemMonitor(StubSampler(), interval=10, count=1)
        started = time.monotonic()
        monitor.run()
        assert time.monotonic() - started < 5

    def test_pushes_to_queue(self):
        queue: Queue[Snapshot] = Queue()
        SystemMonitor(StubSampler(), interval=0, count=2, update_queue=queue).run()
        assert queue.qsize() == 2

    def test_history(self):
        monitor = SystemMonitor(StubSampler(), interval=0, count=70)
        monitor.run()
        history = monitor.history
        assert len(history) == 60
        assert history[-1].cpu_percent == 70.0

    def test_unbounded_run_stops_on_request(self):
        """Test an unbounded loop ends when stop() is called from a reporter."""
        monitor = None

        class StopAfterTwo(CollectingReporter):
            def report(self, snapshot):
                super().report(snapshot)
                if len(self.snapshots) == 2:
                    monitor.stop()

        reporter = StopAfterTwo()
        monitor = SystemMonitor(StubSampler(), reporters=[reporter], interval=0)
        assert monitor.count is None
        assert monitor.run() == 2

    def test_stop_interrupts_sleep(self):
        """Test stop() wakes a loop waiting out a long interval."""
        monitor = SystemMonitor(StubSampler(), interval=60)
        thread = threading.Thread(target=monitor.run)
        thread.start()
        time.sleep(0.2)
        monitor.stop()
        thread.join(timeout=5)
        assert not thread.is_alive()
        assert monitor.ticks == 1

    def test_fatal_error_propagates(self, meminfo_file, tmp_path):
        sampler = Sampler(stat_path=str(tmp_path / "missing"), meminfo_path=meminfo_file)
        monitor = SystemMonitor(sampler, interval=0, count=3)
        with pytest.raises(SourceUnavailable):
            monitor.run()
        assert monitor.ticks == 0


class TestBackgroundMonitor:
    """Tests for the threaded mode used by the live view."""

    def test_start_stop(self):
        monitor = SystemMonitor(StubSampler(), interval=0.1)
        assert not monitor.is_running

        monitor.start()
        assert monitor.is_running

        monitor.stop()
        assert not monitor.is_running

    def test_start_idempotent(self):
        """Test starting an already running monitor is safe."""
        monitor = SystemMonitor(StubSampler(), interval=0.1)

        monitor.start()
        thread1 = monitor._thread
        monitor.start()
        thread2 = monitor._thread

        assert thread1 is thread2
        monitor.stop()

    def test_daemon_thread(self):
        monitor = SystemMonitor(StubSampler(), interval=0.1)
        monitor.start()
        try:
            assert monitor._thread is not None
            assert monitor._thread.daemon is True
            assert monitor._thread.name == "SystemMonitor"
        finally:
            monitor.stop()

    def test_collects_data(self):
        queue: Queue[Snapshot] = Queue()
        monitor = SystemMonitor(StubSampler(), interval=0.05, update_queue=queue)
        monitor.start()
        try:
            assert isinstance(queue.get(timeout=2.0), Snapshot)
            assert isinstance(queue.get(timeout=2.0), Snapshot)
        finally:
            monitor.stop()

    def test_fatal_error_is_recorded(self, meminfo_file, tmp_path):
        """Test a fatal error ends the thread and is kept on the monitor."""
        sampler = Sampler(stat_path=str(tmp_path / "missing"), meminfo_path=meminfo_file)
        monitor = SystemMonitor(sampler, interval=0)
        monitor.start()
        monitor.join(timeout=5)

        assert not monitor.is_running
        assert isinstance(monitor.error, SourceUnavailable)
