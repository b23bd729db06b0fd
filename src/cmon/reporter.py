"""Console and CSV output for snapshots."""

import csv
import sys
from pathlib import Path
from typing import TextIO

from cmon.errors import MonitorError
from cmon.models import Snapshot

CSV_HEADER = ("Timestamp", "CPU Usage (%)", "Memory Usage (%)", "Disk Usage (%)")


def format_snapshot(snapshot: Snapshot) -> str:
    """Format a snapshot as a single console line."""
    return (
        f"{snapshot.formatted_timestamp} - "
        f"CPU: {snapshot.cpu_percent:.1f}%, "
        f"Memory: {snapshot.memory_percent:.1f}%, "
        f"Disk: {snapshot.disk_percent:.1f}%"
    )


class ConsoleReporter:
    """Writes one formatted line per snapshot."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream if stream is not None else sys.stdout

    def report(self, snapshot: Snapshot) -> None:
        self._stream.write(format_snapshot(snapshot) + "\n")
        self._stream.flush()


class CsvReporter:
    """
    Appends snapshots to a CSV log.

    The file is truncated and given a header row when the reporter is
    created. Each report opens the file in append mode, so rows written
    before a crash are never lost to buffering.
    """

    def __init__(self, path: str | Path) -> None:
        """Create (or truncate) the log file and write the header."""
        self.path = Path(path)
        try:
            with self.path.open("w", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerow(CSV_HEADER)
        except OSError as exc:
            raise MonitorError(f"cannot create log file {self.path}: {exc}", source=str(self.path)) from exc

    def report(self, snapshot: Snapshot) -> None:
        row = (
            snapshot.formatted_timestamp,
            snapshot.cpu_percent,
            snapshot.memory_percent,
            snapshot.disk_percent,
        )
        try:
            with self.path.open("a", newline="", encoding="utf-8") as f:
                csv.writer(f, lineterminator="\n").writerow(row)
        except OSError as exc:
            raise MonitorError(f"cannot write log file {self.path}: {exc}", source=str(self.path)) from exc
