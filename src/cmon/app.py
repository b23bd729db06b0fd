"""cmon - Textual live view."""

from queue import Empty, Queue

from textual.app import App, ComposeResult
from textual.containers import Container
from textual.widgets import DataTable, Footer, Static

from cmon.models import Snapshot
from cmon.monitor import SystemMonitor

HISTORY_ROWS = 60


def usage_bar(percent: float, color: str, width: int = 20) -> str:
    """Render a percentage as a Rich markup bar."""
    filled = min(max(int(percent / (100 / width)), 0), width)
    return f"[{color}]█[/{color}]" * filled + "[dim]░[/dim]" * (width - filled)


class UsageStats(Static):
    """Header widget showing the latest CPU, memory and disk figures."""

    DEFAULT_CSS = """
    UsageStats {
        height: auto;
        min-height: 4;
        padding: 1;
        background: $surface;
    }
    """

    def __init__(self, *args, **kwargs) -> None:
        """Initialize UsageStats."""
        super().__init__(*args, **kwargs)
        self._snapshot: Snapshot | None = None

    def on_mount(self) -> None:
        """Show the placeholder text until the first sample arrives."""
        self.update(self._stats_text())

    def update_stats(self, snapshot: Snapshot) -> None:
        """Show a new snapshot."""
        self._snapshot = snapshot
        self.update(self._stats_text())

    def _stats_text(self) -> str:
        snapshot = self._snapshot
        if snapshot is None:
            return "Waiting for first sample..."
        # Escaped brackets around the bars
        return (
            f"CPU  \\[{usage_bar(snapshot.cpu_percent, 'green')}] {snapshot.cpu_percent:5.1f}%\n"
            f"Mem  \\[{usage_bar(snapshot.memory_percent, 'cyan')}] {snapshot.memory_percent:5.1f}%\n"
            f"Disk \\[{usage_bar(snapshot.disk_percent, 'yellow')}] {snapshot.disk_percent:5.1f}%"
        )


class HistoryTable(Container):
    """Recent snapshots, newest first."""

    DEFAULT_CSS = """
    HistoryTable {
        height: 1fr;
        border: solid $primary;
    }
    """

    def compose(self) -> ComposeResult:
        """Compose the history table."""
        yield DataTable(id="history-table")

    def on_mount(self) -> None:
        """Set up the history columns when mounted."""
        table = self.query_one("#history-table", DataTable)
        table.cursor_type = "row"
        table.add_column("Timestamp", key="timestamp", width=20)
        table.add_column("CPU%", key="cpu", width=8)
        table.add_column("MEM%", key="mem", width=8)
        table.add_column("DISK%", key="disk", width=8)

    def show(self, snapshots: list[Snapshot]) -> None:
        """Replace the table contents with ``snapshots`` (oldest first)."""
        table = self.query_one("#history-table", DataTable)
        table.clear()
        for snapshot in reversed(snapshots[-HISTORY_ROWS:]):
            table.add_row(
                snapshot.formatted_timestamp,
                f"{snapshot.cpu_percent:5.1f}",
                f"{snapshot.memory_percent:5.1f}",
                f"{snapshot.disk_percent:5.1f}",
            )

    @property
    def row_count(self) -> int:
        """Number of rows currently shown."""
        return self.query_one("#history-table", DataTable).row_count


class MonitorApp(App):
    """Live view over a running SystemMonitor."""

    TITLE = "cmon"
    SUB_TITLE = "Host Resource Monitor"

    CSS = """
    Screen {
        layout: vertical;
    }

    #usage-stats {
        dock: top;
        height: auto;
        min-height: 5;
    }
    """

    BINDINGS = [
        ("q", "quit", "Quit"),
    ]

    def __init__(self, monitor: SystemMonitor, update_queue: Queue[Snapshot]) -> None:
        """
        Initialize the MonitorApp.

        Args:
            monitor: Monitor whose loop is started on mount.
            update_queue: The queue the monitor pushes snapshots to.
        """
        super().__init__()
        self._monitor = monitor
        self._update_queue = update_queue
        self._error_shown = False

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield UsageStats(id="usage-stats")
        yield HistoryTable()
        yield Footer()

    def on_mount(self) -> None:
        """Start the monitor and poll its queue for updates."""
        self._monitor.start()
        self.set_interval(0.5, self._check_for_updates)

    def _check_for_updates(self) -> None:
        """Drain the queue and show the most recent snapshot."""
        snapshot = None
        while True:
            try:
                snapshot = self._update_queue.get_nowait()
            except Empty:
                break

        if snapshot is not None:
            self.query_one("#usage-stats", UsageStats).update_stats(snapshot)
            self.query_one(HistoryTable).show(self._monitor.history)

        if self._monitor.error is not None and not self._error_shown:
            self._error_shown = True
            self.notify(str(self._monitor.error), severity="error", timeout=10)
            self.exit(return_code=1)

    def on_unmount(self) -> None:
        """Stop the monitor when the app shuts down."""
        self._monitor.stop()

    def action_quit(self) -> None:
        """Stop the monitor and exit."""
        self._monitor.stop()
        self.exit()
