"""Data models for cmon."""

from dataclasses import dataclass
from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(slots=True, frozen=True)
class CPUCounterReading:
    """Cumulative CPU time counters (USER_HZ ticks since boot)."""

    user: int = 0
    nice: int = 0
    system: int = 0
    idle: int = 0
    iowait: int = 0
    irq: int = 0
    softirq: int = 0
    steal: int = 0

    @property
    def total(self) -> int:
        """Sum of all eight counters."""
        return (
            self.user
            + self.nice
            + self.system
            + self.idle
            + self.iowait
            + self.irq
            + self.softirq
            + self.steal
        )

    @property
    def active(self) -> int:
        """Time not spent idle or waiting on I/O."""
        return self.total - self.idle - self.iowait


@dataclass(slots=True, frozen=True)
class MemoryReading:
    """Memory counters in kilobytes."""

    total: int = 0
    free: int = 0
    available: int = 0
    buffers: int = 0
    cached: int = 0

    @property
    def used_percent(self) -> float:
        """Share of memory not available to new allocations."""
        if self.total <= 0:
            return 0.0
        return 100.0 * (1.0 - self.available / self.total)


@dataclass(slots=True, frozen=True)
class DiskReading:
    """Capacity and free space (bytes) of one mounted path."""

    path: str
    capacity: int
    free: int

    @property
    def used_percent(self) -> float:
        """Share of the filesystem capacity in use."""
        if self.capacity <= 0:
            return 0.0
        return 100.0 * (1.0 - self.free / self.capacity)


@dataclass(slots=True, frozen=True)
class Snapshot:
    """One tick worth of utilization figures."""

    timestamp: datetime
    cpu_percent: float
    memory_percent: float
    disk_percent: float

    @property
    def formatted_timestamp(self) -> str:
        """Timestamp as YYYY-MM-DD HH:MM:SS."""
        return self.timestamp.strftime(TIMESTAMP_FORMAT)
