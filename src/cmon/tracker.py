"""Stateful CPU utilization calculation."""

from cmon.models import CPUCounterReading


class CpuUtilizationTracker:
    """
    Turn successive CPU counter readings into a utilization percentage.

    A percentage needs two readings, so the tracker keeps the previous one.
    Feed it exactly one reading per tick: observing the same reading twice
    leaves a zero-width window as the baseline for the next tick.
    """

    def __init__(self) -> None:
        """Initialize the tracker without a baseline."""
        self._previous: CPUCounterReading | None = None

    @property
    def previous(self) -> CPUCounterReading | None:
        """The reading the next observation is measured against."""
        return self._previous

    @property
    def has_baseline(self) -> bool:
        """Whether a previous reading has been recorded."""
        return self._previous is not None

    def reset(self) -> None:
        """Forget the baseline so the next observation is a cold start."""
        self._previous = None

    def observe(self, current: CPUCounterReading) -> float:
        """
        Record ``current`` and return the utilization since the last reading.

        Returns 0.0 on the first call, and whenever total time did not advance
        (counter reset or two reads within the same kernel tick).
        """
        previous = self._previous
        self._previous = current

        if previous is None:
            return 0.0

        total_delta = current.total - previous.total
        if total_delta <= 0:
            return 0.0

        active_delta = current.active - previous.active
        percent = 100.0 * active_delta / total_delta
        return min(max(percent, 0.0), 100.0)
