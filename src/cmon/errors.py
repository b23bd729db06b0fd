"""Exceptions raised while reading host counters."""


class MonitorError(Exception):
    """Base class for cmon errors."""

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class SourceUnavailable(MonitorError):
    """A required counter source could not be opened or read."""


class ParseError(MonitorError):
    """A counter source held content that could not be parsed."""


class DiskQueryError(MonitorError):
    """The filesystem usage query for a path failed."""
