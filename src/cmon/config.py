"""Runtime settings for a monitoring session."""

import argparse
from dataclasses import dataclass
from pathlib import Path


@dataclass(slots=True, frozen=True)
class MonitorConfig:
    """Settings for one monitoring session."""

    interval: float = 1.0
    count: int | None = None  # None runs until stopped
    log_path: Path | None = None
    disk_path: str = "/"
    verbose: bool = False
    tui: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "MonitorConfig":
        """Build a config from parsed command-line arguments."""
        return cls(
            interval=args.interval,
            count=args.count,
            log_path=Path(args.log) if args.log else None,
            disk_path=args.disk_path,
            verbose=args.verbose,
            tui=args.tui,
        )
