"""Readers for raw host counters.

CPU and memory counters are parsed straight from the kernel's procfs
pseudo-files. Disk space comes from psutil's statvfs wrapper.
"""

import logging
from dataclasses import fields

import psutil

from cmon.errors import DiskQueryError, ParseError, SourceUnavailable
from cmon.models import CPUCounterReading, DiskReading, MemoryReading

logger = logging.getLogger(__name__)

PROC_STAT = "/proc/stat"
PROC_MEMINFO = "/proc/meminfo"

# Field order of the aggregate "cpu" line in /proc/stat
CPU_FIELDS = tuple(f.name for f in fields(CPUCounterReading))

MEMINFO_KEYS = {
    "MemTotal": "total",
    "MemFree": "free",
    "MemAvailable": "available",
    "Buffers": "buffers",
    "Cached": "cached",
}


def _parse_int(token: str) -> int | None:
    try:
        return int(token)
    except ValueError:
        return None


def parse_cpu_line(line: str, source: str = PROC_STAT) -> CPUCounterReading:
    """
    Parse the aggregate CPU line of /proc/stat.

    Older kernels expose fewer columns, so missing trailing counters default
    to 0. Parsing stops at the first non-numeric token; everything after it
    keeps its default. Columns beyond ``steal`` are ignored.
    """
    tokens = line.split()
    if not tokens:
        raise ParseError(f"no CPU label in {source}", source=source)

    values: dict[str, int] = {}
    for name, token in zip(CPU_FIELDS, tokens[1:]):
        value = _parse_int(token)
        if value is None:
            logger.debug("stopped parsing %s at %r", source, token)
            break
        values[name] = value
    return CPUCounterReading(**values)


def read_cpu_counters(path: str = PROC_STAT) -> CPUCounterReading:
    """Read the aggregate CPU counters from the first line of ``path``."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            line = f.readline()
    except OSError as exc:
        raise SourceUnavailable(f"cannot read {path}: {exc.strerror or exc}", source=path) from exc
    return parse_cpu_line(line, source=path)


def parse_meminfo(lines) -> MemoryReading:
    """Build a MemoryReading from ``KEY: VALUE unit`` lines, ignoring unknown keys."""
    values: dict[str, int] = {}
    for line in lines:
        key, sep, rest = line.partition(":")
        if not sep:
            continue
        attr = MEMINFO_KEYS.get(key.strip())
        if attr is None:
            continue
        parts = rest.split()
        value = _parse_int(parts[0]) if parts else None
        if value is None:
            continue
        values[attr] = value
    return MemoryReading(**values)


def read_memory_counters(path: str = PROC_MEMINFO) -> MemoryReading:
    """Read memory counters (kB) from ``path``."""
    try:
        with open(path, encoding="utf-8", errors="replace") as f:
            return parse_meminfo(f)
    except OSError as exc:
        raise SourceUnavailable(f"cannot read {path}: {exc.strerror or exc}", source=path) from exc


def read_disk_counters(path: str = "/") -> DiskReading:
    """Query capacity and free space for the filesystem mounted at ``path``."""
    try:
        usage = psutil.disk_usage(path)
    except OSError as exc:
        raise DiskQueryError(f"cannot query disk usage of {path}: {exc}", source=path) from exc
    return DiskReading(path=path, capacity=usage.total, free=usage.free)
