"""Shared fixtures: synthetic procfs files."""

import logging
from datetime import datetime

import pytest

MEMINFO = """\
MemTotal:       16000000 kB
MemFree:         2000000 kB
MemAvailable:    4000000 kB
Buffers:          500000 kB
Cached:          3000000 kB
SwapCached:            0 kB
HugePages_Total:       0
"""


@pytest.fixture
def stat_file(tmp_path):
    """Return a writer for a fake /proc/stat holding a given first line."""
    path = tmp_path / "stat"

    def write(line: str) -> str:
        path.write_text(line + "\nintr 12345 0 0\nctxt 9876\n", encoding="utf-8")
        return str(path)

    write("cpu  100 0 0 900 0 0 0 0 0 0")
    return write


@pytest.fixture
def meminfo_file(tmp_path):
    path = tmp_path / "meminfo"
    path.write_text(MEMINFO, encoding="utf-8")
    return str(path)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2026, 10, 18, 9, 14, 2, 654321)


@pytest.fixture(autouse=True)
def fresh_cmon_logger():
    """Drop handlers bound to a previous test's captured stderr."""
    logger = logging.getLogger("cmon")
    logger.handlers.clear()
    yield
    logger.handlers.clear()
