"""Timing, memory statistics and anchor sorting helpers."""

from __future__ import annotations

import sys
import time
from dataclasses import dataclass
from typing import Iterable

try:
    import resource as _resource
except ImportError:  # not available on Windows
    _resource = None


@dataclass(slots=True)
class Pair128:
    """A pair of 64-bit unsigned integers, sorted by ``x``."""

    x: int
    y: int


def realtime() -> float:
    """Wall-clock time in seconds since the epoch."""
    return time.time()


def cputime() -> float:
    """User plus system CPU time of this process, in seconds."""
    if _resource is None:
        return time.process_time()
    r = _resource.getrusage(_resource.RUSAGE_SELF)
    return r.ru_utime + r.ru_stime


def peakrss() -> int:
    """Peak resident set size in bytes, or 0 where it is unknown."""
    if _resource is None:
        return 0
    rss = _resource.getrusage(_resource.RUSAGE_SELF).ru_maxrss
    return rss * 1024 if sys.platform.startswith("linux") else rss


def radix_sort_128x(items: Iterable[Pair128]) -> list[Pair128]:
    """Return the pairs sorted by ascending ``x``."""
    return sorted(items, key=lambda p: p.x)