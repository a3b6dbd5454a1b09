"""
Profiling utilities for the store service.

A small context manager measuring wall-clock time (perf_counter) and the
process RSS before/after a block (psutil). Used to time scatter-gather
invocations (duration only) and the CLI `seed` command (duration and RSS).

Usage:
    from store_service.utils.profiler import profile_block

    with profile_block("search") as stats:
        executor.execute(specs, repository.execute_query)

    print(stats.duration_seconds, stats.rss_delta_bytes)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Generator, Optional

import psutil


@dataclass
class ProfileStats:
    """
    Container for profiling measurements.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    start_rss_bytes: Optional[int] = field(default=None)
    end_rss_bytes: Optional[int] = field(default=None)

    @property
    def rss_delta_bytes(self) -> Optional[int]:
        if self.start_rss_bytes is None or self.end_rss_bytes is None:
            return None
        return self.end_rss_bytes - self.start_rss_bytes


def _current_rss() -> Optional[int]:
    try:
        return psutil.Process().memory_info().rss
    except psutil.Error:
        return None


@contextlib.contextmanager
def profile_block(label: str, track_memory: bool = True) -> Generator[ProfileStats, None, None]:
    """
    Context manager to profile a block of code.

    Parameters
    ----------
    label : str
        Human-friendly label for the profiled block.
    track_memory : bool
        Whether to snapshot RSS at the start and end of the block.
    """
    stats = ProfileStats(label=label)
    if track_memory:
        stats.start_rss_bytes = _current_rss()

    stats.start_ts = time.perf_counter()
    try:
        yield stats
    finally:
        stats.end_ts = time.perf_counter()
        stats.duration_seconds = stats.end_ts - stats.start_ts
        if track_memory:
            stats.end_rss_bytes = _current_rss()


__all__ = ["ProfileStats", "profile_block"]
