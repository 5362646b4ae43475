"""
Memory Tracking - resident memory sampling and best-effort reclamation.

The server is a long-lived process answering many sequential tool calls.
MemoryMonitor samples resident memory around tool invocations and on a
fixed interval; above the configured threshold it asks the garbage
collector for a full pass. This is housekeeping only: it never rejects
work and never affects a tool call's outcome.

CPython rarely hands freed memory back to the OS, so RSS can stay above
the threshold after a collection. Reclaims are therefore rate-limited by
a cooldown instead of running after every call.
"""

import asyncio
import gc
import logging
import resource
import sys
import time
from dataclasses import dataclass
from typing import Optional

from npm_helper.observability.metrics import record_memory_reclaim

logger = logging.getLogger(__name__)

PROC_STATUS_PATH = "/proc/self/status"


def read_proc_status(path: str = PROC_STATUS_PATH) -> dict[str, int]:
    """
    Read the Vm* counters of /proc/<pid>/status, in kB.

    Returns an empty dict where procfs is unavailable (macOS, BSD).
    """
    counters: dict[str, int] = {}
    try:
        with open(path) as status:
            for line in status:
                key, _, value = line.partition(":")
                fields = value.split()
                if key.startswith("Vm") and fields and fields[0].isdigit():
                    counters[key] = int(fields[0])
    except OSError:
        return {}
    return counters


def _max_rss_mb() -> float:
    """Peak RSS from getrusage; ru_maxrss is bytes on macOS, kB elsewhere."""
    max_rss = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    if sys.platform == "darwin":
        return max_rss / (1024 * 1024)
    return max_rss / 1024


@dataclass
class MemorySample:
    """One memory reading, in megabytes."""

    rss_mb: float = 0.0
    vms_mb: float = 0.0
    peak_mb: float = 0.0
    gc_count: tuple = (0, 0, 0)


class MemoryMonitor:
    """
    Samples process memory and triggers gc.collect() above a threshold.

    Attributes:
        threshold_mb: Resident memory above which a collection is requested.
        cooldown_seconds: Minimum time between two collections.
        reclaims: Number of collections triggered so far.

    Example:
        >>> monitor = MemoryMonitor(threshold_mb=200, cooldown_seconds=300)
        >>> monitor.check("after tool call (search_npm)")
    """

    def __init__(self, threshold_mb: float = 200.0, cooldown_seconds: float = 300.0) -> None:
        self.threshold_mb = threshold_mb
        self.cooldown_seconds = cooldown_seconds
        self.reclaims = 0
        self._peak_mb = 0.0
        self._last_reclaim: Optional[float] = None

    def sample(self) -> MemorySample:
        counters = read_proc_status()
        if "VmRSS" in counters:
            rss_mb = counters["VmRSS"] / 1024
        else:
            rss_mb = _max_rss_mb()
        self._peak_mb = max(self._peak_mb, rss_mb)
        return MemorySample(
            rss_mb=round(rss_mb, 2),
            vms_mb=round(counters.get("VmSize", 0) / 1024, 2),
            peak_mb=round(self._peak_mb, 2),
            gc_count=gc.get_count(),
        )

    def check(self, label: str) -> MemorySample:
        """
        Log current usage and reclaim if it is above the threshold.

        A collection is skipped while the cooldown since the previous one
        is still running.

        Args:
            label: What the sample is taken around (for the log line).

        Returns:
            The sample taken before any reclamation.
        """
        current = self.sample()
        logger.debug(
            f"Memory usage {label}: RSS={current.rss_mb:.0f}MB, peak={current.peak_mb:.0f}MB"
        )
        if current.rss_mb <= self.threshold_mb:
            return current

        now = time.monotonic()
        if self._last_reclaim is not None and now - self._last_reclaim < self.cooldown_seconds:
            logger.debug(f"Memory usage high {label}, reclaim cooling down")
            return current

        logger.info(f"Memory usage high {label}, forcing garbage collection")
        self.force_gc()
        return current

    def force_gc(self) -> dict:
        """
        Run a full collection and report the RSS change.

        Returns:
            Dict with collected_objects, before_mb, after_mb, freed_mb.
        """
        before = self.sample()
        collected = gc.collect()
        after = self.sample()
        self._last_reclaim = time.monotonic()
        self.reclaims += 1
        record_memory_reclaim()

        freed_mb = round(before.rss_mb - after.rss_mb, 2)
        logger.info(
            f"Garbage collection freed {freed_mb:.0f}MB "
            f"(RSS {after.rss_mb:.0f}MB, {collected} objects collected)"
        )
        return {
            "collected_objects": collected,
            "before_mb": before.rss_mb,
            "after_mb": after.rss_mb,
            "freed_mb": freed_mb,
        }

    async def run_periodic(self, interval_seconds: float) -> None:
        """Check memory every interval_seconds until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            self.check("during periodic check")

    def start(self, interval_seconds: float) -> "asyncio.Task[None]":
        """Start run_periodic as a background task on the running loop."""
        return asyncio.get_running_loop().create_task(
            self.run_periodic(interval_seconds), name="memory-monitor"
        )


def log_initial_usage(monitor: Optional[MemoryMonitor] = None) -> MemorySample:
    current = (monitor or MemoryMonitor()).sample()
    logger.info(f"Initial memory usage: RSS={current.rss_mb:.0f}MB")
    return current
