"""
Shared utilities for benchmark metrics: throughput and latency summary statistics.
"""

import heapq
import logging
from typing import Dict, Any, List, Optional

import numpy as np
import pandas as pd

from configuration import (
    BYTES_PER_MB,
    NANOS_PER_MS,
    MAX_TIME_COUNT,
    TIME_99_COUNT,
    MISSING_LATENCY_SENTINEL,
)

logger = logging.getLogger(__name__)

PERCENTILE_RANKS = np.arange(0, 101, dtype=float)


def calculate_throughput_mbps(total_bytes: float, duration_seconds: float) -> float:
    """
    Calculate throughput in megabytes per second (MB/s) from bytes and duration.

    Args:
        total_bytes: Total bytes transferred
        duration_seconds: Duration in seconds

    Returns:
        Throughput in MB/s, 0.0 for an empty window
    """
    if duration_seconds <= 0:
        return 0.0
    return total_bytes / BYTES_PER_MB / duration_seconds


def tail_percentile_ranks(count: int = TIME_99_COUNT) -> np.ndarray:
    """Ranks 99, 99.9, 99.99, ... i.e. 100 - 10^-k for k in [0, count)."""
    return np.array([100.0 - 1.0 / (10.0 ** k) for k in range(count)])


class MethodStatistics:
    """Latency samples of one profiled method."""

    def __init__(self, max_time_count: int = MAX_TIME_COUNT):
        self.num_success = 0
        self.num_failure = 0
        self.max_time_count = max_time_count
        self._time_ns: List[int] = []
        # min-heap holding the largest latencies seen so far
        self._max_time_ns: List[int] = []

    def add_record(self, time_ns: int, success: bool = True) -> None:
        """Record one call of the method."""
        if not success:
            self.num_failure += 1
            return

        self.num_success += 1
        self._time_ns.append(time_ns)
        if len(self._max_time_ns) < self.max_time_count:
            heapq.heappush(self._max_time_ns, time_ns)
        elif time_ns > self._max_time_ns[0]:
            heapq.heapreplace(self._max_time_ns, time_ns)

    @property
    def time_ns(self) -> np.ndarray:
        return np.asarray(self._time_ns, dtype=np.int64)

    @property
    def max_time_ns(self) -> List[int]:
        """Largest observed latencies, descending."""
        return sorted(self._max_time_ns, reverse=True)

    def value_at_percentile(self, ranks) -> np.ndarray:
        """Latency (ns) at each percentile rank.

        Uses the inverted CDF so every value is an observed sample and the
        result is non-decreasing in rank.
        """
        ranks = np.asarray(ranks, dtype=float)
        if not self._time_ns:
            return np.zeros(ranks.shape)
        return np.percentile(self.time_ns, ranks, method="inverted_cdf")

    def __len__(self) -> int:
        return len(self._time_ns)


class SummaryStatistics:
    """Reduced latency statistics of one method, all times in milliseconds."""

    def __init__(self, num_success: int, time_percentile_ms: List[float],
                 time_99_percentile_ms: List[float], max_time_ms: List[float]):
        self.num_success = num_success
        self.time_percentile_ms = time_percentile_ms
        self.time_99_percentile_ms = time_99_percentile_ms
        self.max_time_ms = max_time_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "num_success": self.num_success,
            "time_percentile_ms": list(self.time_percentile_ms),
            "time_99_percentile_ms": list(self.time_99_percentile_ms),
            "max_time_ms": list(self.max_time_ms),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SummaryStatistics":
        return cls(
            num_success=data["num_success"],
            time_percentile_ms=list(data["time_percentile_ms"]),
            time_99_percentile_ms=list(data["time_99_percentile_ms"]),
            max_time_ms=list(data["max_time_ms"]),
        )


def to_summary_statistics(method_statistics: MethodStatistics) -> SummaryStatistics:
    """
    Reduce method latencies to percentile, tail percentile and max-latency arrays.

    Args:
        method_statistics: Latency samples in nanoseconds

    Returns:
        SummaryStatistics with 101 percentiles (0..100), TIME_99_COUNT tail
        percentiles and MAX_TIME_COUNT largest latencies, padded with the
        missing-latency sentinel when fewer samples exist
    """
    percentiles_ms = method_statistics.value_at_percentile(PERCENTILE_RANKS) / NANOS_PER_MS
    tail_ms = method_statistics.value_at_percentile(tail_percentile_ranks()) / NANOS_PER_MS

    max_time_ms = [MISSING_LATENCY_SENTINEL] * method_statistics.max_time_count
    for i, time_ns in enumerate(method_statistics.max_time_ns):
        max_time_ms[i] = time_ns / NANOS_PER_MS

    return SummaryStatistics(
        num_success=method_statistics.num_success,
        time_percentile_ms=[float(v) for v in percentiles_ms],
        time_99_percentile_ms=[float(v) for v in tail_ms],
        max_time_ms=max_time_ms,
    )


def summarize_methods(method_statistics: Dict[str, MethodStatistics]) -> Dict[str, SummaryStatistics]:
    """Reduce every method in a profile query result."""
    return {name: to_summary_statistics(stats) for name, stats in method_statistics.items()}


def thread_count_frame(task_result) -> pd.DataFrame:
    """
    Flatten a task result into one row per thread count.

    This is the shared shape for persistence and visualization.
    """
    rows = []
    for threads, result in sorted(task_result.thread_count_results.items()):
        row = {
            "threads": threads,
            "io_bytes": result.io_bytes,
            "record_start_ts": result.record_start_ts,
            "end_ts": result.end_ts,
            "duration_seconds": result.duration_seconds,
            "io_mbps": result.io_mbps,
            "error_count": len(result.errors),
        }
        summaries: Optional[Dict[str, SummaryStatistics]] = task_result.time_to_first_byte.get(threads)
        if summaries:
            for name, stats in summaries.items():
                row[f"{name}_p50_ms"] = stats.time_percentile_ms[50]
                row[f"{name}_p99_ms"] = stats.time_percentile_ms[99]
                row[f"{name}_max_ms"] = stats.max_time_ms[0]
        rows.append(row)

    return pd.DataFrame(rows)
