"""
Result records for the client I/O benchmark.
"""

import time
from typing import Dict, Any, List, Optional

from configuration import UNDEFINED_START_TS
from common.metrics_utils import calculate_throughput_mbps


class ThreadCountResult:
    """Bytes, errors and timing of one worker, or of a whole trial once merged."""

    def __init__(self, record_start_ts: float = UNDEFINED_START_TS,
                 end_ts: float = UNDEFINED_START_TS, io_bytes: int = 0,
                 errors: Optional[List[str]] = None):
        self.record_start_ts = record_start_ts
        self.end_ts = end_ts
        self.io_bytes = io_bytes
        self.errors: List[str] = list(errors or [])

    def increment_io_bytes(self, num_bytes: int) -> None:
        self.io_bytes += num_bytes

    def add_error_message(self, message: str) -> None:
        self.errors.append(message)

    def set_end_ts(self, end_ts: Optional[float] = None) -> None:
        self.end_ts = time.time() if end_ts is None else end_ts

    @property
    def duration_seconds(self) -> float:
        if self.record_start_ts < 0 or self.end_ts < 0:
            return 0.0
        return max(0.0, self.end_ts - self.record_start_ts)

    @property
    def io_mbps(self) -> float:
        """Throughput over the recorded window in MB/s."""
        return calculate_throughput_mbps(self.io_bytes, self.duration_seconds)

    def merge(self, other: "ThreadCountResult") -> None:
        """Merge another result into this one.

        Bytes are summed, errors concatenated, the recording window widened to
        cover both.

        Raises:
            TypeError: If other is not a ThreadCountResult
        """
        if not isinstance(other, ThreadCountResult):
            raise TypeError(f"Cannot merge {type(other).__name__} into ThreadCountResult")

        self.record_start_ts = _min_defined(self.record_start_ts, other.record_start_ts)
        self.end_ts = max(self.end_ts, other.end_ts)
        self.io_bytes += other.io_bytes
        self.errors.extend(other.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "record_start_ts": self.record_start_ts,
            "end_ts": self.end_ts,
            "duration_seconds": self.duration_seconds,
            "io_bytes": self.io_bytes,
            "io_mbps": self.io_mbps,
            "errors": list(self.errors),
        }

    def __repr__(self) -> str:
        return (f"ThreadCountResult(io_bytes={self.io_bytes}, errors={len(self.errors)}, "
                f"io_mbps={self.io_mbps:.2f})")


def _min_defined(a: float, b: float) -> float:
    if a < 0:
        return b
    if b < 0:
        return a
    return min(a, b)


class ClientIOTaskResult:
    """Results of a full sweep, keyed by thread count."""

    def __init__(self, parameters=None):
        self.parameters = parameters
        self.thread_count_results: Dict[int, ThreadCountResult] = {}
        # thread count -> method name -> SummaryStatistics
        self.time_to_first_byte: Dict[int, Dict[str, Any]] = {}

    def add_thread_count_result(self, num_threads: int, result: ThreadCountResult) -> None:
        self.thread_count_results[num_threads] = result

    def put_time_to_first_byte(self, num_threads: int, statistics: Dict[str, Any]) -> None:
        self.time_to_first_byte[num_threads] = statistics

    @property
    def total_errors(self) -> int:
        return sum(len(r.errors) for r in self.thread_count_results.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parameters": self.parameters.to_dict() if self.parameters is not None else {},
            "thread_count_results": {
                str(threads): result.to_dict()
                for threads, result in sorted(self.thread_count_results.items())
            },
            "time_to_first_byte": {
                str(threads): {name: stats.to_dict() for name, stats in methods.items()}
                for threads, methods in sorted(self.time_to_first_byte.items())
            },
        }
