"""
Trial context shared by all workers of one concurrency level, and the start barrier state of a sweep.
"""

import time
import logging
import threading
from typing import Optional

from configuration import UNDEFINED_START_TS
from persistence.record import ThreadCountResult

logger = logging.getLogger(__name__)


class MissedBarrierError(RuntimeError):
    """A worker reached the start barrier after the agreed start instant."""


class StartBarrier:
    """Tracks whether a start barrier has been passed during one sweep.

    The externally agreed start instant applies only while it lies in the
    future and no barrier has been passed yet. Otherwise every trial gets a
    fresh start instant.
    """

    def __init__(self, external_start_ts: float = UNDEFINED_START_TS):
        self.external_start_ts = external_start_ts
        self._passed = threading.Event()

    @property
    def passed(self) -> bool:
        return self._passed.is_set()

    def mark_passed(self) -> None:
        self._passed.set()

    def next_start_ts(self, start_delay_seconds: float, now: Optional[float] = None) -> float:
        """Start instant for the next trial."""
        if now is None:
            now = time.time()
        if (self.external_start_ts == UNDEFINED_START_TS or self.passed
                or self.external_start_ts <= now):
            # passed barrier or stale external start, overwrite the start time
            return now + start_delay_seconds
        return self.external_start_ts

    def __repr__(self) -> str:
        return f"StartBarrier(external_start_ts={self.external_start_ts}, passed={self.passed})"


class BenchContext:
    """Start/end window of one trial and the merged result of its workers."""

    def __init__(self, start_ts: float, end_ts: float, warmup_seconds: float = 0.0,
                 barrier: Optional[StartBarrier] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.start_ts = start_ts
        self.end_ts = end_ts
        self.record_start_ts = start_ts + warmup_seconds
        self.barrier = barrier or StartBarrier()
        self.cancel_event = cancel_event or threading.Event()

        # Access must hold the lock
        self._result: Optional[ThreadCountResult] = None
        self._lock = threading.Lock()

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def wait_for_start(self) -> None:
        """Block until the start instant.

        Raises:
            MissedBarrierError: If the start instant has already passed
        """
        now = time.time()
        wait_seconds = self.start_ts - now
        if wait_seconds < 0:
            raise MissedBarrierError(
                f"Thread missed barrier. Increase the start delay. "
                f"start: {self.start_ts:.3f} current: {now:.3f}"
            )
        # Returns early if the trial is cancelled while waiting
        while wait_seconds > 0 and not self.cancel_event.wait(wait_seconds):
            wait_seconds = self.start_ts - time.time()
        if not self.cancelled:
            self.barrier.mark_passed()

    def merge_thread_result(self, thread_result: ThreadCountResult) -> None:
        with self._lock:
            if self._result is None:
                self._result = ThreadCountResult()
            try:
                self._result.merge(thread_result)
            except Exception as e:
                logger.error(f"Failed to merge thread result: {e!r}")
                self._result.add_error_message(repr(e))

    def get_result(self) -> Optional[ThreadCountResult]:
        with self._lock:
            return self._result

    def __repr__(self) -> str:
        return (f"BenchContext(start_ts={self.start_ts:.3f}, record_start_ts={self.record_start_ts:.3f}, "
                f"end_ts={self.end_ts:.3f})")
