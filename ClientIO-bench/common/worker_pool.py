"""
Thread pool running one trial of the client I/O benchmark at a fixed thread count.
"""

import time
import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Callable, Optional

from configuration import TERMINATION_GRACE_SECONDS
from common.format_utils import format_bytes
from common.phase_manager import BenchContext, StartBarrier
from persistence.record import ThreadCountResult

logger = logging.getLogger(__name__)


class TrialRunner:
    """Runs N workers against a shared context and collects their merged result."""

    def __init__(
        self,
        parameters,
        clients: List,
        barrier: StartBarrier,
        worker_factory: Optional[Callable] = None,
        grace_seconds: float = TERMINATION_GRACE_SECONDS,
    ):
        """Initialize the trial runner.

        Args:
            parameters: ClientIOParameters of the run
            clients: Clients shared round-robin by worker index
            barrier: Start barrier state of the current sweep
            worker_factory: Builds a worker from (context, client, parameters, thread_id)
            grace_seconds: How long cancelled workers get to exit
        """
        if not clients:
            raise ValueError("At least one storage client is required")

        if worker_factory is None:
            from algorithms.worker import BenchWorker
            worker_factory = BenchWorker

        self.parameters = parameters
        self.clients = clients
        self.barrier = barrier
        self.worker_factory = worker_factory
        self.grace_seconds = grace_seconds

    def create_context(self) -> BenchContext:
        """Build the trial window from the barrier state and the configured durations."""
        start_ts = self.barrier.next_start_ts(self.parameters.start_delay_seconds)
        end_ts = start_ts + self.parameters.warmup_seconds + self.parameters.duration_seconds
        return BenchContext(
            start_ts=start_ts,
            end_ts=end_ts,
            warmup_seconds=self.parameters.warmup_seconds,
            barrier=self.barrier,
            cancel_event=threading.Event(),
        )

    def run(self, num_threads: int) -> ThreadCountResult:
        """Run one trial with num_threads workers.

        Always returns a result; failed or abandoned workers show up as
        error messages, never as exceptions.
        """
        logger.info(f"Running benchmark for thread count: {num_threads}")
        context = self.create_context()
        logger.info(
            f"Trial window: start in {context.start_ts - time.time():.1f}s, "
            f"warmup {self.parameters.warmup_seconds:.1f}s, "
            f"duration {self.parameters.duration_seconds:.1f}s"
        )

        workers = [
            self.worker_factory(context, self.clients[i % len(self.clients)], self.parameters, i)
            for i in range(num_threads)
        ]

        executor = ThreadPoolExecutor(max_workers=num_threads, thread_name_prefix="bench-thread")
        not_done = set()
        try:
            futures = [executor.submit(worker) for worker in workers]
            _, not_done = wait(futures, timeout=self.parameters.bench_timeout_seconds)
            if not_done:
                logger.warning(
                    f"{len(not_done)}/{num_threads} workers still running after "
                    f"{self.parameters.bench_timeout_seconds:.0f}s timeout, cancelling"
                )
        finally:
            context.cancel_event.set()
            executor.shutdown(wait=False, cancel_futures=True)

        if not_done:
            _, abandoned = wait(not_done, timeout=self.grace_seconds)
            if abandoned:
                logger.error(
                    f"{len(abandoned)} workers did not exit within {self.grace_seconds:.0f}s, abandoning them"
                )

        result = context.get_result()
        if result is None:
            result = ThreadCountResult(
                record_start_ts=context.record_start_ts,
                end_ts=time.time(),
                errors=[f"No worker reported a result for thread count {num_threads}"],
            )

        logger.info(
            f"thread count: {num_threads}, errors: {len(result.errors)}, "
            f"IO throughput (MB/s): {result.io_mbps:f}, transferred: {format_bytes(result.io_bytes)}"
        )
        return result
