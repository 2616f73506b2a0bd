"""
Thread count sweep: validates a run, prepares the target path and runs one trial per thread count.
"""

import logging
from typing import List, Optional, Callable

from configuration import MS_PER_SECOND
from common.format_utils import format_bytes
from common.metrics_utils import summarize_methods
from common.phase_manager import StartBarrier
from common.storage_factory import create_client_pool, storage_client_class
from common.worker_pool import TrialRunner
from observability.profile import ProfileLogSource, ttfb_filter
from persistence.record import ClientIOTaskResult, ThreadCountResult
from systems.base import StorageClient, UnsupportedOperationError
from common.operations import ClientIOOperation

logger = logging.getLogger(__name__)


class ClientIOSweep:
    """Runs the configured operation at every requested thread count, in ascending order."""

    def __init__(
        self,
        parameters,
        clients: Optional[List[StorageClient]] = None,
        profile_source: Optional[ProfileLogSource] = None,
        exporter=None,
        worker_factory: Optional[Callable] = None,
    ):
        """Initialize the sweep.

        Args:
            parameters: ClientIOParameters of the run
            clients: Pre-built clients; created from the parameters when None
            profile_source: Method profile source; built from parameters.profile_log when None
            exporter: Optional SimplePrometheusExporter receiving every trial result
            worker_factory: Passed through to TrialRunner
        """
        self.parameters = parameters
        self.clients = clients
        self.exporter = exporter
        self.worker_factory = worker_factory

        if profile_source is None and parameters.profile_log:
            profile_source = ProfileLogSource(parameters.profile_log)
        self.profile_source = profile_source

    def validate(self) -> None:
        """Reject parameters that can never produce a valid trial.

        Raises:
            ValueError: If the buffer is larger than the file
            UnsupportedOperationError: If the client cannot run the operation
        """
        parameters = self.parameters
        if parameters.buffer_size > parameters.file_size:
            raise ValueError(
                f"Buffer size ({parameters.buffer_size_str}) must not exceed "
                f"file size ({parameters.file_size_str})"
            )

        if self.clients:
            unsupported = self.clients[0].unsupported_operations
        else:
            unsupported = storage_client_class(parameters.client_type).unsupported_operations
        if parameters.operation in unsupported:
            raise UnsupportedOperationError(
                f"{parameters.operation.value} is not supported by the {parameters.client_type} client"
            )

        if parameters.operation is ClientIOOperation.WRITE and parameters.warmup_seconds > 0:
            logger.warning(f"Warmup {parameters.warmup_str} is ignored for writes, setting it to 0")
            parameters.warmup_seconds = 0.0
            parameters.warmup_str = "0s"

    def prepare_base(self, client: StorageClient) -> None:
        parameters = self.parameters
        if parameters.operation is ClientIOOperation.WRITE and not parameters.distributed:
            logger.info(f"Cleaning base path {parameters.base_path}")
            client.prepare_base(parameters.base_path, clean=True)
        elif parameters.distributed and parameters.client_type == "posix":
            # every process writes below its own task directory
            client.prepare_base(parameters.task_base_path(), clean=False)

    def run(self) -> ClientIOTaskResult:
        """Run the whole sweep.

        Configuration errors raise before any trial; worker failures are
        recorded in the per-thread-count results.
        """
        parameters = self.parameters
        self.validate()

        owns_clients = self.clients is None
        clients = create_client_pool(parameters) if owns_clients else self.clients
        task_result = ClientIOTaskResult(parameters)
        try:
            self.prepare_base(clients[0])

            barrier = StartBarrier(parameters.start_ts)
            runner = TrialRunner(parameters, clients, barrier, worker_factory=self.worker_factory)
            for num_threads in parameters.sorted_threads:
                if self.exporter is not None:
                    self.exporter.update_concurrency(num_threads)

                result = runner.run(num_threads)
                task_result.add_thread_count_result(num_threads, result)
                self._attach_profile(task_result, num_threads, result)

                if self.exporter is not None:
                    self.exporter.record_trial(parameters.operation.value, num_threads, result)
        finally:
            if owns_clients:
                for client in clients:
                    try:
                        client.close()
                    except Exception as e:
                        logger.error(f"Failed to close {client}: {e!r}")

        total_bytes = sum(r.io_bytes for r in task_result.thread_count_results.values())
        logger.info(
            f"Sweep finished: {len(task_result.thread_count_results)} thread counts, "
            f"{format_bytes(total_bytes)} transferred, {task_result.total_errors} errors"
        )
        return task_result

    def _attach_profile(self, task_result: ClientIOTaskResult, num_threads: int,
                        result: ThreadCountResult) -> None:
        if self.profile_source is None or result.record_start_ts < 0 or result.end_ts < 0:
            return
        start_ms = int(result.record_start_ts * MS_PER_SECOND)
        end_ms = int(result.end_ts * MS_PER_SECOND)
        try:
            method_statistics = self.profile_source.query_method_latencies(start_ms, end_ms, ttfb_filter)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read profile for thread count {num_threads}: {e}")
            return
        summaries = summarize_methods(method_statistics)
        if summaries:
            task_result.put_time_to_first_byte(num_threads, summaries)
            for name, summary in summaries.items():
                logger.info(
                    f"thread count: {num_threads}, {name}: {summary.num_success} calls, "
                    f"p50 {summary.time_percentile_ms[50]:.3f} ms, max {summary.max_time_ms[0]:.3f} ms"
                )
