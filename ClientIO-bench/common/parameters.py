"""
Run parameters for the client I/O benchmark.
"""

import logging
from typing import Dict, Any, List, Optional, Iterable

from configuration import (
    DEFAULT_BASE_PATH,
    DEFAULT_TASK_ID,
    DEFAULT_CLIENT_TYPE,
    DEFAULT_OPERATION,
    DEFAULT_FILE_SIZE,
    DEFAULT_BUFFER_SIZE,
    DEFAULT_BLOCK_SIZE,
    DEFAULT_THREADS,
    DEFAULT_CLIENTS,
    DEFAULT_WARMUP,
    DEFAULT_DURATION,
    DEFAULT_BENCH_TIMEOUT,
    START_DELAY_SECONDS,
    UNDEFINED_START_TS,
)
from common.format_utils import parse_space_size, parse_time_size
from common.operations import ClientIOOperation, AccessPattern

logger = logging.getLogger(__name__)


class ClientIOParameters:
    """Parameters of one benchmark invocation.

    Sizes and durations are accepted in their human-readable form and parsed
    once here; the raw strings are kept for reporting.
    """

    def __init__(
        self,
        operation=DEFAULT_OPERATION,
        base_path: str = DEFAULT_BASE_PATH,
        task_id: str = DEFAULT_TASK_ID,
        client_type: str = DEFAULT_CLIENT_TYPE,
        file_size=DEFAULT_FILE_SIZE,
        buffer_size=DEFAULT_BUFFER_SIZE,
        block_size=DEFAULT_BLOCK_SIZE,
        threads: Iterable[int] = None,
        clients: int = DEFAULT_CLIENTS,
        warmup=DEFAULT_WARMUP,
        duration=DEFAULT_DURATION,
        read_same_file: bool = False,
        read_random: bool = False,
        start_delay_seconds: float = START_DELAY_SECONDS,
        bench_timeout=DEFAULT_BENCH_TIMEOUT,
        start_ts: float = UNDEFINED_START_TS,
        profile_log: str = "",
        conf: Optional[Dict[str, str]] = None,
        distributed: bool = False,
        seed: Optional[int] = None,
        object_store: str = "s3",
    ):
        if isinstance(operation, str):
            operation = ClientIOOperation.from_string(operation)
        self.operation: ClientIOOperation = operation
        self.base_path = base_path
        self.task_id = task_id
        self.client_type = client_type.lower()

        self.file_size_str = str(file_size)
        self.buffer_size_str = str(buffer_size)
        self.block_size_str = str(block_size)
        self.file_size: int = parse_space_size(file_size)
        self.buffer_size: int = parse_space_size(buffer_size)
        self.block_size: int = parse_space_size(block_size)

        self.threads: List[int] = list(threads) if threads else list(DEFAULT_THREADS)
        self.clients = clients

        self.warmup_str = str(warmup)
        self.duration_str = str(duration)
        self.warmup_seconds: float = parse_time_size(warmup)
        self.duration_seconds: float = parse_time_size(duration)
        self.bench_timeout_seconds: float = parse_time_size(bench_timeout)

        self.read_same_file = read_same_file
        self.read_random = read_random
        self.start_delay_seconds = start_delay_seconds
        self.start_ts = start_ts
        self.profile_log = profile_log
        self.conf: Dict[str, str] = dict(conf or {})
        self.distributed = distributed
        self.seed = seed
        self.object_store = object_store.lower()

        if any(t <= 0 for t in self.threads):
            raise ValueError(f"Thread counts must be positive, got {self.threads}")
        if self.clients <= 0:
            raise ValueError(f"clients must be positive, got {self.clients}")

    @property
    def access_pattern(self) -> AccessPattern:
        return AccessPattern(self.operation, self.read_random)

    @property
    def sorted_threads(self) -> List[int]:
        """Thread counts to sweep, ascending and without duplicates."""
        return sorted(set(self.threads))

    def file_path(self, thread_id: int) -> str:
        """Path of the file a worker targets."""
        # all threads read the first file
        file_id = 0 if self.read_same_file else thread_id
        return f"{self.task_base_path()}/data-{file_id}"

    def task_base_path(self) -> str:
        return f"{self.base_path.rstrip('/')}/{self.task_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "operation": self.operation.value,
            "base_path": self.base_path,
            "task_id": self.task_id,
            "client_type": self.client_type,
            "object_store": self.object_store,
            "file_size": self.file_size_str,
            "buffer_size": self.buffer_size_str,
            "block_size": self.block_size_str,
            "threads": self.threads,
            "clients": self.clients,
            "warmup": self.warmup_str,
            "duration": self.duration_str,
            "read_same_file": self.read_same_file,
            "read_random": self.read_random,
            "distributed": self.distributed,
            "conf": self.conf,
        }

    def __repr__(self) -> str:
        return (f"ClientIOParameters(operation={self.operation.value}, client={self.client_type}, "
                f"file={self.file_size_str}, buffer={self.buffer_size_str}, threads={self.threads})")
