"""
Benchmark worker: drives one storage client through the configured operation inside a trial window.
"""

import time
import logging
from typing import Optional

from common.offsets import offset_stream
from common.operations import ClientIOOperation
from common.phase_manager import BenchContext
from persistence.record import ThreadCountResult
from systems.base import StorageClient, InStream, OutStream, UnsupportedOperationError

logger = logging.getLogger(__name__)

WRITE_DONE = -1


class BenchWorker:
    """One benchmark thread.

    The worker owns its buffer, streams and offset stream; the only state it
    shares is the trial context it merges its result into.
    """

    def __init__(self, context: BenchContext, client: StorageClient, parameters, thread_id: int):
        self.context = context
        self.client = client
        self.parameters = parameters
        self.thread_id = thread_id

        self.operation: ClientIOOperation = parameters.operation
        self.pattern = parameters.access_pattern
        self.file_path = parameters.file_path(thread_id)
        self.file_size = parameters.file_size
        self.block_size = parameters.block_size

        self.buffer = bytearray(b"A" * parameters.buffer_size)
        self.max_offset = self.file_size - len(self.buffer)
        seed = None if parameters.seed is None else parameters.seed + thread_id
        self.offsets = offset_stream(self.pattern.read_random, len(self.buffer), self.file_size, seed)
        self.current_offset = 0

        self.result = ThreadCountResult()
        self._in_stream: Optional[InStream] = None
        self._out_stream: Optional[OutStream] = None

    def __call__(self) -> ThreadCountResult:
        return self.run()

    def run(self) -> ThreadCountResult:
        """Run until the trial ends, then merge into the context."""
        try:
            self._run_internal()
        except Exception as e:
            logger.error(f"Worker {self.thread_id}: failed: {e!r}")
            self.result.add_error_message(_describe(e))
        finally:
            self._close_streams()

        self.result.set_end_ts(time.time())
        self.context.merge_thread_result(self.result)
        return self.result

    def _run_internal(self) -> None:
        # When to start recording measurements
        record_start_ts = self.context.record_start_ts
        self.result.record_start_ts = record_start_ts
        is_read = self.operation.is_read

        self.context.wait_for_start()
        logger.debug(f"Worker {self.thread_id}: passed barrier, target {self.file_path}")

        while not self.context.cancelled and (not is_read or time.time() < self.context.end_ts):
            io_bytes = self.apply_operation()

            # Start recording after the warmup
            if time.time() >= record_start_ts and io_bytes > 0:
                self.result.increment_io_bytes(io_bytes)
            if self.operation is ClientIOOperation.WRITE and io_bytes == WRITE_DONE:
                # done writing. done with the thread.
                break

    def apply_operation(self) -> int:
        """Issue one I/O call.

        Returns:
            Bytes transferred, a negative value at end of stream, or
            WRITE_DONE once the whole file has been written
        """
        operation = self.operation
        self.client.check_operation(operation)

        if self.pattern.is_read:
            if self._in_stream is None:
                self._in_stream = self.client.open_for_read(self.file_path)
            self.current_offset = next(self.offsets)
            if self.pattern.needs_seek:
                # must seek if not a positioned read
                self._in_stream.seek(self.current_offset)

        if operation is ClientIOOperation.READ_ARRAY:
            bytes_read = self._in_stream.read_into(self.buffer)
            if bytes_read < 0:
                self._reopen_in_stream()
            return bytes_read

        if operation is ClientIOOperation.READ_BYTE_BUFFER:
            bytes_read = self._in_stream.read_buffer(len(self.buffer))
            if bytes_read < 0:
                self._reopen_in_stream()
            return bytes_read

        if operation is ClientIOOperation.READ_FULLY:
            to_read = min(len(self.buffer), self.file_size - self._in_stream.tell())
            self._in_stream.read_fully(self.buffer, to_read)
            if self._in_stream.tell() >= self.file_size:
                self._reopen_in_stream()
            return to_read

        if operation is ClientIOOperation.POS_READ:
            return self._in_stream.read_at(self.current_offset, self.buffer)

        if operation is ClientIOOperation.POS_READ_FULLY:
            self._in_stream.read_fully_at(self.current_offset, self.buffer)
            return len(self.buffer)

        if operation is ClientIOOperation.WRITE:
            if self._out_stream is None:
                self._out_stream = self.client.open_for_write(
                    self.file_path, self.block_size, len(self.buffer)
                )
            bytes_to_write = min(self.file_size - self._out_stream.bytes_written, len(self.buffer))
            if bytes_to_write <= 0:
                out_stream, self._out_stream = self._out_stream, None
                out_stream.close()
                return WRITE_DONE
            self._out_stream.write(self.buffer, bytes_to_write)
            return bytes_to_write

        raise UnsupportedOperationError(f"Unknown operation: {operation}")

    def _reopen_in_stream(self) -> None:
        self._close_in_stream()
        self._in_stream = self.client.open_for_read(self.file_path)

    def _close_in_stream(self) -> None:
        try:
            if self._in_stream is not None:
                self._in_stream.close()
        except Exception as e:
            self.result.add_error_message(_describe(e))
        finally:
            self._in_stream = None

    def _close_streams(self) -> None:
        self._close_in_stream()
        try:
            if self._out_stream is not None:
                self._out_stream.close()
        except Exception as e:
            self.result.add_error_message(_describe(e))
        finally:
            self._out_stream = None

    def __repr__(self) -> str:
        return f"BenchWorker(thread_id={self.thread_id}, operation={self.operation.value}, path={self.file_path})"


def _describe(error: BaseException) -> str:
    return f"{type(error).__name__}: {error}"
