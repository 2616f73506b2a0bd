"""
Base classes for the storage clients a benchmark worker drives.

A client opens streams; streams do the I/O. Every client exposes the same
capability set so a single worker type can drive any of them. Capabilities a
client cannot provide are declared up front in ``unsupported_operations`` and
rejected before a run starts.
"""

import logging
from typing import FrozenSet

from common.operations import ClientIOOperation

logger = logging.getLogger(__name__)

EOF = -1


class UnsupportedOperationError(ValueError):
    """The operation cannot be performed with the selected client type."""


class InStream:
    """Readable stream over one file."""

    def read_into(self, buffer) -> int:
        """Read up to len(buffer) bytes into buffer. Returns -1 at end of stream."""
        raise UnsupportedOperationError(f"{type(self).__name__} does not support read_into")

    def read_buffer(self, size: int) -> int:
        """Read up to size bytes into a freshly allocated buffer. Returns -1 at end of stream."""
        raise UnsupportedOperationError(f"{type(self).__name__} does not support read_buffer")

    def seek(self, offset: int) -> None:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support seek")

    def tell(self) -> int:
        raise UnsupportedOperationError(f"{type(self).__name__} does not support tell")

    def read_at(self, offset: int, buffer) -> int:
        """Positioned read that does not move the stream position."""
        raise UnsupportedOperationError(f"{type(self).__name__} does not support read_at")

    def read_fully(self, buffer, length: int) -> None:
        """Read exactly length bytes from the current position.

        Raises:
            EOFError: If the stream ends first
        """
        view = memoryview(buffer)[:length]
        filled = 0
        while filled < length:
            n = self.read_into(view[filled:])
            if n < 0:
                raise EOFError(f"Reached end of stream after {filled} of {length} bytes")
            filled += n

    def read_fully_at(self, offset: int, buffer) -> None:
        """Positioned read of exactly len(buffer) bytes.

        Raises:
            EOFError: If the file ends first
        """
        view = memoryview(buffer)
        length = len(view)
        filled = 0
        while filled < length:
            n = self.read_at(offset + filled, view[filled:])
            if n <= 0:
                raise EOFError(f"Reached end of file after {filled} of {length} bytes at offset {offset}")
            filled += n

    def close(self) -> None:
        pass


class OutStream:
    """Writable stream creating one file."""

    def __init__(self):
        self.bytes_written = 0

    def write(self, buffer, length: int) -> None:
        raise NotImplementedError

    def close(self) -> None:
        pass


class StorageClient:
    """One connection to a storage system."""

    client_type: str = ""
    unsupported_operations: FrozenSet[ClientIOOperation] = frozenset()

    def check_operation(self, operation: ClientIOOperation) -> None:
        """Reject operations this client cannot perform.

        Raises:
            UnsupportedOperationError: If the operation is not supported
        """
        if operation in self.unsupported_operations:
            raise UnsupportedOperationError(
                f"{operation.value} is not supported by the {self.client_type} client"
            )

    def open_for_read(self, path: str) -> InStream:
        raise NotImplementedError

    def open_for_write(self, path: str, block_size: int, buffer_size: int) -> OutStream:
        raise NotImplementedError

    def prepare_base(self, path: str, clean: bool) -> None:
        """Make sure the base directory exists, optionally wiping it first."""
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"
