"""
Client I/O operations and the access pattern derived from them.
"""

from enum import Enum


class ClientIOOperation(Enum):
    """I/O operation applied by every worker for the whole run."""

    READ_ARRAY = "ReadArray"  # sequential read into the whole buffer
    READ_BYTE_BUFFER = "ReadByteBuffer"  # sequential read through a fresh buffer
    READ_FULLY = "ReadFully"  # read the buffer fully, reopen at end of file
    POS_READ = "PosRead"  # positioned read
    POS_READ_FULLY = "PosReadFully"  # positioned read of the full buffer
    WRITE = "Write"

    @classmethod
    def from_string(cls, value: str) -> "ClientIOOperation":
        """Look up an operation by its CLI name (case-insensitive)."""
        for operation in cls:
            if operation.value.lower() == value.lower() or operation.name.lower() == value.lower():
                return operation
        valid = ", ".join(op.value for op in cls)
        raise ValueError(f"Unknown operation: {value}. Must be one of: {valid}")

    @property
    def is_read(self) -> bool:
        return self is not ClientIOOperation.WRITE

    @property
    def is_positioned(self) -> bool:
        return self in (ClientIOOperation.POS_READ, ClientIOOperation.POS_READ_FULLY)

    def __str__(self) -> str:
        return self.value


class AccessPattern:
    """Offset policy flags derived from the operation and the random-read switch."""

    def __init__(self, operation: ClientIOOperation, read_random: bool):
        self.is_read = operation.is_read
        self.is_positioned = operation.is_positioned
        # Random offsets only make sense for reads
        self.read_random = bool(read_random) and self.is_read

    @property
    def needs_seek(self) -> bool:
        """Streaming reads must seek to a random offset before reading."""
        return self.read_random and not self.is_positioned

    def __repr__(self) -> str:
        return (f"AccessPattern(is_read={self.is_read}, is_positioned={self.is_positioned}, "
                f"read_random={self.read_random})")
