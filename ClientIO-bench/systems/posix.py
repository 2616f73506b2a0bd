"""
Local POSIX file client (e.g. a FUSE mount of the storage system).
"""

import os
import shutil
import logging

from common.operations import ClientIOOperation
from systems.base import StorageClient, InStream, OutStream, EOF

logger = logging.getLogger(__name__)


class PosixInStream(InStream):
    """Unbuffered file reader; positioned reads go through pread."""

    def __init__(self, path: str):
        self.path = path
        self._file = open(path, "rb", buffering=0)

    def read_into(self, buffer) -> int:
        n = self._file.readinto(buffer)
        if not n:
            return EOF
        return n

    def seek(self, offset: int) -> None:
        self._file.seek(offset)

    def tell(self) -> int:
        return self._file.tell()

    def read_at(self, offset: int, buffer) -> int:
        return os.preadv(self._file.fileno(), [buffer], offset)

    def close(self) -> None:
        self._file.close()


class PosixOutStream(OutStream):
    """Unbuffered file writer starting at offset 0."""

    def __init__(self, path: str):
        super().__init__()
        self.path = path
        self._file = open(path, "wb", buffering=0)

    def write(self, buffer, length: int) -> None:
        view = memoryview(buffer)[:length]
        while view:
            n = self._file.write(view)
            view = view[n:]
            self.bytes_written += n

    def close(self) -> None:
        self._file.close()


class PosixClient(StorageClient):
    """Client for a locally mounted file system."""

    client_type = "posix"
    unsupported_operations = frozenset({ClientIOOperation.READ_BYTE_BUFFER})

    def open_for_read(self, path: str) -> PosixInStream:
        return PosixInStream(path)

    def open_for_write(self, path: str, block_size: int, buffer_size: int) -> PosixOutStream:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        return PosixOutStream(path)

    def prepare_base(self, path: str, clean: bool) -> None:
        if clean and os.path.exists(path):
            logger.info(f"Removing existing base directory {path}")
            shutil.rmtree(path)
        os.makedirs(path, exist_ok=True)
