"""
HDFS-compatible client built on pyarrow's libhdfs bindings.
"""

import logging
from typing import Dict, Optional
from urllib.parse import urlparse

from pyarrow import fs as pafs

from configuration import HDFS_HOST, HDFS_PORT, HDFS_USER
from systems.base import StorageClient, InStream, OutStream, EOF

logger = logging.getLogger(__name__)


def strip_uri(path: str) -> str:
    """Return the path component of an hdfs:// URI, or the path itself."""
    parsed = urlparse(path)
    if parsed.scheme:
        return parsed.path or "/"
    return path


class HdfsInStream(InStream):
    """Seekable HDFS input stream with true positioned reads."""

    def __init__(self, native_file):
        self._file = native_file

    def read_into(self, buffer) -> int:
        n = self._file.readinto(buffer)
        if n == 0:
            return EOF
        return n

    def read_buffer(self, size: int) -> int:
        data = self._file.read_buffer(size)
        if data.size == 0:
            return EOF
        return data.size

    def seek(self, offset: int) -> None:
        self._file.seek(offset)

    def tell(self) -> int:
        return self._file.tell()

    def read_at(self, offset: int, buffer) -> int:
        view = memoryview(buffer)
        data = self._file.read_at(len(view), offset)
        n = len(data)
        view[:n] = data
        return n

    def close(self) -> None:
        self._file.close()


class HdfsOutStream(OutStream):

    def __init__(self, native_file):
        super().__init__()
        self._file = native_file

    def write(self, buffer, length: int) -> None:
        self._file.write(memoryview(buffer)[:length])
        self.bytes_written += length

    def close(self) -> None:
        self._file.close()


class HdfsClient(StorageClient):
    """One HadoopFileSystem connection.

    Args:
        host: Namenode host, "default" uses fs.defaultFS from the Hadoop config
        port: Namenode port, 0 with host "default"
        user: User to connect as
        block_size: Block size for files created by this client
        replication: Replication for files created by this client
        extra_conf: Additional Hadoop configuration key/values
    """

    client_type = "hdfs"

    def __init__(self, host: str = HDFS_HOST, port: int = HDFS_PORT, user: str = HDFS_USER,
                 block_size: Optional[int] = None, replication: int = 1,
                 extra_conf: Optional[Dict[str, str]] = None):
        self.host = host
        self.port = port
        self.block_size = block_size
        self.fs = pafs.HadoopFileSystem(
            host,
            port=port,
            user=user or None,
            replication=replication,
            default_block_size=block_size,
            extra_conf=dict(extra_conf or {}),
        )
        logger.info(f"Connected HDFS client to {host}:{port}")

    def open_for_read(self, path: str) -> HdfsInStream:
        return HdfsInStream(self.fs.open_input_file(strip_uri(path)))

    def open_for_write(self, path: str, block_size: int, buffer_size: int) -> HdfsOutStream:
        if self.block_size and block_size != self.block_size:
            logger.debug(f"Block size {block_size} differs from client default {self.block_size}")
        stream = self.fs.open_output_stream(strip_uri(path), compression=None, buffer_size=buffer_size)
        return HdfsOutStream(stream)

    def prepare_base(self, path: str, clean: bool) -> None:
        path = strip_uri(path)
        info = self.fs.get_file_info(path)
        if clean and info.type != pafs.FileType.NotFound:
            logger.info(f"Removing existing base directory {path}")
            self.fs.delete_dir(path)
        self.fs.create_dir(path, recursive=True)

    def __repr__(self) -> str:
        return f"HdfsClient(host={self.host!r}, port={self.port})"
