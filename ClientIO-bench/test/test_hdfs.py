"""Tests for the HDFS client streams and file system calls, without a cluster."""

import os
import sys
import unittest
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pyarrow as pa
from pyarrow import fs as pafs

from systems.base import EOF
from systems.hdfs import HdfsClient, HdfsInStream, HdfsOutStream, strip_uri


class TestHdfsInStream(unittest.TestCase):

    def _stream(self, data=b"abcdefgh"):
        return HdfsInStream(pa.BufferReader(data))

    def test_read_into_until_eof(self):
        stream = self._stream()
        buffer = bytearray(3)

        self.assertEqual(stream.read_into(buffer), 3)
        self.assertEqual(bytes(buffer), b"abc")
        stream.seek(5)
        self.assertEqual(stream.read_into(buffer), 3)
        self.assertEqual(bytes(buffer), b"fgh")
        self.assertEqual(stream.tell(), 8)
        self.assertEqual(stream.read_into(buffer), EOF)

    def test_read_buffer(self):
        stream = self._stream()
        self.assertEqual(stream.read_buffer(5), 5)
        self.assertEqual(stream.read_buffer(5), 3)
        self.assertEqual(stream.read_buffer(5), EOF)

    def test_positioned_reads(self):
        stream = self._stream()
        buffer = bytearray(4)

        self.assertEqual(stream.read_at(2, buffer), 4)
        self.assertEqual(bytes(buffer), b"cdef")
        self.assertEqual(stream.tell(), 0)
        self.assertEqual(stream.read_at(6, buffer), 2)

        stream.read_fully_at(4, buffer)
        self.assertEqual(bytes(buffer), b"efgh")
        with self.assertRaises(EOFError):
            stream.read_fully_at(6, buffer)

    def test_read_fully(self):
        stream = self._stream()
        buffer = bytearray(8)
        stream.read_fully(buffer, 6)
        self.assertEqual(bytes(buffer[:6]), b"abcdef")
        with self.assertRaises(EOFError):
            stream.read_fully(buffer, 6)


class TestHdfsOutStream(unittest.TestCase):

    def test_write_counts_only_requested_length(self):
        native_file = MagicMock()
        stream = HdfsOutStream(native_file)

        stream.write(bytearray(b"hello world"), 5)
        stream.close()

        self.assertEqual(stream.bytes_written, 5)
        written = native_file.write.call_args.args[0]
        self.assertEqual(bytes(written), b"hello")
        native_file.close.assert_called_once()


class TestHdfsClient(unittest.TestCase):

    def setUp(self):
        patcher = patch("systems.hdfs.pafs.HadoopFileSystem")
        self.fs_class = patcher.start()
        self.addCleanup(patcher.stop)
        self.fs = self.fs_class.return_value
        self.client = HdfsClient(host="namenode", port=8020, user="bench",
                                 block_size=64 * 1024 * 1024, extra_conf={"dfs.replication": "1"})

    def test_connection_settings(self):
        args, kwargs = self.fs_class.call_args
        self.assertEqual(args, ("namenode",))
        self.assertEqual(kwargs["port"], 8020)
        self.assertEqual(kwargs["user"], "bench")
        self.assertEqual(kwargs["default_block_size"], 64 * 1024 * 1024)
        self.assertEqual(kwargs["extra_conf"], {"dfs.replication": "1"})

    def test_open_streams_strip_uri(self):
        self.client.open_for_read("hdfs://namenode:8020/base/task/data-0")
        self.fs.open_input_file.assert_called_once_with("/base/task/data-0")

        out = self.client.open_for_write("hdfs://namenode:8020/base/task/data-1", 64 * 1024 * 1024, 4096)
        self.fs.open_output_stream.assert_called_once_with(
            "/base/task/data-1", compression=None, buffer_size=4096)
        self.assertIsInstance(out, HdfsOutStream)

    def test_prepare_base_clean_existing(self):
        self.fs.get_file_info.return_value = SimpleNamespace(type=pafs.FileType.Directory)

        self.client.prepare_base("/base", clean=True)

        self.fs.delete_dir.assert_called_once_with("/base")
        self.fs.create_dir.assert_called_once_with("/base", recursive=True)

    def test_prepare_base_missing_or_kept(self):
        self.fs.get_file_info.return_value = SimpleNamespace(type=pafs.FileType.NotFound)
        self.client.prepare_base("/base", clean=True)

        self.fs.get_file_info.return_value = SimpleNamespace(type=pafs.FileType.Directory)
        self.client.prepare_base("/base", clean=False)

        self.fs.delete_dir.assert_not_called()
        self.assertEqual(self.fs.create_dir.call_count, 2)


def test_strip_uri():
    assert strip_uri("hdfs://nn:8020/a/b") == "/a/b"
    assert strip_uri("/a/b") == "/a/b"
    assert strip_uri("hdfs://nn:8020") == "/"
