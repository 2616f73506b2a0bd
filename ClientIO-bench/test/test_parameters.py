"""Tests for run parameters and operations."""

import sys
import os
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.operations import ClientIOOperation, AccessPattern
from common.parameters import ClientIOParameters


class TestOperations(unittest.TestCase):

    def test_from_string(self):
        self.assertIs(ClientIOOperation.from_string("PosRead"), ClientIOOperation.POS_READ)
        self.assertIs(ClientIOOperation.from_string("posreadfully"), ClientIOOperation.POS_READ_FULLY)
        self.assertIs(ClientIOOperation.from_string("READ_ARRAY"), ClientIOOperation.READ_ARRAY)
        with self.assertRaises(ValueError):
            ClientIOOperation.from_string("Append")

    def test_access_pattern(self):
        random_stream = AccessPattern(ClientIOOperation.READ_ARRAY, read_random=True)
        self.assertTrue(random_stream.needs_seek)

        random_positioned = AccessPattern(ClientIOOperation.POS_READ, read_random=True)
        self.assertTrue(random_positioned.read_random)
        self.assertFalse(random_positioned.needs_seek)

        write = AccessPattern(ClientIOOperation.WRITE, read_random=True)
        self.assertFalse(write.is_read)
        self.assertFalse(write.read_random)


class TestClientIOParameters(unittest.TestCase):

    def test_parsing(self):
        parameters = ClientIOParameters(operation="Write", file_size="1m", buffer_size="4k",
                                        warmup="5s", duration="1m", threads=[4, 1, 4, 2])
        self.assertIs(parameters.operation, ClientIOOperation.WRITE)
        self.assertEqual(parameters.file_size, 1024 * 1024)
        self.assertEqual(parameters.buffer_size, 4096)
        self.assertEqual(parameters.warmup_seconds, 5.0)
        self.assertEqual(parameters.duration_seconds, 60.0)
        self.assertEqual(parameters.sorted_threads, [1, 2, 4])

    def test_file_paths(self):
        parameters = ClientIOParameters(base_path="/data/", task_id="task-3")
        self.assertEqual(parameters.task_base_path(), "/data/task-3")
        self.assertEqual(parameters.file_path(5), "/data/task-3/data-5")

        shared = ClientIOParameters(base_path="/data", task_id="task-3", read_same_file=True)
        self.assertEqual(shared.file_path(5), "/data/task-3/data-0")

    def test_invalid_values(self):
        with self.assertRaises(ValueError):
            ClientIOParameters(threads=[2, 0])
        with self.assertRaises(ValueError):
            ClientIOParameters(clients=0)
        with self.assertRaises(ValueError):
            ClientIOParameters(file_size="big")

    def test_to_dict_keeps_raw_strings(self):
        document = ClientIOParameters(operation="PosRead", file_size="2g", warmup="10s").to_dict()
        self.assertEqual(document["operation"], "PosRead")
        self.assertEqual(document["file_size"], "2g")
        self.assertEqual(document["warmup"], "10s")


if __name__ == '__main__':
    unittest.main()
