"""Tests for the JSON-lines method profile source."""

import json
import os
import sys
import tempfile
import shutil
import unittest

# Add the parent directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from observability.profile import ProfileLogSource, ttfb_filter


class TestProfileLogSource(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.log_path = os.path.join(self.temp_dir, "profile.jsonl")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _write(self, records):
        with open(self.log_path, "w") as f:
            for record in records:
                f.write(json.dumps(record) + "\n")

    def test_window_and_filter(self):
        self._write([
            {"method": "readBlock", "isttfb": True, "timestamp_ms": 1000, "duration_ns": 2_000_000, "success": True},
            {"method": "readBlock", "isttfb": True, "timestamp_ms": 1500, "duration_ns": 4_000_000, "success": True},
            {"method": "readBlock", "isttfb": True, "timestamp_ms": 2000, "duration_ns": 6_000_000, "success": False},
            {"method": "readBlock", "isttfb": True, "timestamp_ms": 2500, "duration_ns": 9_000_000, "success": True},
            {"method": "close", "isttfb": False, "timestamp_ms": 1200, "duration_ns": 1_000_000, "success": True},
        ])

        statistics = ProfileLogSource(self.log_path).query_method_latencies(1000, 2000)

        self.assertEqual(set(statistics), {"readBlock"})
        read = statistics["readBlock"]
        self.assertEqual(read.num_success, 2)
        self.assertEqual(read.num_failure, 1)
        self.assertEqual(read.max_time_ns, [4_000_000, 2_000_000])

    def test_custom_filter(self):
        self._write([
            {"method": "open", "isttfb": False, "timestamp_ms": 10, "duration_ns": 5},
            {"method": "readBlock", "isttfb": True, "timestamp_ms": 10, "duration_ns": 7},
        ])

        statistics = ProfileLogSource(self.log_path).query_method_latencies(
            0, 100, filter_fn=lambda record: "all")

        self.assertEqual(statistics["all"].num_success, 2)

    def test_missing_log_is_empty(self):
        source = ProfileLogSource(os.path.join(self.temp_dir, "absent.jsonl"))
        self.assertEqual(source.query_method_latencies(0, 100), {})

    def test_missing_columns(self):
        self._write([{"method": "readBlock"}])
        with self.assertRaises(ValueError):
            ProfileLogSource(self.log_path).load()


def test_ttfb_filter():
    assert ttfb_filter({"method": "readBlock", "isttfb": True}) == "readBlock"
    assert ttfb_filter({"method": "readBlock", "isttfb": False}) is None
    assert ttfb_filter({"method": "readBlock"}) is None
    assert ttfb_filter({"method": "readBlock", "isttfb": float("nan")}) is None


if __name__ == '__main__':
    unittest.main()
