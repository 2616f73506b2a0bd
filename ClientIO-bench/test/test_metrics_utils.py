"""Tests for latency statistics reduction."""

import sys
import os
import random
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import numpy as np

from configuration import MAX_TIME_COUNT, TIME_99_COUNT, MISSING_LATENCY_SENTINEL
from common.metrics_utils import (
    MethodStatistics,
    SummaryStatistics,
    to_summary_statistics,
    summarize_methods,
    tail_percentile_ranks,
    calculate_throughput_mbps,
)


class TestSummaryStatistics(unittest.TestCase):

    def test_percentile_curve_is_non_decreasing(self):
        rng = random.Random(42)
        stats = MethodStatistics()
        for _ in range(5000):
            stats.add_record(int(rng.expovariate(1.0) * 1_000_000))

        summary = to_summary_statistics(stats)
        self.assertEqual(len(summary.time_percentile_ms), 101)
        self.assertEqual(len(summary.time_99_percentile_ms), TIME_99_COUNT)
        self.assertTrue(np.all(np.diff(summary.time_percentile_ms) >= 0))
        self.assertTrue(np.all(np.diff(summary.time_99_percentile_ms) >= 0))
        # the 99th percentile starts the tail curve
        self.assertEqual(summary.time_99_percentile_ms[0], summary.time_percentile_ms[99])

    def test_percentiles_are_observed_samples(self):
        stats = MethodStatistics()
        for time_ns in (1_000_000, 2_000_000, 3_000_000, 4_000_000):
            stats.add_record(time_ns)

        summary = to_summary_statistics(stats)
        self.assertEqual(summary.time_percentile_ms[0], 1.0)
        self.assertEqual(summary.time_percentile_ms[50], 2.0)
        self.assertEqual(summary.time_percentile_ms[100], 4.0)

    def test_max_latencies_padded_with_sentinel(self):
        stats = MethodStatistics()
        for time_ns in (5_000_000, 1_000_000, 3_000_000):
            stats.add_record(time_ns)

        summary = to_summary_statistics(stats)
        self.assertEqual(len(summary.max_time_ms), MAX_TIME_COUNT)
        self.assertEqual(summary.max_time_ms[:3], [5.0, 3.0, 1.0])
        self.assertTrue(all(v == MISSING_LATENCY_SENTINEL for v in summary.max_time_ms[3:]))

    def test_max_latencies_keep_largest(self):
        stats = MethodStatistics(max_time_count=3)
        for time_ns in range(1, 101):
            stats.add_record(time_ns * 1_000_000)
        self.assertEqual(stats.max_time_ns, [100_000_000, 99_000_000, 98_000_000])

    def test_failures_are_counted_not_sampled(self):
        stats = MethodStatistics()
        stats.add_record(1_000_000, success=True)
        stats.add_record(9_000_000, success=False)

        self.assertEqual(stats.num_success, 1)
        self.assertEqual(stats.num_failure, 1)
        self.assertEqual(to_summary_statistics(stats).time_percentile_ms[100], 1.0)

    def test_empty_statistics(self):
        summary = to_summary_statistics(MethodStatistics())
        self.assertEqual(summary.num_success, 0)
        self.assertEqual(summary.time_percentile_ms, [0.0] * 101)
        self.assertEqual(summary.max_time_ms, [MISSING_LATENCY_SENTINEL] * MAX_TIME_COUNT)

    def test_dict_round_trip(self):
        stats = MethodStatistics()
        stats.add_record(2_000_000)
        summary = to_summary_statistics(stats)
        restored = SummaryStatistics.from_dict(summary.to_dict())
        self.assertEqual(restored.to_dict(), summary.to_dict())


def test_summarize_methods_keeps_names():
    read = MethodStatistics()
    read.add_record(1_000_000)
    summaries = summarize_methods({"readBlock": read, "open": MethodStatistics()})
    assert set(summaries) == {"readBlock", "open"}
    assert summaries["readBlock"].num_success == 1


def test_tail_percentile_ranks():
    ranks = tail_percentile_ranks(3)
    assert np.allclose(ranks, [99.0, 99.9, 99.99])


def test_calculate_throughput_mbps():
    assert calculate_throughput_mbps(10 * 1024 * 1024, 2.0) == 5.0
    assert calculate_throughput_mbps(100, 0) == 0.0


if __name__ == '__main__':
    unittest.main()
