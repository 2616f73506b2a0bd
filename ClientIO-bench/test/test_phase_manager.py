"""Tests for the start barrier and trial context."""

import sys
import os
import time
import threading
import unittest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from configuration import UNDEFINED_START_TS
from common.phase_manager import StartBarrier, BenchContext, MissedBarrierError


class TestStartBarrier(unittest.TestCase):

    def test_without_external_start(self):
        barrier = StartBarrier()
        self.assertEqual(barrier.next_start_ts(10.0, now=1000.0), 1010.0)

    def test_external_start_used_until_passed(self):
        barrier = StartBarrier(external_start_ts=5000.0)
        self.assertEqual(barrier.next_start_ts(10.0, now=1000.0), 5000.0)
        self.assertEqual(barrier.next_start_ts(10.0, now=1001.0), 5000.0)

        barrier.mark_passed()
        self.assertTrue(barrier.passed)
        self.assertEqual(barrier.next_start_ts(10.0, now=6000.0), 6010.0)

    def test_elapsed_external_start_is_replaced(self):
        barrier = StartBarrier(external_start_ts=900.0)
        self.assertEqual(barrier.next_start_ts(10.0, now=1000.0), 1010.0)
        # the boundary instant counts as elapsed
        self.assertEqual(StartBarrier(external_start_ts=1000.0).next_start_ts(5.0, now=1000.0), 1005.0)

    def test_undefined_constant(self):
        self.assertFalse(StartBarrier(UNDEFINED_START_TS).passed)


class TestBenchContext(unittest.TestCase):

    def test_record_start_after_warmup(self):
        context = BenchContext(start_ts=100.0, end_ts=160.0, warmup_seconds=30.0)
        self.assertEqual(context.record_start_ts, 130.0)

    def test_wait_for_start_blocks_until_start(self):
        barrier = StartBarrier()
        start_ts = time.time() + 0.2
        context = BenchContext(start_ts=start_ts, end_ts=start_ts + 1.0, barrier=barrier)

        context.wait_for_start()
        self.assertGreaterEqual(time.time(), start_ts)
        self.assertTrue(barrier.passed)

    def test_missed_barrier(self):
        barrier = StartBarrier()
        context = BenchContext(start_ts=time.time() - 1.0, end_ts=time.time() + 1.0, barrier=barrier)

        with self.assertRaises(MissedBarrierError) as ctx:
            context.wait_for_start()
        self.assertIn("missed barrier", str(ctx.exception))
        self.assertFalse(barrier.passed)

    def test_cancel_interrupts_wait(self):
        cancel_event = threading.Event()
        context = BenchContext(start_ts=time.time() + 30.0, end_ts=time.time() + 60.0,
                               cancel_event=cancel_event)
        threading.Timer(0.1, cancel_event.set).start()

        begin = time.time()
        context.wait_for_start()
        self.assertLess(time.time() - begin, 5.0)
        self.assertTrue(context.cancelled)

    def test_cancelled_wait_does_not_pass_barrier(self):
        barrier = StartBarrier()
        cancel_event = threading.Event()
        context = BenchContext(start_ts=time.time() + 30.0, end_ts=time.time() + 60.0,
                               barrier=barrier, cancel_event=cancel_event)
        threading.Timer(0.1, cancel_event.set).start()

        context.wait_for_start()
        self.assertFalse(barrier.passed)


if __name__ == '__main__':
    unittest.main()
