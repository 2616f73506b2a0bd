"""Tests for per-worker offset streams."""

import sys
import os
from itertools import islice

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from common.offsets import random_offsets, sequential_offsets, offset_stream


def test_random_offsets_in_range():
    offsets = list(islice(random_offsets(1000 - 64, seed=7), 5000))
    assert all(0 <= o < 1000 - 64 for o in offsets)
    # uniform enough to reach both ends of the range
    assert min(offsets) < 50
    assert max(offsets) > 1000 - 64 - 50


def test_random_offsets_seeded_per_worker():
    first = list(islice(random_offsets(10_000, seed=1), 20))
    again = list(islice(random_offsets(10_000, seed=1), 20))
    other = list(islice(random_offsets(10_000, seed=2), 20))
    assert first == again
    assert first != other


def test_random_offsets_when_buffer_covers_file():
    assert list(islice(random_offsets(0, seed=3), 4)) == [0, 0, 0, 0]


def test_sequential_offsets_wrap():
    # file of 4 buffers: offsets 0, 10, 20, 30 then back to 0
    offsets = list(islice(sequential_offsets(10, 40 - 10), 9))
    assert offsets == [0, 10, 20, 30, 0, 10, 20, 30, 0]


def test_sequential_offsets_partial_last_buffer():
    # 35 byte file, 10 byte buffer: 30 would read past the end
    offsets = list(islice(sequential_offsets(10, 35 - 10), 5))
    assert offsets == [0, 10, 20, 0, 10]


def test_offset_stream_picks_pattern():
    assert list(islice(offset_stream(False, 4, 16), 5)) == [0, 4, 8, 12, 0]
    assert all(0 <= o < 12 for o in islice(offset_stream(True, 4, 16, seed=5), 100))
