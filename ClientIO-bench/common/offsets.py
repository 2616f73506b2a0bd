"""
Per-worker offset streams.

Each worker owns its own generator, so drawing the next offset never touches
shared state. Streams are infinite and restart from scratch when recreated for
a new trial.
"""

import random
from typing import Iterator, Optional


def random_offsets(max_offset: int, seed: Optional[int] = None) -> Iterator[int]:
    """Yield uniformly distributed offsets in [0, max_offset).

    When the buffer covers the whole file (max_offset == 0) the only valid
    offset is 0.
    """
    rng = random.Random(seed)
    while True:
        if max_offset <= 0:
            yield 0
        else:
            yield rng.randrange(0, max_offset)


def sequential_offsets(buffer_size: int, max_offset: int) -> Iterator[int]:
    """Yield 0, buffer_size, 2 * buffer_size, ... wrapping to 0 past max_offset."""
    offset = 0
    while True:
        yield offset
        offset += buffer_size
        if offset > max_offset:
            offset = 0


def offset_stream(read_random: bool, buffer_size: int, file_size: int,
                  seed: Optional[int] = None) -> Iterator[int]:
    """Build the offset stream for one worker."""
    max_offset = file_size - buffer_size
    if read_random:
        return random_offsets(max_offset, seed)
    return sequential_offsets(buffer_size, max_offset)
