"""
Parsing helpers for human-readable sizes ("64k", "500m") and durations ("10s", "2m").
"""

import re
import logging
from configuration import (
    BYTES_PER_KB,
    BYTES_PER_MB,
    BYTES_PER_GB,
    BYTES_PER_TB,
    MS_PER_SECOND,
    SECONDS_PER_MINUTE,
    SECONDS_PER_HOUR,
    SECONDS_PER_DAY,
)

logger = logging.getLogger(__name__)

_SIZE_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([a-z]*)\s*$", re.IGNORECASE)

_SIZE_UNITS = {
    "": 1,
    "b": 1,
    "k": BYTES_PER_KB,
    "kb": BYTES_PER_KB,
    "m": BYTES_PER_MB,
    "mb": BYTES_PER_MB,
    "g": BYTES_PER_GB,
    "gb": BYTES_PER_GB,
    "t": BYTES_PER_TB,
    "tb": BYTES_PER_TB,
}

# Values are seconds per unit; a bare number is milliseconds
_TIME_UNITS = {
    "": 1.0 / MS_PER_SECOND,
    "ms": 1.0 / MS_PER_SECOND,
    "s": 1.0,
    "sec": 1.0,
    "m": float(SECONDS_PER_MINUTE),
    "min": float(SECONDS_PER_MINUTE),
    "h": float(SECONDS_PER_HOUR),
    "hr": float(SECONDS_PER_HOUR),
    "d": float(SECONDS_PER_DAY),
    "day": float(SECONDS_PER_DAY),
}


def parse_space_size(value) -> int:
    """Parse a size such as "64k", "1.5g" or "1048576" into bytes.

    Args:
        value: Size string or integer byte count

    Returns:
        Number of bytes

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, int):
        return value

    match = _SIZE_PATTERN.match(str(value))
    if not match or match.group(2).lower() not in _SIZE_UNITS:
        raise ValueError(f"Invalid size: {value!r}")

    number, unit = match.groups()
    return int(float(number) * _SIZE_UNITS[unit.lower()])


def parse_time_size(value) -> float:
    """Parse a duration such as "10s", "500ms" or "2m" into seconds.

    A bare number is interpreted as milliseconds.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, (int, float)):
        return float(value) / MS_PER_SECOND

    match = _SIZE_PATTERN.match(str(value))
    if not match or match.group(2).lower() not in _TIME_UNITS:
        raise ValueError(f"Invalid duration: {value!r}")

    number, unit = match.groups()
    return float(number) * _TIME_UNITS[unit.lower()]


def format_bytes(num_bytes: float) -> str:
    """Format a byte count with the largest binary unit that keeps it above 1."""
    for unit, factor in (("TB", BYTES_PER_TB), ("GB", BYTES_PER_GB),
                         ("MB", BYTES_PER_MB), ("KB", BYTES_PER_KB)):
        if num_bytes >= factor:
            return f"{num_bytes / factor:.2f} {unit}"
    return f"{int(num_bytes)} B"
