"""
Reader for method profiles written by a client profiling agent.

The agent appends one JSON object per profiled call:

    {"method": "readBlock", "isttfb": true, "timestamp_ms": 1700000000123,
     "duration_ns": 1834000, "success": true}
"""

import os
import logging
from typing import Callable, Dict, Any, Optional

import pandas as pd

from common.metrics_utils import MethodStatistics

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("method", "timestamp_ms", "duration_ns")


def ttfb_filter(record: Dict[str, Any]) -> Optional[str]:
    """Keep only time-to-first-byte records, grouped by method name."""
    flag = record.get("isttfb")
    if flag is not None and pd.notna(flag) and bool(flag):
        return record["method"]
    return None


class ProfileLogSource:
    """Method latency source backed by a JSON-lines agent log."""

    def __init__(self, log_path: str):
        self.log_path = log_path
        logger.info(f"Initialized profile source for {log_path}")

    def load(self) -> pd.DataFrame:
        if not os.path.exists(self.log_path) or os.path.getsize(self.log_path) == 0:
            logger.warning(f"Profile log {self.log_path} is missing or empty")
            return pd.DataFrame(columns=list(REQUIRED_COLUMNS))

        data = pd.read_json(self.log_path, lines=True, convert_dates=False)
        missing = [c for c in REQUIRED_COLUMNS if c not in data.columns]
        if missing:
            raise ValueError(f"Profile log {self.log_path} is missing columns: {missing}")
        return data

    def query_method_latencies(
        self,
        start_ms: int,
        end_ms: int,
        filter_fn: Callable[[Dict[str, Any]], Optional[str]] = ttfb_filter,
    ) -> Dict[str, MethodStatistics]:
        """
        Collect latencies of profiled calls that started within [start_ms, end_ms].

        Args:
            start_ms: Window start, epoch milliseconds
            end_ms: Window end, epoch milliseconds
            filter_fn: Maps a record to the statistics name it belongs to, or
                None to drop it

        Returns:
            Mapping from name to MethodStatistics
        """
        data = self.load()
        if len(data) == 0:
            return {}

        window = data[(data["timestamp_ms"] >= start_ms) & (data["timestamp_ms"] <= end_ms)]
        statistics: Dict[str, MethodStatistics] = {}
        for record in window.to_dict("records"):
            name = filter_fn(record)
            if name is None:
                continue
            stats = statistics.setdefault(name, MethodStatistics())
            success = record.get("success", True)
            stats.add_record(int(record["duration_ns"]), bool(success) if pd.notna(success) else True)

        logger.info(
            f"Profile window [{start_ms}, {end_ms}]: {len(window)} records, "
            f"{len(statistics)} methods"
        )
        return statistics
