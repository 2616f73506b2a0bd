"""
Parquet and JSON persistence for benchmark results.
"""

import os
import json
import logging
from typing import Optional, Tuple, Dict, Any
from datetime import datetime

import pandas as pd

from common.metrics_utils import thread_count_frame

logger = logging.getLogger(__name__)


class ParquetPersistence:
    """Writes a task result as a JSON document plus a per-thread-count Parquet table.

    Attributes:
        output_dir: Directory where result files are saved
    """

    def __init__(self, output_dir: str = "results"):
        """Initialize persistence.

        Args:
            output_dir: Directory for saving result files (default: 'results')
        """
        self.output_dir: str = output_dir

        # Ensure output directory exists
        os.makedirs(output_dir, exist_ok=True)

    def save_task_result(self, task_result, filename_prefix: str = "client_io") -> Optional[Tuple[str, str]]:
        """Save a task result.

        Args:
            task_result: ClientIOTaskResult of a completed sweep
            filename_prefix: Prefix for the generated filenames (default: 'client_io')

        Returns:
            (json path, parquet path), or None if there are no results to save
        """
        if not task_result.thread_count_results:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        base = os.path.join(self.output_dir, f"{filename_prefix}_{timestamp}")

        json_path = f"{base}.json"
        with open(json_path, "w") as f:
            json.dump(task_result.to_dict(), f, indent=2)

        parquet_path = f"{base}.parquet"
        df = thread_count_frame(task_result)
        df.to_parquet(parquet_path, index=False)

        logger.info(f"Saved {len(df)} thread count results to {json_path} and {parquet_path}")
        return json_path, parquet_path


def load_thread_counts(parquet_path: str) -> pd.DataFrame:
    """Load the per-thread-count table written by save_task_result."""
    return pd.read_parquet(parquet_path).sort_values("threads")


def load_task_document(json_path: str) -> Dict[str, Any]:
    """Load the JSON document written by save_task_result."""
    with open(json_path) as f:
        return json.load(f)
