"""
Base classes for plot visualization.
"""

import os
import pandas as pd
import logging

logger = logging.getLogger(__name__)


class BasePlotter:
    """Base class for all plotters with common functionality."""

    def __init__(self, data: pd.DataFrame, output_dir: str):
        self.data = data
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

    def has_data(self) -> bool:
        return self.data is not None and len(self.data) > 0

    def get_thread_counts(self):
        """Get the swept thread counts, ascending."""
        if not self.has_data():
            return []
        return sorted(self.data['threads'].unique())

    def get_thread_colors(self):
        """Generate color map for thread counts."""
        import matplotlib.pyplot as plt
        threads = self.get_thread_counts()
        thread_colors = plt.cm.viridis([i / max(1, len(threads) - 1) for i in range(len(threads))])
        return dict(zip(threads, thread_colors))

    def output_path(self, filename: str) -> str:
        return os.path.join(self.output_dir, filename)
