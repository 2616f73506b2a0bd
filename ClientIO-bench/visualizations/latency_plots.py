"""
Latency visualization plots built from profiled time-to-first-byte statistics.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import logging

from common.metrics_utils import tail_percentile_ranks
from .base import BasePlotter

logger = logging.getLogger(__name__)


def percentile_frame(document: dict) -> pd.DataFrame:
    """Flatten the time_to_first_byte section of a saved task result.

    One row per (threads, method, percentile).
    """
    rows = []
    for threads, methods in document.get("time_to_first_byte", {}).items():
        for method, stats in methods.items():
            for rank, value in enumerate(stats["time_percentile_ms"]):
                rows.append({"threads": int(threads), "method": method,
                             "percentile": float(rank), "latency_ms": value})
            for rank, value in zip(tail_percentile_ranks(len(stats["time_99_percentile_ms"])),
                                   stats["time_99_percentile_ms"]):
                rows.append({"threads": int(threads), "method": method,
                             "percentile": float(rank), "latency_ms": value})
    return pd.DataFrame(rows, columns=["threads", "method", "percentile", "latency_ms"])


class LatencyPlotter(BasePlotter):
    """Plotter for latency percentile curves."""

    def create_percentile_curves(self):
        """Plot latency against percentile for every thread count and method."""
        if not self.has_data():
            logger.warning("No profile statistics available for latency plot")
            return None

        colors = self.get_thread_colors()
        fig, ax = plt.subplots(figsize=(14, 8))
        for (threads, method), group in self.data.groupby(['threads', 'method']):
            group = group.sort_values('percentile')
            # distance to 100 on a log axis spreads out the tail
            x = 100.0 - group['percentile'].to_numpy()
            x = np.where(x <= 0, 1e-7, x)
            ax.plot(x, group['latency_ms'], marker='.', color=colors[threads],
                    label=f'{method} ({threads} threads)')

        ax.set_xscale('log')
        ax.invert_xaxis()
        ax.set_title('Time to First Byte Percentiles', fontsize=14)
        ax.set_xlabel('100 - percentile', fontsize=12)
        ax.set_ylabel('Latency (ms)', fontsize=12)
        ax.grid(True, alpha=0.3)
        ax.legend(fontsize=8)
        fig.tight_layout()

        output_file = self.output_path('ttfb_percentiles.png')
        fig.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        logger.info(f"Created latency percentile plot: {output_file}")
        return output_file
