"""
Throughput visualization plots.
"""

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import logging

from .base import BasePlotter

logger = logging.getLogger(__name__)


class ThroughputPlotter(BasePlotter):
    """Plotter for the per-thread-count throughput table."""

    def create_throughput_vs_threads(self):
        """Plot MB/s against thread count, marking trials that reported errors."""
        if not self.has_data():
            logger.warning("No data available for throughput vs threads plot")
            return None

        data = self.data.sort_values('threads')
        fig, ax = plt.subplots(figsize=(12, 7))
        ax.plot(data['threads'], data['io_mbps'], marker='o', linewidth=2, color='steelblue',
                label='Throughput')

        degraded = data[data['error_count'] > 0]
        if len(degraded) > 0:
            ax.scatter(degraded['threads'], degraded['io_mbps'], color='red', s=80, zorder=3,
                       label='Trial with errors')
            for _, row in degraded.iterrows():
                ax.annotate(f"{int(row['error_count'])} err", (row['threads'], row['io_mbps']),
                            textcoords="offset points", xytext=(0, 10), ha='center', fontsize=9)

        ax.set_title('IO Throughput by Thread Count', fontsize=14)
        ax.set_xlabel('Threads', fontsize=12)
        ax.set_ylabel('Throughput (MB/s)', fontsize=12)
        ax.set_xscale('log', base=2)
        ax.set_xticks(data['threads'])
        ax.set_xticklabels([str(t) for t in data['threads']])
        ax.grid(True, alpha=0.3)
        ax.legend()
        fig.tight_layout()

        output_file = self.output_path('throughput_vs_threads.png')
        fig.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        logger.info(f"Created throughput vs threads plot: {output_file}")
        return output_file

    def create_per_thread_throughput(self):
        """Plot MB/s divided by thread count to show scaling efficiency."""
        if not self.has_data():
            logger.warning("No data available for per-thread throughput plot")
            return None

        data = self.data.sort_values('threads')
        per_thread = data['io_mbps'] / data['threads']

        fig, ax = plt.subplots(figsize=(12, 7))
        ax.bar([str(t) for t in data['threads']], per_thread, color='seagreen', alpha=0.8)
        ax.set_title('Throughput per Thread', fontsize=14)
        ax.set_xlabel('Threads', fontsize=12)
        ax.set_ylabel('Throughput per thread (MB/s)', fontsize=12)
        ax.grid(True, axis='y', alpha=0.3)
        fig.tight_layout()

        output_file = self.output_path('per_thread_throughput.png')
        fig.savefig(output_file, dpi=150, bbox_inches='tight')
        plt.close(fig)

        logger.info(f"Created per-thread throughput plot: {output_file}")
        return output_file
