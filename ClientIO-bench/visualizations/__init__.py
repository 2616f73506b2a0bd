"""
Plot visualization modules for benchmark results.
"""

from .base import BasePlotter
from .throughput_plots import ThroughputPlotter
from .latency_plots import LatencyPlotter, percentile_frame

__all__ = ['BasePlotter', 'ThroughputPlotter', 'LatencyPlotter', 'percentile_frame']
