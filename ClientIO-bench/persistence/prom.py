"""
Simple Prometheus metrics exporter for the client I/O benchmark.
"""

import logging
from prometheus_client import start_http_server, Counter, Gauge, CollectorRegistry

logger = logging.getLogger(__name__)


class SimplePrometheusExporter:
    """Publishes per-trial results, labelled by thread count."""

    def __init__(self, port: int = 9100, registry: CollectorRegistry = None):
        self.port = port
        self.server_started = False
        self.registry = registry or CollectorRegistry()

        # Define metrics
        self.io_bytes = Counter('client_io_bench_bytes_total', 'Bytes transferred after warmup',
                                ['operation', 'threads'], registry=self.registry)
        self.errors = Counter('client_io_bench_errors_total', 'Worker errors',
                              ['operation', 'threads'], registry=self.registry)
        self.throughput = Gauge('client_io_bench_throughput_mbps', 'Trial throughput in MB/s',
                                ['operation', 'threads'], registry=self.registry)
        self.concurrency = Gauge('client_io_bench_threads', 'Thread count of the running trial',
                                 registry=self.registry)

    def start_server(self):
        """Start the Prometheus HTTP server."""
        if not self.server_started:
            try:
                start_http_server(self.port, registry=self.registry)
                self.server_started = True
                logger.info(f"Prometheus server started on port {self.port}")
            except OSError as e:
                logger.error(f"Failed to start Prometheus server: {e}")

    def update_concurrency(self, threads: int):
        self.concurrency.set(threads)

    def record_trial(self, operation: str, threads: int, result):
        """Record the merged result of one trial."""
        labels = {'operation': operation, 'threads': str(threads)}
        self.io_bytes.labels(**labels).inc(result.io_bytes)
        self.errors.labels(**labels).inc(len(result.errors))
        self.throughput.labels(**labels).set(result.io_mbps)
