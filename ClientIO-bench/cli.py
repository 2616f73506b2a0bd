import os
import sys
import logging
import argparse

# Add the current directory to Python path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from configuration import (
    DEFAULT_BASE_PATH, DEFAULT_TASK_ID, DEFAULT_CLIENT_TYPE, DEFAULT_OPERATION,
    DEFAULT_FILE_SIZE, DEFAULT_BUFFER_SIZE, DEFAULT_BLOCK_SIZE, DEFAULT_THREADS,
    DEFAULT_CLIENTS, DEFAULT_WARMUP, DEFAULT_DURATION, DEFAULT_BENCH_TIMEOUT,
    START_DELAY_SECONDS, UNDEFINED_START_TS, DEFAULT_OUTPUT_DIR, DEFAULT_PLOTS_DIR,
    DEFAULT_PROFILE_LOG, PROMETHEUS_PORT,
)
from common.operations import ClientIOOperation
from common.storage_factory import CLIENT_TYPES

# Set up logging (only if not already configured)
if not logging.root.handlers:
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def parse_thread_list(value: str):
    """Parse '1,2,4' into [1, 2, 4]."""
    try:
        return [int(t) for t in value.split(',') if t.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid thread list: {value}")


def parse_conf(value: str):
    """Parse one key=value client option."""
    key, sep, conf_value = value.partition('=')
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"Expected key=value, got: {value}")
    return key.strip(), conf_value.strip()


class ClientIOBenchCLI:
    """CLI interface for the client I/O benchmark."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self):
        """Create the main argument parser."""
        parser = argparse.ArgumentParser(
            description='Client I/O stress benchmark',
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # Write one 1 GiB file per thread through HDFS, for 1, 2 and 4 threads
  python cli.py run --client-type hdfs --operation Write --threads 1,2,4

  # Random positioned reads against local files
  python cli.py run --client-type posix --operation PosRead --read-random --threads 8

  # Generate plots from saved results
  python cli.py visualize --parquet-file results/client_io_20241201_120000.parquet
            """
        )

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Run command
        run_parser = subparsers.add_parser('run', help='Run a thread count sweep')
        run_parser.add_argument('--operation', type=str, default=DEFAULT_OPERATION,
                                choices=[op.value for op in ClientIOOperation],
                                help=f'Operation to benchmark (default: {DEFAULT_OPERATION})')
        run_parser.add_argument('--client-type', choices=CLIENT_TYPES, default=DEFAULT_CLIENT_TYPE,
                                help=f'Storage client to drive (default: {DEFAULT_CLIENT_TYPE})')
        run_parser.add_argument('--object-store', choices=['s3', 'r2'], default='s3',
                                help='Endpoint preset for the native client (default: s3)')
        run_parser.add_argument('--base', type=str, default=DEFAULT_BASE_PATH,
                                help=f'Base path of the test files (default: {DEFAULT_BASE_PATH})')
        run_parser.add_argument('--task-id', type=str, default=DEFAULT_TASK_ID,
                                help=f'Directory below the base path for this process (default: {DEFAULT_TASK_ID})')
        run_parser.add_argument('--file-size', type=str, default=DEFAULT_FILE_SIZE,
                                help=f'File size per thread, e.g. 1g (default: {DEFAULT_FILE_SIZE})')
        run_parser.add_argument('--buffer-size', type=str, default=DEFAULT_BUFFER_SIZE,
                                help=f'Size of one I/O call (default: {DEFAULT_BUFFER_SIZE})')
        run_parser.add_argument('--block-size', type=str, default=DEFAULT_BLOCK_SIZE,
                                help=f'Block size of written files (default: {DEFAULT_BLOCK_SIZE})')
        run_parser.add_argument('--threads', type=parse_thread_list,
                                default=list(DEFAULT_THREADS),
                                help='Comma separated thread counts to sweep (default: 1)')
        run_parser.add_argument('--clients', type=int, default=DEFAULT_CLIENTS,
                                help=f'Number of client connections shared by the threads (default: {DEFAULT_CLIENTS})')
        run_parser.add_argument('--warmup', type=str, default=DEFAULT_WARMUP,
                                help=f'Warmup excluded from measurement, ignored for writes (default: {DEFAULT_WARMUP})')
        run_parser.add_argument('--duration', type=str, default=DEFAULT_DURATION,
                                help=f'Measured duration of read trials (default: {DEFAULT_DURATION})')
        run_parser.add_argument('--read-same-file', action='store_true',
                                help='All threads read the file of thread 0')
        run_parser.add_argument('--read-random', action='store_true',
                                help='Read at random offsets instead of sequentially')
        run_parser.add_argument('--start-delay', type=float, default=START_DELAY_SECONDS,
                                help=f'Seconds between trial setup and the start barrier (default: {START_DELAY_SECONDS})')
        run_parser.add_argument('--start-ts', type=float, default=UNDEFINED_START_TS,
                                help='Epoch seconds of an agreed start instant for the first trial')
        run_parser.add_argument('--timeout', type=str, default=DEFAULT_BENCH_TIMEOUT,
                                help=f'Upper bound on one trial (default: {DEFAULT_BENCH_TIMEOUT})')
        run_parser.add_argument('--distributed', action='store_true',
                                help='Run as one of several processes sharing the base path')
        run_parser.add_argument('--conf', type=parse_conf, action='append', default=[],
                                help='Extra client option key=value, repeatable')
        run_parser.add_argument('--seed', type=int, default=None,
                                help='Seed of the random offset streams')
        run_parser.add_argument('--profile-log', type=str, default=DEFAULT_PROFILE_LOG,
                                help='JSON-lines method profile written by the client agent')
        run_parser.add_argument('--output-dir', type=str, default=DEFAULT_OUTPUT_DIR,
                                help=f'Directory for result files (default: {DEFAULT_OUTPUT_DIR})')
        run_parser.add_argument('--prometheus-port', type=int, default=PROMETHEUS_PORT,
                                help='Port for the Prometheus exporter (0 = disabled)')

        # Visualize command
        visualize_parser = subparsers.add_parser('visualize', help='Generate plots from benchmark results')
        visualize_parser.add_argument('--parquet-file', type=str, required=True,
                                      help='Path to the Parquet file containing per thread count results')
        visualize_parser.add_argument('--json-file', type=str, default=None,
                                      help='Path to the JSON task result, for latency plots')
        visualize_parser.add_argument('--output-dir', type=str, default=DEFAULT_PLOTS_DIR,
                                      help=f'Output directory for generated plots (default: {DEFAULT_PLOTS_DIR})')

        return parser

    def build_parameters(self, args):
        from common.parameters import ClientIOParameters

        return ClientIOParameters(
            operation=args.operation,
            base_path=args.base,
            task_id=args.task_id,
            client_type=args.client_type,
            file_size=args.file_size,
            buffer_size=args.buffer_size,
            block_size=args.block_size,
            threads=args.threads,
            clients=args.clients,
            warmup=args.warmup,
            duration=args.duration,
            read_same_file=args.read_same_file,
            read_random=args.read_random,
            start_delay_seconds=args.start_delay,
            bench_timeout=args.timeout,
            start_ts=args.start_ts,
            profile_log=args.profile_log,
            conf=dict(args.conf),
            distributed=args.distributed,
            seed=args.seed,
            object_store=args.object_store,
        )

    def run_sweep(self, args):
        """Run the benchmark sweep and save its results."""
        try:
            from algorithms.sweep import ClientIOSweep
            from persistence.parquet import ParquetPersistence

            logger.info("=== Client I/O Benchmark ===")
            parameters = self.build_parameters(args)
            logger.info(f"Parameters: {parameters}")

            exporter = None
            if args.prometheus_port:
                from persistence.prom import SimplePrometheusExporter
                exporter = SimplePrometheusExporter(port=args.prometheus_port)
                exporter.start_server()

            task_result = ClientIOSweep(parameters, exporter=exporter).run()

            saved = ParquetPersistence(args.output_dir).save_task_result(task_result)
            if saved:
                logger.info(f"Results saved to {saved[0]} and {saved[1]}")

            if task_result.total_errors:
                logger.warning(f"Benchmark finished with {task_result.total_errors} errors")
            return 0

        except ValueError as e:
            logger.error(f"Invalid benchmark configuration: {e}")
            return 1
        except Exception as e:
            logger.error(f"Error in benchmark: {e}")
            return 1

    def run_visualize(self, args):
        """Run the visualization phase."""
        try:
            from persistence.parquet import load_thread_counts, load_task_document
            from visualizations import ThroughputPlotter, LatencyPlotter, percentile_frame

            logger.info("=== Visualization Phase ===")

            if not os.path.exists(args.parquet_file):
                logger.error(f"Parquet file not found: {args.parquet_file}")
                return 1

            throughput = ThroughputPlotter(load_thread_counts(args.parquet_file), args.output_dir)
            plots = [
                throughput.create_throughput_vs_threads(),
                throughput.create_per_thread_throughput(),
            ]
            if args.json_file:
                document = load_task_document(args.json_file)
                plots.append(LatencyPlotter(percentile_frame(document), args.output_dir).create_percentile_curves())

            plots = [p for p in plots if p]
            if plots:
                logger.info(f"Successfully created {len(plots)} plots in {args.output_dir}")
                for plot in plots:
                    logger.info(f"  - {plot}")
                return 0
            else:
                logger.error("No plots were created")
                return 1

        except Exception as e:
            logger.error(f"Error in visualization phase: {e}")
            return 1

    def run(self, args=None):
        """Run the CLI with the given arguments."""
        if args is None:
            args = sys.argv[1:]

        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            if parsed_args.command == 'run':
                return self.run_sweep(parsed_args)
            elif parsed_args.command == 'visualize':
                return self.run_visualize(parsed_args)
            else:
                logger.error(f"Unknown command: {parsed_args.command}")
                return 1

        except KeyboardInterrupt:
            logger.info("Operation interrupted by user")
            return 1


def main():
    """Main entry point."""
    cli = ClientIOBenchCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
