"""
Configuration constants for the client I/O benchmark.

This module contains all configuration parameters including:
- Storage credentials and endpoints for the three client types
- Default run parameters (sizes, durations, thread counts)
- Barrier and timeout settings for trial coordination
- Summary statistics dimensions and size/time conversion factors
"""

import os
from typing import List

# =============================================================================
# OBJECT STORE (NATIVE CLIENT) CONFIGURATION
# =============================================================================

BUCKET_NAME: str = os.getenv("BUCKET_NAME", "")

# AWS S3 credentials and configuration
S3_ENDPOINT: str = os.getenv("S3_ENDPOINT", "")
AWS_ACCESS_KEY_ID: str = os.getenv("AWS_ACCESS_KEY_ID", "")
AWS_SECRET_ACCESS_KEY: str = os.getenv("AWS_SECRET_ACCESS_KEY", "")
AWS_REGION: str = os.getenv("AWS_REGION", "eu-north-1")

# Cloudflare R2 credentials and configuration
R2_ENDPOINT: str = os.getenv("R2_ENDPOINT", "")
R2_ACCESS_KEY_ID: str = os.getenv("R2_ACCESS_KEY_ID", "")
R2_SECRET_ACCESS_KEY: str = os.getenv("R2_SECRET_ACCESS_KEY", "")

# Smallest part S3 accepts in a multipart upload (except the last one)
MIN_MULTIPART_PART_BYTES: int = 5 * 1024 * 1024

REQUEST_TIMEOUT_SECONDS: int = 120  # Per ranged GET / part upload

# =============================================================================
# HDFS-COMPATIBLE CLIENT CONFIGURATION
# =============================================================================

HDFS_HOST: str = os.getenv("HDFS_HOST", "default")
HDFS_PORT: int = int(os.getenv("HDFS_PORT", "0"))
HDFS_USER: str = os.getenv("HDFS_USER", "")

# =============================================================================
# RUN PARAMETER DEFAULTS
# =============================================================================

DEFAULT_BASE_PATH: str = "/tmp/stress-client-io-base"
DEFAULT_TASK_ID: str = "local-task-0"
DEFAULT_CLIENT_TYPE: str = "hdfs"
DEFAULT_OPERATION: str = "ReadArray"

DEFAULT_FILE_SIZE: str = "1g"
DEFAULT_BUFFER_SIZE: str = "64k"
DEFAULT_BLOCK_SIZE: str = "64m"

DEFAULT_THREADS: List[int] = [1]
DEFAULT_CLIENTS: int = 1

DEFAULT_WARMUP: str = "30s"
DEFAULT_DURATION: str = "30s"

# =============================================================================
# BARRIER AND TIMEOUTS
# =============================================================================

START_DELAY_SECONDS: float = 10.0  # Lead time before the trial barrier
DEFAULT_BENCH_TIMEOUT: str = "20m"  # Upper bound on one trial
TERMINATION_GRACE_SECONDS: float = 30.0  # Wait for cancelled workers to exit
UNDEFINED_START_TS: float = -1.0

# =============================================================================
# SUMMARY STATISTICS
# =============================================================================

MAX_TIME_COUNT: int = 20  # Largest latencies kept per method
TIME_99_COUNT: int = 6  # Tail percentiles 100 - 10^-k for k in [0, 6)
MISSING_LATENCY_SENTINEL: float = -1.0
TTFB_PROFILE_FILTER: str = "isttfb"

# =============================================================================
# FILE SIZE AND TIME CONSTANTS
# =============================================================================

BYTES_PER_KB: int = 1024
BYTES_PER_MB: int = 1024 * 1024
BYTES_PER_GB: int = 1024 * 1024 * 1024
BYTES_PER_TB: int = 1024 * 1024 * 1024 * 1024
NANOS_PER_MS: int = 1_000_000
MS_PER_SECOND: int = 1000
SECONDS_PER_MINUTE: int = 60
SECONDS_PER_HOUR: int = 3600
SECONDS_PER_DAY: int = 86400

# =============================================================================
# CLI DEFAULTS
# =============================================================================

DEFAULT_OUTPUT_DIR: str = "results"
DEFAULT_PLOTS_DIR: str = "plots"
DEFAULT_PROFILE_LOG: str = ""  # Empty disables profile statistics
PROMETHEUS_PORT: int = int(os.getenv("PROMETHEUS_PORT", "0"))  # 0 = disabled
