"""Tests for command line parsing."""

import argparse
import os
import sys
import tempfile
import shutil

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from cli import ClientIOBenchCLI, parse_thread_list, parse_conf
from common.operations import ClientIOOperation


def test_parse_thread_list():
    assert parse_thread_list("1,2,4") == [1, 2, 4]
    assert parse_thread_list("8") == [8]
    with pytest.raises(argparse.ArgumentTypeError):
        parse_thread_list("1,two")


def test_parse_conf():
    assert parse_conf("dfs.replication=2") == ("dfs.replication", "2")
    assert parse_conf("key=a=b") == ("key", "a=b")
    with pytest.raises(argparse.ArgumentTypeError):
        parse_conf("novalue")


def test_run_arguments_build_parameters():
    cli = ClientIOBenchCLI()
    args = cli.parser.parse_args([
        "run", "--operation", "PosRead", "--client-type", "posix", "--threads", "4,1",
        "--file-size", "16m", "--buffer-size", "1m", "--read-random",
        "--conf", "a=1", "--conf", "b=2", "--seed", "9",
    ])

    parameters = cli.build_parameters(args)
    assert parameters.operation is ClientIOOperation.POS_READ
    assert parameters.client_type == "posix"
    assert parameters.sorted_threads == [1, 4]
    assert parameters.file_size == 16 * 1024 * 1024
    assert parameters.read_random is True
    assert parameters.conf == {"a": "1", "b": "2"}
    assert parameters.seed == 9


def test_invalid_configuration_exits_with_error():
    temp_dir = tempfile.mkdtemp()
    try:
        code = ClientIOBenchCLI().run([
            "run", "--client-type", "posix", "--operation", "ReadByteBuffer",
            "--base", temp_dir, "--output-dir", temp_dir,
        ])
        assert code == 1
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def test_posix_run_and_visualize():
    temp_dir = tempfile.mkdtemp()
    try:
        results_dir = os.path.join(temp_dir, "results")
        cli = ClientIOBenchCLI()
        code = cli.run([
            "run", "--client-type", "posix", "--operation", "Write",
            "--base", os.path.join(temp_dir, "base"), "--file-size", "64k", "--buffer-size", "4k",
            "--threads", "1,2", "--start-delay", "0.2", "--output-dir", results_dir,
        ])
        assert code == 0

        parquet_files = [f for f in os.listdir(results_dir) if f.endswith(".parquet")]
        assert len(parquet_files) == 1

        plots_dir = os.path.join(temp_dir, "plots")
        code = cli.run([
            "visualize", "--parquet-file", os.path.join(results_dir, parquet_files[0]),
            "--output-dir", plots_dir,
        ])
        assert code == 0
        assert "throughput_vs_threads.png" in os.listdir(plots_dir)
    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)


def test_no_command_prints_help():
    assert ClientIOBenchCLI().run([]) == 1
