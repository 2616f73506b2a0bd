"""
Common utilities for the client I/O benchmark.
"""
