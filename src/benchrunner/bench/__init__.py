"""Benchmarking core for benchrunner.

Runs warmup and measurement phases for registered callables, keeps
running statistics per target, and compares competing implementations
over a stream of parameter scenarios.
"""
