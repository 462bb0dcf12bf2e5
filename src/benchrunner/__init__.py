"""benchrunner — a micro-benchmarking harness for Python callables."""

__version__ = "0.1.0"
