"""Metrics writers for persisting training metrics.

- FileWriter: JSONL/CSV file logging
- LogWriter: forwards metrics to the logging system
"""

from walker.training.metrics.writers.base import MetricsWriter
from walker.training.metrics.writers.file_writer import FileWriter
from walker.training.metrics.writers.log_writer import LogWriter

__all__ = [
    "MetricsWriter",
    "FileWriter",
    "LogWriter",
]
