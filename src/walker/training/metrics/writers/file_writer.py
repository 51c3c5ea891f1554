"""File-based metrics writer.

Metrics are appended to ``metrics.jsonl`` (one JSON object per line) or
``metrics.csv`` under the writer's directory, rotating to
``metrics_<n>.<ext>`` once a file grows past the size limit.
"""

import csv
import json
import logging
import threading
from datetime import datetime
from pathlib import Path
from typing import Literal

from walker.training.metrics.writers.base import MetricsWriter

logger = logging.getLogger(__name__)

CSV_COLUMNS = ["tag", "value", "step", "timestamp"]


class FileWriter(MetricsWriter):
    """Buffered JSONL or CSV metrics writer.

    Attributes:
        log_dir: Directory for output files
        format: Output format ("json" or "csv")
        max_file_size_mb: Size at which the next flush starts a new file
        buffer_size: Entries held in memory before an automatic flush
    """

    def __init__(
        self,
        log_dir: str | Path,
        format: Literal["json", "csv"] = "json",
        max_file_size_mb: float = 100.0,
        buffer_size: int = 100,
    ) -> None:
        if format not in ("json", "csv"):
            raise ValueError(f"Unsupported metrics format: {format!r}")

        self.log_dir = Path(log_dir)
        self.format = format
        self.max_file_size_mb = max_file_size_mb
        self.buffer_size = buffer_size

        self._buffer: list[dict] = []
        self._lock = threading.Lock()
        self._file_index = 0
        self._closed = False

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.path = self._path_for(self._file_index)
        if self.format == "csv" and not self.path.exists():
            self._start_csv(self.path)

        logger.info("FileWriter initialized: %s (format=%s)", self.path, self.format)

    def _path_for(self, index: int) -> Path:
        extension = "jsonl" if self.format == "json" else "csv"
        stem = "metrics" if index == 0 else f"metrics_{index}"
        return self.log_dir / f"{stem}.{extension}"

    @staticmethod
    def _start_csv(path: Path) -> None:
        with open(path, "w", newline="") as f:
            csv.writer(f).writerow(CSV_COLUMNS)

    def _rotate_if_needed(self) -> None:
        if not self.path.exists():
            return
        if self.path.stat().st_size / (1024 * 1024) < self.max_file_size_mb:
            return

        self._file_index += 1
        self.path = self._path_for(self._file_index)
        if self.format == "csv":
            self._start_csv(self.path)
        logger.info("Rotated metrics file: %s", self.path)

    def write_scalar(self, tag: str, value: float, step: int) -> None:
        if self._closed:
            return

        entry = {
            "tag": tag,
            "value": float(value),
            "step": step,
            "timestamp": datetime.now().isoformat(),
        }
        with self._lock:
            self._buffer.append(entry)
            if len(self._buffer) >= self.buffer_size:
                self._write_buffer()

    def _write_buffer(self) -> None:
        """Append buffered entries to the current file (caller holds the lock)."""
        if not self._buffer:
            return

        self._rotate_if_needed()
        with open(self.path, "a", newline="") as f:
            if self.format == "json":
                f.writelines(json.dumps(entry) + "\n" for entry in self._buffer)
            else:
                writer = csv.writer(f)
                writer.writerows([entry[c] for c in CSV_COLUMNS] for entry in self._buffer)
        self._buffer.clear()

    def flush(self) -> None:
        if self._closed:
            return

        with self._lock:
            self._write_buffer()

    def close(self) -> None:
        if self._closed:
            return

        self.flush()
        self._closed = True
        logger.info("FileWriter closed: %s", self.path)
