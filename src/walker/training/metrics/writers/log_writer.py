"""Metrics writer that forwards scalars to the standard logging system."""

import logging

from walker.training.metrics.writers.base import MetricsWriter

logger = logging.getLogger(__name__)


class LogWriter(MetricsWriter):
    """Emit each scalar as a log record.

    Attributes:
        level: Log level used for the records
    """

    def __init__(self, level: int = logging.DEBUG) -> None:
        self.level = level

    def write_scalar(self, tag: str, value: float, step: int) -> None:
        logger.log(self.level, "%s = %.6g (step %d)", tag, value, step)

    def write_scalars(
        self, main_tag: str, tag_scalar_dict: dict[str, float], step: int
    ) -> None:
        values = " | ".join(f"{k} {v:.6g}" for k, v in tag_scalar_dict.items())
        logger.log(self.level, "%s %d | %s", main_tag, step, values)

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass
