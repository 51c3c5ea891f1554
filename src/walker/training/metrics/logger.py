"""MetricsLogger: fans training metrics out to writers and keeps rolling stats."""

import logging
from pathlib import Path
from typing import Literal

from walker.training.metrics.aggregators import RollingAggregator
from walker.training.metrics.models import (
    AggregateMetrics,
    EpisodeMetrics,
    TrainingStepMetrics,
)
from walker.training.metrics.writers.base import MetricsWriter
from walker.training.metrics.writers.file_writer import FileWriter
from walker.training.metrics.writers.log_writer import LogWriter

logger = logging.getLogger(__name__)


class MetricsLogger:
    """Main logger for training metrics.

    Example:
        with MetricsLogger(log_dir="logs/run_001") as metrics:
            metrics.log_episode(EpisodeMetrics(
                episode_id=1, total_reward=12.5, length=500, mean_reward=0.025,
            ))
            summary = metrics.get_summary()

    Attributes:
        log_dir: Directory for metrics files
        writers: Active writers
        aggregator: Rolling statistics over recent episodes
        episode_count: Episodes logged
        step_count: Training steps logged
    """

    def __init__(
        self,
        log_dir: str | Path,
        writers: list[MetricsWriter] | None = None,
        enable_file: bool = True,
        enable_log: bool = True,
        file_format: Literal["json", "csv"] = "json",
        window_size: int = 100,
    ) -> None:
        """Initialize the metrics logger.

        Args:
            log_dir: Directory for metrics files
            writers: Custom list of writers (overrides the enable_* flags)
            enable_file: Write metrics to JSONL/CSV files under log_dir
            enable_log: Forward metrics to the logging system at DEBUG
            file_format: File format for the FileWriter ("json" or "csv")
            window_size: Rolling window size for aggregates
        """
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        if writers is not None:
            self.writers = writers
        else:
            self.writers = []
            if enable_file:
                self.writers.append(FileWriter(log_dir=self.log_dir, format=file_format))
            if enable_log:
                self.writers.append(LogWriter())

        self.aggregator = RollingAggregator(window_size=window_size)
        self.episode_count = 0
        self.step_count = 0
        self._closed = False

        logger.info(
            "MetricsLogger initialized: %s (writers=%d)",
            self.log_dir,
            len(self.writers),
        )

    def log_episode(self, episode_data: EpisodeMetrics) -> None:
        """Log episode metrics and add them to the rolling window.

        Args:
            episode_data: Metrics of the completed episode
        """
        if self._closed:
            return

        self.episode_count += 1
        self.aggregator.add_episode(episode_data)
        self.log_scalars(
            "episode",
            {
                "reward": episode_data.total_reward,
                "length": float(episode_data.length),
                "mean_reward": episode_data.mean_reward,
                "terminated": 1.0 if episode_data.terminated else 0.0,
            },
            episode_data.episode_id,
        )

    def log_training_step(self, step_data: TrainingStepMetrics) -> None:
        """Log the metrics of one agent train call.

        Args:
            step_data: Metrics returned by the train call
        """
        if self._closed:
            return

        self.step_count += 1
        self.log_scalars(
            "train",
            {
                "value_loss": step_data.value_loss,
                "clip_fraction": step_data.clip_fraction,
                "approx_kl": step_data.approx_kl,
                "num_batches": float(step_data.num_batches),
                "standard_deviation": step_data.standard_deviation,
                "total_timesteps": float(step_data.total_timesteps),
            },
            step_data.step,
        )

    def log_scalar(self, tag: str, value: float, step: int) -> None:
        """Log a single scalar to all writers.

        Args:
            tag: Metric tag (e.g. "custom/my_metric")
            value: Scalar value
            step: Episode or train call number
        """
        if self._closed:
            return

        for writer in self.writers:
            writer.write_scalar(tag, value, step)

    def log_scalars(
        self, main_tag: str, tag_scalar_dict: dict[str, float], step: int
    ) -> None:
        """Log a group of scalars to all writers.

        Args:
            main_tag: Group tag (e.g. "episode")
            tag_scalar_dict: Mapping of sub-tag to value
            step: Episode or train call number
        """
        if self._closed:
            return

        for writer in self.writers:
            writer.write_scalars(main_tag, tag_scalar_dict, step)

    def get_summary(self) -> dict[str, float]:
        """Totals plus rolling statistics when any episode has been logged."""
        summary: dict[str, float] = {
            "total_episodes": float(self.episode_count),
            "total_training_steps": float(self.step_count),
        }

        aggregate = self.aggregator.get_aggregate()
        if aggregate is not None:
            summary.update(
                {
                    "mean_reward": aggregate.mean_reward,
                    "std_reward": aggregate.std_reward,
                    "min_reward": aggregate.min_reward,
                    "max_reward": aggregate.max_reward,
                    "mean_length": aggregate.mean_length,
                    "mean_step_reward": aggregate.mean_step_reward,
                    "termination_rate": aggregate.termination_rate,
                    "window_episodes": float(aggregate.episodes_count),
                }
            )
        return summary

    def get_aggregate_metrics(self) -> AggregateMetrics | None:
        """Rolling statistics, or None before the first episode."""
        return self.aggregator.get_aggregate()

    def flush(self) -> None:
        """Flush all writers."""
        if self._closed:
            return

        for writer in self.writers:
            writer.flush()

    def close(self) -> None:
        """Close all writers. Later log calls are ignored."""
        if self._closed:
            return

        for writer in self.writers:
            writer.close()
        self._closed = True
        logger.info("MetricsLogger closed: %s", self.log_dir)

    def __enter__(self) -> "MetricsLogger":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        self.close()
