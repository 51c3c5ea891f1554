"""Training metrics logging.

Episode and training step metrics are validated with pydantic, summarised
over a rolling window, and written to JSONL/CSV files and the log.

Usage:
    from walker.training.metrics import EpisodeMetrics, MetricsLogger

    with MetricsLogger(log_dir="logs/run_001") as metrics:
        metrics.log_episode(EpisodeMetrics(
            episode_id=1,
            total_reward=12.5,
            length=500,
            mean_reward=0.025,
        ))
        print(metrics.get_summary()["mean_reward"])
"""

from walker.training.metrics.aggregators import RollingAggregator
from walker.training.metrics.logger import MetricsLogger
from walker.training.metrics.models import (
    AggregateMetrics,
    EpisodeMetrics,
    TrainingStepMetrics,
)
from walker.training.metrics.writers import FileWriter, LogWriter, MetricsWriter

__all__ = [
    # Main logger
    "MetricsLogger",
    # Data models
    "EpisodeMetrics",
    "TrainingStepMetrics",
    "AggregateMetrics",
    # Writers
    "MetricsWriter",
    "FileWriter",
    "LogWriter",
    # Aggregation
    "RollingAggregator",
]
