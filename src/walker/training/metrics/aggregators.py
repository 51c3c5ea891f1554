"""Rolling statistics over recent episodes."""

import math
from collections import deque
from datetime import datetime

from walker.training.metrics.models import AggregateMetrics, EpisodeMetrics


class RollingAggregator:
    """Keeps the most recent episodes and summarises them on demand.

    Attributes:
        window_size: Maximum number of episodes kept
    """

    def __init__(self, window_size: int = 100) -> None:
        if window_size < 1:
            raise ValueError("window_size must be at least 1")

        self.window_size = window_size
        self._episodes: deque[EpisodeMetrics] = deque(maxlen=window_size)

    def add_episode(self, episode: EpisodeMetrics) -> None:
        self._episodes.append(episode)

    def get_aggregate(self) -> AggregateMetrics | None:
        """Compute statistics over the current window.

        Returns:
            AggregateMetrics if there are episodes, None otherwise
        """
        if not self._episodes:
            return None

        count = len(self._episodes)
        rewards = [e.total_reward for e in self._episodes]
        mean_reward = sum(rewards) / count
        variance = sum((r - mean_reward) ** 2 for r in rewards) / count

        return AggregateMetrics(
            mean_reward=mean_reward,
            std_reward=math.sqrt(variance),
            min_reward=min(rewards),
            max_reward=max(rewards),
            mean_length=sum(e.length for e in self._episodes) / count,
            mean_step_reward=sum(e.mean_reward for e in self._episodes) / count,
            termination_rate=sum(1 for e in self._episodes if e.terminated) / count,
            episodes_count=count,
            timestamp=datetime.now(),
        )

    def clear(self) -> None:
        self._episodes.clear()

    def __len__(self) -> int:
        return len(self._episodes)
