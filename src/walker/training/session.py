"""Episode loop that drives a PPOAgent against an environment.

This module provides the TrainingSession class, which collects one
trajectory per episode, trains the agent on it, and handles weights,
reward history and configuration reloads between episodes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import numpy as np
from pydantic import ValidationError

from walker.agent.matrix import Matrix
from walker.agent.ppo_agent import PPOAgent
from walker.agent.trajectory import Trajectory
from walker.config import WalkerConfig
from walker.exceptions import AgentBusyError
from walker.training.environment import Environment
from walker.training.metrics import EpisodeMetrics, MetricsLogger, TrainingStepMetrics
from walker.training.reward_history import save_reward_history

logger = logging.getLogger(__name__)

REWARD_HISTORY_FILE_NAME = "rewards.txt"


@dataclass
class EpisodeResult:
    """Outcome of one episode.

    Attributes:
        episode: Episode number, starting at 1
        total_reward: Sum of rewards
        mean_reward: Average reward per timestep
        length: Number of timesteps collected
        terminated: Whether the environment ended the episode
        train_metrics: Metrics returned by PPOAgent.train
    """

    episode: int
    total_reward: float
    mean_reward: float
    length: int
    terminated: bool
    train_metrics: dict[str, float] = field(default_factory=dict)


class TrainingSession:
    """Runs training episodes for one agent.

    Example:
        env = GymEnvironment.make("Pendulum-v1")
        session = TrainingSession(config, env)
        results = session.run(episodes=10)
        session.save_data()

    Attributes:
        config: Active configuration
        environment: Environment being trained against
        agent: Agent being trained
        metrics_logger: Optional metrics sink
        episode_count: Episodes completed
        total_timesteps: Timesteps collected across all episodes
        reward_history: Average reward of each episode, when collect_data is set
    """

    def __init__(
        self,
        config: WalkerConfig,
        environment: Environment,
        agent: PPOAgent | None = None,
        metrics_logger: MetricsLogger | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            config: Configuration for the agent and the episode loop
            environment: Environment to train against
            agent: Existing agent (created from config if None)
            metrics_logger: Metrics sink (metrics are only logged if given)

        Raises:
            ValueError: If the environment's state or action size does not
                match the configuration.
        """
        network = config.network
        if (environment.state_size, environment.action_size) != (
            network.state_size,
            network.action_size,
        ):
            raise ValueError(
                f"Environment sizes (state={environment.state_size}, "
                f"action={environment.action_size}) do not match configuration "
                f"(state={network.state_size}, action={network.action_size})"
            )

        self.config = config
        self.environment = environment
        self.agent = (
            agent if agent is not None
            else PPOAgent(network.state_size, network.action_size, config)
        )
        self.metrics_logger = metrics_logger

        self.episode_count = 0
        self.total_timesteps = 0
        self.reward_history: list[float] = []

        self._in_episode = False
        self._callbacks: list[Callable[[EpisodeResult], None]] = []

    @property
    def critic_weights_path(self) -> Path:
        training = self.config.training
        return Path(training.weights_dir) / f"{training.critic_weight_file_name}.txt"

    @property
    def actor_weights_path(self) -> Path:
        training = self.config.training
        return Path(training.weights_dir) / f"{training.actor_weight_file_name}.txt"

    def add_callback(self, callback: Callable[[EpisodeResult], None]) -> None:
        """Register a function called with each EpisodeResult.

        Callbacks run between episodes, so they may call reload_config.
        """
        self._callbacks.append(callback)

    def run_episode(self) -> EpisodeResult:
        """Collect one trajectory, train on it and report the result."""
        self._in_episode = True
        try:
            trajectory, terminated = self._collect_trajectory()
            train_metrics = self.agent.train(trajectory)
        finally:
            self._in_episode = False

        self.episode_count += 1
        self.total_timesteps += len(trajectory)

        result = EpisodeResult(
            episode=self.episode_count,
            total_reward=trajectory.total_reward,
            mean_reward=trajectory.mean_reward,
            length=len(trajectory),
            terminated=terminated,
            train_metrics=train_metrics,
        )
        if self.config.training.collect_data:
            self.reward_history.append(result.mean_reward)

        self._log_result(result)
        for callback in self._callbacks:
            callback(result)
        return result

    def _collect_trajectory(self) -> tuple[Trajectory, bool]:
        state, _info = self.environment.reset()
        trajectory = Trajectory()
        terminated = False

        for _ in range(self.config.training.max_timesteps):
            state_matrix = Matrix.from_values(state)
            sample = self.agent.sample_actions(state_matrix)
            action = np.clip(sample.action.to_numpy().ravel(), -1.0, 1.0)

            state, reward, terminated, truncated, _info = self.environment.step(action)
            trajectory.record(
                state_matrix,
                sample.action,
                sample.mean,
                sample.std,
                sample.log_probability,
                reward,
            )
            if terminated or truncated:
                break

        return trajectory, bool(terminated)

    def _log_result(self, result: EpisodeResult) -> None:
        if result.episode % self.config.logging.log_interval == 0:
            logger.info(
                "Episode %d | Steps %d | Reward %.4f | Mean reward %.4f | Std %.4f",
                result.episode,
                result.length,
                result.total_reward,
                result.mean_reward,
                result.train_metrics.get("standard_deviation", float("nan")),
            )

        if self.metrics_logger is None:
            return

        self.metrics_logger.log_episode(
            EpisodeMetrics(
                episode_id=result.episode,
                total_reward=result.total_reward,
                length=result.length,
                mean_reward=result.mean_reward,
                terminated=result.terminated,
            )
        )
        try:
            step_metrics = TrainingStepMetrics(
                step=result.episode,
                value_loss=result.train_metrics["value_loss"],
                clip_fraction=result.train_metrics["clip_fraction"],
                approx_kl=result.train_metrics["approx_kl"],
                num_batches=int(result.train_metrics["num_batches"]),
                log_standard_deviation=result.train_metrics["log_standard_deviation"],
                standard_deviation=result.train_metrics["standard_deviation"],
                total_timesteps=self.total_timesteps,
            )
        except ValidationError as e:
            # NaN losses or an underflowed std fail validation.
            logger.warning(
                "Skipping training metrics for episode %d: %d invalid value(s)",
                result.episode,
                e.error_count(),
            )
            return
        self.metrics_logger.log_training_step(step_metrics)

    def run(self, episodes: int | None = None) -> list[EpisodeResult]:
        """Run several episodes.

        Weights are saved after every episode when save_weights is set.

        Args:
            episodes: Number of episodes (config.training.episodes if None)

        Returns:
            One EpisodeResult per episode
        """
        count = episodes if episodes is not None else self.config.training.episodes
        logger.info("Starting training: %d episodes", count)

        results = []
        for _ in range(count):
            results.append(self.run_episode())
            if self.config.training.save_weights:
                self.save_weights()

        if self.metrics_logger is not None:
            self.metrics_logger.flush()
        logger.info("Training complete: %d episodes", count)
        return results

    def reload_config(self, config: WalkerConfig) -> None:
        """Replace the configuration between episodes.

        Raises:
            AgentBusyError: If called while an episode is running.
            InvalidArchitectureError: If the new configuration changes an
                architecture or a state or action size. The previous
                configuration stays active.
        """
        if self._in_episode:
            raise AgentBusyError("Configuration can only be reloaded between episodes")

        self.agent.apply_config(config)
        self.config = config
        logger.info("Configuration reloaded")

    def save_weights(self) -> None:
        self.agent.save(self.critic_weights_path, self.actor_weights_path)

    def load_weights(self) -> None:
        """Load weights from the configured weight files.

        Raises:
            FileNotFoundError: If either weight file doesn't exist
        """
        self.agent.load(self.critic_weights_path, self.actor_weights_path)

    def save_data(self, path: str | Path | None = None) -> Path:
        """Write the average reward history.

        Args:
            path: Destination (data_dir/rewards.txt if None)

        Returns:
            Path to the written file
        """
        if path is None:
            path = Path(self.config.training.data_dir) / REWARD_HISTORY_FILE_NAME
        written = save_reward_history(path, self.reward_history)
        logger.info("Saved %d rewards to %s", len(self.reward_history), written)
        return written
