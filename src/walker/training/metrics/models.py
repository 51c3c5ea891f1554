"""Pydantic models for training metrics.

These models capture what the training session reports after every
episode and every agent update, plus summary statistics over a window of
recent episodes.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class EpisodeMetrics(BaseModel):
    """Metrics captured at the end of each episode.

    Attributes:
        episode_id: Episode number within the session
        total_reward: Sum of rewards received during the episode
        length: Number of timesteps in the episode
        mean_reward: Average reward per timestep
        terminated: Whether the environment ended the episode (as opposed
            to the timestep limit or truncation)
        timestamp: When the episode completed
    """

    model_config = ConfigDict(frozen=True)

    episode_id: int = Field(ge=0, description="Episode number")
    total_reward: float = Field(description="Cumulative episode reward")
    length: int = Field(ge=0, description="Episode length in timesteps")
    mean_reward: float = Field(description="Average reward per timestep")
    terminated: bool = Field(default=False, description="Ended by the environment")
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="Episode completion timestamp",
    )


class TrainingStepMetrics(BaseModel):
    """Metrics captured after each agent train call.

    Attributes:
        step: Train call number
        value_loss: Mean squared critic error over all batches
        clip_fraction: Fraction of probability ratios outside the clip range
        approx_kl: Approximate KL divergence between old and new policy
        num_batches: Gradient steps taken
        log_standard_deviation: Log std after decay
        standard_deviation: Std after decay
        total_timesteps: Timesteps collected so far in the session
    """

    model_config = ConfigDict(frozen=True)

    step: int = Field(ge=0, description="Train call number")
    value_loss: float = Field(ge=0, description="Mean squared critic error")
    clip_fraction: float = Field(ge=0, le=1, description="Fraction of ratios clipped")
    approx_kl: float = Field(description="Approximate KL divergence")
    num_batches: int = Field(ge=0, description="Gradient steps taken")
    log_standard_deviation: float = Field(description="Log std after decay")
    standard_deviation: float = Field(gt=0, description="Std after decay")
    total_timesteps: int = Field(ge=0, description="Total timesteps collected")


class AggregateMetrics(BaseModel):
    """Statistics over a rolling window of episodes.

    Attributes:
        mean_reward: Mean episode reward over the window
        std_reward: Population standard deviation of episode rewards
        min_reward: Lowest episode reward
        max_reward: Highest episode reward
        mean_length: Mean episode length
        mean_step_reward: Mean of the per-episode average rewards
        termination_rate: Fraction of episodes ended by the environment
        episodes_count: Number of episodes in the window
        timestamp: When the aggregate was computed
    """

    model_config = ConfigDict(frozen=True)

    mean_reward: float = Field(description="Mean episode reward")
    std_reward: float = Field(ge=0, description="Standard deviation of rewards")
    min_reward: float = Field(description="Lowest episode reward")
    max_reward: float = Field(description="Highest episode reward")
    mean_length: float = Field(ge=0, description="Mean episode length")
    mean_step_reward: float = Field(description="Mean per-timestep reward")
    termination_rate: float = Field(ge=0, le=1, description="Fraction terminated")
    episodes_count: int = Field(ge=0, description="Number of episodes in aggregate")
    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="Aggregate computation timestamp",
    )
