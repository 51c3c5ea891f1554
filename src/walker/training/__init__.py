"""Training module: environment boundary, episode loop and metrics.

Usage:
    from walker.config import WalkerConfig
    from walker.training import GymEnvironment, TrainingSession

    env = GymEnvironment.make("Pendulum-v1")
    session = TrainingSession(config, env)
    results = session.run(episodes=10)
"""

from walker.training.environment import Environment, GymEnvironment
from walker.training.reward_history import load_reward_history, save_reward_history
from walker.training.session import EpisodeResult, TrainingSession

__all__ = [
    "Environment",
    "EpisodeResult",
    "GymEnvironment",
    "TrainingSession",
    "load_reward_history",
    "save_reward_history",
]
