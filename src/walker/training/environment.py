"""Simulation boundary for the training session.

The session only needs a gymnasium-style ``reset``/``step`` pair with fixed
size float vectors. GymEnvironment adapts any gymnasium environment with
Box observation and action spaces to that interface.
"""

from __future__ import annotations

from typing import Any, Protocol

import gymnasium as gym
import numpy as np
from gymnasium import spaces


class Environment(Protocol):
    """Protocol for the environment a TrainingSession drives.

    Actions passed to step() are already clipped to [-1, 1].
    """

    state_size: int
    action_size: int

    def reset(self) -> tuple[np.ndarray, dict[str, Any]]:
        """Start a new episode.

        Returns:
            Tuple of (state, info_dict) where state has shape (state_size,)
        """
        ...

    def step(
        self, action: np.ndarray
    ) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        """Apply one action.

        Args:
            action: Array of shape (action_size,) with values in [-1, 1]

        Returns:
            Tuple of (state, reward, terminated, truncated, info)
        """
        ...


class GymEnvironment:
    """Adapter from a gymnasium Box environment to Environment.

    Actions in [-1, 1] are rescaled linearly to the action space bounds.

    Attributes:
        env: Wrapped gymnasium environment
        state_size: Flattened observation width
        action_size: Flattened action width
    """

    def __init__(self, env: gym.Env, seed: int | None = None):
        """Wrap a gymnasium environment.

        Args:
            env: Environment with Box observation and action spaces
            seed: Seed passed to the first reset

        Raises:
            ValueError: If either space is not a bounded Box.
        """
        if not isinstance(env.observation_space, spaces.Box):
            raise ValueError(
                f"Observation space must be Box, got {type(env.observation_space).__name__}"
            )
        if not isinstance(env.action_space, spaces.Box):
            raise ValueError(
                f"Action space must be Box, got {type(env.action_space).__name__}"
            )
        if not env.action_space.is_bounded():
            raise ValueError("Action space must be bounded")

        self.env = env
        self.state_size = int(np.prod(env.observation_space.shape))
        self.action_size = int(np.prod(env.action_space.shape))
        self._low = env.action_space.low.astype(np.float64).ravel()
        self._high = env.action_space.high.astype(np.float64).ravel()
        self._seed = seed

    @classmethod
    def make(cls, env_id: str, seed: int | None = None, **kwargs: Any) -> GymEnvironment:
        """Create and wrap a registered gymnasium environment."""
        return cls(gym.make(env_id, **kwargs), seed=seed)

    def scale_action(self, action: np.ndarray) -> np.ndarray:
        """Map an action from [-1, 1] to the action space bounds."""
        action = np.clip(np.asarray(action, dtype=np.float64).ravel(), -1.0, 1.0)
        scaled = self._low + (action + 1.0) * 0.5 * (self._high - self._low)
        return scaled.reshape(self.env.action_space.shape).astype(
            self.env.action_space.dtype
        )

    def reset(self) -> tuple[np.ndarray, dict[str, Any]]:
        observation, info = self.env.reset(seed=self._seed)
        # Only the first episode is seeded.
        self._seed = None
        return np.asarray(observation, dtype=np.float64).ravel(), info

    def step(
        self, action: np.ndarray
    ) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        observation, reward, terminated, truncated, info = self.env.step(
            self.scale_action(action)
        )
        return (
            np.asarray(observation, dtype=np.float64).ravel(),
            float(reward),
            bool(terminated),
            bool(truncated),
            info,
        )

    def close(self) -> None:
        self.env.close()
