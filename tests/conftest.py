"""Shared fixtures for walker tests.

This module provides:
- A seeded random generator for reproducible weights and sampling
- Small configurations that train in milliseconds
- A deterministic environment implementing the session's Environment protocol
- Custom markers for test categorization
"""

from pathlib import Path
from typing import Any

import numpy as np
import pytest

from walker.config import (
    AgentConfig,
    LoggingConfig,
    NetworkConfig,
    TrainingConfig,
    WalkerConfig,
)

SMALL_STATE_SIZE = 3
SMALL_ACTION_SIZE = 2


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers", "integration: marks tests exercising several components together"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


class MockEnvironment:
    """Deterministic environment for session tests.

    The state is a fixed function of the step counter, the reward favours
    actions close to zero, and the episode terminates after episode_length
    steps.
    """

    def __init__(
        self,
        state_size: int = SMALL_STATE_SIZE,
        action_size: int = SMALL_ACTION_SIZE,
        episode_length: int = 10,
    ):
        self.state_size = state_size
        self.action_size = action_size
        self.episode_length = episode_length
        self.steps = 0
        self.reset_count = 0
        self.actions: list[np.ndarray] = []

    def _state(self) -> np.ndarray:
        return np.sin(np.arange(self.state_size) + 0.1 * self.steps)

    def reset(self) -> tuple[np.ndarray, dict[str, Any]]:
        self.steps = 0
        self.reset_count += 1
        return self._state(), {}

    def step(
        self, action: np.ndarray
    ) -> tuple[np.ndarray, float, bool, bool, dict[str, Any]]:
        assert action.shape == (self.action_size,)
        self.actions.append(np.array(action))
        self.steps += 1
        reward = 1.0 - float(np.sum(np.square(action)))
        terminated = self.steps >= self.episode_length
        return self._state(), reward, terminated, False, {}


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(42)


@pytest.fixture
def small_config(tmp_path: Path) -> WalkerConfig:
    """Configuration with tiny networks and batches, writing under tmp_path."""
    return WalkerConfig(
        agent=AgentConfig(epochs=2, batch_size=4, gamma=0.9),
        network=NetworkConfig(
            state_size=SMALL_STATE_SIZE,
            action_size=SMALL_ACTION_SIZE,
            critic_architecture="Input |8| (LeakyReLU) |1| Output",
            actor_architecture="Input |8| (LeakyReLU) |2| (TanH) Output",
        ),
        training=TrainingConfig(
            episodes=2,
            max_timesteps=12,
            weights_dir=str(tmp_path / "weights"),
            data_dir=str(tmp_path / "saved"),
            seed=42,
        ),
        logging=LoggingConfig(log_dir=str(tmp_path / "logs")),
    )


@pytest.fixture
def mock_env() -> MockEnvironment:
    """Deterministic environment matching small_config."""
    return MockEnvironment()


@pytest.fixture
def make_mock_env() -> type[MockEnvironment]:
    """The MockEnvironment class, for tests needing other sizes or lengths."""
    return MockEnvironment
