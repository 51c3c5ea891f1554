"""Configuration module for walker training hyperparameters.

This module provides Pydantic-based configuration classes for the PPO agent
and the training session, with support for YAML file loading and validation.
"""

from walker.config.ppo_config import (
    AdamConfig,
    AgentConfig,
    LoggingConfig,
    NetworkConfig,
    TrainingConfig,
    WalkerConfig,
)

__all__ = [
    "WalkerConfig",
    "AdamConfig",
    "AgentConfig",
    "NetworkConfig",
    "TrainingConfig",
    "LoggingConfig",
]
