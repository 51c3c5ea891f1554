"""PPO hyperparameter configuration with Pydantic validation.

This module provides type-safe configuration classes for the walker agent
and its training session, with support for YAML file loading. Defaults are
the hyperparameters the walker was tuned with.
"""

import re
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

FILE_NAME_PATTERN = re.compile(r"^[\w\-. ]+$")


class AdamConfig(BaseModel):
    """Adam optimiser hyperparameters shared by the critic and actor."""

    model_config = ConfigDict(frozen=True)

    alpha: float = Field(
        0.001,
        gt=0,
        lt=10,
        description="Learning rate (step size)",
    )
    beta1: float = Field(
        0.9,
        gt=0,
        lt=1.0,
        description="Exponential decay rate for the first moment estimates",
    )
    beta2: float = Field(
        0.999,
        gt=0,
        lt=1.0,
        description="Exponential decay rate for the second moment estimates",
    )
    epsilon: float = Field(
        1e-8,
        gt=0,
        lt=1.0,
        description="Small constant added to the denominator for stability",
    )


class AgentConfig(BaseModel):
    """Core PPO algorithm hyperparameters.

    These parameters control advantage estimation, clipping, batching and
    exploration decay.
    """

    model_config = ConfigDict(frozen=True)

    epochs: int = Field(
        5,
        ge=1,
        lt=50,
        description="Number of passes over fresh batches per train call",
    )
    batch_size: int = Field(
        64,
        ge=1,
        lt=1000,
        description="Timesteps per batch",
    )
    use_gae: bool = Field(
        False,
        description="Use generalized advantage estimation instead of Monte Carlo",
    )
    normalize_advantages: bool = Field(
        False,
        description="Standardize advantages over the trajectory",
    )
    gamma: float = Field(
        0.9,
        ge=0,
        le=1.0,
        description="Discount factor for rewards",
    )
    gae_lambda: float = Field(
        0.95,
        ge=0,
        le=1.0,
        description="GAE smoothing factor",
    )
    clip_epsilon: float = Field(
        0.3,
        gt=0,
        le=1.0,
        description="PPO clipping parameter",
    )
    log_standard_deviation: float = Field(
        -1.0,
        gt=-5,
        lt=5,
        description="Initial log standard deviation of the action distribution",
    )
    log_standard_deviation_decay: float = Field(
        0.001,
        ge=0,
        description="Amount subtracted from the log standard deviation after each train call",
    )


class NetworkConfig(BaseModel):
    """Critic and actor architectures.

    Architectures are descriptor strings such as
    "Input |64| (LeakyReLU) |1| Output". The critic must end in a dense
    layer of width 1 and the actor in a dense layer of width action_size.
    """

    model_config = ConfigDict(frozen=True)

    state_size: int = Field(
        12,
        ge=1,
        description="Width of the state vector",
    )
    action_size: int = Field(
        4,
        ge=1,
        description="Width of the action vector",
    )
    critic_architecture: str = Field(
        "Input |64| (LeakyReLU) |1| Output",
        description="Critic network descriptor (state -> value)",
    )
    actor_architecture: str = Field(
        "Input |64| (LeakyReLU) |64| (LeakyReLU) |4| (TanH) Output",
        description="Actor mean network descriptor (state -> action means)",
    )

    @model_validator(mode="after")
    def check_architectures(self) -> "NetworkConfig":
        from walker.agent.architecture import parse_architecture

        parse_architecture(self.critic_architecture, 1)
        parse_architecture(self.actor_architecture, self.action_size)
        return self


class TrainingConfig(BaseModel):
    """Training loop configuration.

    These parameters control the episode loop and where weights and reward
    history are written.
    """

    model_config = ConfigDict(frozen=True)

    episodes: int = Field(
        100,
        ge=1,
        description="Number of episodes to run",
    )
    max_timesteps: int = Field(
        1000,
        ge=1,
        description="Maximum ticks per episode",
    )
    collect_data: bool = Field(
        True,
        description="Record the average reward of each episode",
    )
    save_weights: bool = Field(
        True,
        description="Save critic and actor weights after each episode",
    )
    weights_dir: str = Field(
        "data/weights",
        description="Directory for weight files",
    )
    data_dir: str = Field(
        "data/saved",
        description="Directory for reward history files",
    )
    critic_weight_file_name: str = Field(
        "critic",
        description="File name of the critic weights",
    )
    actor_weight_file_name: str = Field(
        "actor",
        description="File name of the actor weights",
    )
    seed: int | None = Field(
        None,
        description="Random seed for reproducibility",
    )

    @field_validator("critic_weight_file_name", "actor_weight_file_name")
    @classmethod
    def check_file_name(cls, value: str) -> str:
        if not FILE_NAME_PATTERN.match(value) or value in {".", ".."}:
            raise ValueError(f"invalid file name: {value!r}")
        return value


class LoggingConfig(BaseModel):
    """Logging and metrics configuration."""

    model_config = ConfigDict(frozen=True)

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        "INFO",
        description="Log level for the walker loggers",
    )
    log_dir: str = Field(
        "logs/",
        description="Directory for metrics files",
    )
    metrics_format: Literal["json", "csv"] = Field(
        "json",
        description="Metrics file format",
    )
    log_interval: int = Field(
        1,
        ge=1,
        description="Frequency of episode logging (in episodes)",
    )


class WalkerConfig(BaseModel):
    """Complete walker configuration.

    The configuration can be:
    - Instantiated with defaults: `WalkerConfig()`
    - Loaded from YAML: `WalkerConfig.from_yaml("config.yaml")`
    - Saved to YAML: `config.to_yaml("config.yaml")`

    All nested configurations are frozen; a changed configuration is a new
    object handed to TrainingSession.reload_config between episodes.
    """

    model_config = ConfigDict(frozen=True)

    adam: AdamConfig = Field(
        default_factory=AdamConfig,
        description="Adam optimiser hyperparameters",
    )
    agent: AgentConfig = Field(
        default_factory=AgentConfig,
        description="Core PPO algorithm hyperparameters",
    )
    network: NetworkConfig = Field(
        default_factory=NetworkConfig,
        description="Critic and actor architectures",
    )
    training: TrainingConfig = Field(
        default_factory=TrainingConfig,
        description="Training loop configuration",
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging and metrics configuration",
    )

    @classmethod
    def from_yaml(cls, path: str) -> "WalkerConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file.

        Returns:
            A validated WalkerConfig instance.

        Raises:
            FileNotFoundError: If the configuration file doesn't exist.
            ValidationError: If the configuration is invalid.
        """
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data or {})

    def to_yaml(self, path: str) -> None:
        """Save configuration to a YAML file.

        Args:
            path: Path where the YAML file will be saved.
        """
        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(),
                f,
                default_flow_style=False,
                sort_keys=False,
            )
