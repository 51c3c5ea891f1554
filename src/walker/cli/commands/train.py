"""Train subcommands for running training against gymnasium environments."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import gymnasium as gym
import typer
import yaml
from pydantic import ValidationError

from walker.cli.utils.output import (
    configure_logging,
    console,
    create_episode_table,
    print_error,
    print_success,
)
from walker.config import WalkerConfig
from walker.exceptions import WalkerError
from walker.training import GymEnvironment, TrainingSession
from walker.training.metrics import MetricsLogger

app = typer.Typer(no_args_is_help=True)


def _fit_config_to_environment(config: WalkerConfig, env: GymEnvironment) -> WalkerConfig:
    """Adopt the environment's state size; the action size must already match."""
    network = config.network
    if env.action_size != network.action_size:
        raise ValueError(
            f"Environment action size is {env.action_size} but the configuration "
            f"uses {network.action_size}; set network.action_size and an actor "
            "architecture ending in that width"
        )
    if env.state_size == network.state_size:
        return config
    return config.model_copy(
        update={"network": network.model_copy(update={"state_size": env.state_size})}
    )


@app.command("run")
def run(
    env_id: Annotated[
        str,
        typer.Option("--env", "-e", help="Gymnasium environment id (continuous actions)"),
    ],
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to YAML configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    episodes: Annotated[
        int | None,
        typer.Option("--episodes", "-n", help="Number of episodes", min=1),
    ] = None,
    seed: Annotated[
        int | None,
        typer.Option("--seed", "-s", help="Random seed"),
    ] = None,
    load: Annotated[
        bool,
        typer.Option("--load", help="Load saved weights before training"),
    ] = False,
) -> None:
    """Train the agent against a gymnasium environment.

    Examples:
        python -m walker.cli train run --env Pendulum-v1 --config config/pendulum.yaml
        python -m walker.cli train run --env BipedalWalker-v3 --episodes 50 --seed 7
    """
    try:
        config = WalkerConfig.from_yaml(str(config_path)) if config_path else WalkerConfig()
    except (ValidationError, yaml.YAMLError) as e:
        print_error(f"Failed to load configuration: {e}")
        raise typer.Exit(1)

    if seed is not None:
        config = config.model_copy(
            update={"training": config.training.model_copy(update={"seed": seed})}
        )
    configure_logging(config.logging.level)

    try:
        env = GymEnvironment.make(env_id, seed=config.training.seed)
    except gym.error.Error as e:
        print_error(f"Cannot create environment {env_id}: {e}")
        raise typer.Exit(1)
    except ValueError as e:
        print_error(f"Unsupported environment {env_id}: {e}")
        raise typer.Exit(1)

    try:
        config = _fit_config_to_environment(config, env)
    except ValueError as e:
        env.close()
        print_error(str(e))
        raise typer.Exit(1)

    metrics_logger = MetricsLogger(
        log_dir=config.logging.log_dir,
        file_format=config.logging.metrics_format,
    )
    try:
        session = TrainingSession(config, env, metrics_logger=metrics_logger)
        if load:
            session.load_weights()
            console.print(f"Loaded weights from {session.critic_weights_path.parent}")

        with console.status(f"Training on {env_id}..."):
            results = session.run(episodes)

        if config.training.collect_data:
            session.save_data()
    except (WalkerError, FileNotFoundError) as e:
        print_error(str(e))
        raise typer.Exit(1)
    finally:
        metrics_logger.close()
        env.close()

    console.print(create_episode_table(results))
    print_success(f"Trained {len(results)} episodes on {env_id}")
