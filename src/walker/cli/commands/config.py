"""Config subcommands for configuration management."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.syntax import Syntax

from walker.cli.utils.output import console, print_error, print_success, print_warning
from walker.config import AgentConfig, TrainingConfig, WalkerConfig

app = typer.Typer(no_args_is_help=True)


def _format_validation_error(error: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in e['loc']) or 'config'}: {e['msg']}"
        for e in error.errors()
    ]


def _collect_warnings(config: WalkerConfig) -> list[str]:
    warnings: list[str] = []
    agent = config.agent
    training = config.training

    if agent.batch_size > training.max_timesteps:
        warnings.append(
            f"batch_size ({agent.batch_size}) exceeds max_timesteps "
            f"({training.max_timesteps}) - episodes will never fill a batch "
            "and no updates will run"
        )
    if config.adam.alpha > 0.01:
        warnings.append(
            f"alpha ({config.adam.alpha}) is high - typical values are 1e-4 to 1e-3"
        )
    if agent.clip_epsilon > 0.5:
        warnings.append(
            f"clip_epsilon ({agent.clip_epsilon}) is high - typical values are 0.1 to 0.3"
        )

    final_log_std = (
        agent.log_standard_deviation
        - agent.log_standard_deviation_decay * training.episodes
    )
    if final_log_std < -5:
        warnings.append(
            f"log standard deviation decays to {final_log_std:.2f} over "
            f"{training.episodes} episodes - exploration will effectively stop"
        )
    return warnings


@app.command("validate")
def validate(
    config_path: Annotated[
        Path,
        typer.Argument(
            help="Path to configuration file to validate",
            exists=True,
            dir_okay=False,
        ),
    ],
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show detailed configuration"),
    ] = False,
) -> None:
    """Validate a walker configuration file.

    Checks that the YAML file is valid, that every value is within range
    and that both architectures parse and fit the state and action sizes.

    Examples:
        python -m walker.cli config validate config/walker.yaml
        python -m walker.cli config validate config/walker.yaml --verbose
    """
    try:
        with open(config_path) as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        print_error(f"Invalid YAML syntax: {e}")
        raise typer.Exit(1)

    if raw_data is None:
        print_error("Configuration file is empty")
        raise typer.Exit(1)

    if not isinstance(raw_data, dict):
        print_error("Configuration must be a YAML mapping (dictionary)")
        raise typer.Exit(1)

    try:
        config = WalkerConfig.model_validate(raw_data)
    except ValidationError as e:
        for message in _format_validation_error(e):
            print_error(message)
        raise typer.Exit(1)

    print_success(f"Configuration is valid: {config_path}")

    warnings = _collect_warnings(config)
    if warnings:
        console.print()
        for warning in warnings:
            print_warning(warning)

    if verbose:
        network = config.network
        agent = config.agent
        console.print()
        console.print("[bold]Network:[/bold]")
        console.print(f"  State Size: {network.state_size}")
        console.print(f"  Action Size: {network.action_size}")
        console.print(f"  Critic: {network.critic_architecture}")
        console.print(f"  Actor: {network.actor_architecture}")

        console.print()
        console.print("[bold]PPO Hyperparameters:[/bold]")
        console.print(f"  Epochs: {agent.epochs}")
        console.print(f"  Batch Size: {agent.batch_size}")
        console.print(f"  Advantages: {'GAE' if agent.use_gae else 'Monte Carlo'}")
        console.print(f"  Gamma: {agent.gamma}")
        console.print(f"  GAE Lambda: {agent.gae_lambda}")
        console.print(f"  Clip Epsilon: {agent.clip_epsilon}")
        console.print(f"  Log Std: {agent.log_standard_deviation}")
        console.print(f"  Learning Rate: {config.adam.alpha}")


@app.command("generate")
def generate(
    output: Annotated[
        Path,
        typer.Argument(help="Output file path"),
    ],
    preset: Annotated[
        str,
        typer.Option(
            "--preset",
            "-p",
            help="Configuration preset (default, quick)",
        ),
    ] = "default",
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing file"),
    ] = False,
) -> None:
    """Generate a sample configuration file.

    Presets:
        default: The walker's tuned hyperparameters
        quick: Short episodes and small batches for smoke testing

    Examples:
        python -m walker.cli config generate config/walker.yaml
        python -m walker.cli config generate config/quick.yaml --preset quick
    """
    if output.exists() and not force:
        print_error(f"File already exists: {output}")
        console.print("Use --force to overwrite")
        raise typer.Exit(1)

    if preset == "quick":
        config = WalkerConfig(
            agent=AgentConfig(epochs=2, batch_size=16),
            training=TrainingConfig(episodes=5, max_timesteps=200),
        )
    elif preset == "default":
        config = WalkerConfig()
    else:
        print_error(f"Unknown preset: {preset}")
        raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    config.to_yaml(str(output))

    print_success(f"Generated configuration: {output}")
    console.print(f"[dim]Preset: {preset}[/dim]")


@app.command("show")
def show(
    config_path: Annotated[
        Path,
        typer.Argument(
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ],
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (yaml, json)"),
    ] = "yaml",
) -> None:
    """Display a configuration file, with defaults filled in.

    Examples:
        python -m walker.cli config show config/walker.yaml
        python -m walker.cli config show config/walker.yaml --format json
    """
    try:
        config = WalkerConfig.from_yaml(str(config_path))
    except (ValidationError, yaml.YAMLError) as e:
        print_error(f"Failed to load configuration: {e}")
        raise typer.Exit(1)

    data = config.model_dump(mode="json")
    if output_format == "json":
        syntax = Syntax(json.dumps(data, indent=2), "json", theme="monokai", line_numbers=True)
    else:
        output = yaml.dump(data, default_flow_style=False, sort_keys=False)
        syntax = Syntax(output, "yaml", theme="monokai", line_numbers=True)

    console.print(syntax)
