"""Rich console output formatting utilities."""

import logging

from rich.console import Console
from rich.table import Table

from walker.agent.serialization import WeightFileInfo
from walker.training.session import EpisodeResult

console = Console()

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def print_error(message: str) -> None:
    """Print an error message in red."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_warning(message: str) -> None:
    """Print a warning message in yellow."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def print_success(message: str) -> None:
    """Print a success message in green."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)


def create_episode_table(results: list[EpisodeResult]) -> Table:
    """Create a table of per-episode rewards and training metrics."""
    table = Table(title="Training Episodes")

    table.add_column("Episode", justify="right", style="cyan")
    table.add_column("Steps", justify="right")
    table.add_column("Total Reward", justify="right", style="green")
    table.add_column("Mean Reward", justify="right")
    table.add_column("Value Loss", justify="right")
    table.add_column("Batches", justify="right")
    table.add_column("Std", justify="right", style="magenta")

    for result in results:
        metrics = result.train_metrics
        table.add_row(
            str(result.episode),
            str(result.length),
            f"{result.total_reward:.3f}",
            f"{result.mean_reward:.4f}",
            f"{metrics.get('value_loss', 0.0):.4f}",
            str(int(metrics.get("num_batches", 0))),
            f"{metrics.get('standard_deviation', 0.0):.4f}",
        )

    return table


def create_weight_file_table(info: WeightFileInfo) -> Table:
    """Create a table describing the dense layers of a weight file."""
    table = Table(title=info.architecture)

    table.add_column("Layer", justify="right", style="cyan")
    table.add_column("Shape", justify="right")
    table.add_column("Weights", justify="right")
    table.add_column("Biases", justify="right")

    for i, (weights, biases) in enumerate(info.layer_value_counts):
        inputs = weights // biases if biases else 0
        table.add_row(str(i), f"{biases}x{inputs}", f"{weights:,}", f"{biases:,}")

    return table
