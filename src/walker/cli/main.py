"""Main CLI application.

Aggregates the command groups (config, network, train).
"""

import typer

from walker.cli.commands import config as config_commands
from walker.cli.commands import network as network_commands
from walker.cli.commands import train as train_commands

app = typer.Typer(
    name="walker",
    help="PPO walker training CLI",
    no_args_is_help=True,
    pretty_exceptions_enable=True,
)

app.add_typer(config_commands.app, name="config", help="Configuration utilities")
app.add_typer(network_commands.app, name="network", help="Architecture and weight file tools")
app.add_typer(train_commands.app, name="train", help="Training runs")


@app.callback()
def main_callback() -> None:
    """PPO walker training CLI.

    Use the subcommands to validate configuration and architectures,
    inspect saved weights, and run training.
    """
    pass


if __name__ == "__main__":
    app()
