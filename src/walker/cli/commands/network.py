"""Network subcommands for architecture descriptors and weight files."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from walker.agent.architecture import validate_architecture
from walker.agent.serialization import read_weight_file_info
from walker.cli.utils.output import (
    console,
    create_weight_file_table,
    print_error,
    print_success,
)
from walker.exceptions import WalkerError

app = typer.Typer(no_args_is_help=True)


@app.command("validate")
def validate(
    descriptor: Annotated[
        str,
        typer.Argument(help='Architecture descriptor, e.g. "Input |64| (ReLU) |1| Output"'),
    ],
    role: Annotated[
        str,
        typer.Option("--role", "-r", help="Network role (critic, actor)"),
    ] = "critic",
    action_size: Annotated[
        int,
        typer.Option("--action-size", "-a", help="Action size for actor networks", min=1),
    ] = 4,
) -> None:
    """Check an architecture descriptor against the grammar.

    Critic networks must end in a dense layer of width 1, actor networks
    in a dense layer of width --action-size.

    Examples:
        python -m walker.cli network validate "Input |64| (LeakyReLU) |1| Output"
        python -m walker.cli network validate "Input |32| (TanH) |2| Output" --role actor -a 2
    """
    if role == "critic":
        output_size = 1
    elif role == "actor":
        output_size = action_size
    else:
        print_error(f"Unknown role: {role} (expected critic or actor)")
        raise typer.Exit(1)

    problem = validate_architecture(descriptor, output_size)
    if problem is not None:
        print_error(f"Invalid {role} architecture: {problem}")
        raise typer.Exit(1)

    print_success(f"Valid {role} architecture: {descriptor}")


@app.command("inspect")
def inspect(
    weights_file: Annotated[
        Path,
        typer.Argument(
            help="Path to a saved weight file",
            exists=True,
            dir_okay=False,
        ),
    ],
) -> None:
    """Show the architecture and dense layer shapes of a weight file.

    Examples:
        python -m walker.cli network inspect data/weights/critic.txt
    """
    try:
        info = read_weight_file_info(weights_file)
    except WalkerError as e:
        print_error(f"Cannot read weight file: {e}")
        raise typer.Exit(1)

    console.print(create_weight_file_table(info))
    console.print(f"Input size: {info.input_size}")
    console.print(f"Output size: {info.output_size}")
