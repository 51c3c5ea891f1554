"""Architecture descriptor grammar for feed-forward networks.

A descriptor reads left to right from the network input to its output:

    Input |64| (LeakyReLU) |64| (LeakyReLU) |4| (TanH) Output

``|N|`` introduces a dense layer with N outputs whose input width is the
previous stage's output, ``(Name)`` introduces an activation layer. The
width of the last dense layer is the network's output dimensionality.
"""

import re
from dataclasses import dataclass
from enum import Enum

from walker.exceptions import InvalidArchitectureError

DESCRIPTOR_PATTERN = re.compile(
    r"^Input ((\|[1-9]\d*\| )|(\((LeakyReLU|TanH|ReLU)\) ))+Output$"
)
TOKEN_PATTERN = re.compile(r"\|(\d+)\||\((\w+)\)")


class ActivationKind(str, Enum):
    """Supported activation functions, named as they appear in descriptors."""

    RELU = "ReLU"
    LEAKY_RELU = "LeakyReLU"
    TANH = "TanH"


@dataclass(frozen=True)
class DenseSpec:
    """A dense layer stage with its output width."""

    width: int


@dataclass(frozen=True)
class ActivationSpec:
    """An activation layer stage."""

    kind: ActivationKind


LayerSpec = DenseSpec | ActivationSpec


def parse_architecture(
    descriptor: str, output_size: int | None = None
) -> list[LayerSpec]:
    """Parse and validate an architecture descriptor.

    Args:
        descriptor: Descriptor string such as "Input |64| (ReLU) |1| Output".
        output_size: Required width of the last dense layer, or None to
            skip the output width check.

    Returns:
        The layer stages in construction order.

    Raises:
        InvalidArchitectureError: If the descriptor does not follow the
            grammar, has no dense layer, or ends in the wrong width.
    """
    if not DESCRIPTOR_PATTERN.match(descriptor):
        unknown = [
            name
            for _, name in TOKEN_PATTERN.findall(descriptor)
            if name and name not in {kind.value for kind in ActivationKind}
        ]
        if unknown:
            raise InvalidArchitectureError(
                f"unsupported activation '{unknown[0]}', expected one of "
                f"{', '.join(kind.value for kind in ActivationKind)}"
            )
        raise InvalidArchitectureError(
            f"neural network not valid, check syntax: {descriptor!r} should read "
            "'Input ( |N| | (Activation) )+ Output'"
        )

    specs: list[LayerSpec] = []
    for width, name in TOKEN_PATTERN.findall(descriptor):
        if width:
            specs.append(DenseSpec(int(width)))
        else:
            specs.append(ActivationSpec(ActivationKind(name)))

    dense_widths = [spec.width for spec in specs if isinstance(spec, DenseSpec)]
    if not dense_widths:
        raise InvalidArchitectureError("no dense layers")

    if output_size is not None and dense_widths[-1] != output_size:
        raise InvalidArchitectureError(
            f"last dense layer should output {output_size}, "
            f"currently outputs {dense_widths[-1]}"
        )

    return specs


def validate_architecture(descriptor: str, output_size: int | None = None) -> str | None:
    """Check a descriptor without raising.

    Returns:
        None if the descriptor is valid, otherwise a description of the
        violated rule.
    """
    try:
        parse_architecture(descriptor, output_size)
    except InvalidArchitectureError as e:
        return str(e)
    return None


def output_width(descriptor: str) -> int:
    """Width of the last dense layer of a valid descriptor."""
    specs = parse_architecture(descriptor)
    return [spec.width for spec in specs if isinstance(spec, DenseSpec)][-1]
