"""Feed-forward neural network built from an architecture descriptor.

The network is a linear pipeline of layers: forward passes chain start to
end, backward passes chain end to start, and optimiser calls are delegated
to every layer.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from walker.agent.architecture import DenseSpec, parse_architecture
from walker.agent.layers import ActivationLayer, DenseLayer, Layer
from walker.agent.matrix import Matrix
from walker.exceptions import ArchitectureMismatchError, WeightFormatError

if TYPE_CHECKING:
    from walker.config import AdamConfig


class NeuralNetwork:
    """Ordered stack of dense and activation layers.

    Example:
        network = NeuralNetwork.from_architecture(
            "Input |64| (LeakyReLU) |1| Output", input_size=12, output_size=1
        )
        value = network.feed_forward(state)

    Attributes:
        architecture: Descriptor the network was built from
        input_size: Width of the input column vector
        output_size: Width of the output column vector
        layers: Owned layers in construction order
    """

    def __init__(self, architecture: str, input_size: int, layers: list[Layer]) -> None:
        self.architecture = architecture
        self.input_size = input_size
        self.layers = layers

    @classmethod
    def from_architecture(
        cls,
        architecture: str,
        input_size: int,
        output_size: int | None = None,
        rng: np.random.Generator | None = None,
    ) -> NeuralNetwork:
        """Build a network from a descriptor string.

        Args:
            architecture: Descriptor such as "Input |64| (ReLU) |1| Output".
            input_size: Width of the state vector fed into the network.
            output_size: Required output width, checked against the last
                dense layer. None skips the check.
            rng: Random source for weight initialisation.

        Returns:
            A freshly initialised network.

        Raises:
            InvalidArchitectureError: If the descriptor is invalid.
        """
        rng = rng if rng is not None else np.random.default_rng()
        layers: list[Layer] = []
        width = input_size
        for spec in parse_architecture(architecture, output_size):
            if isinstance(spec, DenseSpec):
                layers.append(DenseLayer(width, spec.width, rng))
                width = spec.width
            else:
                layers.append(ActivationLayer(spec.kind))
        return cls(architecture, input_size, layers)

    @property
    def output_size(self) -> int:
        return self.dense_layers[-1].output_size

    @property
    def dense_layers(self) -> list[DenseLayer]:
        return [layer for layer in self.layers if isinstance(layer, DenseLayer)]

    def feed_forward(self, matrix: Matrix) -> Matrix:
        """Run a column vector through every layer, start to end.

        Args:
            matrix: Input column vector of height input_size

        Returns:
            Output column vector of height output_size
        """
        for layer in self.layers:
            matrix = layer.feed_forward(matrix)
        return matrix

    def feed_back(self, gradient: Matrix) -> Matrix:
        """Propagate a loss gradient from the output back to the input.

        Dense layers accumulate their parameter gradients along the way.

        Returns:
            Gradient with respect to the network input.
        """
        for layer in reversed(self.layers):
            gradient = layer.feed_back(gradient)
        return gradient

    def optimise(self, adam: AdamConfig) -> None:
        """Apply one Adam step to every dense layer and clear its gradients."""
        for layer in self.layers:
            layer.optimise(adam)

    def zero(self) -> None:
        """Clear accumulated gradients without updating weights."""
        for layer in self.layers:
            layer.zero()

    def save(self) -> list[str]:
        """Serialise the network to weight-file lines.

        Line 0 is the architecture descriptor; each dense layer then
        contributes one line of row-major weights and one line of biases.
        """
        lines = [self.architecture]
        for layer in self.dense_layers:
            lines.append(" ".join(repr(value) for value in layer.weights.to_list()))
            lines.append(" ".join(repr(value) for value in layer.biases.to_list()))
        return lines

    def load(self, lines: list[str]) -> None:
        """Apply weight-file lines produced by save().

        Every line is parsed and checked before any layer is touched, so
        a rejected file leaves the live weights unchanged.

        Raises:
            ArchitectureMismatchError: If the saved descriptor differs from
                this network's descriptor.
            WeightFormatError: If the file is empty or a value count is wrong.
        """
        self.set_weights(self.parse_weights(lines))

    def parse_weights(self, lines: list[str]) -> list[tuple[Matrix, Matrix]]:
        """Parse weight-file lines into (weights, biases) per dense layer.

        Raises:
            ArchitectureMismatchError: If the saved descriptor differs from
                this network's descriptor.
            WeightFormatError: If the file is empty or a value count is wrong.
        """
        if not lines:
            raise WeightFormatError("Weight file is empty")

        saved_architecture = lines[0].strip()
        if saved_architecture != self.architecture:
            raise ArchitectureMismatchError(
                f"Saved architecture {saved_architecture!r} does not match "
                f"live architecture {self.architecture!r}"
            )

        body = [line for line in lines[1:] if line.strip()]
        dense_layers = self.dense_layers
        if len(body) != 2 * len(dense_layers):
            raise WeightFormatError(
                f"Expected {2 * len(dense_layers)} weight lines, got {len(body)}"
            )

        parameters: list[tuple[Matrix, Matrix]] = []
        for i, layer in enumerate(dense_layers):
            weights = _parse_line(body[2 * i], layer.output_size, layer.input_size, i)
            biases = _parse_line(body[2 * i + 1], layer.output_size, 1, i)
            parameters.append((weights, biases))
        return parameters

    def set_weights(self, parameters: list[tuple[Matrix, Matrix]]) -> None:
        """Replace the weights and biases of every dense layer.

        Args:
            parameters: (weights, biases) per dense layer, as returned by
                parse_weights

        Raises:
            WeightFormatError: If the layer count differs.
            ShapeMismatchError: If a layer's weights or biases have the wrong shape.
        """
        dense_layers = self.dense_layers
        if len(parameters) != len(dense_layers):
            raise WeightFormatError(
                f"Expected parameters for {len(dense_layers)} dense layers, "
                f"got {len(parameters)}"
            )
        for layer, (weights, biases) in zip(dense_layers, parameters):
            layer.set_parameters(weights, biases)


def _parse_line(line: str, height: int, width: int, layer_index: int) -> Matrix:
    try:
        values = [float(token) for token in line.split()]
    except ValueError as e:
        raise WeightFormatError(
            f"Dense layer {layer_index}: non-numeric weight value ({e})"
        ) from e
    if len(values) != height * width:
        raise WeightFormatError(
            f"Dense layer {layer_index}: expected {height * width} values, "
            f"got {len(values)}"
        )
    return Matrix(np.array(values).reshape(height, width))
