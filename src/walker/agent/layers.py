"""Network layers: dense (parametrised) and activation (stateless).

The set of layer types is closed. ``Layer`` is the union of the two
variants, and activation behaviour is chosen from a table keyed by
ActivationKind rather than by subclassing.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from walker.agent.architecture import ActivationKind
from walker.agent.matrix import Matrix
from walker.exceptions import ShapeMismatchError

if TYPE_CHECKING:
    from walker.config import AdamConfig

LEAKY_RELU_SLOPE = 0.05


def _relu(x: np.ndarray) -> np.ndarray:
    return np.maximum(x, 0.0)


def _relu_derivative(x: np.ndarray) -> np.ndarray:
    return np.where(x < 0.0, 0.0, 1.0)


def _leaky_relu(x: np.ndarray) -> np.ndarray:
    return np.where(x < 0.0, LEAKY_RELU_SLOPE * x, x)


def _leaky_relu_derivative(x: np.ndarray) -> np.ndarray:
    return np.where(x < 0.0, LEAKY_RELU_SLOPE, 1.0)


def _tanh_derivative(x: np.ndarray) -> np.ndarray:
    return 1.0 - np.tanh(x) ** 2


ACTIVATIONS: dict[
    ActivationKind,
    tuple[Callable[[np.ndarray], np.ndarray], Callable[[np.ndarray], np.ndarray]],
] = {
    ActivationKind.RELU: (_relu, _relu_derivative),
    ActivationKind.LEAKY_RELU: (_leaky_relu, _leaky_relu_derivative),
    ActivationKind.TANH: (np.tanh, _tanh_derivative),
}


@dataclass
class ActivationLayer:
    """Elementwise activation layer.

    Attributes:
        kind: Which activation function to apply
    """

    kind: ActivationKind
    _input: Matrix | None = field(default=None, repr=False)

    def feed_forward(self, matrix: Matrix) -> Matrix:
        """Apply the activation elementwise, caching the input for feed_back."""
        self._input = matrix
        activation, _ = ACTIVATIONS[self.kind]
        return Matrix.perform_operation(matrix, activation)

    def feed_back(self, gradient: Matrix) -> Matrix:
        """Scale the upstream gradient by the derivative at the cached input."""
        if self._input is None:
            raise RuntimeError("feed_back called before feed_forward")
        _, derivative = ACTIVATIONS[self.kind]
        return Matrix.hadamard_product(
            gradient, Matrix.perform_operation(self._input, derivative)
        )

    def optimise(self, adam: AdamConfig) -> None:
        """Activation layers have no parameters."""
        pass

    def zero(self) -> None:
        """Activation layers have no gradients."""
        pass


class DenseLayer:
    """Fully connected layer with Adam moments and gradient accumulators.

    Gradients from successive feed_back calls are summed into the
    accumulators; weights only change when optimise() is called.

    Attributes:
        input_size: Width of the input column vector
        output_size: Width of the output column vector
        weights: (output_size x input_size) weight matrix
        biases: (output_size x 1) bias vector
    """

    def __init__(
        self,
        input_size: int,
        output_size: int,
        rng: np.random.Generator | None = None,
    ) -> None:
        """Initialise weights uniformly scaled by 1/sqrt(input_size), biases at zero.

        Args:
            input_size: Width of the input column vector.
            output_size: Width of the output column vector.
            rng: Random source for weight initialisation.
        """
        rng = rng if rng is not None else np.random.default_rng()
        self.input_size = input_size
        self.output_size = output_size

        self.weights = Matrix.from_random(output_size, input_size, rng) * (
            1.0 / math.sqrt(input_size)
        )
        self.biases = Matrix.from_size(output_size, 1)

        self._weight_gradients = Matrix.from_size(output_size, input_size)
        self._bias_gradients = Matrix.from_size(output_size, 1)

        self._weight_first_moment = Matrix.from_size(output_size, input_size)
        self._weight_second_moment = Matrix.from_size(output_size, input_size)
        self._bias_first_moment = Matrix.from_size(output_size, 1)
        self._bias_second_moment = Matrix.from_size(output_size, 1)
        self._timestep = 0

        self._input: Matrix | None = None

    def __repr__(self) -> str:
        return f"DenseLayer(input_size={self.input_size}, output_size={self.output_size})"

    @property
    def weight_gradients(self) -> Matrix:
        return self._weight_gradients.clone()

    @property
    def bias_gradients(self) -> Matrix:
        return self._bias_gradients.clone()

    def feed_forward(self, matrix: Matrix) -> Matrix:
        """Compute W x + b, caching x for feed_back."""
        self._input = matrix
        return self.weights @ matrix + self.biases

    def feed_back(self, gradient: Matrix) -> Matrix:
        """Accumulate parameter gradients and return the input gradient."""
        if self._input is None:
            raise RuntimeError("feed_back called before feed_forward")
        if gradient.shape != (self.output_size, 1):
            raise ShapeMismatchError(
                f"Dense layer expects a {self.output_size}x1 gradient, "
                f"got {gradient.get_size()}"
            )

        self._weight_gradients = self._weight_gradients + gradient @ Matrix.transpose(
            self._input
        )
        self._bias_gradients = self._bias_gradients + gradient

        return Matrix.transpose(self.weights) @ gradient

    def optimise(self, adam: AdamConfig) -> None:
        """Apply one Adam step from the accumulated gradients, then clear them."""
        self._timestep += 1

        self.weights, self._weight_first_moment, self._weight_second_moment = _adam_step(
            self.weights,
            self._weight_gradients,
            self._weight_first_moment,
            self._weight_second_moment,
            self._timestep,
            adam,
        )
        self.biases, self._bias_first_moment, self._bias_second_moment = _adam_step(
            self.biases,
            self._bias_gradients,
            self._bias_first_moment,
            self._bias_second_moment,
            self._timestep,
            adam,
        )

        self.zero()

    def zero(self) -> None:
        """Clear the gradient accumulators."""
        self._weight_gradients.zero()
        self._bias_gradients.zero()

    def set_parameters(self, weights: Matrix, biases: Matrix) -> None:
        """Replace weights and biases, e.g. when loading saved weights."""
        if weights.shape != self.weights.shape or biases.shape != self.biases.shape:
            raise ShapeMismatchError(
                f"Expected weights {self.weights.get_size()} and biases "
                f"{self.biases.get_size()}, got {weights.get_size()} and "
                f"{biases.get_size()}"
            )
        self.weights = weights.clone()
        self.biases = biases.clone()


def _adam_step(
    parameters: Matrix,
    gradients: Matrix,
    first_moment: Matrix,
    second_moment: Matrix,
    timestep: int,
    adam: AdamConfig,
) -> tuple[Matrix, Matrix, Matrix]:
    """Bias-corrected Adam update (Kingma & Ba, Algorithm 1)."""
    first_moment = first_moment * adam.beta1 + gradients * (1.0 - adam.beta1)
    second_moment = second_moment * adam.beta2 + Matrix.hadamard_product(
        gradients, gradients
    ) * (1.0 - adam.beta2)

    corrected_first = first_moment / (1.0 - adam.beta1**timestep)
    corrected_second = second_moment / (1.0 - adam.beta2**timestep)

    step = Matrix.hadamard_division(
        corrected_first, Matrix.square_root(corrected_second) + adam.epsilon
    )
    return parameters - step * adam.alpha, first_moment, second_moment


Layer = DenseLayer | ActivationLayer
