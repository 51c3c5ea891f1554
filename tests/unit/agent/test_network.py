"""Unit tests for NeuralNetwork.

Tests cover:
- Construction from descriptors
- Forward and backward chaining
- Weight-file line serialisation and loading
- Rejection of mismatched or malformed weight lines
"""

import numpy as np
import pytest

from walker.agent.layers import ActivationLayer, DenseLayer
from walker.agent.matrix import Matrix
from walker.agent.network import NeuralNetwork
from walker.config import AdamConfig
from walker.exceptions import (
    ArchitectureMismatchError,
    InvalidArchitectureError,
    WeightFormatError,
)

ACTOR = "Input |8| (LeakyReLU) |8| (LeakyReLU) |2| (TanH) Output"
CRITIC = "Input |8| (LeakyReLU) |1| Output"


class TestConstruction:
    """Tests for NeuralNetwork.from_architecture."""

    def test_layers_follow_descriptor(self, rng: np.random.Generator) -> None:
        """Test the layer sequence and widths match the descriptor."""
        network = NeuralNetwork.from_architecture(ACTOR, 3, 2, rng)
        kinds = [type(layer) for layer in network.layers]
        assert kinds == [
            DenseLayer,
            ActivationLayer,
            DenseLayer,
            ActivationLayer,
            DenseLayer,
            ActivationLayer,
        ]
        shapes = [(d.input_size, d.output_size) for d in network.dense_layers]
        assert shapes == [(3, 8), (8, 8), (8, 2)]
        assert network.output_size == 2

    def test_wrong_output_size(self, rng: np.random.Generator) -> None:
        """Test construction rejects a descriptor of the wrong output width."""
        with pytest.raises(InvalidArchitectureError):
            NeuralNetwork.from_architecture(CRITIC, 3, 2, rng)

    def test_same_seed_same_weights(self) -> None:
        """Test equal seeds produce identical networks."""
        a = NeuralNetwork.from_architecture(CRITIC, 3, 1, np.random.default_rng(1))
        b = NeuralNetwork.from_architecture(CRITIC, 3, 1, np.random.default_rng(1))
        assert a.save() == b.save()


class TestForwardBackward:
    """Tests for chained passes."""

    def test_forward_output_shape(self, rng: np.random.Generator) -> None:
        """Test the output is a column of the last dense width."""
        network = NeuralNetwork.from_architecture(ACTOR, 3, 2, rng)
        out = network.feed_forward(Matrix.from_values([0.1, 0.2, 0.3]))
        assert out.shape == (2, 1)
        assert np.all(np.abs(out.to_numpy()) < 1.0)

    def test_zero_input_gives_bias_output(self, rng: np.random.Generator) -> None:
        """Test a zero input with zero biases produces a zero output."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        out = network.feed_forward(Matrix.from_size(3, 1))
        assert out.to_list() == [0.0]

    def test_backward_returns_input_gradient(self, rng: np.random.Generator) -> None:
        """Test feed_back returns a gradient shaped like the input."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        network.feed_forward(Matrix.from_values([0.1, 0.2, 0.3]))
        grad = network.feed_back(Matrix.from_values([1.0]))
        assert grad.shape == (3, 1)

    def test_optimise_reduces_squared_error(self, rng: np.random.Generator) -> None:
        """Test repeated steps fit a single target value."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        x = Matrix.from_values([0.5, -0.5, 0.25])
        target = 0.7
        adam = AdamConfig(alpha=0.01)

        def error() -> float:
            return network.feed_forward(x).get_value(0, 0) - target

        initial = error() ** 2
        for _ in range(200):
            network.feed_back(Matrix.from_values([2.0 * error()]))
            network.optimise(adam)
        assert error() ** 2 < initial * 0.01

    def test_zero_clears_every_layer(self, rng: np.random.Generator) -> None:
        """Test zero() resets all dense accumulators."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        network.feed_forward(Matrix.from_values([1.0, 1.0, 1.0]))
        network.feed_back(Matrix.from_values([1.0]))
        network.zero()
        for layer in network.dense_layers:
            assert not np.any(layer.weight_gradients.to_numpy())
            assert not np.any(layer.bias_gradients.to_numpy())


class TestSaveLoad:
    """Tests for weight-file lines."""

    def test_save_layout(self, rng: np.random.Generator) -> None:
        """Test line 0 is the descriptor followed by weights and biases per layer."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        lines = network.save()
        assert lines[0] == CRITIC
        assert len(lines) == 5
        assert len(lines[1].split()) == 24
        assert len(lines[2].split()) == 8
        assert len(lines[3].split()) == 8
        assert len(lines[4].split()) == 1

    def test_round_trip_reproduces_outputs(self) -> None:
        """Test loading saved lines reproduces forward outputs."""
        source = NeuralNetwork.from_architecture(ACTOR, 3, 2, np.random.default_rng(1))
        target = NeuralNetwork.from_architecture(ACTOR, 3, 2, np.random.default_rng(2))
        x = Matrix.from_values([0.3, -0.2, 0.9])

        target.load(source.save())

        np.testing.assert_allclose(
            target.feed_forward(x).to_numpy(),
            source.feed_forward(x).to_numpy(),
            atol=1e-5,
        )

    def test_architecture_mismatch(self, rng: np.random.Generator) -> None:
        """Test a different descriptor is rejected before any weight changes."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        before = network.save()
        other = NeuralNetwork.from_architecture(
            "Input |4| (ReLU) |1| Output", 3, 1, rng
        ).save()

        with pytest.raises(ArchitectureMismatchError):
            network.load(other)
        assert network.save() == before

    def test_wrong_value_count(self, rng: np.random.Generator) -> None:
        """Test a short weight line raises WeightFormatError and changes nothing."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        before = network.save()
        lines = list(before)
        lines[3] = " ".join(lines[3].split()[:-1])

        with pytest.raises(WeightFormatError):
            network.load(lines)
        assert network.save() == before

    def test_missing_lines(self, rng: np.random.Generator) -> None:
        """Test a truncated file is rejected."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        with pytest.raises(WeightFormatError):
            network.load(network.save()[:3])

    def test_non_numeric_value(self, rng: np.random.Generator) -> None:
        """Test a non-numeric token is rejected."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        lines = network.save()
        lines[2] = "abc " + " ".join(lines[2].split()[1:])
        with pytest.raises(WeightFormatError):
            network.load(lines)

    def test_empty_file(self, rng: np.random.Generator) -> None:
        """Test an empty line list is rejected."""
        network = NeuralNetwork.from_architecture(CRITIC, 3, 1, rng)
        with pytest.raises(WeightFormatError):
            network.load([])


class TestZeroInputScenario:
    """Zero inputs expose the biases."""

    def test_output_equals_final_bias(self, rng: np.random.Generator) -> None:
        """Test "Input |3| (ReLU) |1| Output" maps zeros to the final bias."""
        network = NeuralNetwork.from_architecture("Input |3| (ReLU) |1| Output", 3, 1, rng)
        final = network.dense_layers[-1]
        final.set_parameters(final.weights, Matrix.from_values([0.3]))

        out = network.feed_forward(Matrix.from_size(3, 1))

        assert out.get_value(0, 0) == pytest.approx(0.3)

    def test_trailing_relu_applies_to_bias(self, rng: np.random.Generator) -> None:
        """Test a final ReLU floors a negative bias."""
        network = NeuralNetwork.from_architecture("Input |2| (ReLU) Output", 3, 2, rng)
        layer = network.dense_layers[0]
        layer.set_parameters(layer.weights, Matrix.from_values([-0.4, 0.6]))

        out = network.feed_forward(Matrix.from_size(3, 1))

        assert out.to_list() == pytest.approx([0.0, 0.6])
