"""Unit tests for the architecture descriptor grammar.

Tests cover:
- Accepted descriptors and the parsed layer stages
- Rejected syntax, activations and widths
- Output width checks for critic and actor roles
"""

import pytest

from walker.agent.architecture import (
    ActivationKind,
    ActivationSpec,
    DenseSpec,
    output_width,
    parse_architecture,
    validate_architecture,
)
from walker.exceptions import InvalidArchitectureError


class TestParseArchitecture:
    """Tests for parse_architecture."""

    def test_critic_default(self) -> None:
        """Test the default critic descriptor parses into stages."""
        specs = parse_architecture("Input |64| (LeakyReLU) |1| Output", 1)
        assert specs == [
            DenseSpec(64),
            ActivationSpec(ActivationKind.LEAKY_RELU),
            DenseSpec(1),
        ]

    def test_actor_with_three_activations(self) -> None:
        """Test all activation names are recognised."""
        specs = parse_architecture("Input |8| (ReLU) |8| (LeakyReLU) |4| (TanH) Output", 4)
        kinds = [s.kind for s in specs if isinstance(s, ActivationSpec)]
        assert kinds == [ActivationKind.RELU, ActivationKind.LEAKY_RELU, ActivationKind.TANH]

    def test_consecutive_dense_layers(self) -> None:
        """Test dense layers may follow each other directly."""
        specs = parse_architecture("Input |5| |3| Output")
        assert specs == [DenseSpec(5), DenseSpec(3)]

    def test_output_size_none_skips_width_check(self) -> None:
        """Test output_size=None accepts any final width."""
        assert parse_architecture("Input |7| Output")[-1] == DenseSpec(7)

    def test_output_width(self) -> None:
        """Test output_width reports the last dense width."""
        assert output_width("Input |64| (TanH) |4| (TanH) Output") == 4

    @pytest.mark.parametrize(
        "descriptor",
        [
            "Input |64| (LeakyReLU) |1|",
            "|64| (LeakyReLU) |1| Output",
            "Input |64|  (LeakyReLU) |1| Output",
            "Input |064| (LeakyReLU) |1| Output",
            "Input |0| Output",
            "Input |-3| Output",
            "Input Output",
            "input |64| Output",
            "Input |64| (LeakyReLU) |1| Output ",
        ],
    )
    def test_invalid_syntax(self, descriptor: str) -> None:
        """Test malformed descriptors are rejected."""
        with pytest.raises(InvalidArchitectureError, match="not valid"):
            parse_architecture(descriptor)

    def test_unknown_activation(self) -> None:
        """Test unsupported activation names are reported by name."""
        with pytest.raises(InvalidArchitectureError, match="Sigmoid"):
            parse_architecture("Input |64| (Sigmoid) |1| Output")

    def test_no_dense_layers(self) -> None:
        """Test a descriptor with only activations is rejected."""
        with pytest.raises(InvalidArchitectureError, match="no dense layers"):
            parse_architecture("Input (ReLU) Output")

    def test_wrong_output_width(self) -> None:
        """Test the final dense width must match the required output."""
        with pytest.raises(InvalidArchitectureError, match="should output 1, currently outputs 2"):
            parse_architecture("Input |64| (LeakyReLU) |2| Output", 1)

    def test_error_is_value_error(self) -> None:
        """Test InvalidArchitectureError can be caught as ValueError."""
        with pytest.raises(ValueError):
            parse_architecture("nonsense")


class TestValidateArchitecture:
    """Tests for the non-raising validator."""

    def test_valid_returns_none(self) -> None:
        """Test a valid descriptor returns None."""
        assert validate_architecture("Input |64| (LeakyReLU) |1| Output", 1) is None

    def test_invalid_returns_message(self) -> None:
        """Test an invalid descriptor returns the violated rule."""
        message = validate_architecture("Input |64| (LeakyReLU) |3| Output", 4)
        assert message is not None
        assert "should output 4" in message
