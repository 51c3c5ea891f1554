"""Unit tests for weight file persistence.

Tests cover:
- Writing and reading network weight files
- Missing file handling
- Weight file inspection
"""

from pathlib import Path

import numpy as np
import pytest

from walker.agent.matrix import Matrix
from walker.agent.network import NeuralNetwork
from walker.agent.serialization import (
    load_network,
    read_weight_file_info,
    save_network,
)
from walker.exceptions import InvalidArchitectureError, WeightFormatError

ACTOR = "Input |8| (LeakyReLU) |2| (TanH) Output"


class TestSaveLoadNetwork:
    """Tests for save_network and load_network."""

    def test_creates_parent_directories(self, tmp_path: Path, rng: np.random.Generator) -> None:
        """Test saving into a missing directory creates it."""
        network = NeuralNetwork.from_architecture(ACTOR, 3, 2, rng)
        path = save_network(network, tmp_path / "nested" / "actor.txt")
        assert path.exists()
        assert path.read_text().splitlines()[0] == ACTOR

    def test_round_trip(self, tmp_path: Path) -> None:
        """Test a loaded network reproduces the saved network's outputs."""
        source = NeuralNetwork.from_architecture(ACTOR, 3, 2, np.random.default_rng(3))
        target = NeuralNetwork.from_architecture(ACTOR, 3, 2, np.random.default_rng(4))
        path = save_network(source, tmp_path / "actor.txt")

        load_network(target, path)

        x = Matrix.from_values([1.0, 0.5, -0.5])
        np.testing.assert_allclose(
            target.feed_forward(x).to_numpy(), source.feed_forward(x).to_numpy(), atol=1e-5
        )

    def test_missing_file(self, tmp_path: Path, rng: np.random.Generator) -> None:
        """Test loading a missing file raises FileNotFoundError."""
        network = NeuralNetwork.from_architecture(ACTOR, 3, 2, rng)
        with pytest.raises(FileNotFoundError):
            load_network(network, tmp_path / "missing.txt")


class TestWeightFileInfo:
    """Tests for read_weight_file_info."""

    def test_reports_layer_sizes(self, tmp_path: Path, rng: np.random.Generator) -> None:
        """Test the info reflects the saved architecture."""
        network = NeuralNetwork.from_architecture(ACTOR, 3, 2, rng)
        path = save_network(network, tmp_path / "actor.txt")

        info = read_weight_file_info(path)

        assert info.architecture == ACTOR
        assert info.layer_value_counts == [(24, 8), (16, 2)]
        assert info.input_size == 3
        assert info.output_size == 2

    def test_invalid_descriptor(self, tmp_path: Path) -> None:
        """Test a corrupt descriptor line is reported."""
        path = tmp_path / "bad.txt"
        path.write_text("Input |x| Output\n1 2\n3\n")
        with pytest.raises(InvalidArchitectureError):
            read_weight_file_info(path)

    def test_missing_body_lines(self, tmp_path: Path) -> None:
        """Test a file without weights is malformed."""
        path = tmp_path / "short.txt"
        path.write_text(f"{ACTOR}\n")
        with pytest.raises(WeightFormatError):
            read_weight_file_info(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file is malformed."""
        path = tmp_path / "empty.txt"
        path.write_text("")
        with pytest.raises(WeightFormatError):
            read_weight_file_info(path)
