"""Weight file persistence for networks and agents.

A weight file is plain text. The first line is the architecture descriptor
the weights were trained with; the remaining lines hold, for each dense
layer in construction order, its flattened weights and then its biases.
"""

from dataclasses import dataclass
from pathlib import Path

from walker.agent.architecture import DenseSpec, parse_architecture
from walker.agent.network import NeuralNetwork
from walker.exceptions import WeightFormatError


@dataclass
class WeightFileInfo:
    """Summary of a saved weight file.

    Attributes:
        architecture: Descriptor on line 0
        layer_value_counts: Number of weight and bias values per dense layer
    """

    architecture: str
    layer_value_counts: list[tuple[int, int]]

    @property
    def output_size(self) -> int:
        return [
            spec.width
            for spec in parse_architecture(self.architecture)
            if isinstance(spec, DenseSpec)
        ][-1]

    @property
    def input_size(self) -> int:
        """Input width implied by the first dense layer's weight count."""
        weights, biases = self.layer_value_counts[0]
        return weights // biases


def save_network(network: NeuralNetwork, path: str | Path) -> Path:
    """Write a network's weights to a text file.

    Args:
        network: Network to save
        path: Destination file; parent directories are created

    Returns:
        Path to the written file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(network.save()) + "\n")
    return path


def load_network(network: NeuralNetwork, path: str | Path) -> NeuralNetwork:
    """Load weights from a text file into an existing network.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ArchitectureMismatchError: If the saved descriptor differs
        WeightFormatError: If the file is malformed
    """
    network.load(read_weight_lines(path))
    return network


def read_weight_lines(path: str | Path) -> list[str]:
    """Read the raw lines of a weight file.

    Raises:
        FileNotFoundError: If the file doesn't exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Weight file not found: {path}")
    return path.read_text().splitlines()


def read_weight_file_info(path: str | Path) -> WeightFileInfo:
    """Read the architecture and layer sizes of a weight file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidArchitectureError: If line 0 is not a valid descriptor
        WeightFormatError: If the body does not pair up with the descriptor
    """
    lines = read_weight_lines(path)
    if not lines:
        raise WeightFormatError(f"Weight file is empty: {path}")

    architecture = lines[0].strip()
    dense_count = sum(
        1 for spec in parse_architecture(architecture) if isinstance(spec, DenseSpec)
    )
    body = [line for line in lines[1:] if line.strip()]
    if len(body) != 2 * dense_count:
        raise WeightFormatError(
            f"Expected {2 * dense_count} weight lines, got {len(body)}"
        )

    counts = [
        (len(body[i].split()), len(body[i + 1].split()))
        for i in range(0, len(body), 2)
    ]
    return WeightFileInfo(architecture=architecture, layer_value_counts=counts)
