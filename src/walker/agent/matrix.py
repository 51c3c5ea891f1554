"""Dense 2-D matrix kernel used by the networks and the PPO agent.

The matrix wraps a float64 numpy array whose shape is fixed at construction.
Every binary operation checks shapes up front and raises
ShapeMismatchError instead of relying on numpy broadcasting, so that an
architecture defect surfaces at the operation that caused it.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Sequence

import numpy as np

from walker.exceptions import InvalidShapeError, ShapeMismatchError

LOG_SQRT_2PI = 0.5 * math.log(2.0 * math.pi)


class Matrix:
    """Immutable-shape dense matrix of floats.

    Attributes:
        height: Number of rows
        width: Number of columns
    """

    __slots__ = ("_values",)

    def __init__(self, values: np.ndarray) -> None:
        """Wrap a 2-D array. Prefer the from_* constructors.

        Args:
            values: 2-D array of values, copied into a float64 array.

        Raises:
            InvalidShapeError: If values is not 2-D or has an empty dimension.
        """
        array = np.array(values, dtype=np.float64)
        if array.ndim != 2 or array.shape[0] == 0 or array.shape[1] == 0:
            raise InvalidShapeError(
                f"Matrix requires a non-empty 2-D array, got shape {array.shape}"
            )
        self._values = array

    # Construction

    @classmethod
    def from_size(cls, height: int, width: int) -> Matrix:
        """Create a zero-filled matrix."""
        return cls(np.zeros((height, width)))

    @classmethod
    def from_values(cls, values: Sequence[float] | Sequence[Sequence[float]] | np.ndarray) -> Matrix:
        """Create a matrix from nested values.

        A flat sequence produces a column vector, matching how states,
        actions and gradients are passed around.
        """
        array = np.asarray(values, dtype=np.float64)
        if array.ndim == 1:
            array = array.reshape(-1, 1)
        return cls(array)

    @classmethod
    def from_random(cls, height: int, width: int, rng: np.random.Generator) -> Matrix:
        """Create a matrix with values drawn uniformly from [-1, 1)."""
        return cls(rng.uniform(-1.0, 1.0, size=(height, width)))

    def clone(self) -> Matrix:
        """Return a deep copy."""
        return Matrix(self._values)

    # Shape and element access

    @property
    def height(self) -> int:
        return self._values.shape[0]

    @property
    def width(self) -> int:
        return self._values.shape[1]

    @property
    def shape(self) -> tuple[int, int]:
        return self._values.shape  # type: ignore[return-value]

    def get_size(self) -> str:
        """Return the shape as "HxW", as used in error messages."""
        return f"{self.height}x{self.width}"

    def _check_index(self, row: int, column: int) -> None:
        if not (0 <= row < self.height and 0 <= column < self.width):
            raise IndexError(
                f"Index ({row}, {column}) out of range for {self.get_size()} matrix"
            )

    def get_value(self, row: int, column: int) -> float:
        """Read one element.

        Args:
            row: Zero-based row index
            column: Zero-based column index

        Returns:
            The element as a Python float

        Raises:
            IndexError: If the position is outside the matrix.
        """
        self._check_index(row, column)
        return float(self._values[row, column])

    def set_value(self, row: int, column: int, value: float) -> None:
        """Write one element in place.

        Raises:
            IndexError: If the position is outside the matrix.
        """
        self._check_index(row, column)
        self._values[row, column] = value

    def to_numpy(self) -> np.ndarray:
        """Return a copy of the underlying values."""
        return self._values.copy()

    def to_list(self) -> list[float]:
        """Return the values flattened in row-major order."""
        return self._values.ravel().tolist()

    def zero(self) -> None:
        """Reset every element to zero in place."""
        self._values.fill(0.0)

    def __repr__(self) -> str:
        return f"Matrix({self.get_size()}, {self._values.tolist()!r})"

    def __eq__(self, other: object) -> bool:
        """Exact equality of shape and every element."""
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._values, other._values))

    __hash__ = None  # type: ignore[assignment]

    # Reductions (column vectors only)

    def _require_column(self, operation: str) -> None:
        if self.width != 1:
            raise InvalidShapeError(
                f"Cannot take {operation} of a {self.get_size()} matrix: width must be 1"
            )

    def sum(self) -> float:
        """Sum of a column vector.

        Raises:
            InvalidShapeError: If the matrix is wider than one column.
        """
        self._require_column("sum")
        return float(self._values.sum())

    def max(self) -> float:
        """Largest element of a column vector.

        Raises:
            InvalidShapeError: If the matrix is wider than one column.
        """
        self._require_column("max")
        return float(self._values.max())

    def mean(self) -> float:
        """Arithmetic mean of a column vector.

        Raises:
            InvalidShapeError: If the matrix is wider than one column.
        """
        self._require_column("mean")
        return self.sum() / self.height

    # Arithmetic

    @staticmethod
    def _require_same_shape(a: Matrix, b: Matrix, operation: str) -> None:
        if a.shape != b.shape:
            raise ShapeMismatchError(
                f"Invalid matrix dimensions, {operation} {a.get_size()} matrix "
                f"with {b.get_size()}"
            )

    def __add__(self, other: Matrix | float) -> Matrix:
        """Elementwise sum with a same-shape matrix, or add a scalar to every element.

        Raises:
            ShapeMismatchError: If other is a matrix of a different shape.
        """
        if isinstance(other, Matrix):
            Matrix._require_same_shape(self, other, "adding")
            return Matrix(self._values + other._values)
        return Matrix(self._values + float(other))

    def __radd__(self, other: float) -> Matrix:
        return self + other

    def __sub__(self, other: Matrix | float) -> Matrix:
        """Elementwise difference with a same-shape matrix or a scalar.

        Raises:
            ShapeMismatchError: If other is a matrix of a different shape.
        """
        if isinstance(other, Matrix):
            Matrix._require_same_shape(self, other, "subtracting")
            return Matrix(self._values - other._values)
        return Matrix(self._values - float(other))

    def __neg__(self) -> Matrix:
        return Matrix(-self._values)

    def __mul__(self, value: float) -> Matrix:
        """Scale every element by a scalar.

        Raises:
            TypeError: If value is a matrix.
        """
        if isinstance(value, Matrix):
            raise TypeError(
                "Use '@' for matrix multiplication or hadamard_product for elementwise"
            )
        return Matrix(self._values * float(value))

    def __rmul__(self, value: float) -> Matrix:
        return self * value

    def __truediv__(self, value: float) -> Matrix:
        """Divide every element by a scalar.

        Raises:
            TypeError: If value is a matrix.
        """
        if isinstance(value, Matrix):
            raise TypeError("Use hadamard_division for elementwise division")
        return Matrix(self._values / float(value))

    def __matmul__(self, other: Matrix) -> Matrix:
        """Matrix product.

        Args:
            other: Matrix whose height equals this matrix's width

        Returns:
            A (self.height x other.width) matrix

        Raises:
            ShapeMismatchError: If the inner dimensions differ.
        """
        if self.width != other.height:
            raise ShapeMismatchError(
                f"Invalid matrix dimensions: multiplying {self.get_size()} matrix "
                f"with {other.get_size()}"
            )
        return Matrix(self._values @ other._values)

    # Elementwise helpers

    @staticmethod
    def hadamard_product(a: Matrix, b: Matrix) -> Matrix:
        """Elementwise product of two same-shape matrices.

        Raises:
            ShapeMismatchError: If the shapes differ.
        """
        Matrix._require_same_shape(a, b, "multiplying")
        return Matrix(a._values * b._values)

    @staticmethod
    def hadamard_division(a: Matrix, b: Matrix) -> Matrix:
        """Elementwise quotient a / b of two same-shape matrices.

        Raises:
            ShapeMismatchError: If the shapes differ.
        """
        Matrix._require_same_shape(a, b, "dividing")
        return Matrix(a._values / b._values)

    @staticmethod
    def exponential(matrix: Matrix) -> Matrix:
        """Apply exp to every element."""
        return Matrix(np.exp(matrix._values))

    @staticmethod
    def square_root(matrix: Matrix) -> Matrix:
        """Apply sqrt to every element."""
        return Matrix(np.sqrt(matrix._values))

    @staticmethod
    def clip(matrix: Matrix, upper: float, lower: float) -> Matrix:
        """Clamp every element into [lower, upper]."""
        return Matrix(np.clip(matrix._values, lower, upper))

    @staticmethod
    def clip_ceiling(matrix: Matrix, upper: float) -> Matrix:
        """Clamp every element to at most upper."""
        return Matrix(np.minimum(matrix._values, upper))

    @staticmethod
    def minimum(a: Matrix, b: Matrix) -> Matrix:
        """Elementwise minimum of two same-shape matrices.

        Raises:
            ShapeMismatchError: If the shapes differ.
        """
        Matrix._require_same_shape(a, b, "comparing")
        return Matrix(np.minimum(a._values, b._values))

    @staticmethod
    def compare(
        a: Matrix, b: Matrix, true_value: float = 1.0, false_value: float = 0.0
    ) -> Matrix:
        """Mask of true_value where a == b, false_value elsewhere."""
        Matrix._require_same_shape(a, b, "comparing")
        return Matrix(np.where(a._values == b._values, true_value, false_value))

    @staticmethod
    def compare_not_equal(
        a: Matrix, b: Matrix, true_value: float = 1.0, false_value: float = 0.0
    ) -> Matrix:
        """Mask of true_value where a != b, false_value elsewhere."""
        Matrix._require_same_shape(a, b, "comparing")
        return Matrix(np.where(a._values != b._values, true_value, false_value))

    @staticmethod
    def compare_in_range(
        matrix: Matrix,
        upper: float,
        lower: float,
        true_value: float = 1.0,
        false_value: float = 0.0,
    ) -> Matrix:
        """Mask of true_value where lower <= x <= upper, false_value elsewhere."""
        values = matrix._values
        inside = (values >= lower) & (values <= upper)
        return Matrix(np.where(inside, true_value, false_value))

    @staticmethod
    def transpose(matrix: Matrix) -> Matrix:
        """Return a new matrix with rows and columns swapped."""
        return Matrix(matrix._values.T)

    @staticmethod
    def flatten(matrix: Matrix) -> Matrix:
        """Sum each row into a column vector."""
        return Matrix(matrix._values.sum(axis=1, keepdims=True))

    @staticmethod
    def perform_operation(
        matrix: Matrix, operation: Callable[[np.ndarray], np.ndarray]
    ) -> Matrix:
        """Apply a vectorised elementwise operation."""
        result = np.asarray(operation(matrix._values), dtype=np.float64)
        if result.shape != matrix.shape:
            raise ShapeMismatchError(
                f"Operation changed shape from {matrix.get_size()} to {result.shape}"
            )
        return Matrix(result)

    # Gaussian sampling

    @staticmethod
    def sample_normal(mean: Matrix, std: Matrix, rng: np.random.Generator) -> Matrix:
        """Draw one sample per element from N(mean, std)."""
        Matrix._require_same_shape(mean, std, "sampling")
        return Matrix(rng.normal(mean._values, std._values))

    @staticmethod
    def log_normal_densities(mean: Matrix, std: Matrix, actions: Matrix) -> Matrix:
        """Per-element log density of actions under N(mean, std)."""
        Matrix._require_same_shape(mean, std, "evaluating")
        Matrix._require_same_shape(mean, actions, "evaluating")
        variance = std._values**2
        log_density = (
            -((actions._values - mean._values) ** 2) / (2.0 * variance)
            - np.log(std._values)
            - LOG_SQRT_2PI
        )
        return Matrix(log_density)
