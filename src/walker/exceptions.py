"""Custom exceptions for the walker training engine.

This module defines the exception hierarchy shared by the matrix kernel,
the network container and the PPO agent.
"""


class WalkerError(Exception):
    """Base exception for walker training engine errors."""

    pass


class MatrixError(WalkerError):
    """Base exception for matrix kernel errors.

    These indicate a programming or architecture defect and are not
    expected to be recovered from at runtime.
    """

    pass


class ShapeMismatchError(MatrixError):
    """Raised when two matrices have incompatible shapes for an operation."""

    pass


class InvalidShapeError(MatrixError):
    """Raised when an operation is called on a matrix of the wrong shape."""

    pass


class InvalidArchitectureError(WalkerError, ValueError):
    """Raised when an architecture descriptor violates the grammar."""

    pass


class ArchitectureMismatchError(WalkerError):
    """Raised when saved weights were produced by a different architecture."""

    pass


class WeightFormatError(WalkerError):
    """Raised when a weight file is structurally malformed."""

    pass


class AgentBusyError(WalkerError, RuntimeError):
    """Raised when an agent is invoked while another call is in progress."""

    pass
