"""
Error types raised by the training engine.
"""


class TensornetError(Exception):
    """Base class for all engine errors."""


class ShapeMismatchError(TensornetError, ValueError):
    """Tensor or layer dimensions disagree."""


class LengthMismatchError(ShapeMismatchError):
    """Predicted and actual vectors passed to a loss differ in length."""


class InvalidArgumentError(TensornetError, ValueError):
    """Non-positive sizes, empty inputs or unknown names."""


class OperationOrderError(TensornetError, RuntimeError):
    """A layer was asked to run backward before any forward pass."""
