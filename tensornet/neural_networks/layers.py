"""
Neural network layer contract.
"""
import numpy as np

from ..base import BaseEstimator
from ..exceptions import InvalidArgumentError, OperationOrderError, ShapeMismatchError
from ..tensor import Tensor
from .activations import VectorActivation


class Layer(BaseEstimator):
    """
    Base class for all neural network layers.

    A layer owns its parameters (weights, biases) and gradient buffers of the
    same shapes. forward() caches the input and output it saw; backward()
    consumes them, adds this sample's contribution into the gradient buffers
    and returns the gradient with respect to the input. Buffers are only
    cleared by an optimizer step (or zero_grad).
    """

    def __init__(self):
        self._weights = None
        self._biases = None
        self._gradient_weights = None
        self._gradient_biases = None
        self._input = None
        self._output = None

    def forward(self, input_data):
        """Forward pass through the layer."""
        raise NotImplementedError

    def backward(self, output_gradient):
        """Backward pass through the layer."""
        raise NotImplementedError

    @property
    def input_shape(self):
        """tuple: Shape of the tensors this layer accepts."""
        raise NotImplementedError

    @property
    def output_shape(self):
        """tuple: Shape of the tensors this layer produces."""
        raise NotImplementedError

    def accepts(self, shape):
        """Whether a tensor of the given shape is a valid input."""
        return tuple(shape) == tuple(self.input_shape)

    @property
    def weights(self):
        return self._weights

    @property
    def biases(self):
        return self._biases

    @property
    def gradient_weights(self):
        return self._gradient_weights

    @property
    def gradient_biases(self):
        return self._gradient_biases

    @property
    def input(self):
        """Tensor: Copy of the input captured by the last forward pass."""
        if self._input is None:
            return None
        return self._input.copy()

    @property
    def output(self):
        """Tensor: Copy of the output produced by the last forward pass."""
        if self._output is None:
            return None
        return self._output.copy()

    @property
    def has_parameters(self):
        return self._weights is not None

    def parameters(self):
        """
        Pairs of (parameter, gradient) tensors for optimizers.

        Returns:
            list: [(weights, gradient_weights), (biases, gradient_biases)], or
            an empty list for parameter-free layers
        """
        if not self.has_parameters:
            return []
        return [(self._weights, self._gradient_weights),
                (self._biases, self._gradient_biases)]

    def zero_grad(self):
        """Reset accumulated gradients."""
        for _, grad in self.parameters():
            grad.fill(0.0)

    def _check_input(self, input_data):
        if not isinstance(input_data, Tensor):
            raise InvalidArgumentError(
                f"{type(self).__name__} expects a Tensor, got {type(input_data).__name__}")
        if not self.accepts(input_data.shape):
            raise ShapeMismatchError(
                f"{type(self).__name__} expects input of shape {self.input_shape}, "
                f"got {input_data.shape}")

    def _check_gradient(self, output_gradient):
        if self._input is None or self._output is None:
            raise OperationOrderError(
                f"{type(self).__name__}.backward called before forward")
        if not isinstance(output_gradient, Tensor):
            raise InvalidArgumentError(
                f"{type(self).__name__} expects a Tensor gradient, "
                f"got {type(output_gradient).__name__}")
        if output_gradient.shape != self._output.shape:
            raise ShapeMismatchError(
                f"{type(self).__name__} expects gradient of shape {self._output.shape}, "
                f"got {output_gradient.shape}")

    def __call__(self, input_data):
        return self.forward(input_data)


def is_integer(value):
    """Whether value is a Python or numpy integer; bools do not count."""
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def check_positive(**sizes):
    """Raise InvalidArgumentError unless every keyword value is a positive int."""
    for name, value in sizes.items():
        if not is_integer(value) or value <= 0:
            raise InvalidArgumentError(f"{name} must be a positive integer, got {value!r}")


def activate(activation, z):
    """Apply an optional activation to a pre-activation array."""
    if activation is None:
        return z
    return activation.apply(z)


def activation_delta(activation, output, upstream_grad):
    """
    Chain the upstream gradient through an activation using its cached output.

    Args:
        activation: Elementwise or vector activation, or None
        output (ndarray): Activation output from the forward pass
        upstream_grad (ndarray): dL/d output

    Returns:
        ndarray: dL/d pre-activation
    """
    if activation is None:
        return upstream_grad.copy()
    if isinstance(activation, VectorActivation):
        flat = activation.backward_from_output(output.ravel(), upstream_grad.ravel())
        return flat.reshape(output.shape)
    return upstream_grad * activation.derivative_from_output(output)
