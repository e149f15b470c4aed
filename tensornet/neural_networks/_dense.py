"""
Fully connected (dense) layer.
"""
import numpy as np

from ..tensor import Tensor
from .activations import get_activation
from .layers import Layer, activate, activation_delta, check_positive


class DenseLayer(Layer):
    """
    Fully connected layer: y = activation(x . W + b).

    Weights have shape (input_size, output_size, 1) and biases
    (1, output_size, 1). Any input holding input_size elements is accepted and
    read in row-major order, so a convolution or pooling volume can feed a
    dense layer directly. The output always has shape (1, output_size, 1).
    """

    def __init__(self, input_size, output_size, activation=None, rng=None):
        """
        Initialize the layer with Xavier-scaled Gaussian weights.

        Args:
            input_size (int): Number of input features
            output_size (int): Number of output units
            activation (str or activation, optional): Activation applied to the
                output; None keeps the layer linear
            rng (np.random.Generator, optional): Random number generator
        """
        super().__init__()
        check_positive(input_size=input_size, output_size=output_size)
        if rng is None:
            rng = np.random.default_rng()

        self.input_size = int(input_size)
        self.output_size = int(output_size)
        self.activation = get_activation(activation)

        # Xavier initialization
        scale = np.sqrt(2.0 / (input_size + output_size))
        self._weights = Tensor.from_array(
            rng.normal(0.0, scale, (input_size, output_size, 1)))
        self._biases = Tensor(1, output_size, 1)
        self._gradient_weights = Tensor(input_size, output_size, 1)
        self._gradient_biases = Tensor(1, output_size, 1)

    @property
    def input_shape(self):
        return (1, self.input_size, 1)

    @property
    def output_shape(self):
        return (1, self.output_size, 1)

    def accepts(self, shape):
        return int(np.prod(shape)) == self.input_size

    def forward(self, input_data):
        """
        Forward pass: activation(x . W + b)

        Args:
            input_data (Tensor): Input holding input_size elements

        Returns:
            Tensor: Output of shape (1, output_size, 1)
        """
        self._check_input(input_data)
        self._input = input_data.copy()

        x = input_data.flatten()
        z = self._biases.values[0, :, 0] + x.dot(self._weights.values[:, :, 0])
        y = activate(self.activation, z)

        self._output = Tensor.from_vector(y)
        return self._output.copy()

    def backward(self, output_gradient):
        """
        Backward pass: accumulate parameter gradients, return input gradient.

        Args:
            output_gradient (Tensor): dL/dy of shape (1, output_size, 1)

        Returns:
            Tensor: dL/dx shaped like the last forward input
        """
        self._check_gradient(output_gradient)

        y = self._output.values[0, :, 0]
        delta = activation_delta(self.activation, y, output_gradient.values[0, :, 0])
        x = self._input.flatten()

        self._gradient_weights.values[:, :, 0] += np.outer(x, delta)
        self._gradient_biases.values[0, :, 0] += delta

        input_grad = self._weights.values[:, :, 0].dot(delta)
        return Tensor.from_array(input_grad.reshape(self._input.shape))

    def __repr__(self):
        return (f"DenseLayer(input_size={self.input_size}, "
                f"output_size={self.output_size}, activation={self.activation!r})")
