"""
Convolutional layer for feature extraction with learnable filters.
"""
import warnings

import numpy as np

from ..common.logger import get_logger
from ..exceptions import InvalidArgumentError
from ..tensor import Tensor
from .activations import VectorActivation, get_activation
from .layers import Layer, activate, activation_delta, check_positive, is_integer

logger = get_logger(__name__)


# Helper Functions
def get_patches(arr, patch_shape, strides=(1, 1)):
    """
    Extract sliding window patches from a (height, width, channels) array.

    Args:
        arr: Input array of shape (height, width, channels)
        patch_shape: Tuple (patch_h, patch_w)
        strides: Tuple (stride_h, stride_w)

    Returns:
        Read-only view of shape (out_h, out_w, channels, patch_h, patch_w)
    """
    patch_h, patch_w = patch_shape
    stride_h, stride_w = strides
    patches = np.lib.stride_tricks.sliding_window_view(arr, (patch_h, patch_w),
                                                      axis=(0, 1))
    # Apply stride by slicing
    return patches[::stride_h, ::stride_w]


def pad_images(input_data, padding):
    """
    Pad a (height, width, channels) array with zeros on both spatial axes.

    Args:
        input_data: Input image of shape (height, width, channels)
        padding: Number of pixels to pad on each side

    Returns:
        Padded image
    """
    if padding == 0:
        return input_data
    return np.pad(input_data, ((padding, padding), (padding, padding), (0, 0)),
                  mode='constant')


def window_output_size(layer_name, axis, dim, window, stride, padding=0):
    """
    Number of window positions along one axis: floor((dim - window + 2p) / s) + 1.

    Trailing rows or columns no window reaches are dropped; a UserWarning
    reports how many.

    Returns:
        int: Output size along the axis
    """
    span = dim - window + 2 * padding
    if span < 0:
        raise InvalidArgumentError(
            f"{layer_name}: window of size {window} does not fit {axis} "
            f"{dim} with padding {padding}")
    dropped = span % stride
    if dropped:
        message = (f"{layer_name}: stride {stride} leaves the last {dropped} "
                   f"{axis} position(s) of the padded input unused "
                   f"({axis}={dim}, window={window}, padding={padding})")
        logger.warning(message)
        warnings.warn(message, UserWarning, stacklevel=3)
    return span // stride + 1


class ConvolutionalLayer(Layer):
    """
    2-D convolution (cross-correlation, no kernel flip) over an
    (input_height, input_width, input_depth) volume.

    Filters are stored in a single weight tensor of shape
    (filter_size, filter_size, num_filters * input_depth), where filter f
    reads channel d from index f * input_depth + d. Biases have shape
    (1, 1, num_filters). The output has shape (out_h, out_w, num_filters).
    """

    def __init__(self, input_height, input_width, input_depth, filter_size,
                 num_filters, stride=1, padding=0, activation=None, rng=None):
        """Constructor with Xavier-scaled Gaussian filters and zero biases"""
        super().__init__()
        check_positive(input_height=input_height, input_width=input_width,
                       input_depth=input_depth, filter_size=filter_size,
                       num_filters=num_filters, stride=stride)
        if not is_integer(padding) or padding < 0:
            raise InvalidArgumentError(
                f"padding must be a non-negative integer, got {padding!r}")
        if rng is None:
            rng = np.random.default_rng()

        self.input_height = int(input_height)
        self.input_width = int(input_width)
        self.input_depth = int(input_depth)
        self.filter_size = int(filter_size)
        self.num_filters = int(num_filters)
        self.stride = int(stride)
        self.padding = int(padding)
        self.activation = get_activation(activation)
        if isinstance(self.activation, VectorActivation):
            raise InvalidArgumentError(
                "ConvolutionalLayer supports elementwise activations only")

        self.output_height = window_output_size(
            'ConvolutionalLayer', 'height', input_height, filter_size, stride, padding)
        self.output_width = window_output_size(
            'ConvolutionalLayer', 'width', input_width, filter_size, stride, padding)

        # Xavier initialization
        scale = np.sqrt(2.0 / (filter_size * filter_size * input_depth))
        weight_shape = (filter_size, filter_size, num_filters * input_depth)
        self._weights = Tensor.from_array(rng.normal(0.0, scale, weight_shape))
        self._biases = Tensor(1, 1, num_filters)
        self._gradient_weights = Tensor(*weight_shape)
        self._gradient_biases = Tensor(1, 1, num_filters)
        self._patches = None

    @property
    def input_shape(self):
        return (self.input_height, self.input_width, self.input_depth)

    @property
    def output_shape(self):
        return (self.output_height, self.output_width, self.num_filters)

    def _filters(self, values):
        """View a weight-shaped array as (filter_size, filter_size, num_filters, input_depth)."""
        return values.reshape(self.filter_size, self.filter_size,
                              self.num_filters, self.input_depth)

    def _input_patches(self, x):
        padded = pad_images(x, self.padding)
        patches = get_patches(padded, (self.filter_size, self.filter_size),
                              (self.stride, self.stride))
        return patches[:self.output_height, :self.output_width]

    def forward(self, input_data):
        """Forward pass: cross-correlation + bias, then activation"""
        self._check_input(input_data)
        self._input = input_data.copy()

        # patches: (out_h, out_w, depth, k, k); filters: (k, k, num_filters, depth)
        self._patches = self._input_patches(self._input.values)
        z = np.einsum('ijdab,abfd->ijf', self._patches,
                      self._filters(self._weights.values))
        z = z + self._biases.values[0, 0, :]

        self._output = Tensor.from_array(activate(self.activation, z))
        return self._output.copy()

    def backward(self, output_gradient):
        """
        Backward pass with tied filter weights.

        Every output position adds its contribution to the same filter
        gradients; the input gradient is the scatter-add of
        weight * delta into each input position a window touched.
        """
        self._check_gradient(output_gradient)

        delta = activation_delta(self.activation, self._output.values,
                                 output_gradient.values)

        # Weight gradient summed over all output positions
        grad_filters = np.einsum('ijdab,ijf->abfd', self._patches, delta)
        self._gradient_weights.values[...] += grad_filters.reshape(
            self._gradient_weights.shape)

        # Bias gradient
        self._gradient_biases.values[0, 0, :] += np.sum(delta, axis=(0, 1))

        # Input gradient on the padded grid, cropped afterwards
        filters = self._filters(self._weights.values)
        padded_grad = np.zeros((self.input_height + 2 * self.padding,
                                self.input_width + 2 * self.padding,
                                self.input_depth))
        row_span = self.stride * (self.output_height - 1) + 1
        col_span = self.stride * (self.output_width - 1) + 1
        for a in range(self.filter_size):
            for b in range(self.filter_size):
                padded_grad[a:a + row_span:self.stride,
                            b:b + col_span:self.stride, :] += delta.dot(filters[a, b])

        p = self.padding
        input_grad = padded_grad[p:p + self.input_height, p:p + self.input_width, :]
        return Tensor.from_array(input_grad)

    def __repr__(self):
        return (f"ConvolutionalLayer(input_shape={self.input_shape}, "
                f"filter_size={self.filter_size}, num_filters={self.num_filters}, "
                f"stride={self.stride}, padding={self.padding}, "
                f"activation={self.activation!r})")
