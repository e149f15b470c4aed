"""
Pooling layer for spatial dimension reduction.
"""
from enum import Enum

import numpy as np

from ..exceptions import InvalidArgumentError
from ..tensor import Tensor
from ._conv import get_patches, window_output_size
from .layers import Layer, check_positive


class PoolingMode(Enum):
    MAX = 'max'
    AVERAGE = 'average'


class PoolingLayer(Layer):
    """
    Max or average pooling over each channel of an
    (input_height, input_width, input_depth) volume.

    The layer has no parameters. Max pooling remembers, for every output cell,
    the flat input index row * input_width + col of the first maximum found in
    a row-major scan of its window.
    """

    def __init__(self, input_height, input_width, input_depth, pool_size,
                 stride, mode=PoolingMode.MAX):
        """Constructor"""
        super().__init__()
        check_positive(input_height=input_height, input_width=input_width,
                       input_depth=input_depth, pool_size=pool_size, stride=stride)
        try:
            mode = PoolingMode(mode.lower() if isinstance(mode, str) else mode)
        except ValueError as e:
            raise InvalidArgumentError(f"Unknown pooling mode: {mode}") from e

        self.input_height = int(input_height)
        self.input_width = int(input_width)
        self.input_depth = int(input_depth)
        self.pool_size = int(pool_size)
        self.stride = int(stride)
        self.mode = mode

        self.output_height = window_output_size(
            'PoolingLayer', 'height', input_height, pool_size, stride)
        self.output_width = window_output_size(
            'PoolingLayer', 'width', input_width, pool_size, stride)

        self._max_indices = None

    @property
    def input_shape(self):
        return (self.input_height, self.input_width, self.input_depth)

    @property
    def output_shape(self):
        return (self.output_height, self.output_width, self.input_depth)

    @property
    def max_indices(self):
        """ndarray: Flat input index of each output cell's maximum (max mode)."""
        if self._max_indices is None:
            return None
        return self._max_indices.copy()

    def _window_origins(self):
        rows = np.arange(self.output_height) * self.stride
        cols = np.arange(self.output_width) * self.stride
        return rows, cols

    def forward(self, input_data):
        """Forward pass: max or average of each window"""
        self._check_input(input_data)
        self._input = input_data.copy()

        # patches: (out_h, out_w, depth, pool, pool)
        patches = get_patches(self._input.values, (self.pool_size, self.pool_size),
                              (self.stride, self.stride))
        patches = patches[:self.output_height, :self.output_width]
        windows = patches.reshape(self.output_height, self.output_width,
                                  self.input_depth, -1)

        if self.mode is PoolingMode.MAX:
            # argmax returns the first maximum in row-major window order
            local = np.argmax(windows, axis=-1)
            output = np.take_along_axis(windows, local[..., None], axis=-1)[..., 0]
            rows, cols = self._window_origins()
            abs_rows = rows[:, None, None] + local // self.pool_size
            abs_cols = cols[None, :, None] + local % self.pool_size
            self._max_indices = abs_rows * self.input_width + abs_cols
        else:
            output = np.mean(windows, axis=-1)

        self._output = Tensor.from_array(output)
        return self._output.copy()

    def backward(self, output_gradient):
        """
        Backward pass.

        Max: each cell's gradient goes entirely to its remembered input
        position. Average: each cell's gradient is split equally over its
        window. Overlapping windows add up.
        """
        self._check_gradient(output_gradient)
        grad = output_gradient.values
        input_grad = np.zeros(self.input_shape)

        if self.mode is PoolingMode.MAX:
            flat_grad = input_grad.reshape(-1, self.input_depth)
            channels = np.broadcast_to(np.arange(self.input_depth),
                                       self._max_indices.shape)
            np.add.at(flat_grad, (self._max_indices.ravel(), channels.ravel()),
                      grad.ravel())
        else:
            share = grad / (self.pool_size * self.pool_size)
            row_span = self.stride * (self.output_height - 1) + 1
            col_span = self.stride * (self.output_width - 1) + 1
            for a in range(self.pool_size):
                for b in range(self.pool_size):
                    input_grad[a:a + row_span:self.stride,
                               b:b + col_span:self.stride, :] += share

        return Tensor.from_array(input_grad)

    def __repr__(self):
        return (f"PoolingLayer(input_shape={self.input_shape}, "
                f"pool_size={self.pool_size}, stride={self.stride}, "
                f"mode={self.mode.name})")
