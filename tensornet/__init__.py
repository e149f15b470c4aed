"""
tensornet: a small neural network training engine on numpy.
"""
from .exceptions import (
    TensornetError,
    ShapeMismatchError,
    LengthMismatchError,
    InvalidArgumentError,
    OperationOrderError
)
from .tensor import Tensor
from .neural_networks import (
    DenseLayer,
    ConvolutionalLayer,
    PoolingLayer,
    PoolingMode,
    SGDOptimizer,
    AdamOptimizer,
    NeuralNetwork
)

__version__ = '0.1.0'

__all__ = [
    'TensornetError',
    'ShapeMismatchError',
    'LengthMismatchError',
    'InvalidArgumentError',
    'OperationOrderError',
    'Tensor',
    'DenseLayer',
    'ConvolutionalLayer',
    'PoolingLayer',
    'PoolingMode',
    'SGDOptimizer',
    'AdamOptimizer',
    'NeuralNetwork'
]
