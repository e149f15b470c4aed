"""
Neural networks module: layers, activations, losses, optimizers and the
sequential network that trains them.
"""
from .activations import (
    ActivationFunction,
    VectorActivation,
    Identity,
    Sigmoid,
    Tanh,
    ReLU,
    LeakyReLU,
    ELU,
    Softmax,
    get_activation
)
from .losses import (
    LossFunction,
    MeanSquaredError,
    CrossEntropy,
    get_loss
)
from .layers import Layer
from ._dense import DenseLayer
from ._conv import ConvolutionalLayer
from ._pooling import PoolingLayer, PoolingMode
from .optimizers import (
    Optimizer,
    SGDOptimizer,
    AdamOptimizer,
    get_optimizer
)
from ._network import NeuralNetwork

__all__ = [
    'ActivationFunction',
    'VectorActivation',
    'Identity',
    'Sigmoid',
    'Tanh',
    'ReLU',
    'LeakyReLU',
    'ELU',
    'Softmax',
    'get_activation',
    'LossFunction',
    'MeanSquaredError',
    'CrossEntropy',
    'get_loss',
    'Layer',
    'DenseLayer',
    'ConvolutionalLayer',
    'PoolingLayer',
    'PoolingMode',
    'Optimizer',
    'SGDOptimizer',
    'AdamOptimizer',
    'get_optimizer',
    'NeuralNetwork'
]
