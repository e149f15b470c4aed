"""
Activation functions for neural network layers.

Two families are provided. Elementwise activations map each value on its own
and expose a scalar derivative. Vector activations (softmax) couple every
output to every input, so their backward pass is a Jacobian-vector product.
"""
import numpy as np

from ..exceptions import InvalidArgumentError


class ActivationFunction:
    """Base class for elementwise activations."""

    name = None

    def apply(self, x):
        """Apply the activation to a scalar or array."""
        raise NotImplementedError

    def derivative(self, x):
        """Derivative with respect to the pre-activation input x."""
        raise NotImplementedError

    def derivative_from_output(self, y):
        """
        Same derivative, expressed through the activation output y = apply(x).

        Layers cache their outputs during forward and use this in backward.
        """
        raise NotImplementedError

    def __call__(self, x):
        return self.apply(x)

    def __repr__(self):
        return f"{type(self).__name__}()"


class Identity(ActivationFunction):
    """f(x) = x"""

    name = 'identity'

    def apply(self, x):
        return np.asarray(x, dtype=np.float64) * 1.0

    def derivative(self, x):
        return np.ones_like(np.asarray(x, dtype=np.float64))

    def derivative_from_output(self, y):
        return np.ones_like(np.asarray(y, dtype=np.float64))


class Sigmoid(ActivationFunction):
    """f(x) = 1 / (1 + exp(-x))"""

    name = 'sigmoid'

    def apply(self, x):
        # Clip input to prevent overflow
        x_clipped = np.clip(np.asarray(x, dtype=np.float64), -500, 500)
        return 1 / (1 + np.exp(-x_clipped))

    def derivative(self, x):
        return self.derivative_from_output(self.apply(x))

    def derivative_from_output(self, y):
        y = np.asarray(y, dtype=np.float64)
        return y * (1 - y)


class Tanh(ActivationFunction):
    """f(x) = tanh(x)"""

    name = 'tanh'

    def apply(self, x):
        return np.tanh(np.asarray(x, dtype=np.float64))

    def derivative(self, x):
        return self.derivative_from_output(self.apply(x))

    def derivative_from_output(self, y):
        y = np.asarray(y, dtype=np.float64)
        return 1 - y ** 2


class ReLU(ActivationFunction):
    """f(x) = max(0, x)"""

    name = 'relu'

    def apply(self, x):
        return np.maximum(np.asarray(x, dtype=np.float64), 0.0)

    def derivative(self, x):
        return (np.asarray(x, dtype=np.float64) > 0).astype(np.float64)

    def derivative_from_output(self, y):
        # The output is positive exactly where the input was
        return (np.asarray(y, dtype=np.float64) > 0).astype(np.float64)


class LeakyReLU(ActivationFunction):
    """f(x) = x if x > 0 else alpha * x"""

    name = 'leaky_relu'

    def __init__(self, alpha=0.01):
        if alpha <= 0:
            raise InvalidArgumentError(f"alpha must be positive, got {alpha}")
        self.alpha = alpha

    def apply(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x > 0, x, self.alpha * x)

    def derivative(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x > 0, 1.0, self.alpha)

    def derivative_from_output(self, y):
        # alpha > 0 keeps the sign of the input
        return self.derivative(y)

    def __repr__(self):
        return f"LeakyReLU(alpha={self.alpha})"


class ELU(ActivationFunction):
    """f(x) = x if x > 0 else alpha * (exp(x) - 1)"""

    name = 'elu'

    def __init__(self, alpha=1.0):
        if alpha <= 0:
            raise InvalidArgumentError(f"alpha must be positive, got {alpha}")
        self.alpha = alpha

    def apply(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x > 0, x, self.alpha * np.expm1(np.minimum(x, 0.0)))

    def derivative(self, x):
        x = np.asarray(x, dtype=np.float64)
        return np.where(x > 0, 1.0, self.alpha * np.exp(np.minimum(x, 0.0)))

    def derivative_from_output(self, y):
        # For x <= 0: alpha * exp(x) == y + alpha
        y = np.asarray(y, dtype=np.float64)
        return np.where(y > 0, 1.0, y + self.alpha)

    def __repr__(self):
        return f"ELU(alpha={self.alpha})"


class VectorActivation:
    """Base class for activations applied to a whole vector at once."""

    name = None

    def apply(self, x):
        """Map a 1-D vector to a 1-D vector."""
        raise NotImplementedError

    def jacobian(self, x):
        """Full (n, n) Jacobian d apply(x)_i / d x_j."""
        raise NotImplementedError

    def backward_from_output(self, y, upstream_grad):
        """Jacobian-transpose times upstream_grad, using the cached output y."""
        raise NotImplementedError

    def __call__(self, x):
        return self.apply(x)

    def __repr__(self):
        return f"{type(self).__name__}()"


class Softmax(VectorActivation):
    """Numerically stable softmax."""

    name = 'softmax'

    def apply(self, x):
        x = np.asarray(x, dtype=np.float64)
        # Subtract max for numerical stability
        exp_x = np.exp(x - np.max(x))
        return exp_x / np.sum(exp_x)

    def jacobian(self, x):
        s = self.apply(x)
        return np.diag(s) - np.outer(s, s)

    def backward_from_output(self, y, upstream_grad):
        y = np.asarray(y, dtype=np.float64)
        upstream_grad = np.asarray(upstream_grad, dtype=np.float64)
        # J is symmetric: J g = y * (g - <g, y>)
        return y * (upstream_grad - np.dot(upstream_grad, y))


_ACTIVATIONS = {
    'identity': Identity,
    'linear': Identity,
    'sigmoid': Sigmoid,
    'tanh': Tanh,
    'relu': ReLU,
    'leaky_relu': LeakyReLU,
    'elu': ELU,
    'softmax': Softmax,
}


def get_activation(activation):
    """
    Resolve an activation from a name or pass an instance through.

    Args:
        activation (str, ActivationFunction, VectorActivation or None):
            Name such as 'relu', or an already built activation

    Returns:
        Activation instance, or None when no activation is requested
    """
    if activation is None or isinstance(activation, (ActivationFunction, VectorActivation)):
        return activation
    if isinstance(activation, str) and activation.lower() in _ACTIVATIONS:
        return _ACTIVATIONS[activation.lower()]()
    raise InvalidArgumentError(f"Unknown activation: {activation}")
