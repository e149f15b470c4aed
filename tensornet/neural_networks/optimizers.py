"""
Gradient-based optimizers for neural network layers.

An optimizer consumes the gradients a layer accumulated during a batch,
updates the layer's weights and biases in place and resets the gradients to
zero. Per-layer state is keyed by a layer id, which the network derives from
the layer's position and its own prefix ("net0/layer_0", "net0/layer_1", ...),
so one optimizer instance can be shared by several networks.
"""
import numpy as np

from ..exceptions import InvalidArgumentError


class Optimizer:
    """Base class for optimizers."""

    def __init__(self, lr):
        self.learning_rate = lr

    @property
    def learning_rate(self):
        return self._lr

    @learning_rate.setter
    def learning_rate(self, value):
        if value <= 0:
            raise InvalidArgumentError(f"Learning rate must be positive, got {value}")
        self._lr = value

    @property
    def lr(self):
        return self._lr

    def update(self, layer_id, layer):
        """
        Apply one update step to a layer and zero its gradients.

        Args:
            layer_id (str): Unique identifier for the layer
            layer (Layer): Layer whose parameters are updated
        """
        raise NotImplementedError


class SGDOptimizer(Optimizer):
    """
    Stochastic Gradient Descent optimizer, optionally with momentum and
    Nesterov acceleration. With momentum=0 every step is param -= lr * grad.
    """

    def __init__(self, lr=0.01, momentum=0.0, nesterov=False):
        """
        Initialize SGD optimizer.

        Args:
            lr (float): Learning rate
            momentum (float): Momentum factor
            nesterov (bool): Whether to apply Nesterov momentum
        """
        super().__init__(lr)
        if not 0.0 <= momentum < 1.0:
            raise InvalidArgumentError(f"momentum must be in [0, 1), got {momentum}")
        self.momentum = momentum
        self.nesterov = nesterov
        self.velocities = {}

    def update(self, layer_id, layer):
        """
        Update weights using SGD.

        Args:
            layer_id (str): Unique identifier for the layer
            layer (Layer): Layer whose parameters are updated
        """
        params = layer.parameters()
        if not params:
            return

        if self.momentum == 0.0:
            for param, grad in params:
                param.values[...] -= self.lr * grad.values
                grad.fill(0.0)
            return

        # Initialize velocities if not exists
        if layer_id not in self.velocities:
            self.velocities[layer_id] = [np.zeros(param.shape) for param, _ in params]

        for velocity, (param, grad) in zip(self.velocities[layer_id], params):
            # Update velocities
            velocity *= self.momentum
            velocity -= self.lr * grad.values

            if self.nesterov:
                # Nesterov momentum
                param.values[...] += self.momentum * velocity - self.lr * grad.values
            else:
                # Standard momentum
                param.values[...] += velocity
            grad.fill(0.0)

    def __repr__(self):
        return (f"SGDOptimizer(lr={self.lr}, momentum={self.momentum}, "
                f"nesterov={self.nesterov})")


class AdamOptimizer(Optimizer):
    """
    Adam optimizer implementation with optional learning-rate decay
    lr_t = lr * (1 - decay_rate) ** t.
    """

    def __init__(self, lr=0.001, beta1=0.9, beta2=0.999, epsilon=1e-8, decay_rate=0.0):
        """
        Initialize Adam optimizer.

        Args:
            lr (float): Learning rate
            beta1 (float): Exponential decay rate for first moment
            beta2 (float): Exponential decay rate for second moment
            epsilon (float): Small constant for numerical stability
            decay_rate (float): Per-step learning rate decay
        """
        super().__init__(lr)
        for name, value in (('beta1', beta1), ('beta2', beta2), ('decay_rate', decay_rate)):
            if not 0.0 <= value < 1.0:
                raise InvalidArgumentError(f"{name} must be in [0, 1), got {value}")
        self.beta1 = beta1
        self.beta2 = beta2
        self.epsilon = epsilon
        self.decay_rate = decay_rate
        self.moments = {}

    def update(self, layer_id, layer):
        """
        Update weights using Adam optimization.

        Args:
            layer_id (str): Unique identifier for the layer
            layer (Layer): Layer whose parameters are updated
        """
        if not layer.has_parameters:
            return

        weights, bias = layer.weights, layer.biases
        weight_grad = layer.gradient_weights.values
        bias_grad = layer.gradient_biases.values

        # Initialize moments if not exists
        if layer_id not in self.moments:
            self.moments[layer_id] = {
                'm_weight': np.zeros(weights.shape),
                'v_weight': np.zeros(weights.shape),
                'm_bias': np.zeros(bias.shape),
                'v_bias': np.zeros(bias.shape),
                't': 0  # Time step per layer
            }

        moments = self.moments[layer_id]
        moments['t'] += 1
        t = moments['t']

        current_lr = self.lr * (1.0 - self.decay_rate) ** t

        # Update biased first moment estimate
        moments['m_weight'] = self.beta1 * \
            moments['m_weight'] + (1 - self.beta1) * weight_grad
        moments['m_bias'] = self.beta1 * \
            moments['m_bias'] + (1 - self.beta1) * bias_grad

        # Update biased second raw moment estimate
        moments['v_weight'] = self.beta2 * moments['v_weight'] + \
            (1 - self.beta2) * (weight_grad ** 2)
        moments['v_bias'] = self.beta2 * moments['v_bias'] + \
            (1 - self.beta2) * (bias_grad ** 2)

        # Compute bias-corrected first moment estimate
        m_weight_corrected = moments['m_weight'] / (1 - self.beta1 ** t)
        m_bias_corrected = moments['m_bias'] / (1 - self.beta1 ** t)

        # Compute bias-corrected second raw moment estimate
        v_weight_corrected = moments['v_weight'] / (1 - self.beta2 ** t)
        v_bias_corrected = moments['v_bias'] / (1 - self.beta2 ** t)

        # Update parameters
        weights.values[...] -= current_lr * m_weight_corrected / \
            (np.sqrt(v_weight_corrected) + self.epsilon)
        bias.values[...] -= current_lr * m_bias_corrected / \
            (np.sqrt(v_bias_corrected) + self.epsilon)

        layer.zero_grad()

    def __repr__(self):
        return (f"AdamOptimizer(lr={self.lr}, beta1={self.beta1}, "
                f"beta2={self.beta2}, epsilon={self.epsilon}, "
                f"decay_rate={self.decay_rate})")


def get_optimizer(solver='adam', **kwargs):
    """
    Factory function to get optimizer instances.

    Args:
        solver (str or Optimizer): Optimizer type ('sgd', 'adam') or instance
        **kwargs: Optimizer-specific parameters

    Returns:
        Optimizer instance
    """
    if isinstance(solver, Optimizer):
        return solver
    if solver == 'sgd':
        return SGDOptimizer(**kwargs)
    if solver == 'adam':
        return AdamOptimizer(**kwargs)
    raise InvalidArgumentError(f"Unknown solver: {solver}")
