"""
Sequential neural network: forward/backward propagation and mini-batch training.
"""
import itertools

import numpy as np

from ..common.logger import get_logger
from ..exceptions import InvalidArgumentError, ShapeMismatchError
from ..tensor import Tensor
from .layers import Layer, is_integer
from .losses import get_loss
from .optimizers import get_optimizer

logger = get_logger(__name__)

# Distinct prefix per network for optimizer state keys
_network_ids = itertools.count()


def _as_vector(target):
    """Flatten a Tensor or array-like target in row-major order."""
    if isinstance(target, Tensor):
        return target.flatten()
    return np.asarray(target, dtype=np.float64).ravel()


class NeuralNetwork:
    """
    Ordered stack of layers trained with one loss function and one optimizer.

    Gradients from every sample of a batch are summed into the layers'
    gradient buffers and consumed by a single optimizer step. They are not
    divided by the batch size, so the effective step grows with batch_size.
    """

    def __init__(self, loss='mse', optimizer='sgd', random_state=None,
                 log_interval=10, **optimizer_kwargs):
        """
        Initialize the network.

        Args:
            loss (str or LossFunction): Loss function ('mse', 'cross_entropy')
            optimizer (str or Optimizer): Optimizer ('sgd', 'adam') or instance
            random_state (int or np.random.Generator, optional): Seed for the
                shuffling generator
            log_interval (int): Log the epoch loss every this many epochs
            **optimizer_kwargs: Passed to the optimizer factory, e.g. lr=0.01
        """
        if log_interval < 1:
            raise InvalidArgumentError(f"log_interval must be >= 1, got {log_interval}")
        self.loss_function = get_loss(loss)
        self.optimizer = get_optimizer(optimizer, **optimizer_kwargs)
        self.random_state = random_state
        self.log_interval = log_interval

        self._layers = []
        self._loss_history = []
        self.rng_ = np.random.default_rng(random_state)
        self._layer_id_prefix = f"net{next(_network_ids)}"

    def add_layer(self, layer):
        """
        Append a layer after the current last layer.

        Args:
            layer (Layer): Layer whose input must accept the previous output

        Returns:
            self
        """
        if not isinstance(layer, Layer):
            raise InvalidArgumentError(f"Expected a Layer, got {type(layer).__name__}")
        if self._layers:
            previous_shape = self._layers[-1].output_shape
            if not layer.accepts(previous_shape):
                raise ShapeMismatchError(
                    f"{type(layer).__name__} expects input of shape {layer.input_shape}, "
                    f"but the previous layer produces {previous_shape}")
        self._layers.append(layer)
        logger.debug("Added layer %d: %r", len(self._layers) - 1, layer)
        return self

    @property
    def layers(self):
        return list(self._layers)

    @property
    def loss_history(self):
        """list: Mean loss of every train_batch call, oldest first."""
        return list(self._loss_history)

    def _layer_id(self, index):
        """Optimizer state key of the layer at index, unique across networks."""
        return f"{self._layer_id_prefix}/layer_{index}"

    def _require_layers(self):
        if not self._layers:
            raise InvalidArgumentError("Network has no layers")

    def forward(self, input_data):
        """Forward pass through all layers"""
        self._require_layers()
        output = input_data
        for layer in self._layers:
            output = layer.forward(output)
        return output

    def backward(self, gradient):
        """Backward pass through all layers, last to first"""
        self._require_layers()
        current_grad = gradient
        for layer in reversed(self._layers):
            current_grad = layer.backward(current_grad)
        return current_grad

    @staticmethod
    def _validate_samples(inputs, targets):
        inputs = list(inputs)
        targets = list(targets)
        if not inputs:
            raise InvalidArgumentError("inputs must not be empty")
        if len(inputs) != len(targets):
            raise ShapeMismatchError(
                "Input and target arrays must have same length: "
                f"{len(inputs)} vs {len(targets)}")
        return inputs, targets

    def _sample_loss(self, input_data, target):
        """Forward one sample; return (prediction, loss)."""
        prediction = self.forward(input_data)
        loss = self.loss_function.compute(prediction.flatten(), _as_vector(target))
        return prediction, loss

    def train_batch(self, inputs, targets):
        """
        Train on one batch and apply a single optimizer step.

        Each sample runs forward, loss and backward in turn, so every backward
        consumes the activations of its own forward pass.

        Args:
            inputs (sequence of Tensor): Batch inputs
            targets (sequence of Tensor): Batch targets

        Returns:
            float: Mean loss over the batch
        """
        self._require_layers()
        inputs, targets = self._validate_samples(inputs, targets)

        total_loss = 0.0
        try:
            for input_data, target in zip(inputs, targets):
                prediction, loss = self._sample_loss(input_data, target)
                total_loss += loss

                loss_grad = self.loss_function.gradient(prediction.flatten(),
                                                        _as_vector(target))
                self.backward(Tensor.from_array(loss_grad.reshape(prediction.shape)))
        except Exception:
            # Drop the partial batch so the next step starts clean
            for layer in self._layers:
                layer.zero_grad()
            raise

        for i, layer in enumerate(self._layers):
            self.optimizer.update(self._layer_id(i), layer)

        batch_loss = total_loss / len(inputs)
        self._loss_history.append(batch_loss)
        logger.debug("Batch of %d samples, loss %.6f", len(inputs), batch_loss)
        return batch_loss

    def _generate_batches(self, n_samples, batch_size):
        """Yield index arrays of a fresh permutation, batch_size at a time."""
        indices = self.rng_.permutation(n_samples)
        for start_idx in range(0, n_samples, batch_size):
            yield indices[start_idx:start_idx + batch_size]

    def train(self, inputs, targets, epochs, batch_size):
        """
        Mini-batch training loop.

        Args:
            inputs (sequence of Tensor): Training inputs
            targets (sequence of Tensor): Training targets
            epochs (int): Number of passes over the data (may be 0)
            batch_size (int): Samples per optimizer step; the last batch of an
                epoch may be shorter

        Returns:
            list: Mean batch loss of every epoch
        """
        self._require_layers()
        inputs, targets = self._validate_samples(inputs, targets)
        if not is_integer(epochs) or epochs < 0:
            raise InvalidArgumentError(f"epochs must be a non-negative integer, got {epochs!r}")
        if not is_integer(batch_size) or batch_size < 1:
            raise InvalidArgumentError(f"batch_size must be a positive integer, got {batch_size!r}")

        n_samples = len(inputs)
        logger.info("Training %d samples for %d epochs, batch size %d",
                    n_samples, epochs, batch_size)

        epoch_losses = []
        for epoch in range(epochs):
            batch_losses = []
            for batch_indices in self._generate_batches(n_samples, batch_size):
                batch_losses.append(self.train_batch(
                    [inputs[i] for i in batch_indices],
                    [targets[i] for i in batch_indices]))

            epoch_loss = float(np.mean(batch_losses))
            epoch_losses.append(epoch_loss)
            if epoch % self.log_interval == 0:
                logger.info("Epoch %d, Loss: %.6f", epoch, epoch_loss)

        return epoch_losses

    def predict(self, inputs):
        """
        Prediction: forward every input, no gradient bookkeeping.

        Args:
            inputs (sequence of Tensor): Inputs

        Returns:
            list: Output Tensor per input
        """
        self._require_layers()
        inputs = list(inputs)
        if not inputs:
            raise InvalidArgumentError("inputs must not be empty")
        return [self.forward(input_data) for input_data in inputs]

    def evaluate(self, inputs, targets):
        """Mean loss over the samples without touching the parameters."""
        inputs, targets = self._validate_samples(inputs, targets)
        self._require_layers()
        losses = [self._sample_loss(x, y)[1] for x, y in zip(inputs, targets)]
        return float(np.mean(losses))

    def __len__(self):
        return len(self._layers)

    def __repr__(self):
        layers = ",\n  ".join(repr(layer) for layer in self._layers)
        return (f"NeuralNetwork(loss={self.loss_function!r}, "
                f"optimizer={self.optimizer!r}, layers=[\n  {layers}\n])")
