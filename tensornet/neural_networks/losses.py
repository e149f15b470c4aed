"""
Loss functions operating on flattened prediction and target vectors.
"""
import numpy as np

from ..exceptions import InvalidArgumentError, LengthMismatchError


class LossFunction:
    """Base class for losses: a scalar value and its gradient w.r.t. predictions."""

    name = None

    def compute(self, predicted, actual):
        raise NotImplementedError

    def gradient(self, predicted, actual):
        raise NotImplementedError

    @staticmethod
    def _validate(predicted, actual):
        predicted = np.asarray(predicted, dtype=np.float64).ravel()
        actual = np.asarray(actual, dtype=np.float64).ravel()
        if predicted.shape[0] != actual.shape[0]:
            raise LengthMismatchError(
                "Predicted and actual arrays must have same length: "
                f"{predicted.shape[0]} vs {actual.shape[0]}")
        return predicted, actual

    def __call__(self, predicted, actual):
        return self.compute(predicted, actual)

    def __repr__(self):
        return f"{type(self).__name__}()"


class MeanSquaredError(LossFunction):
    """mean((p - a)^2)"""

    name = 'mse'

    def compute(self, predicted, actual):
        predicted, actual = self._validate(predicted, actual)
        return float(np.mean((predicted - actual) ** 2))

    def gradient(self, predicted, actual):
        predicted, actual = self._validate(predicted, actual)
        return 2 * (predicted - actual) / predicted.shape[0]


class CrossEntropy(LossFunction):
    """
    Categorical cross-entropy -sum(a * ln(p)).

    Predictions are clipped to [epsilon, 1 - epsilon] to avoid ln(0).
    """

    name = 'cross_entropy'

    def __init__(self, epsilon=1e-15):
        self.epsilon = epsilon

    def _clip(self, predicted):
        return np.clip(predicted, self.epsilon, 1 - self.epsilon)

    def compute(self, predicted, actual):
        predicted, actual = self._validate(predicted, actual)
        return float(-np.sum(actual * np.log(self._clip(predicted))))

    def gradient(self, predicted, actual):
        predicted, actual = self._validate(predicted, actual)
        return -actual / self._clip(predicted)


_LOSSES = {
    'mse': MeanSquaredError,
    'mean_squared_error': MeanSquaredError,
    'cross_entropy': CrossEntropy,
}


def get_loss(loss='mse'):
    """
    Factory function to get loss instances.

    Args:
        loss (str or LossFunction): Loss name ('mse', 'cross_entropy') or instance

    Returns:
        LossFunction instance
    """
    if isinstance(loss, LossFunction):
        return loss
    if isinstance(loss, str) and loss.lower() in _LOSSES:
        return _LOSSES[loss.lower()]()
    raise InvalidArgumentError(f"Unknown loss: {loss}")
