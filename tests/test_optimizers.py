"""
Tests for the SGD and Adam optimizers.
"""

import numpy as np
import pytest

from tensornet import (
    AdamOptimizer,
    DenseLayer,
    InvalidArgumentError,
    PoolingLayer,
    SGDOptimizer,
    Tensor,
)
from tensornet.neural_networks import get_optimizer


@pytest.fixture
def layer(rng):
    """DenseLayer(2 -> 1) with unit weights and a bias of 0.5."""
    dense = DenseLayer(2, 1, rng=rng)
    dense.weights.fill(1.0)
    dense.biases.fill(0.5)
    return dense


def set_gradients(layer, value):
    layer.gradient_weights.fill(value)
    layer.gradient_biases.fill(value)


class TestSGDOptimizer:
    """Test plain and momentum SGD."""

    def test_plain_step(self, layer):
        set_gradients(layer, 2.0)
        SGDOptimizer(lr=0.1).update("layer_0", layer)
        np.testing.assert_allclose(layer.weights.flatten(), [0.8, 0.8])
        np.testing.assert_allclose(layer.biases.flatten(), [0.3])

    def test_step_zeroes_gradients(self, layer):
        set_gradients(layer, 2.0)
        SGDOptimizer(lr=0.1).update("layer_0", layer)
        assert layer.gradient_weights.sum() == 0.0
        assert layer.gradient_biases.sum() == 0.0

    def test_zero_gradient_leaves_parameters(self, layer):
        before = layer.weights.copy()
        SGDOptimizer(lr=0.1).update("layer_0", layer)
        assert layer.weights == before

    def test_momentum_builds_velocity(self, layer):
        optimizer = SGDOptimizer(lr=0.1, momentum=0.9)
        set_gradients(layer, 1.0)
        optimizer.update("layer_0", layer)
        np.testing.assert_allclose(layer.weights.flatten(), [0.9, 0.9])

        set_gradients(layer, 1.0)
        optimizer.update("layer_0", layer)
        # second step moves by (1 + momentum) * lr * grad
        np.testing.assert_allclose(layer.weights.flatten(), [0.9 - 0.19, 0.9 - 0.19])
        assert "layer_0" in optimizer.velocities

    def test_nesterov_first_step(self, layer):
        optimizer = SGDOptimizer(lr=0.1, momentum=0.5, nesterov=True)
        set_gradients(layer, 1.0)
        optimizer.update("layer_0", layer)
        # momentum * (-lr * g) - lr * g
        np.testing.assert_allclose(layer.weights.flatten(), [0.85, 0.85])

    def test_parameter_free_layer_skipped(self):
        pool = PoolingLayer(2, 2, 1, pool_size=2, stride=2)
        SGDOptimizer(lr=0.1, momentum=0.9).update("layer_0", pool)
        assert pool.weights is None

    @pytest.mark.parametrize("kwargs", [dict(lr=0.0), dict(lr=-1.0), dict(momentum=1.0),
                                        dict(momentum=-0.1)])
    def test_invalid_hyperparameters(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            SGDOptimizer(**kwargs)


class TestAdamOptimizer:
    """Test Adam steps and state keeping."""

    @pytest.mark.parametrize("grad", [1e-3, 1e3, -5.0])
    def test_first_step_has_learning_rate_magnitude(self, layer, grad):
        set_gradients(layer, grad)
        AdamOptimizer(lr=0.01).update("layer_0", layer)
        step = 1.0 - layer.weights.get(0, 0, 0)
        assert abs(step) == pytest.approx(0.01, rel=1e-4)
        assert np.sign(step) == np.sign(grad)

    def test_step_zeroes_gradients(self, layer):
        set_gradients(layer, 0.3)
        AdamOptimizer().update("layer_0", layer)
        assert layer.gradient_weights.sum() == 0.0
        assert layer.gradient_biases.sum() == 0.0

    def test_time_step_per_layer(self, rng, layer):
        other = DenseLayer(1, 1, rng=rng)
        optimizer = AdamOptimizer()
        for _ in range(3):
            set_gradients(layer, 1.0)
            optimizer.update("layer_0", layer)
        optimizer.update("layer_1", other)
        assert optimizer.moments["layer_0"]["t"] == 3
        assert optimizer.moments["layer_1"]["t"] == 1

    def test_decay_scales_step(self, rng):
        plain, decayed = DenseLayer(2, 1, rng=rng), DenseLayer(2, 1, rng=rng)
        for dense in (plain, decayed):
            dense.weights.fill(0.0)
            set_gradients(dense, 1.0)
        AdamOptimizer(lr=0.01).update("layer_0", plain)
        AdamOptimizer(lr=0.01, decay_rate=0.5).update("layer_0", decayed)
        assert decayed.weights.get(0, 0, 0) == pytest.approx(plain.weights.get(0, 0, 0) / 2)

    def test_parameter_free_layer_skipped(self):
        optimizer = AdamOptimizer()
        optimizer.update("layer_0", PoolingLayer(2, 2, 1, pool_size=2, stride=2))
        assert optimizer.moments == {}

    @pytest.mark.parametrize("kwargs", [dict(lr=0.0), dict(beta1=1.0), dict(beta2=-0.5),
                                        dict(decay_rate=1.0)])
    def test_invalid_hyperparameters(self, kwargs):
        with pytest.raises(InvalidArgumentError):
            AdamOptimizer(**kwargs)

    def test_learning_rate_setter_validates(self):
        optimizer = AdamOptimizer()
        optimizer.learning_rate = 0.5
        assert optimizer.lr == 0.5
        with pytest.raises(InvalidArgumentError):
            optimizer.learning_rate = 0


class TestOptimizerFactory:

    def test_names(self):
        assert isinstance(get_optimizer('sgd', lr=0.1), SGDOptimizer)
        assert isinstance(get_optimizer('adam'), AdamOptimizer)
        assert get_optimizer('sgd', lr=0.1).lr == 0.1

    def test_instance_passes_through(self):
        optimizer = SGDOptimizer()
        assert get_optimizer(optimizer) is optimizer

    def test_unknown_name(self):
        with pytest.raises(InvalidArgumentError):
            get_optimizer('rmsprop')


def test_update_after_backward_moves_downhill(rng):
    dense = DenseLayer(2, 1, rng=rng)
    x, target = Tensor.from_vector([1.0, -1.0]), 3.0

    def loss():
        return (dense.forward(x).get(0, 0, 0) - target) ** 2

    before = loss()
    prediction = dense.forward(x).get(0, 0, 0)
    dense.backward(Tensor.from_vector([2 * (prediction - target)]))
    SGDOptimizer(lr=0.05).update("layer_0", dense)
    assert loss() < before
