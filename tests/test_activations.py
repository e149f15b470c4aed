"""
Tests for activation and loss functions.
"""

import numpy as np
import pytest

from tensornet import InvalidArgumentError, LengthMismatchError, ShapeMismatchError
from tensornet.neural_networks import (
    ELU,
    CrossEntropy,
    Identity,
    LeakyReLU,
    MeanSquaredError,
    ReLU,
    Sigmoid,
    Softmax,
    Tanh,
    get_activation,
    get_loss,
)

ELEMENTWISE = [Identity(), Sigmoid(), Tanh(), ReLU(), LeakyReLU(), ELU()]
POINTS = np.array([-3.0, -0.7, -0.01, 0.2, 1.5, 4.0])


class TestElementwiseActivations:
    """Closed-form function/derivative pairs."""

    @pytest.mark.parametrize("activation", ELEMENTWISE, ids=repr)
    def test_derivative_from_output_matches_derivative(self, activation):
        y = activation.apply(POINTS)
        np.testing.assert_allclose(activation.derivative_from_output(y),
                                   activation.derivative(POINTS), atol=1e-12)

    @pytest.mark.parametrize("activation", ELEMENTWISE, ids=repr)
    def test_derivative_matches_finite_difference(self, activation):
        eps = 1e-6
        numeric = (activation.apply(POINTS + eps) - activation.apply(POINTS - eps)) / (2 * eps)
        np.testing.assert_allclose(activation.derivative(POINTS), numeric, atol=1e-6)

    def test_known_values(self):
        assert float(Sigmoid().apply(0.0)) == 0.5
        assert float(ReLU().apply(-2.0)) == 0.0
        assert float(LeakyReLU().apply(-2.0)) == pytest.approx(-0.02)
        assert float(ELU().apply(-1.0)) == pytest.approx(np.exp(-1.0) - 1)
        assert float(Identity().derivative(123.0)) == 1.0

    def test_sigmoid_does_not_overflow(self):
        with np.errstate(over='raise'):
            assert float(Sigmoid().apply(-1e6)) == pytest.approx(0.0)


class TestSoftmax:
    """Vector activation with a full Jacobian."""

    def test_sums_to_one(self):
        out = Softmax().apply([1.0, 2.0, 3.0])
        assert out.sum() == pytest.approx(1.0)
        assert np.all(np.diff(out) > 0)

    def test_stable_for_large_inputs(self):
        out = Softmax().apply([1000.0, 1000.0])
        np.testing.assert_allclose(out, [0.5, 0.5])

    def test_backward_matches_jacobian(self):
        softmax = Softmax()
        x = np.array([0.3, -1.2, 2.0, 0.0])
        g = np.array([0.5, -1.0, 0.25, 2.0])
        y = softmax.apply(x)
        np.testing.assert_allclose(softmax.backward_from_output(y, g),
                                   softmax.jacobian(x).T.dot(g), atol=1e-12)


class TestActivationRegistry:

    @pytest.mark.parametrize("name,cls", [
        ('relu', ReLU), ('sigmoid', Sigmoid), ('tanh', Tanh), ('identity', Identity),
        ('linear', Identity), ('leaky_relu', LeakyReLU), ('elu', ELU), ('softmax', Softmax),
    ])
    def test_names(self, name, cls):
        assert isinstance(get_activation(name), cls)

    def test_instances_and_none_pass_through(self):
        relu = ReLU()
        assert get_activation(relu) is relu
        assert get_activation(None) is None

    def test_unknown_name(self):
        with pytest.raises(InvalidArgumentError):
            get_activation('swish')


class TestLosses:
    """Mean squared error and cross-entropy."""

    def test_mse_value_and_gradient(self):
        mse = MeanSquaredError()
        assert mse.compute([5.0], [7.0]) == 4.0
        np.testing.assert_allclose(mse.gradient([5.0], [7.0]), [-4.0])

    def test_mse_gradient_divides_by_length(self):
        grad = MeanSquaredError().gradient([1.0, 2.0], [0.0, 0.0])
        np.testing.assert_allclose(grad, [1.0, 2.0])

    def test_cross_entropy_value(self):
        loss = CrossEntropy().compute([0.25, 0.75], [0.0, 1.0])
        assert loss == pytest.approx(-np.log(0.75))

    def test_cross_entropy_clips_zero_probability(self):
        ce = CrossEntropy()
        loss = ce.compute([0.0, 1.0], [1.0, 0.0])
        assert np.isfinite(loss)
        assert loss == pytest.approx(-np.log(1e-15))
        assert np.all(np.isfinite(ce.gradient([0.0, 1.0], [1.0, 0.0])))

    def test_cross_entropy_gradient_matches_finite_difference(self):
        ce = CrossEntropy()
        p = np.array([0.2, 0.5, 0.3])
        a = np.array([0.0, 1.0, 0.0])
        eps = 1e-7
        numeric = []
        for i in range(3):
            step = np.zeros(3)
            step[i] = eps
            numeric.append((ce.compute(p + step, a) - ce.compute(p - step, a)) / (2 * eps))
        np.testing.assert_allclose(ce.gradient(p, a), numeric, atol=1e-5)

    @pytest.mark.parametrize("loss", [MeanSquaredError(), CrossEntropy()], ids=repr)
    def test_length_mismatch(self, loss):
        with pytest.raises(LengthMismatchError):
            loss.compute([0.1, 0.2], [0.1])
        with pytest.raises(ShapeMismatchError):
            loss.gradient([0.1], [0.1, 0.2])

    def test_registry(self):
        assert isinstance(get_loss('mse'), MeanSquaredError)
        assert isinstance(get_loss('cross_entropy'), CrossEntropy)
        with pytest.raises(InvalidArgumentError):
            get_loss('hinge')
