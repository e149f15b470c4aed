"""
Pytest configuration for the test suite.

Provides seeded random generators so weight initialization and shuffling
are reproducible across runs.
"""

import numpy as np
import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def rng():
    """Seeded generator for layer initialization."""
    return np.random.default_rng(1234)


@pytest.fixture
def fixed_dense():
    """DenseLayer(2 -> 1), identity activation, weights [[1], [1]], bias [0]."""
    from tensornet import DenseLayer

    layer = DenseLayer(2, 1, rng=np.random.default_rng(0))
    layer.weights.values[...] = 1.0
    layer.biases.fill(0.0)
    return layer
