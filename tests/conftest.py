"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np

from pylmselect.regression import Design


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Simple regression dataset for basic tests."""
    n, p = 100, 3
    X = rng.standard_normal((n, p))
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity: x3 = x1 + x2."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2
    X = np.column_stack([x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def noisy_design(rng):
    """Intercept model with moderate noise: y = 1 + 2·x1 − x2 + 0·x3 + N(0, 1)."""
    n = 80
    X = rng.standard_normal((n, 3))
    y = 1.0 + X @ np.array([2.0, -1.0, 0.0]) + rng.standard_normal(n)
    return Design.from_arrays(X, y, names=['x1', 'x2', 'x3'], intercept=True)


@pytest.fixture
def aic_scenario():
    """
    Three uncorrelated standard-normal predictors, n=200,
    y = 2·x1 + 0·x2 + 0·x3 + N(0, 1).

    Seed 0 is fixed on purpose: with it the full model does not improve
    AIC over {x1}. Some seeds (2, for one) give the opposite ordering.
    """
    rng = np.random.default_rng(0)
    n = 200
    X = rng.standard_normal((n, 3))
    y = 2.0 * X[:, 0] + rng.standard_normal(n)
    return Design.from_arrays(X, y, names=['x1', 'x2', 'x3'], intercept=True)


@pytest.fixture
def planted_pair_design():
    """Six predictors; y depends on x1 and x4 only, with small noise."""
    rng = np.random.default_rng(7)
    n = 120
    X = rng.standard_normal((n, 6))
    y = 3.0 * X[:, 1] - 2.0 * X[:, 4] + 0.3 * rng.standard_normal(n)
    return Design.from_arrays(
        X, y, names=[f'x{j}' for j in range(6)], intercept=True,
    )
