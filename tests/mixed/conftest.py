"""
Shared fixtures for mixed model tests.

Provides binary datasets with known random-intercept structure.
"""

import numpy as np
import pytest


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(2024)


@pytest.fixture
def glmm_binomial(rng):
    """Binomial GLMM dataset: binary y ~ x + (1 | group).

    20 groups, 10 observations each = 200 observations.
    """
    n_groups = 20
    n_per_group = 10
    n = n_groups * n_per_group

    beta0 = -0.5
    beta1 = 1.0
    sigma_group = 1.0

    group_effects = rng.normal(0, sigma_group, size=n_groups)
    group = np.repeat(np.arange(n_groups), n_per_group)
    x = rng.normal(0, 1, size=n)

    eta = beta0 + beta1 * x + group_effects[group]
    prob = 1.0 / (1.0 + np.exp(-eta))
    y = rng.binomial(1, prob).astype(float)

    X = np.column_stack([np.ones(n), x])

    return {
        'y': y, 'X': X, 'group': group, 'x': x,
        'n_groups': n_groups,
        'beta0': beta0, 'beta1': beta1,
        'sigma_group': sigma_group,
    }


@pytest.fixture
def no_group_signal(rng):
    """Binary data with no between-group variation at all.

    Every group has the same 50% success rate, balanced exactly, so
    the random intercept variance is estimated on its lower bound.
    """
    n_groups = 10
    group = np.repeat(np.arange(n_groups), 4)
    y = np.tile([0.0, 1.0, 0.0, 1.0], n_groups)
    X = np.ones((len(y), 1))
    return {'y': y, 'X': X, 'group': group}
