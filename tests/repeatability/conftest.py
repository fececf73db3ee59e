"""
Shared fixtures for repeatability tests.

Provides small binary datasets with known group structure and stub
fitters implementing the ModelFitter protocol, so engine behaviour can
be tested without numerical optimization.
"""

from dataclasses import dataclass

import numpy as np
import pytest

from pyrepeatability.core.exceptions import FitError


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(99)


@pytest.fixture
def binary_data(rng):
    """Binary y ~ (1 | id) with a crossed (1 | pop) factor.

    20 individuals measured 5 times = 100 observations. Between-
    individual SD on the logit scale is 1.5, between-population SD 0.5.
    """
    n_id = 20
    n_rep = 5
    n = n_id * n_rep

    ind = np.repeat(np.arange(n_id), n_rep)
    pop = np.array(['A', 'B', 'C', 'D'])[ind % 4]
    sex = np.where(ind % 2 == 0, 'F', 'M')

    id_effects = rng.normal(0, 1.5, size=n_id)
    pop_effects = dict(zip('ABCD', rng.normal(0, 0.5, size=4)))
    eta = 0.2 + id_effects[ind] + np.array([pop_effects[p] for p in pop])
    y = rng.binomial(1, 1.0 / (1.0 + np.exp(-eta))).astype(float)

    return {'y': y, 'id': ind, 'pop': pop, 'sex': sex}


# ═══════════════════════════════════════════════════════════════════════
# Stub fitter
# ═══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class StubTerm:
    group: str
    variance: float
    std_dev: float


class StubModel:
    """FittedModel with fixed variances and fitted probabilities."""

    def __init__(self, variances, beta0, log_likelihood, y):
        self.var_components = tuple(
            StubTerm(g, v, float(np.sqrt(v))) for g, v in variances.items()
        )
        self.coefficients = np.array([beta0])
        self.fitted_values = np.full(len(y), 0.5)
        self.residuals = y - self.fitted_values
        self.log_likelihood = log_likelihood

    def simulate(self, n_sim, rng):
        n = len(self.fitted_values)
        return rng.binomial(1, self.fitted_values, size=(n_sim, n)).astype(float)


class StubFitter:
    """ModelFitter returning the same variances for every dataset.

    Each random term missing from the spec lowers the log-likelihood by
    drop_cost[group]. With fail_replicates, any dataset whose response
    differs from the first one fitted raises FitError.
    """

    def __init__(self, variances, beta0=0.0, loglik=-50.0, drop_cost=None,
                 fail_replicates=False):
        self.variances = dict(variances)
        self.beta0 = beta0
        self.loglik = loglik
        self.drop_cost = drop_cost or {}
        self.fail_replicates = fail_replicates
        self.specs = []
        self._observed = None

    def __call__(self, spec, data, link):
        self.specs.append(spec)
        y = np.asarray(data[spec.response], dtype=float)
        if self._observed is None:
            self._observed = y
        elif self.fail_replicates and not np.array_equal(y, self._observed):
            raise FitError("stub refit failed", reason='stub')

        variances = {g: v for g, v in self.variances.items() if g in spec.random}
        loglik = self.loglik - sum(
            cost for g, cost in self.drop_cost.items() if g not in spec.random
        )
        return StubModel(variances, self.beta0, loglik, y)


class FailingFitter:
    """ModelFitter that always fails."""

    def __call__(self, spec, data, link):
        raise FitError("no convergence", reason='stub')


@pytest.fixture
def stub_data():
    """40 observations on 10 individuals; only the shape matters to stubs."""
    ind = np.repeat(np.arange(10), 4)
    y = np.tile([0.0, 1.0, 1.0, 0.0], 10)
    return {'y': y, 'id': ind, 'pop': ind % 2}


@pytest.fixture
def make_stub_fitter():
    """Factory for StubFitter instances."""
    return StubFitter


@pytest.fixture
def failing_fitter():
    return FailingFitter()
