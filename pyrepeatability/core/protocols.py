"""
Core protocols for pyrepeatability.

These define the structural boundary between the repeatability engines
and the numerical library that fits the mixed model. We use Protocol
(structural typing) rather than ABC (nominal typing) so that any fitter
honouring the contract can be plugged in, including test doubles.

Design Principles:
    - Minimal contracts: prescribe only what the engines consume
    - Fitted models are immutable and owned by the call that made them
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, Sequence, runtime_checkable

import numpy as np
from numpy.typing import NDArray


@runtime_checkable
class VarianceTerm(Protocol):
    """One row of a fitted model's variance table."""

    @property
    def group(self) -> str:
        ...

    @property
    def variance(self) -> float:
        ...

    @property
    def std_dev(self) -> float:
        ...


@runtime_checkable
class FittedModel(Protocol):
    """
    Minimal protocol for a fitted binomial GLMM.

    The engines read the variance table, the fixed intercept (first
    coefficient), fitted probabilities, raw residuals and the Laplace
    log-likelihood, and draw predictive responses with simulate().
    """

    @property
    def var_components(self) -> Sequence[VarianceTerm]:
        ...

    @property
    def coefficients(self) -> NDArray:
        ...

    @property
    def fitted_values(self) -> NDArray:
        """Fitted probabilities μ̂ (n,)."""
        ...

    @property
    def residuals(self) -> NDArray:
        """Raw response residuals y - μ̂ (n,)."""
        ...

    @property
    def log_likelihood(self) -> float:
        ...

    def simulate(
        self,
        n_sim: int,
        rng: np.random.Generator,
    ) -> NDArray:
        """Draw n_sim response vectors, shape (n_sim, n)."""
        ...


@runtime_checkable
class ModelFitter(Protocol):
    """
    Fits a binomial GLMM to a dataset.

    Called as fitter(spec, data, link). The spec already carries the
    observation-level random term. Implementations raise FitError when
    the fit fails.
    """

    def __call__(
        self,
        spec: Any,
        data: Mapping[str, Any],
        link: str,
    ) -> FittedModel:
        ...
