"""
Residual permutation test for repeatability.

Under the null hypothesis residuals are exchangeable across groups.
Each replicate shuffles the full model's residuals, adds them to the
fitted values on the link scale, and draws Bernoulli responses from the
back-transformed probabilities. The observed estimate is the first
sample, so the p-value is never below 1/npermut.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.mixed._family import Link
from pyrepeatability.repeatability._common import PointEstimate, ReplicateSamples
from pyrepeatability.repeatability._replicates import run_replicates

if TYPE_CHECKING:
    from pyrepeatability.repeatability.design import RepeatabilityDesign

logger = logging.getLogger(__name__)


def permuted_responses(
    point: PointEstimate,
    n_replicates: int,
    link: Link,
    rng: np.random.Generator,
) -> NDArray[np.floating[Any]]:
    """Null responses from permuted residuals, shape (n_replicates, n)."""
    model = point.model
    eta_fitted = link.link(np.asarray(model.fitted_values, dtype=np.float64))
    residuals = np.asarray(model.residuals, dtype=np.float64)

    responses = np.empty((n_replicates, residuals.shape[0]))
    for i in range(n_replicates):
        eta = eta_fitted + rng.permutation(residuals)
        responses[i] = rng.binomial(1, link.linkinv(eta))
    return responses


def permutation_replicates(
    point: PointEstimate,
    design: RepeatabilityDesign,
    rng: np.random.Generator,
) -> ReplicateSamples:
    """Observed estimate plus `npermut - 1` refitted null replicates.

    Returns (npermut, k) sample arrays whose row 0 is the observed
    estimate.
    """
    n_replicates = design.npermut - 1
    logger.debug("Permutation: %d replicate(s)", n_replicates)
    responses = permuted_responses(point, n_replicates, design.scale.link, rng)

    samples = run_replicates(
        list(responses),
        spec=design.spec,
        data=design.data,
        groups=design.groups,
        scale=design.scale,
        fitter=design.replicate_fitter,
        parallel=design.parallel,
        n_workers=design.n_workers,
        phase='permutation',
        offset=1,
    )
    samples.link[0] = point.estimate.link
    samples.original[0] = point.estimate.original
    return samples


def permutation_pvalues(samples: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Upper-tail p-value per column.

    p = #(samples >= samples[0]) / n_rows, where row 0 is the observed
    estimate and counts once. NaN samples never count; a NaN observed
    value gives NaN.
    """
    n_rows = samples.shape[0]
    observed = samples[0]
    with np.errstate(invalid='ignore'):
        counts = np.sum(samples >= observed, axis=0)
    p = counts / n_rows
    p[np.isnan(observed)] = np.nan
    return p
