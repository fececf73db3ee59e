"""
Parametric bootstrap for repeatability.

Response vectors are simulated from the fitted full model conditional on
its estimated fixed and random effects, each replicate is refitted, and
the replicate estimates are summarized by empirical quantiles and their
standard deviation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.repeatability._common import PointEstimate, ReplicateSamples
from pyrepeatability.repeatability._replicates import run_replicates

if TYPE_CHECKING:
    from pyrepeatability.repeatability.design import RepeatabilityDesign

logger = logging.getLogger(__name__)


def bootstrap_replicates(
    point: PointEstimate,
    design: RepeatabilityDesign,
    rng: np.random.Generator,
) -> ReplicateSamples:
    """Refit `design.nboot` responses simulated from the observed fit.

    Returns (nboot, k) sample arrays; (0, k) when nboot is 0.
    """
    k = len(design.groups)
    if design.nboot == 0:
        return ReplicateSamples(link=np.empty((0, k)), original=np.empty((0, k)))

    logger.debug("Bootstrap: %d replicate(s)", design.nboot)
    responses = point.model.simulate(design.nboot, rng)

    return run_replicates(
        list(responses),
        spec=design.spec,
        data=design.data,
        groups=design.groups,
        scale=design.scale,
        fitter=design.replicate_fitter,
        parallel=design.parallel,
        n_workers=design.n_workers,
        phase='bootstrap',
    )


def empirical_ci(
    samples: NDArray[np.floating[Any]],
    conf_level: float,
) -> NDArray[np.floating[Any]]:
    """Two-sided empirical interval per column, shape (k, 2).

    Quantiles at (1 - conf_level)/2 and 1 - (1 - conf_level)/2 with
    linear interpolation. Missing values are ignored; a column with no
    finite value gives NaN bounds.
    """
    alpha = 1.0 - conf_level
    probs = [alpha / 2.0, 1.0 - alpha / 2.0]
    k = samples.shape[1]
    ci = np.full((k, 2), np.nan)
    for j in range(k):
        col = samples[:, j]
        col = col[~np.isnan(col)]
        if col.size:
            ci[j] = np.quantile(col, probs)
    return ci


def bootstrap_se(samples: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    """Sample standard deviation per column (ddof=1), ignoring NaN.

    Columns with fewer than two finite values give NaN.
    """
    k = samples.shape[1]
    se = np.full(k, np.nan)
    for j in range(k):
        col = samples[:, j]
        col = col[~np.isnan(col)]
        if col.size >= 2:
            se[j] = np.std(col, ddof=1)
    return se


def summarize_bootstrap(
    boot: ReplicateSamples,
    conf_level: float,
) -> dict[str, NDArray[np.floating[Any]]]:
    """CI and SE on both scales: se_link, se_org, ci_link, ci_org."""
    return {
        'se_link': bootstrap_se(boot.link),
        'se_org': bootstrap_se(boot.original),
        'ci_link': empirical_ci(boot.link, conf_level),
        'ci_org': empirical_ci(boot.original, conf_level),
    }
