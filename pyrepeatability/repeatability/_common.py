"""
Common data structures for repeatability estimation.

RptParams is the parameter payload wrapped by Result[P] and exposed
through RepeatabilitySolution. The remaining classes are the values
passed between the point estimator and the resampling engines.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class VarianceComponents:
    """
    Variance components of a fitted model, on the link scale.

    - group_variance: grouping factor → random intercept variance
    - observation_variance: variance of the observation-level random
      intercept (the overdispersion), 0.0 if the model has none
    """
    group_variance: dict[str, float]
    observation_variance: float


@dataclass(frozen=True)
class RepeatabilityEstimate:
    """
    Repeatability per grouping factor on both scales.

    - groups: grouping factor names, shape (k,)
    - link: R on the latent (link) scale, shape (k,)
    - original: R on the original (data) scale, shape (k,);
      all NaN under the probit link
    """
    groups: tuple[str, ...]
    link: NDArray[np.floating[Any]]
    original: NDArray[np.floating[Any]]

    @classmethod
    def missing(cls, groups: Sequence[str]) -> RepeatabilityEstimate:
        """Placeholder for a replicate whose refit failed."""
        k = len(groups)
        return cls(
            groups=tuple(groups),
            link=np.full(k, np.nan),
            original=np.full(k, np.nan),
        )


@dataclass(frozen=True)
class PointEstimate:
    """
    Output of the point estimator for one dataset.

    - degenerate: a requested group's variance is exactly zero
      (only ever set when flagging was requested)
    """
    estimate: RepeatabilityEstimate
    degenerate: bool
    variance: VarianceComponents
    model: Any


@dataclass(frozen=True)
class ReplicateSamples:
    """
    Replicate estimates of one resampling phase.

    Rows are replicates, columns follow the requested groups. Failed
    replicates are NaN rows.
    """
    link: NDArray[np.floating[Any]]        # shape (R, k)
    original: NDArray[np.floating[Any]]    # shape (R, k)

    @property
    def R(self) -> int:
        return self.link.shape[0]


@dataclass(frozen=True)
class LRTSummary:
    """
    Likelihood-ratio test for one grouping factor.

    deviance = -2 * (loglik_reduced - loglik_full); p-value halved for
    the boundary of a variance constrained to be non-negative.
    """
    group: str
    loglik_full: float
    loglik_reduced: float
    deviance: float
    df: int
    p_value: float


@dataclass(frozen=True)
class RptParams:
    """
    Parameter payload for a binary repeatability analysis.

    Matches the structure of R's rpt objects:
    - R: point estimates on link and original scale
    - se_*: bootstrap standard errors, shape (k,)
    - ci_*: empirical bootstrap intervals, shape (k, 2)
    - p_*: LRT and permutation p-values, shape (k,)
    - boot / permut: raw replicate estimates
    """
    groups: tuple[str, ...]
    R: RepeatabilityEstimate
    se_link: NDArray[np.floating[Any]]
    se_org: NDArray[np.floating[Any]]
    ci_link: NDArray[np.floating[Any]]
    ci_org: NDArray[np.floating[Any]]
    p_lrt: NDArray[np.floating[Any]]
    p_permut_link: NDArray[np.floating[Any]]
    p_permut_org: NDArray[np.floating[Any]]
    boot: ReplicateSamples
    permut: ReplicateSamples
    lrt: dict[str, LRTSummary]
    ngroups: dict[str, int]
    nobs: int
    overdisp: float
    model: Any
