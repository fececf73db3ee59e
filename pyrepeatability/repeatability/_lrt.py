"""
Likelihood-ratio tests for the grouping factors' variance components.

Testing σ²_a = 0 puts the parameter on the boundary of its space, so the
null distribution of the deviance is a 50:50 mixture of χ²(0) and χ²(1)
and the χ²(1) tail probability is halved.

References:
    Self, S. G. and Liang, K.-Y. (1987). Asymptotic properties of
    maximum likelihood estimators and likelihood ratio tests under
    nonstandard conditions. JASA 82: 605-610.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from scipy import stats

from pyrepeatability.core.protocols import FittedModel
from pyrepeatability.repeatability._common import LRTSummary

if TYPE_CHECKING:
    from pyrepeatability.repeatability.design import RepeatabilityDesign

logger = logging.getLogger(__name__)

LRT_DF = 1


def lrt_pvalue(deviance: float) -> float:
    """Boundary-corrected p-value: 1 if D <= 0, else 0.5 * P(χ²₁ > D)."""
    if deviance <= 0:
        return 1.0
    return 0.5 * float(stats.chi2.sf(deviance, LRT_DF))


def likelihood_ratio_tests(
    design: RepeatabilityDesign,
    full_model: FittedModel,
) -> dict[str, LRTSummary]:
    """One reduced fit per requested group.

    Only the tested group's random intercept is dropped; the other
    groups and the observation-level term stay in the reduced model.

    Raises:
        FitError: If a reduced fit fails.
    """
    loglik_full = float(full_model.log_likelihood)
    tests = {}
    for group in design.groups:
        reduced_spec = design.spec.drop_random(group)
        logger.debug("LRT: fitting %s", reduced_spec)
        reduced = design.fitter(reduced_spec, design.data, design.scale.name)
        loglik_reduced = float(reduced.log_likelihood)
        deviance = -2.0 * (loglik_reduced - loglik_full)
        tests[group] = LRTSummary(
            group=group,
            loglik_full=loglik_full,
            loglik_reduced=loglik_reduced,
            deviance=deviance,
            df=LRT_DF,
            p_value=lrt_pvalue(deviance),
        )
    return tests
