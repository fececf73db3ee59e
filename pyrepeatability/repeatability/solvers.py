"""
Solver dispatch for binary repeatability.

Public API:
    rpt_binary() — repeatability of a binary response via a binomial GLMM
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import replace
from typing import Any, Mapping, Sequence

import numpy as np

from pyrepeatability.core.compute.timing import Timer
from pyrepeatability.core.exceptions import BoundaryWarning
from pyrepeatability.core.protocols import ModelFitter
from pyrepeatability.core.result import Result
from pyrepeatability.mixed._formula import ModelSpec
from pyrepeatability.repeatability._bootstrap import (
    bootstrap_replicates, summarize_bootstrap,
)
from pyrepeatability.repeatability._common import (
    LRTSummary, PointEstimate, ReplicateSamples, RptParams,
)
from pyrepeatability.repeatability._lrt import likelihood_ratio_tests
from pyrepeatability.repeatability._permutation import (
    permutation_pvalues, permutation_replicates,
)
from pyrepeatability.repeatability._point import estimate_point
from pyrepeatability.repeatability.design import RepeatabilityDesign
from pyrepeatability.repeatability.solution import RepeatabilitySolution

logger = logging.getLogger(__name__)


def rpt_binary(
    formula: str | ModelSpec,
    groups: str | Sequence[str],
    data: Mapping[str, Any],
    *,
    link: str = 'logit',
    conf_level: float = 0.95,
    nboot: int = 1000,
    npermut: int = 1000,
    parallel: bool = False,
    n_workers: int | None = None,
    seed: int | None = None,
    fitter: ModelFitter | None = None,
) -> RepeatabilitySolution:
    """Repeatability of a binary response.

    Fits a binomial GLMM with an observation-level random intercept
    added for overdispersion, and reports repeatability on the link and
    the original scale. Uncertainty comes from a parametric bootstrap,
    significance from a residual permutation test and a likelihood-ratio
    test per grouping factor.

    Matches R's rptR::rptBinary.

    Args:
        formula: lme4-style formula, e.g. 'y ~ sex + (1 | id)', or a
            ModelSpec.
        groups: Grouping factor(s) to estimate repeatability for; each
            must be a random intercept in the formula.
        data: Column mapping (dict of arrays or a DataFrame).
        link: 'logit' (default) or 'probit'. Probit has no
            original-scale estimate.
        conf_level: Confidence level of the bootstrap intervals.
        nboot: Parametric bootstrap replicates (0 skips the bootstrap).
        npermut: Permutation replicates including the observed one
            (1 skips the permutation test).
        parallel: Run replicates on a process pool.
        n_workers: Pool size; defaults to all cores but one.
        seed: Seed for all resampling.
        fitter: ModelFitter to use instead of mixed.fit_binomial.

    Returns:
        RepeatabilitySolution with estimates, intervals and p-values.

    Raises:
        ConfigurationError: Unsupported link, or a group that is not a
            random term of the formula.
        ValidationError: On invalid inputs.
        FitError: If the full or an LRT reduced model cannot be fitted.
        ParallelWorkerError: If the worker pool fails in a phase.

    Warns:
        BoundaryWarning: When a group's variance is estimated as exactly
            zero; the bootstrap is then skipped.
    """
    design = RepeatabilityDesign.for_binary(
        formula, groups, data,
        link=link,
        conf_level=conf_level,
        nboot=nboot,
        npermut=npermut,
        parallel=parallel,
        n_workers=n_workers,
        seed=seed,
        fitter=fitter,
    )
    rng = np.random.default_rng(design.seed)
    warn_list: list[str] = []

    with Timer() as timer:
        logger.debug("Point estimate: fitting %s (%s link)",
                     design.spec, design.scale.name)
        with timer.section('point_estimate'):
            point = estimate_point(
                design.spec, design.data, design.groups, design.scale,
                fitter=design.fitter, flag_degenerate=True,
            )

        # Settled before any bootstrap work is scheduled.
        if point.degenerate and design.nboot > 0:
            msg = (
                "Estimated variance of at least one grouping factor is "
                "exactly zero; parametric bootstrap skipped (nboot set to 0)"
            )
            warnings.warn(msg, BoundaryWarning, stacklevel=2)
            warn_list.append(msg)
            design = replace(design, nboot=0)

        with timer.section('bootstrap'):
            boot = bootstrap_replicates(point, design, rng)
            boot_summary = summarize_bootstrap(boot, design.conf_level)

        with timer.section('permutation'):
            permut = permutation_replicates(point, design, rng)

        with timer.section('lrt'):
            lrt = likelihood_ratio_tests(design, point.model)

    result = assemble_result(
        design, point, boot, boot_summary, permut, lrt,
        timing=timer.result(),
        warn_list=warn_list,
    )
    return RepeatabilitySolution(_result=result)


def assemble_result(
    design: RepeatabilityDesign,
    point: PointEstimate,
    boot: ReplicateSamples,
    boot_summary: dict[str, np.ndarray],
    permut: ReplicateSamples,
    lrt: dict[str, LRTSummary],
    *,
    timing: dict[str, float] | None = None,
    warn_list: Sequence[str] = (),
) -> Result[RptParams]:
    """Bundle all phase outputs into one immutable result."""
    ngroups = {
        g: int(np.unique(design.data[g]).size) for g in design.groups
    }

    params = RptParams(
        groups=design.groups,
        R=point.estimate,
        se_link=boot_summary['se_link'],
        se_org=boot_summary['se_org'],
        ci_link=boot_summary['ci_link'],
        ci_org=boot_summary['ci_org'],
        p_lrt=np.array([lrt[g].p_value for g in design.groups]),
        p_permut_link=permutation_pvalues(permut.link),
        p_permut_org=permutation_pvalues(permut.original),
        boot=boot,
        permut=permut,
        lrt=lrt,
        ngroups=ngroups,
        nobs=design.nobs,
        overdisp=point.variance.observation_variance,
        model=point.model,
    )

    return Result(
        params=params,
        info={
            'method': 'GLMM Laplace',
            'link': design.scale.name,
            'formula': str(design.spec),
            'conf_level': design.conf_level,
            'nboot': design.nboot,
            'npermut': design.npermut,
            'parallel': design.parallel,
            'seed': design.seed,
            'degenerate': point.degenerate,
        },
        timing=timing,
        backend_name='cpu_rpt_binary',
        warnings=tuple(warn_list),
    )
