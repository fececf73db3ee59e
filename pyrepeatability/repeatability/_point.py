"""
Point estimation: fit, extract variance components, transform.
"""

from __future__ import annotations

from typing import Any, Mapping, Sequence

from pyrepeatability.core.protocols import ModelFitter
from pyrepeatability.mixed._formula import ModelSpec
from pyrepeatability.repeatability._common import PointEstimate
from pyrepeatability.repeatability._transform import LinkScale, transform
from pyrepeatability.repeatability._variance import extract_variance_components


def estimate_point(
    spec: ModelSpec,
    data: Mapping[str, Any],
    groups: Sequence[str],
    scale: LinkScale,
    *,
    fitter: ModelFitter,
    flag_degenerate: bool = False,
) -> PointEstimate:
    """Repeatability of `groups` for one dataset.

    Args:
        spec: Model specification, observation-level term included.
        data: Column mapping holding the response and model columns.
        groups: Grouping factors to report.
        scale: Link variant.
        fitter: ModelFitter used for the fit.
        flag_degenerate: Report whether any requested group's variance
            is exactly zero. Only the observed estimate asks for this.

    Returns:
        PointEstimate carrying the estimate, the degenerate flag, the
        variance components and the fitted model.

    Raises:
        FitError: If the fitter fails.
    """
    model = fitter(spec, data, scale.name)
    variance = extract_variance_components(model)
    beta0 = float(model.coefficients[0])
    estimate = transform(variance, groups, beta0, scale)

    degenerate = flag_degenerate and any(
        variance.group_variance[g] == 0.0 for g in groups
    )

    return PointEstimate(
        estimate=estimate,
        degenerate=degenerate,
        variance=variance,
        model=model,
    )
