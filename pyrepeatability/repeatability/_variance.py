"""
Variance components from a fitted model's variance table.
"""

from __future__ import annotations

from pyrepeatability.core.protocols import FittedModel
from pyrepeatability.mixed._formula import OBSERVATION_LEVEL
from pyrepeatability.repeatability._common import VarianceComponents


def extract_variance_components(model: FittedModel) -> VarianceComponents:
    """Map each random term to its variance (the squared SD).

    The observation-level term is split off as the overdispersion
    variance; it is 0.0 when the model has no such term.
    """
    group_variance: dict[str, float] = {}
    observation_variance = 0.0
    for term in model.var_components:
        variance = float(term.std_dev) ** 2
        if term.group == OBSERVATION_LEVEL:
            observation_variance = variance
        else:
            group_variance[term.group] = variance
    return VarianceComponents(
        group_variance=group_variance,
        observation_variance=observation_variance,
    )
