"""
Design class for binary repeatability analysis.

RepeatabilityDesign encapsulates all inputs needed by the point estimator
and the resampling engines. Immutable, validated at construction.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.exceptions import ConfigurationError, ValidationError
from pyrepeatability.core.protocols import ModelFitter
from pyrepeatability.core.validation import check_columns, check_probability
from pyrepeatability.mixed import ModelSpec, OBSERVATION_LEVEL, fit_binomial
from pyrepeatability.repeatability._transform import LinkScale, resolve_link_scale


@dataclass(frozen=True)
class RepeatabilityDesign:
    """
    Frozen design for a binary repeatability analysis.

    Attributes:
        spec: Model specification including the observation-level term.
        groups: Grouping factors whose repeatability is estimated.
        data: Snapshot of the model's columns as numpy arrays.
        scale: Link variant (logit or probit).
        conf_level: Width of the bootstrap confidence intervals.
        nboot: Parametric bootstrap replicates (>= 0).
        npermut: Permutation replicates including the observed one (>= 1).
        parallel: Dispatch replicates to a process pool.
        n_workers: Pool size, or None for all cores but one.
        seed: Seed for the random generator driving all resampling.
        fitter: ModelFitter for the observed and likelihood-ratio fits.
        replicate_fitter: ModelFitter for bootstrap and permutation
            refits. With the default fitter it rejects non-converged
            fits, so such replicates are recorded as missing.
    """
    spec: ModelSpec
    groups: tuple[str, ...]
    data: dict[str, NDArray]
    scale: LinkScale
    conf_level: float
    nboot: int
    npermut: int
    parallel: bool
    n_workers: int | None
    seed: int | None
    fitter: ModelFitter
    replicate_fitter: ModelFitter

    @property
    def nobs(self) -> int:
        return len(self.data[self.spec.response])

    @classmethod
    def for_binary(
        cls,
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
    ) -> RepeatabilityDesign:
        """
        Create a repeatability design with validation.

        Args:
            formula: lme4-style formula string or ModelSpec. Every group
                in `groups` must appear as a (1 | group) term.
            groups: Grouping factor name(s) to estimate repeatability for.
            data: Column mapping (dict of arrays or DataFrame).
            link: 'logit' or 'probit'.
            conf_level: Confidence interval width in (0, 1).
            nboot: Bootstrap replicates; negative values become 0.
            npermut: Permutation replicates; values below 1 become 1.
            parallel: Use a process pool for replicates.
            n_workers: Pool size (>= 1) or None.
            seed: Random seed.
            fitter: ModelFitter; defaults to mixed.fit_binomial. A
                custom fitter is also used for the replicates.

        Returns:
            Validated RepeatabilityDesign.

        Raises:
            ConfigurationError: Unsupported link, or a group that is not a
                random term of the formula.
            ValidationError: If other inputs are invalid.
        """
        scale = resolve_link_scale(link)

        spec = formula if isinstance(formula, ModelSpec) else ModelSpec.from_formula(formula)

        if isinstance(groups, str):
            groups = (groups,)
        groups = tuple(groups)
        if not groups:
            raise ValidationError("groups: at least one grouping factor required")
        if len(set(groups)) != len(groups):
            raise ValidationError(f"groups: duplicate names in {list(groups)}")

        if OBSERVATION_LEVEL in spec.random or OBSERVATION_LEVEL in groups:
            raise ConfigurationError(
                f"{OBSERVATION_LEVEL!r} is reserved for the observation-level "
                f"random effect and is added automatically",
                parameter='formula',
                value=str(spec),
            )
        absent = [g for g in groups if g not in spec.random]
        if absent:
            raise ConfigurationError(
                f"Grouping factor(s) {absent} must appear as random "
                f"intercepts (1 | group) in the formula {str(spec)!r}",
                parameter='groups',
                value=absent,
            )

        if OBSERVATION_LEVEL in data:
            raise ConfigurationError(
                f"data already has a column named {OBSERVATION_LEVEL!r}, "
                f"which is reserved for the observation-level random effect",
                parameter='data',
                value=OBSERVATION_LEVEL,
            )
        columns = (spec.response, *spec.fixed, *spec.random)
        check_columns(data, columns, 'data')
        snapshot = {col: np.array(data[col]) for col in dict.fromkeys(columns)}

        conf_level = check_probability(conf_level, 'conf_level')

        if n_workers is not None and n_workers < 1:
            raise ValidationError(f"n_workers: must be >= 1, got {n_workers}")

        return cls(
            spec=spec.with_observation_level(),
            groups=groups,
            data=snapshot,
            scale=scale,
            conf_level=conf_level,
            nboot=max(int(nboot), 0),
            npermut=max(int(npermut), 1),
            parallel=bool(parallel),
            n_workers=n_workers,
            seed=seed,
            fitter=fit_binomial if fitter is None else fitter,
            replicate_fitter=(
                partial(fit_binomial, strict=True) if fitter is None else fitter
            ),
        )
