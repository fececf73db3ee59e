"""
Design validation for binomial GLMMs.

MixedDesign validates and organizes the inputs for a fit: the 0/1
response y, the fixed effects matrix X and the grouping variables that
each carry a random intercept. MixedDesign.from_spec builds those arrays
from a ModelSpec and a column mapping.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.exceptions import ValidationError
from pyrepeatability.core.validation import (
    check_array, check_binary, check_columns, check_finite,
)
from pyrepeatability.mixed._formula import ModelSpec, OBSERVATION_LEVEL


@dataclass(frozen=True)
class MixedDesign:
    """Validated design for a binomial GLMM.

    Attributes:
        y: Response vector (n,), values 0/1.
        X: Fixed effects design matrix (n, p), intercept first.
        groups: Dict of grouping factor name → group labels (n,).
        coef_names: Names of the columns of X.
        n: Number of observations.
        p: Number of fixed effect columns.
    """
    y: NDArray
    X: NDArray
    groups: dict[str, NDArray]
    coef_names: tuple[str, ...]
    n: int
    p: int

    @staticmethod
    def validate(
        y: NDArray,
        X: NDArray,
        groups: dict[str, NDArray],
        coef_names: tuple[str, ...] | None = None,
    ) -> 'MixedDesign':
        """Validate inputs and create a MixedDesign.

        Args:
            y: Binary response vector.
            X: Fixed effects design matrix. If 1-D, treated as a single
               column. Should include the intercept column.
            groups: Dict mapping grouping factor names to group label arrays.
            coef_names: Optional names for the columns of X.

        Returns:
            Validated MixedDesign.

        Raises:
            ValidationError: On invalid inputs.
        """
        y = check_array(y, 'y').ravel()
        n = len(y)

        if n < 3:
            raise ValidationError(f"Need at least 3 observations, got {n}")
        check_finite(y, 'y')
        check_binary(y, 'y')

        X = check_array(X, 'X')
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if X.shape[0] != n:
            raise ValidationError(
                f"X has {X.shape[0]} rows, expected {n} (matching y)"
            )
        check_finite(X, 'X')
        p = X.shape[1]

        if coef_names is None:
            coef_names = _default_coef_names(p)
        elif len(coef_names) != p:
            raise ValidationError(
                f"coef_names has {len(coef_names)} entries, expected {p}"
            )

        if not groups:
            raise ValidationError("At least one grouping factor required")

        groups_validated = {
            name: _check_grouping(name, g, n) for name, g in groups.items()
        }

        return MixedDesign(
            y=y,
            X=X,
            groups=groups_validated,
            coef_names=tuple(coef_names),
            n=n,
            p=p,
        )

    @staticmethod
    def from_spec(spec: ModelSpec, data: Mapping[str, Any]) -> 'MixedDesign':
        """Build a design from a ModelSpec and a column mapping.

        The observation-level grouping variable is generated here, one
        level per row, when the spec carries it.
        """
        observed = [g for g in spec.random if g != OBSERVATION_LEVEL]
        check_columns(data, (spec.response, *spec.fixed, *observed), 'data')

        y = np.asarray(data[spec.response])
        n = len(y)

        columns = [np.ones(n, dtype=np.float64)]
        names = ['(Intercept)']
        for col in spec.fixed:
            values = np.asarray(data[col])
            if np.issubdtype(values.dtype, np.number):
                columns.append(values.astype(np.float64))
                names.append(col)
            else:
                # Treatment coding, first sorted level is the reference
                levels = np.unique(values)
                for level in levels[1:]:
                    columns.append((values == level).astype(np.float64))
                    names.append(f'{col}{level}')

        groups = {}
        for g in spec.random:
            if g == OBSERVATION_LEVEL:
                groups[g] = np.arange(n)
            else:
                groups[g] = np.asarray(data[g])

        return MixedDesign.validate(
            y, np.column_stack(columns), groups, tuple(names),
        )


def _check_grouping(name: str, labels: Any, n: int) -> NDArray:
    """One label per observation and at least two distinct levels."""
    labels = np.asarray(labels)
    if labels.shape[0] != n:
        raise ValidationError(
            f"Group '{name}' has {labels.shape[0]} elements, expected {n}"
        )
    n_levels = np.unique(labels).size
    if n_levels < 2:
        raise ValidationError(
            f"Group '{name}' has only {n_levels} level(s), need at least 2"
        )
    return labels


def _default_coef_names(p: int) -> list[str]:
    """Generate default coefficient names."""
    return ['(Intercept)'] + [f'X{i}' for i in range(1, p)]
