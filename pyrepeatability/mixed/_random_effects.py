"""
Random intercept specification, Z matrix construction, and Λ_θ.

This module handles:
1. Mapping grouping variables to consecutive integer levels
2. Building the random effects design matrix Z
3. Expanding the θ parameter vector into the diagonal of Λ_θ
4. θ bounds and starting values for the optimizer

With random intercepts only, each grouping factor contributes one θ
element, the relative standard deviation of its intercepts, and Λ_θ is
diagonal. It is therefore carried as a vector throughout.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class RandomInterceptSpec:
    """Random intercept for one grouping factor.

    Attributes:
        group_name: Name of the grouping factor (e.g. 'individual').
        group_ids: 0-indexed consecutive level of each observation (n,).
        levels: Original level labels, indexed by group id.
        n_groups: Number of unique levels (J).
    """
    group_name: str
    group_ids: NDArray
    levels: NDArray
    n_groups: int


def parse_random_intercepts(
    groups: dict[str, NDArray],
    n: int,
) -> list[RandomInterceptSpec]:
    """One RandomInterceptSpec per grouping factor, in dict order."""
    specs = []
    for group_name, labels in groups.items():
        labels = np.asarray(labels)
        if labels.shape[0] != n:
            raise ValueError(
                f"Group '{group_name}' has {labels.shape[0]} elements, "
                f"expected {n}"
            )
        levels, group_ids = np.unique(labels, return_inverse=True)
        specs.append(RandomInterceptSpec(
            group_name=group_name,
            group_ids=group_ids.ravel(),
            levels=levels,
            n_groups=len(levels),
        ))
    return specs


def build_z_matrix(specs: list[RandomInterceptSpec]) -> NDArray:
    """Indicator matrix Z = [Z_1 | Z_2 | ...], shape (n, Σ J_k).

    Z_k[i, j] = 1 if observation i belongs to level j of factor k.
    """
    if not specs:
        raise ValueError("At least one random effect specification required")
    n = specs[0].group_ids.shape[0]
    total_q = sum(s.n_groups for s in specs)
    Z = np.zeros((n, total_q), dtype=np.float64)
    rows = np.arange(n)
    offset = 0
    for spec in specs:
        Z[rows, offset + spec.group_ids] = 1.0
        offset += spec.n_groups
    return Z


def build_lambda(theta: NDArray, specs: list[RandomInterceptSpec]) -> NDArray:
    """Diagonal of Λ_θ: θ_k repeated J_k times for each factor k."""
    return np.repeat(
        np.asarray(theta, dtype=np.float64),
        [s.n_groups for s in specs],
    )


def theta_lower_bounds(specs: list[RandomInterceptSpec]) -> NDArray:
    """Relative standard deviations are non-negative."""
    return np.zeros(len(specs), dtype=np.float64)


def theta_start(specs: list[RandomInterceptSpec]) -> NDArray:
    """Start every factor at σ_b = 1 on the link scale."""
    return np.ones(len(specs), dtype=np.float64)
