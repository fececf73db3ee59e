"""
Repeatability from variance components, on link and original scale.

The link function is a closed set of two variants. Each variant knows
its latent residual variance (π²/3 for logit, 1 for probit) and its
original-scale formula; probit has none and returns NaN.

References:
    Nakagawa, S. and Schielzeth, H. (2010). Repeatability for Gaussian
    and non-Gaussian data: a practical guide for biologists.
    Biological Reviews 85: 935-956.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

import numpy as np
from numpy.typing import NDArray
from scipy.special import expit

from pyrepeatability.core.exceptions import ConfigurationError
from pyrepeatability.mixed._family import Link, LogitLink, ProbitLink
from pyrepeatability.repeatability._common import (
    RepeatabilityEstimate, VarianceComponents,
)


class LinkScale(ABC):
    """A supported link together with its repeatability formulas."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def link(self) -> Link:
        ...

    @property
    @abstractmethod
    def latent_variance(self) -> float:
        """Distribution-specific variance on the latent scale."""
        ...

    def r_link(self, var_a: NDArray, var_e: float) -> NDArray:
        """R = σ²_a / (σ²_a + σ²_e + latent variance)."""
        return var_a / (var_a + var_e + self.latent_variance)

    @abstractmethod
    def r_original(self, var_a: NDArray, var_e: float, beta0: float) -> NDArray:
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class LogitScale(LinkScale):
    """Logit link; latent variance π²/3."""

    @property
    def name(self) -> str:
        return 'logit'

    @property
    def link(self) -> Link:
        return LogitLink()

    @property
    def latent_variance(self) -> float:
        return np.pi ** 2 / 3.0

    def r_original(self, var_a: NDArray, var_e: float, beta0: float) -> NDArray:
        """Original-scale R evaluated at the intercept.

        With P = exp(β0)/(1 + exp(β0)) and q = P(1 - P) = P/(1 + exp(β0)):

            R = σ²_a q² / ((σ²_a + σ²_e) q² + q)
              = σ²_a q / ((σ²_a + σ²_e) q + 1)

        The reduced form stays finite when q underflows to zero.
        """
        q = expit(beta0) * expit(-beta0)
        return var_a * q / ((var_a + var_e) * q + 1.0)


class ProbitScale(LinkScale):
    """Probit link; latent variance 1, no original-scale R."""

    @property
    def name(self) -> str:
        return 'probit'

    @property
    def link(self) -> Link:
        return ProbitLink()

    @property
    def latent_variance(self) -> float:
        return 1.0

    def r_original(self, var_a: NDArray, var_e: float, beta0: float) -> NDArray:
        return np.full(np.shape(var_a), np.nan)


_SCALES: dict[str, type[LinkScale]] = {
    'logit': LogitScale,
    'probit': ProbitScale,
}


def resolve_link_scale(link: str | LinkScale) -> LinkScale:
    """Resolve 'logit' / 'probit' to its LinkScale.

    Raises:
        ConfigurationError: For any other value.
    """
    if isinstance(link, LinkScale):
        return link
    cls = _SCALES.get(link) if isinstance(link, str) else None
    if cls is None:
        raise ConfigurationError(
            f"Link function has to be 'logit' or 'probit', got {link!r}",
            parameter='link',
            value=link,
        )
    return cls()


def transform(
    var_comps: VarianceComponents,
    groups: Sequence[str],
    beta0: float,
    scale: LinkScale,
) -> RepeatabilityEstimate:
    """Repeatability of each requested group on both scales.

    Args:
        var_comps: Variance components of the fitted model.
        groups: Grouping factors to report, in output order.
        beta0: Fixed intercept on the link scale.
        scale: Link variant.

    Raises:
        ConfigurationError: If a group has no variance component.
    """
    missing = [g for g in groups if g not in var_comps.group_variance]
    if missing:
        raise ConfigurationError(
            f"Grouping factor(s) {missing} have no random intercept in "
            f"the fitted model",
            parameter='groups',
            value=missing,
        )

    var_a = np.array([var_comps.group_variance[g] for g in groups],
                     dtype=np.float64)
    var_e = float(var_comps.observation_variance)

    return RepeatabilityEstimate(
        groups=tuple(groups),
        link=scale.r_link(var_a, var_e),
        original=scale.r_original(var_a, var_e, float(beta0)),
    )
