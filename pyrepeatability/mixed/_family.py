"""
Bernoulli family and its two supported link functions.

Each Link defines:
- g(μ) → η  (link)
- g⁻¹(η) → μ  (inverse link)
- dμ/dη  (derivative of inverse link, for IRLS weights)

The Binomial family supplies the variance function, deviance and
log-likelihood for 0/1 responses.

References:
    McCullagh, P., & Nelder, J. A. (1989). Generalized Linear Models (2nd ed.)
    R Core Team. stats::family, stats::make.link
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import numpy as np
from numpy.typing import NDArray
from scipy.special import expit, logit
from scipy.stats import norm

from pyrepeatability.core.exceptions import ConfigurationError

_MU_EPS = 1e-10


class Link(ABC):
    """Abstract link function g(μ) mapping mean to linear predictor."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def link(self, mu: NDArray) -> NDArray:
        """g(μ) → η."""
        ...

    @abstractmethod
    def linkinv(self, eta: NDArray) -> NDArray:
        """g⁻¹(η) → μ."""
        ...

    @abstractmethod
    def mu_eta(self, eta: NDArray) -> NDArray:
        """dμ/dη = (g⁻¹)'(η)."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class LogitLink(Link):
    """Logit link: g(μ) = log(μ/(1-μ))."""

    @property
    def name(self) -> str:
        return 'logit'

    def link(self, mu: NDArray) -> NDArray:
        return logit(np.clip(mu, _MU_EPS, 1 - _MU_EPS))

    def linkinv(self, eta: NDArray) -> NDArray:
        return expit(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        p = expit(eta)
        return np.maximum(p * (1.0 - p), _MU_EPS)


class ProbitLink(Link):
    """Probit link: g(μ) = Φ⁻¹(μ)."""

    @property
    def name(self) -> str:
        return 'probit'

    def link(self, mu: NDArray) -> NDArray:
        return norm.ppf(np.clip(mu, _MU_EPS, 1 - _MU_EPS))

    def linkinv(self, eta: NDArray) -> NDArray:
        return norm.cdf(eta)

    def mu_eta(self, eta: NDArray) -> NDArray:
        return np.maximum(norm.pdf(eta), _MU_EPS)


_LINK_CLASSES: dict[str, type[Link]] = {
    'logit': LogitLink,
    'probit': ProbitLink,
}


def resolve_link(link: str | Link) -> Link:
    """Resolve a link argument to a Link instance.

    Raises:
        ConfigurationError: If the link is not 'logit' or 'probit'.
    """
    if isinstance(link, Link):
        return link
    cls = _LINK_CLASSES.get(link) if isinstance(link, str) else None
    if cls is None:
        raise ConfigurationError(
            f"Link function has to be 'logit' or 'probit', got {link!r}",
            parameter='link',
            value=link,
        )
    return cls()


class Binomial:
    """Binomial family for binary data.

    V(μ) = μ(1-μ)
    Deviance = 2 * Σ [y_i log(y_i/μ_i) + (1-y_i) log((1-y_i)/(1-μ_i))]
    """

    name = 'binomial'

    def __init__(self, link: str | Link = 'logit'):
        self._link = resolve_link(link)

    @property
    def link(self) -> Link:
        return self._link

    def variance(self, mu: NDArray) -> NDArray:
        mu = np.clip(mu, _MU_EPS, 1 - _MU_EPS)
        return mu * (1.0 - mu)

    def initialize(self, y: NDArray) -> NDArray:
        # R's default for binary data
        return (y + 0.5) / 2.0

    def deviance(self, y: NDArray, mu: NDArray) -> float:
        # For 0/1 data the saturated log-likelihood is zero.
        return -2.0 * self.log_likelihood(y, mu)

    def log_likelihood(self, y: NDArray, mu: NDArray) -> float:
        mu = np.clip(mu, _MU_EPS, 1 - _MU_EPS)
        return float(np.sum(y * np.log(mu) + (1 - y) * np.log(1 - mu)))

    def __repr__(self) -> str:
        return f"Binomial(link={self._link.name!r})"
