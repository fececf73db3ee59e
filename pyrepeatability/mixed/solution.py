"""
Solution wrapper for binomial GLMM fits.

GLMMSolution wraps Result[GLMMParams] and provides property accessors,
predictive simulation, and R-style summary output.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.result import Result
from pyrepeatability.mixed._common import GLMMParams, VarCompSummary
from pyrepeatability.mixed._family import resolve_link


_SIGNIF_CUTS = ((0.001, '***'), (0.01, '**'), (0.05, '*'), (0.1, '.'))


def _coef_row(name: str, est: float, se: float, z: float, p: float) -> str:
    """One fixed-effect line of the summary table, R conventions."""
    if p < 2e-16:
        p_text = '< 2e-16'
    elif p < 0.001:
        p_text = f'{p:.2e}'
    else:
        p_text = f'{p:.4f}'
    stars = next((s for cut, s in _SIGNIF_CUTS if p < cut), ' ')
    return f" {name:>15s} {est:10.4f} {se:10.4f} {z:10.3f} {p_text:>10s} {stars}"


class GLMMSolution:
    """Solution wrapper for a fitted binomial GLMM.

    Implements the FittedModel protocol consumed by the repeatability
    engines. Uses Wald z-statistics for fixed-effect inference.
    """

    def __init__(self, _result: Result[GLMMParams]):
        self._result = _result

    @property
    def params(self) -> GLMMParams:
        return self._result.params

    # --- Fixed effects ---

    @property
    def coefficients(self) -> NDArray:
        return self.params.coefficients

    @property
    def fixef(self) -> dict[str, float]:
        return dict(zip(self.params.coefficient_names, self.params.coefficients))

    @property
    def se(self) -> NDArray:
        return self.params.se

    @property
    def z_values(self) -> NDArray:
        """Wald z-statistics for fixed effects."""
        return self.params.z_values

    @property
    def p_values(self) -> NDArray:
        return self.params.p_values

    # --- Random effects ---

    @property
    def ranef(self) -> dict[str, NDArray]:
        return self.params.random_effects

    @property
    def var_components(self) -> tuple[VarCompSummary, ...]:
        return self.params.var_components

    # --- Model fit ---

    @property
    def log_likelihood(self) -> float:
        return self.params.log_likelihood

    @property
    def deviance(self) -> float:
        return self.params.deviance

    @property
    def aic(self) -> float:
        return self.params.aic

    @property
    def bic(self) -> float:
        return self.params.bic

    @property
    def link_name(self) -> str:
        return self.params.link_name

    @property
    def fitted_values(self) -> NDArray:
        """Fitted probabilities (μ̂)."""
        return self.params.fitted_values

    @property
    def linear_predictor(self) -> NDArray:
        """Linear predictor (η̂ = Xβ̂ + Zb̂)."""
        return self.params.linear_predictor

    @property
    def residuals(self) -> NDArray:
        """Raw response residuals y - μ̂."""
        return self.params.residuals

    @property
    def converged(self) -> bool:
        return self.params.converged

    @property
    def info(self) -> dict:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # --- Simulation ---

    def simulate(
        self,
        n_sim: int,
        rng: np.random.Generator,
        use_u: bool = True,
    ) -> NDArray:
        """Draw binary responses from the fitted model.

        Args:
            n_sim: Number of response vectors.
            rng: Random generator; all randomness comes from it.
            use_u: If True (default), condition on the estimated random
                effects and draw from μ̂. If False, draw fresh random
                intercepts from N(0, σ²_k) for every factor first.

        Returns:
            Array of shape (n_sim, n) with 0.0/1.0 entries.
        """
        params = self.params
        if use_u:
            mu = np.broadcast_to(params.fitted_values, (n_sim, params.n_obs))
        else:
            eta = np.tile(params.X @ params.coefficients, (n_sim, 1))
            for vc in params.var_components:
                ids = params.group_ids[vc.group]
                n_levels = params.n_groups[vc.group]
                b = rng.normal(0.0, vc.std_dev, size=(n_sim, n_levels))
                eta += b[:, ids]
            mu = resolve_link(params.link_name).linkinv(eta)
        return rng.binomial(1, mu).astype(np.float64)

    # --- Summary ---

    def _random_block(self) -> list[str]:
        params = self.params
        rows = [
            "Random effects:",
            f" {'Groups':<12s} {'Name':<15s} {'Variance':>10s} {'Std.Dev.':>10s}",
        ]
        rows += [
            f" {vc.group:<12s} {vc.name:<15s} {vc.variance:10.4f} {vc.std_dev:10.4f}"
            for vc in params.var_components
        ]
        counts = ', '.join(f'{g}, {n}' for g, n in params.n_groups.items())
        rows.append(f"Number of obs: {params.n_obs}, groups:  {counts}")
        return rows

    def _fixed_block(self) -> list[str]:
        params = self.params
        header = (f" {'':>15s} {'Estimate':>10s} {'Std. Error':>10s} "
                  f"{'z value':>10s} {'Pr(>|z|)':>10s}")
        rows = ["Fixed effects:", header]
        rows += [
            _coef_row(*row) for row in zip(
                params.coefficient_names, params.coefficients, params.se,
                params.z_values, params.p_values,
            )
        ]
        rows.append("---")
        rows.append(
            "Signif. codes:  0 '***' 0.001 '**' 0.01 '*' 0.05 '.' 0.1 ' ' 1"
        )
        return rows

    def summary(self) -> str:
        """R-style summary in the layout of lme4's summary(glmer(...))."""
        params = self.params
        out = [
            "Generalized linear mixed model fit by maximum likelihood "
            "(Laplace Approximation)",
            f" Family: binomial  ( {params.link_name} )",
            "",
            *self._random_block(),
            "",
            *self._fixed_block(),
            "",
            f"AIC: {params.aic:.1f}, BIC: {params.bic:.1f}, "
            f"logLik: {params.log_likelihood:.1f}",
        ]
        if not params.converged:
            out += ["", "WARNING: Model did not converge"]
        return '\n'.join(out)

    def __repr__(self) -> str:
        p = self.params
        return (
            f"GLMMSolution(binomial({p.link_name}), n={p.n_obs}, "
            f"fixed={len(p.coefficients)}, "
            f"random={len(p.var_components)} var components)"
        )
