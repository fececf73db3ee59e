"""
Solver dispatch for binomial GLMMs.

Public API:
    glmm()          — fit a binomial random-intercept GLMM (Laplace approximation)
    fit_binomial()  — ModelFitter entry point: fit from a ModelSpec and a dataset
"""

from __future__ import annotations

import warnings
from typing import Any, Mapping

import numpy as np
from numpy.typing import ArrayLike
from scipy import stats
from scipy.linalg import cho_factor, cho_solve
from scipy.optimize import minimize

from pyrepeatability.core.compute.timing import Timer
from pyrepeatability.core.exceptions import FitError
from pyrepeatability.core.result import Result
from pyrepeatability.mixed._common import GLMMParams, VarCompSummary
from pyrepeatability.mixed._deviance import (
    laplace_deviance, profiled_deviance_glmm,
)
from pyrepeatability.mixed._family import Binomial, Link
from pyrepeatability.mixed._formula import ModelSpec
from pyrepeatability.mixed._pirls import solve_pirls
from pyrepeatability.mixed._random_effects import (
    build_lambda, build_z_matrix, parse_random_intercepts,
    theta_lower_bounds, theta_start,
)
from pyrepeatability.mixed.design import MixedDesign
from pyrepeatability.mixed.solution import GLMMSolution


def glmm(
    y: ArrayLike,
    X: ArrayLike,
    groups: dict[str, ArrayLike],
    *,
    link: str | Link = 'logit',
    coef_names: tuple[str, ...] | None = None,
    tol: float = 1e-8,
    max_iter: int = 200,
    pirls_max_iter: int = 25,
    strict: bool = False,
) -> GLMMSolution:
    """Fit a binomial generalized linear mixed model.

    Uses Laplace approximation to the marginal likelihood with
    Penalized IRLS (PIRLS) for the inner loop and L-BFGS-B for
    the outer optimization over the relative standard deviations
    of the random intercepts.

    Args:
        y: Binary response vector (n,).
        X: Fixed effects design matrix (n, p), intercept column first.
        groups: Dict mapping grouping factor names to group label arrays.
            Each factor gets one random intercept.
        link: 'logit' (default) or 'probit'.
        coef_names: Optional names for the columns of X.
        tol: Convergence tolerance of the outer optimizer.
        max_iter: Maximum outer optimizer iterations.
        pirls_max_iter: Maximum PIRLS iterations per deviance evaluation.
        strict: Raise FitError instead of warning when the optimizer or
            the final PIRLS solve does not converge.

    Returns:
        GLMMSolution with fixed effects, variance components and fit.

    Raises:
        ConfigurationError: If link is not supported.
        ValidationError: On invalid inputs.
        FitError: If the fit breaks down numerically, or does not
            converge under strict.
    """
    family = Binomial(link)
    design = MixedDesign.validate(y, X, groups, coef_names)

    with Timer() as timer:
        with timer.section('setup'):
            specs = parse_random_intercepts(design.groups, design.n)
            Z = build_z_matrix(specs)
            bounds = [(lb, None) for lb in theta_lower_bounds(specs)]

        try:
            with timer.section('optimization'):
                opt_result = minimize(
                    profiled_deviance_glmm,
                    theta_start(specs),
                    args=(design.X, Z, design.y, specs, family, 1e-8,
                          pirls_max_iter),
                    method='L-BFGS-B',
                    bounds=bounds,
                    options={'maxiter': max_iter, 'ftol': tol,
                             'gtol': tol * 10},
                )

            theta_hat = np.maximum(opt_result.x, 0.0)
            if not np.all(np.isfinite(theta_hat)):
                raise FitError(
                    f"GLMM optimizer returned non-finite parameters {theta_hat}",
                    reason='non_finite_theta',
                    n_iter=opt_result.nit,
                )

            # PIRLS once more at θ̂ to recover β̂, b̂ and RX
            with timer.section('final_solve'):
                pirls = solve_pirls(
                    design.X, Z, design.y, build_lambda(theta_hat, specs),
                    family, max_iter=pirls_max_iter,
                )
                se = _compute_se_glmm(pirls.pls.RX)
        except np.linalg.LinAlgError as exc:
            raise FitError(
                f"GLMM fit failed: {exc}", reason='singular_system',
            ) from exc

        converged = bool(opt_result.success)
        n_iter = int(opt_result.nit)
        if strict and not (converged and pirls.converged):
            raise FitError(
                f"GLMM did not converge (optimizer: {opt_result.message}; "
                f"PIRLS converged: {pirls.converged})",
                reason='not_converged',
                n_iter=n_iter,
            )
        if not converged:
            warnings.warn(
                f"GLMM optimizer did not converge after {n_iter} iterations. "
                f"Message: {opt_result.message}",
                RuntimeWarning,
                stacklevel=2,
            )

        with timer.section('model_fit'):
            # Laplace: conditional loglik - ||u||²/2 - log|L_θ|
            ll = -0.5 * laplace_deviance(pirls)
            if not np.isfinite(ll):
                raise FitError(
                    "GLMM fit produced a non-finite log-likelihood",
                    reason='non_finite_loglik',
                    n_iter=n_iter,
                )
            n_params = design.p + len(theta_hat)
            aic = -2.0 * ll + 2.0 * n_params
            bic = -2.0 * ll + np.log(design.n) * n_params

            var_comps = tuple(
                VarCompSummary(
                    group=spec.group_name,
                    name='(Intercept)',
                    variance=float(theta_hat[k] ** 2),
                    std_dev=float(theta_hat[k]),
                )
                for k, spec in enumerate(specs)
            )
            z_vals = pirls.pls.beta / se
            p_vals = 2.0 * stats.norm.sf(np.abs(z_vals))

    params = GLMMParams(
        coefficients=pirls.pls.beta,
        coefficient_names=design.coef_names,
        se=se,
        z_values=z_vals,
        p_values=p_vals,
        var_components=var_comps,
        log_likelihood=float(ll),
        deviance=pirls.deviance,
        aic=float(aic),
        bic=float(bic),
        n_obs=design.n,
        n_groups={s.group_name: s.n_groups for s in specs},
        link_name=family.link.name,
        converged=converged,
        n_iter=n_iter,
        random_effects=_extract_blups(pirls.pls.b, specs),
        fitted_values=pirls.mu,
        linear_predictor=pirls.eta,
        residuals=design.y - pirls.mu,
        X=design.X,
        group_ids={s.group_name: s.group_ids for s in specs},
        theta=theta_hat,
    )

    warn_list = []
    if not converged:
        warn_list.append(f"Optimizer did not converge: {opt_result.message}")
    if not pirls.converged:
        warn_list.append(f"PIRLS did not converge after {pirls.n_iter} iterations")

    result = Result(
        params=params,
        info={
            'method': 'Laplace',
            'family': family.name,
            'link': family.link.name,
            'optimizer': 'L-BFGS-B',
            'converged': converged,
            'pirls_converged': pirls.converged,
            'n_iter': n_iter,
            'pirls_iter': pirls.n_iter,
            'deviance': float(opt_result.fun),
        },
        timing=timer.result(),
        backend_name='cpu_glmm',
        warnings=tuple(warn_list),
    )

    return GLMMSolution(_result=result)


def fit_binomial(
    spec: ModelSpec,
    data: Mapping[str, Any],
    link: str | Link = 'logit',
    **control: Any,
) -> GLMMSolution:
    """Fit the GLMM described by spec to a column mapping.

    This is the default ModelFitter used by the repeatability engines.
    Extra keyword arguments are passed to glmm().
    """
    design = MixedDesign.from_spec(spec, data)
    return glmm(
        design.y, design.X, design.groups,
        link=link, coef_names=design.coef_names, **control,
    )


# =====================================================================
# Helpers
# =====================================================================

def _extract_blups(b: np.ndarray, specs: list) -> dict[str, np.ndarray]:
    """Split the flat b vector into one (J_k,) block per grouping factor."""
    result = {}
    offset = 0
    for spec in specs:
        result[spec.group_name] = b[offset:offset + spec.n_groups].copy()
        offset += spec.n_groups
    return result


def _compute_se_glmm(RX: np.ndarray) -> np.ndarray:
    """Fixed-effect SEs from Var(β̂) = (RX RX')⁻¹ (σ² = 1 by convention)."""
    p = RX.shape[0]
    vcov = cho_solve(cho_factor(RX @ RX.T, lower=True), np.eye(p))
    return np.sqrt(np.maximum(np.diag(vcov), 0.0))
