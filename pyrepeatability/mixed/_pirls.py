"""
Penalized Iteratively Reweighted Least Squares (PIRLS) for GLMM.

For a GLMM with given θ (and hence Λ_θ), PIRLS iteratively finds the
conditional modes of the random effects by solving a sequence of penalized
weighted least squares problems.

This is the inner loop of GLMM estimation. The outer loop optimizes θ
to minimize the Laplace-approximated deviance.

References:
    Bates, D., Maechler, M., Bolker, B., & Walker, S. (2015).
    Fitting Linear Mixed-Effects Models Using lme4.
    Journal of Statistical Software, 67(1), Section 3.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import numpy as np
from numpy.typing import NDArray

from pyrepeatability.core.exceptions import FitError
from pyrepeatability.mixed._family import Binomial
from pyrepeatability.mixed._pls import solve_pls, PLSResult

_MAX_HALVINGS = 10


@dataclass(frozen=True)
class PIRLSResult:
    """Result from PIRLS convergence.

    Attributes:
        pls: The final PLS result (contains beta, u, b, L).
        mu: Fitted values on the response scale (n,).
        eta: Linear predictor Xβ + Zb (n,).
        deviance: Family deviance at convergence.
        converged: Whether PIRLS converged.
        n_iter: Number of PIRLS iterations.
    """
    pls: PLSResult
    mu: NDArray
    eta: NDArray
    deviance: float
    converged: bool
    n_iter: int


def solve_pirls(
    X: NDArray,
    Z: NDArray,
    y: NDArray,
    lam: NDArray,
    family: Binomial,
    tol: float = 1e-8,
    max_iter: int = 25,
) -> PIRLSResult:
    """Penalized IRLS for GLMM (inner loop).

    For given θ (hence Λ), finds conditional modes of random effects b
    and fixed effects β by iterating:

    1. Compute working response: z = η + (y - μ) / (dμ/dη)
    2. Compute working weights: w = (dμ/dη)² / V(μ)
    3. Solve penalized WLS: minimize ‖√W(z - Xβ - ZΛu)‖² + ‖u‖²
    4. Update η = Xβ + Zb, halving the step while the penalized
       deviance increases
    5. Check convergence on the penalized deviance change

    Raises:
        FitError: If the penalized deviance becomes non-finite.
    """
    link = family.link

    mu = family.initialize(y)
    eta = link.link(mu)
    pdev_old = family.deviance(y, mu)
    u_old = np.zeros(Z.shape[1], dtype=np.float64)

    converged = False
    pls_result = None
    n_iter = 0

    for n_iter in range(1, max_iter + 1):
        mu_eta_val = link.mu_eta(eta)
        z = eta + (y - mu) / mu_eta_val
        w = np.maximum((mu_eta_val ** 2) / family.variance(mu), 1e-10)

        candidate = solve_pls(X, Z, z, lam, weights=w)
        eta_new = X @ candidate.beta + Z @ candidate.b
        mu_new = link.linkinv(eta_new)
        u_new = candidate.u
        pdev_new = family.deviance(y, mu_new) + float(u_new @ u_new)

        # Step halving between the previous iterate and the PLS solution
        step = 1.0
        if pls_result is not None:
            for _ in range(_MAX_HALVINGS):
                if pdev_new <= pdev_old:
                    break
                step *= 0.5
                u_new = u_old + step * (candidate.u - u_old)
                eta_new = eta + step * (
                    X @ candidate.beta + Z @ candidate.b - eta
                )
                mu_new = link.linkinv(eta_new)
                pdev_new = family.deviance(y, mu_new) + float(u_new @ u_new)

        if not np.isfinite(pdev_new):
            raise FitError(
                "PIRLS produced a non-finite penalized deviance",
                reason='non_finite_deviance',
                n_iter=n_iter,
            )

        if step < 1.0:
            beta_new = pls_result.beta + step * (candidate.beta - pls_result.beta)
            candidate = replace(candidate, beta=beta_new, u=u_new, b=lam * u_new)
        pls_result = candidate
        eta, mu = eta_new, mu_new
        u_old = u_new
        if abs(pdev_new - pdev_old) / (abs(pdev_old) + 0.1) < tol:
            pdev_old = pdev_new
            converged = True
            break
        pdev_old = pdev_new

    if pls_result is None:
        raise FitError("PIRLS failed to produce a result", reason='no_iterations')

    return PIRLSResult(
        pls=pls_result,
        mu=mu,
        eta=eta,
        deviance=family.deviance(y, mu),
        converged=converged,
        n_iter=n_iter,
    )
