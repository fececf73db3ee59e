"""
Penalized weighted least squares (PLS) step of PIRLS.

For fixed θ (and hence fixed Λ_θ) and working weights W, this solves

    minimize ‖√W(z - Xβ - ZΛu)‖² + ‖u‖²

where u = Λ⁻¹b are the "spherical" random effects. The solve follows
lme4's block elimination: the random-effects block is factored once as
L = cholesky(Λ'Z'WZΛ + I), and β is obtained from the Schur complement.

References:
    Bates, D., Maechler, M., Bolker, B., & Walker, S. (2015).
    Fitting Linear Mixed-Effects Models Using lme4.
    Journal of Statistical Software, 67(1), 1-48. Section 2.
"""

from __future__ import annotations

from dataclasses import dataclass
import numpy as np
from numpy.typing import NDArray
import scipy.linalg as sla


@dataclass(frozen=True)
class PLSResult:
    """Result from a penalized least squares solve.

    Attributes:
        beta: Fixed effects estimates (p,).
        u: Spherical random effects (q,).
        b: Conditional modes b = Λu (q,).
        L: Cholesky factor of (Λ'Z'WZΛ + I), shape (q, q).
        RX: Cholesky factor of the Schur complement for β, shape (p, p).
    """
    beta: NDArray
    u: NDArray
    b: NDArray
    L: NDArray
    RX: NDArray


def solve_pls(
    X: NDArray,
    Z: NDArray,
    z: NDArray,
    lam: NDArray,
    weights: NDArray,
) -> PLSResult:
    """Solve the penalized weighted least squares problem.

    Args:
        X: Fixed effects design matrix (n, p).
        Z: Random effects indicator matrix (n, q).
        z: Working response (n,).
        lam: Diagonal of Λ_θ (q,).
        weights: Working weights (n,).

    Returns:
        PLSResult with β, u, b and the factors needed for the Laplace
        approximation.
    """
    q = Z.shape[1]

    sqrt_w = np.sqrt(weights)
    Xw = X * sqrt_w[:, np.newaxis]
    ZLam = Z * (sqrt_w[:, np.newaxis] * lam[np.newaxis, :])  # (n, q)
    zw = z * sqrt_w

    # L = cholesky(Λ'Z'WZΛ + I); positive definite for any θ
    L = np.linalg.cholesky(ZLam.T @ ZLam + np.eye(q))

    # Normal equations of the penalized system:
    #   [Λ'Z'WZΛ + I   Λ'Z'WX] [u]   [Λ'Z'Wz]
    #   [X'WZΛ         X'WX  ] [β] = [X'Wz  ]
    ZLam_t_z = ZLam.T @ zw
    ZLam_t_X = ZLam.T @ Xw

    cu = sla.solve_triangular(L, ZLam_t_z, lower=True)
    CX = sla.solve_triangular(L, ZLam_t_X, lower=True)

    # RX RX' = X'WX - CX'CX  (the Schur complement)
    RtR = Xw.T @ Xw - CX.T @ CX
    rhs_beta = Xw.T @ zw - CX.T @ cu

    try:
        RX = np.linalg.cholesky(RtR)
        tmp = sla.solve_triangular(RX, rhs_beta, lower=True)
        beta = sla.solve_triangular(RX.T, tmp, lower=False)
    except np.linalg.LinAlgError:
        # Nearly collinear fixed effects: least squares with a
        # pseudo-factor kept only for its diagonal.
        beta, _, _, _ = np.linalg.lstsq(RtR, rhs_beta, rcond=None)
        eigvals = np.maximum(np.linalg.eigvalsh(RtR), 1e-20)
        RX = np.diag(np.sqrt(eigvals))

    # L L' u = Λ'Z'W(z - Xβ)
    cu_final = sla.solve_triangular(L, ZLam_t_z - ZLam_t_X @ beta, lower=True)
    u = sla.solve_triangular(L.T, cu_final, lower=False)

    return PLSResult(beta=beta, u=u, b=lam * u, L=L, RX=RX)
