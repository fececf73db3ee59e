"""
Common data types for binomial GLMM fits.

Contains the frozen parameter payload that goes inside the Result[P]
envelope. The payload is a pure data container: no methods, no
computation.

References:
    Bates, D., Maechler, M., Bolker, B., & Walker, S. (2015).
    Fitting Linear Mixed-Effects Models Using lme4.
    Journal of Statistical Software, 67(1), 1-48.
"""

from dataclasses import dataclass

from numpy.typing import NDArray


@dataclass(frozen=True)
class VarCompSummary:
    """Variance component summary for one random intercept.

    Attributes:
        group: Grouping factor name (e.g. 'individual').
        name: Term name within the group, always '(Intercept)' here.
        variance: Estimated variance σ²_b for this component.
        std_dev: Standard deviation (sqrt of variance).
    """
    group: str
    name: str
    variance: float
    std_dev: float


@dataclass(frozen=True)
class GLMMParams:
    """
    Parameter payload for a fitted binomial GLMM.

    Carries the design pieces (X, group ids) so that the fitted model can
    simulate new responses without access to the original dataset.
    """
    # Fixed effects
    coefficients: NDArray
    coefficient_names: tuple[str, ...]
    se: NDArray
    z_values: NDArray                  # Wald z-statistics β̂ / se
    p_values: NDArray

    # Random effects
    var_components: tuple[VarCompSummary, ...]

    # Model fit
    log_likelihood: float
    deviance: float
    aic: float
    bic: float
    n_obs: int
    n_groups: dict[str, int]

    # Family
    link_name: str

    # Convergence
    converged: bool
    n_iter: int

    # Random effects conditional modes
    random_effects: dict[str, NDArray]  # group_name → (J_k,)

    # Predictions (on link scale and response scale)
    fitted_values: NDArray             # μ̂ = g⁻¹(Xβ̂ + Zb̂) (n,)
    linear_predictor: NDArray          # η̂ = Xβ̂ + Zb̂ (n,)
    residuals: NDArray                 # y - μ̂ (n,)

    # Design pieces needed by simulate()
    X: NDArray
    group_ids: dict[str, NDArray]      # group_name → level index (n,)

    # Internal
    theta: NDArray
