"""
Binomial generalized linear mixed models with random intercepts.

This subpackage is the model fitter behind the repeatability engines.

Public API:
    glmm()            — fit from arrays (Laplace approximation)
    fit_binomial()    — fit from a ModelSpec and a column mapping
    ModelSpec         — response, covariates and random intercepts
    GLMMSolution      — fitted model (implements FittedModel)
    OBSERVATION_LEVEL — reserved name of the per-observation random term
"""

from pyrepeatability.mixed._formula import ModelSpec, OBSERVATION_LEVEL
from pyrepeatability.mixed.solvers import glmm, fit_binomial
from pyrepeatability.mixed.solution import GLMMSolution

__all__ = [
    "glmm",
    "fit_binomial",
    "ModelSpec",
    "GLMMSolution",
    "OBSERVATION_LEVEL",
]
