"""
pyrepeatability: repeatability of binary data with mixed models.

Estimates the intraclass correlation of repeatedly measured binary
responses from a binomial GLMM, with parametric-bootstrap intervals,
permutation tests and likelihood-ratio tests, following R's rptR.

Submodules:
    repeatability: rpt_binary() and its result
    mixed: binomial random-intercept GLMM fitter
    core: result envelope, exceptions, replicate dispatch
"""

__version__ = "0.1.0"
__author__ = "Hai-Shuo"
__email__ = "contact@sgcx.org"

from pyrepeatability import mixed
from pyrepeatability import repeatability
from pyrepeatability.core.exceptions import (
    RepeatabilityError,
    ValidationError,
    ConfigurationError,
    NumericalError,
    FitError,
    ParallelWorkerError,
    BoundaryWarning,
)
from pyrepeatability.mixed import ModelSpec, glmm
from pyrepeatability.repeatability import rpt_binary

__all__ = [
    "__version__",
    "mixed",
    "repeatability",
    "rpt_binary",
    "glmm",
    "ModelSpec",
    "RepeatabilityError",
    "ValidationError",
    "ConfigurationError",
    "NumericalError",
    "FitError",
    "ParallelWorkerError",
    "BoundaryWarning",
]
