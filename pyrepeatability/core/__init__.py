"""
Core infrastructure for pyrepeatability.

This module provides shared abstractions and utilities used by the
mixed-model fitter and the repeatability engines.

Key components:
    protocols: FittedModel, ModelFitter protocols
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    compute: Timing and replicate dispatch
"""

from pyrepeatability.core.protocols import FittedModel, ModelFitter
from pyrepeatability.core.result import Result
from pyrepeatability.core.exceptions import (
    RepeatabilityError,
    ValidationError,
    ConfigurationError,
    NumericalError,
    FitError,
    ParallelWorkerError,
    BoundaryWarning,
)

__all__ = [
    # Protocols
    "FittedModel",
    "ModelFitter",
    # Result
    "Result",
    # Exceptions
    "RepeatabilityError",
    "ValidationError",
    "ConfigurationError",
    "NumericalError",
    "FitError",
    "ParallelWorkerError",
    "BoundaryWarning",
]
