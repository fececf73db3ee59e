"""
Exception hierarchy for pyrepeatability.

All exceptions inherit from RepeatabilityError to allow catching any
library-specific error. Non-fatal conditions are warning categories so
they can be filtered with the standard warnings machinery.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""


class RepeatabilityError(Exception):
    """Base exception for all pyrepeatability errors."""
    pass


class ValidationError(RepeatabilityError):
    """
    Input validation failed.

    Raised when user-provided inputs fail validation checks.
    """
    pass


class ConfigurationError(ValidationError):
    """
    The requested analysis is not configured consistently.

    Raised for an unsupported link function, or when a grouping factor
    requested for repeatability is not a random term of the model.

    Attributes:
        parameter: Name of the offending argument
        value: The rejected value
    """

    def __init__(
        self,
        message: str,
        parameter: str | None = None,
        value: object = None,
    ):
        super().__init__(message)
        self.parameter = parameter
        self.value = value


class NumericalError(RepeatabilityError):
    """
    Numerical computation failed.

    Base class for errors arising from numerical issues during computation.
    """
    pass


class FitError(NumericalError):
    """
    Fitting a mixed model failed.

    Fatal for the observed-estimate fit and for likelihood-ratio reduced
    fits. Inside bootstrap or permutation replicates it is absorbed and
    the replicate is recorded as missing.

    Attributes:
        reason: Short machine-readable cause (e.g. 'non_finite_deviance')
        n_iter: Optimizer iterations completed, if known
    """

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        n_iter: int | None = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.n_iter = n_iter


class ParallelWorkerError(RepeatabilityError):
    """
    The worker pool of a replicate phase failed.

    No partial aggregation is produced for the phase that raised it.

    Attributes:
        phase: Replicate phase that was running ('bootstrap', 'permutation')
        n_tasks: Number of tasks submitted to the pool
    """

    def __init__(
        self,
        message: str,
        phase: str | None = None,
        n_tasks: int | None = None,
    ):
        super().__init__(message)
        self.phase = phase
        self.n_tasks = n_tasks


class BoundaryWarning(UserWarning):
    """
    A requested group's observed variance component is exactly zero.

    Parametric bootstrapping is skipped for that call.
    """
    pass
