"""
Tests for the pyrepeatability exception hierarchy.

Validates:
    - Inheritance chain (all exceptions catchable via RepeatabilityError)
    - Diagnostic attributes on ConfigurationError, FitError,
      ParallelWorkerError
    - BoundaryWarning works with the warnings machinery
"""

import warnings

import pytest

from pyrepeatability.core.exceptions import (
    BoundaryWarning,
    ConfigurationError,
    FitError,
    NumericalError,
    ParallelWorkerError,
    RepeatabilityError,
    ValidationError,
)


# ═══════════════════════════════════════════════════════════════════════
# Inheritance hierarchy
# ═══════════════════════════════════════════════════════════════════════


class TestInheritance:
    """Every exception is catchable via RepeatabilityError."""

    def test_validation_error_is_repeatability_error(self):
        with pytest.raises(RepeatabilityError):
            raise ValidationError("bad input")

    def test_configuration_error_is_validation_error(self):
        with pytest.raises(ValidationError):
            raise ConfigurationError("bad link")

    def test_fit_error_is_numerical_error(self):
        with pytest.raises(NumericalError):
            raise FitError("diverged")

    def test_fit_error_is_repeatability_error(self):
        with pytest.raises(RepeatabilityError):
            raise FitError("diverged")

    def test_parallel_worker_error_is_repeatability_error(self):
        with pytest.raises(RepeatabilityError):
            raise ParallelWorkerError("pool died")

    def test_fit_error_is_not_validation_error(self):
        assert not issubclass(FitError, ValidationError)

    def test_boundary_warning_is_user_warning(self):
        assert issubclass(BoundaryWarning, UserWarning)
        assert not issubclass(BoundaryWarning, RepeatabilityError)


# ═══════════════════════════════════════════════════════════════════════
# Diagnostic attributes
# ═══════════════════════════════════════════════════════════════════════


class TestConfigurationError:
    """ConfigurationError carries the offending parameter and value."""

    def test_attributes(self):
        exc = ConfigurationError("bad link", parameter='link', value='cloglog')
        assert exc.parameter == 'link'
        assert exc.value == 'cloglog'
        assert str(exc) == "bad link"

    def test_defaults_none(self):
        exc = ConfigurationError("bad")
        assert exc.parameter is None
        assert exc.value is None


class TestFitError:
    """FitError carries reason and iteration count."""

    def test_attributes(self):
        exc = FitError("non-finite", reason='non_finite_deviance', n_iter=7)
        assert exc.reason == 'non_finite_deviance'
        assert exc.n_iter == 7

    def test_defaults_none(self):
        exc = FitError("failed")
        assert exc.reason is None
        assert exc.n_iter is None


class TestParallelWorkerError:
    """ParallelWorkerError records the phase."""

    def test_attributes(self):
        exc = ParallelWorkerError("crash", phase='bootstrap', n_tasks=100)
        assert exc.phase == 'bootstrap'
        assert exc.n_tasks == 100

    def test_chained_cause_preserved(self):
        try:
            try:
                raise OSError("broken pipe")
            except OSError as inner:
                raise ParallelWorkerError("crash", phase='permutation') from inner
        except ParallelWorkerError as exc:
            assert isinstance(exc.__cause__, OSError)


class TestBoundaryWarning:
    """BoundaryWarning can be filtered like any warning category."""

    def test_caught_by_warns(self):
        with pytest.warns(BoundaryWarning, match="zero"):
            warnings.warn("variance exactly zero", BoundaryWarning)

    def test_can_be_escalated(self):
        with warnings.catch_warnings():
            warnings.simplefilter('error', BoundaryWarning)
            with pytest.raises(BoundaryWarning):
                warnings.warn("variance exactly zero", BoundaryWarning)
