"""
Tests for input validation utilities.

Validates every function in core/validation.py:
    - check_array: conversion, dtype coercion, object rejection
    - check_finite: NaN/Inf detection
    - check_binary: 0/1 responses
    - check_columns: column presence
    - check_probability: open unit interval
"""

import numpy as np
import pytest

from pyrepeatability.core.exceptions import ValidationError
from pyrepeatability.core.validation import (
    check_array,
    check_binary,
    check_columns,
    check_finite,
    check_probability,
)


class TestCheckArray:
    """check_array converts to float64 and rejects non-numeric data."""

    def test_list_to_float_array(self):
        result = check_array([1, 0, 1], "y")
        assert result.dtype == np.float64
        np.testing.assert_array_equal(result, [1.0, 0.0, 1.0])

    def test_bool_accepted(self):
        result = check_array(np.array([True, False, True]), "y")
        np.testing.assert_array_equal(result, [1.0, 0.0, 1.0])

    def test_rejects_strings(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array(["a", "b"], "y")

    def test_rejects_object(self):
        with pytest.raises(ValidationError, match="non-numeric dtype"):
            check_array([None, 1, 2.0], "y")


class TestCheckFinite:
    """check_finite reports NaN and Inf counts."""

    def test_finite_passes(self):
        check_finite(np.array([0.0, 1.0]), "y")

    def test_nan_rejected(self):
        with pytest.raises(ValidationError, match="1 NaN"):
            check_finite(np.array([0.0, np.nan]), "y")

    def test_inf_rejected(self):
        with pytest.raises(ValidationError, match="1 Inf"):
            check_finite(np.array([np.inf, 1.0]), "y")


class TestCheckBinary:
    """check_binary accepts only 0 and 1."""

    def test_binary_passes(self):
        check_binary(np.array([0.0, 1.0, 1.0]), "y")

    def test_proportions_rejected(self):
        with pytest.raises(ValidationError, match="0/1"):
            check_binary(np.array([0.0, 0.5, 1.0]), "y")

    def test_counts_rejected(self):
        with pytest.raises(ValidationError, match=r"\[2.0\]"):
            check_binary(np.array([0.0, 2.0]), "y")


class TestCheckColumns:
    """check_columns names the missing columns."""

    def test_present(self):
        check_columns({'y': [], 'id': []}, ['y', 'id'], "data")

    def test_missing(self):
        with pytest.raises(ValidationError, match="'nest'"):
            check_columns({'y': []}, ['y', 'nest'], "data")


class TestCheckProbability:
    """check_probability requires a value strictly inside (0, 1)."""

    def test_valid(self):
        assert check_probability(0.95, "conf_level") == 0.95

    @pytest.mark.parametrize("value", [0.0, 1.0, -0.1, 1.5])
    def test_out_of_range(self, value):
        with pytest.raises(ValidationError, match="conf_level"):
            check_probability(value, "conf_level")
