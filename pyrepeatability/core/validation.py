"""
Input validation utilities for pyrepeatability.

These validators follow the "fail fast, fail loud" principle. They raise
immediately with clear error messages rather than silently correcting
or making assumptions about user intent.

Design principles:
    - No silent type coercion (except np.asarray on array-likes)
    - Clear, actionable error messages with actual values
    - Each function validates ONE thing
    - Parameter names included in all error messages
"""

from typing import Any, Mapping, Sequence

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyrepeatability.core.exceptions import ValidationError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    numeric = np.issubdtype(result.dtype, np.number) or result.dtype == bool
    if result.dtype == object or not numeric:
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    return result.astype(np.float64, copy=False)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array contains no NaN or Inf values.

    Raises:
        ValidationError: If array contains non-finite values
    """
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_binary(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify array holds only 0/1 outcomes.

    Raises:
        ValidationError: If any value is not exactly 0 or 1
    """
    bad = ~np.isin(array, (0.0, 1.0))
    if np.any(bad):
        examples = np.unique(array[bad])[:5].tolist()
        raise ValidationError(
            f"{name}: binary response must be 0/1, found values {examples}"
        )


def check_columns(
    data: Mapping[str, Any],
    columns: Sequence[str],
    name: str,
) -> None:
    """
    Verify every requested column is present in the dataset.

    Raises:
        ValidationError: If a column is missing
    """
    missing = [c for c in columns if c not in data]
    if missing:
        raise ValidationError(
            f"{name}: columns {missing} not found in data"
        )


def check_probability(value: float, name: str) -> float:
    """
    Verify value lies strictly between 0 and 1.

    Raises:
        ValidationError: If value is outside (0, 1)
    """
    value = float(value)
    if not 0.0 < value < 1.0:
        raise ValidationError(f"{name}: must be in (0, 1), got {value}")
    return value
