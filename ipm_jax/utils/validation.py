"""
Validation utilities for ipm-jax.

Provides common validation functions for arrays and parameter values. These
run eagerly on concrete values and must not be called inside jit-compiled code.
"""

import numpy as np
from typing import Union, Tuple, Optional, Any
from ..core.exceptions import ValidationError


def validate_array_dimensions(
    array: Any,
    expected_shape: Optional[Tuple[Optional[int], ...]] = None,
    min_dims: Optional[int] = None,
    max_dims: Optional[int] = None,
    name: str = "array"
) -> None:
    """
    Validate array dimensions.

    Args:
        array: Array to validate
        expected_shape: Expected exact shape (None entries are ignored)
        min_dims: Minimum number of dimensions
        max_dims: Maximum number of dimensions
        name: Name for error messages

    Raises:
        ValidationError: If validation fails
    """
    if not hasattr(array, 'shape'):
        raise ValidationError(
            f"{name} must be an array-like object with shape attribute",
            suggestions=[
                "Ensure input is numpy or JAX array",
                "Convert lists to arrays using np.asarray()",
            ]
        )

    shape = array.shape
    ndims = len(shape)

    if min_dims is not None and ndims < min_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at least {min_dims}",
            suggestions=[f"Check that {name} has correct structure"],
        )

    if max_dims is not None and ndims > max_dims:
        raise ValidationError(
            f"{name} has {ndims} dimensions, expected at most {max_dims}",
            suggestions=[f"Check that {name} has correct structure"],
        )

    if expected_shape is not None:
        if len(expected_shape) != ndims:
            raise ValidationError(
                f"{name} has {ndims} dimensions, expected {len(expected_shape)}",
                suggestions=[
                    f"Expected shape: {expected_shape}",
                    f"Actual shape: {shape}",
                ],
                context={"expected_shape": expected_shape, "actual_shape": shape},
            )

        for i, (actual, expected) in enumerate(zip(shape, expected_shape)):
            if expected is not None and actual != expected:
                raise ValidationError(
                    f"{name} dimension {i} has size {actual}, expected {expected}",
                    suggestions=[
                        f"Expected shape: {expected_shape}",
                        f"Actual shape: {shape}",
                    ],
                    context={"expected_shape": expected_shape, "actual_shape": shape},
                )


def validate_finite(value: Any, name: str = "value") -> None:
    """Validate that value(s) contain no NaN or infinity."""
    if not np.all(np.isfinite(np.asarray(value))):
        raise ValidationError(
            f"{name} contains non-finite values",
            suggestions=["Check for missing values encoded as NaN"],
        )


def validate_positive(
    value: Union[float, int, np.ndarray, Any],
    name: str = "value",
    strict: bool = False
) -> None:
    """
    Validate that value(s) are positive.

    Args:
        value: Value or array to validate
        name: Name for error messages
        strict: If True, require strictly positive (> 0), else non-negative (>= 0)

    Raises:
        ValidationError: If validation fails
    """
    values = np.asarray(value)
    if strict:
        ok = np.all(values > 0)
        operator = ">"
    else:
        ok = np.all(values >= 0)
        operator = ">="

    if not ok:
        raise ValidationError(
            f"{name} must be {operator} 0 (min: {np.min(values)})",
            suggestions=[
                f"All values must be {operator} 0",
                "Check parameter constraints",
            ],
            context={"name": name, "min": float(np.min(values))},
        )


def validate_probability(value: Any, name: str = "probability") -> None:
    """
    Validate that value(s) are valid probabilities (0 <= p <= 1).

    Raises:
        ValidationError: If validation fails
    """
    validate_positive(value, name, strict=False)

    values = np.asarray(value)
    if not np.all(values <= 1):
        raise ValidationError(
            f"{name} contains values > 1 (max: {np.max(values)})",
            suggestions=[
                "Probabilities must be between 0 and 1",
                "Check if values need to be transformed",
            ],
            context={"name": name, "max": float(np.max(values))},
        )


def validate_integer_valued(value: Any, name: str = "value") -> None:
    """Validate that value(s) are whole numbers, whatever their dtype."""
    values = np.asarray(value)
    if not np.all(np.equal(np.mod(values, 1), 0)):
        raise ValidationError(
            f"{name} must contain whole numbers",
            suggestions=[
                "Counts of individuals, nestlings and broods are integers",
                "Round or re-tabulate the raw data",
            ],
        )
