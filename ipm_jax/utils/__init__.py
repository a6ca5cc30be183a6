"""Utility functions and classes for ipm-jax."""

from .logging import get_logger, setup_logging
from .validation import (
    validate_array_dimensions,
    validate_positive,
    validate_probability,
    validate_finite,
    validate_integer_valued,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "validate_array_dimensions",
    "validate_positive",
    "validate_probability",
    "validate_finite",
    "validate_integer_valued",
]
