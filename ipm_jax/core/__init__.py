"""Core functionality for ipm-jax."""

from .exceptions import (
    IpmJaxError,
    DataFormatError,
    ModelSpecificationError,
    DomainError,
    ValidationError,
    ConfigurationError,
)

__all__ = [
    "IpmJaxError",
    "DataFormatError",
    "ModelSpecificationError",
    "DomainError",
    "ValidationError",
    "ConfigurationError",
]
