"""
Exception classes for ipm-jax.

Provides rich error information with actionable suggestions.
"""

from typing import List, Optional, Dict, Any


class IpmJaxError(Exception):
    """
    Base exception class for ipm-jax with rich error information.

    Provides structured error information including suggestions for resolution.
    """

    def __init__(
        self,
        message: str,
        suggestions: Optional[List[str]] = None,
        documentation_link: Optional[str] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        self.suggestions = suggestions or []
        self.documentation_link = documentation_link
        self.error_code = error_code
        self.context = context or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return formatted error message with suggestions."""
        message = super().__str__()

        if self.error_code:
            message = f"[{self.error_code}] {message}"

        if self.suggestions:
            message += "\n\nSuggestions:"
            for i, suggestion in enumerate(self.suggestions, 1):
                message += f"\n  {i}. {suggestion}"

        if self.documentation_link:
            message += f"\n\nDocumentation: {self.documentation_link}"

        return message


class DataFormatError(IpmJaxError):
    """Exception raised when an observation bundle is malformed."""

    def __init__(
        self,
        field: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[str] = None,
        specific_issue: Optional[str] = None,
        **kwargs
    ):
        if field and expected:
            message = f"Observation field '{field}' has {actual}, expected {expected}"
            suggestions = [
                f"Check how '{field}' was assembled for the study period",
                "y has nyears entries; J and R have nyears-1 entries",
                "m has 2*(nyears-1) rows (juvenile then adult cohorts) and nyears columns",
            ]
        elif specific_issue:
            message = f"Observation data issue: {specific_issue}"
            suggestions = [
                "Counts must be finite and non-negative",
                "J, R and m must hold whole numbers",
                "Check for missing or corrupted values",
            ]
        else:
            message = "Observation data validation failed"
            suggestions = [
                "Check the observation bundle field shapes against nyears",
                "Validate your input data structure",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="DATA_FORMAT",
            context={"field": field, "expected": expected, "actual": actual},
            **kwargs
        )


class ModelSpecificationError(IpmJaxError):
    """Exception raised for model specification issues."""

    def __init__(
        self,
        parameter: Optional[str] = None,
        issue: Optional[str] = None,
        available_parameters: Optional[List[str]] = None,
        **kwargs
    ):
        if parameter and issue:
            message = f"Invalid specification for parameter '{parameter}': {issue}"
        elif issue:
            message = f"Invalid model specification: {issue}"
        else:
            message = "Model specification error"

        suggestions = [
            "Every model parameter needs exactly one prior entry",
            "Check parameter names for spelling",
        ]
        if available_parameters:
            suggestions.insert(0, f"Known parameters: {', '.join(available_parameters)}")

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="MODEL_SPEC",
            context={
                "parameter": parameter,
                "issue": issue,
                "available_parameters": available_parameters,
            },
            **kwargs
        )


class DomainError(IpmJaxError):
    """Exception raised when a density is evaluated outside its domain."""

    def __init__(
        self,
        function: Optional[str] = None,
        argument: Optional[str] = None,
        value: Optional[Any] = None,
        requirement: Optional[str] = None,
        **kwargs
    ):
        if function and argument:
            message = f"{function}: argument '{argument}' = {value} violates {requirement}"
        elif argument:
            message = f"Parameter '{argument}' = {value} violates {requirement}"
        else:
            message = "Domain violation"

        suggestions = [
            "Treat this draw as a rejected sample",
            "Check the sampler respects the declared parameter bounds",
        ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="DOMAIN",
            context={
                "function": function,
                "argument": argument,
                "value": value,
                "requirement": requirement,
            },
            **kwargs
        )


class ValidationError(IpmJaxError):
    """Exception raised for array validation failures."""

    def __init__(self, message: Optional[str] = None, **kwargs):
        super().__init__(
            message=message or "Validation checks failed",
            error_code=kwargs.pop('error_code', "VALIDATION"),
            **kwargs
        )


class ConfigurationError(IpmJaxError):
    """Exception raised for configuration issues."""

    def __init__(self, config_key: Optional[str] = None, **kwargs):
        if config_key:
            message = f"Invalid configuration for '{config_key}'"
            suggestions = [
                f"Check the value for configuration key '{config_key}'",
                "Review configuration file syntax",
                "Check environment variable formatting",
                "Use ipm_jax.get_config() to inspect current settings",
            ]
        else:
            message = "Configuration error"
            suggestions = [
                "Check configuration file syntax",
                "Verify all required settings are provided",
            ]

        kwargs.pop('suggestions', None)

        super().__init__(
            message=message,
            suggestions=suggestions,
            error_code="CONFIG",
            context={"config_key": config_key},
            **kwargs
        )
