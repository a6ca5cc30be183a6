"""Configuration management for ipm-jax."""

from .settings import IpmJaxConfig, ModelConfig, LoggingConfig, PerformanceConfig, get_default_config

__all__ = ["IpmJaxConfig", "ModelConfig", "LoggingConfig", "PerformanceConfig", "get_default_config"]
