"""
Configuration management system for ipm-jax.

Provides a hierarchical configuration system with support for
file-based configuration, environment variables, and runtime updates.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union
from pydantic import BaseModel, Field, validator
from enum import Enum

from ..core.exceptions import ConfigurationError


class LogLevel(str, Enum):
    """Logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ModelConfig(BaseModel):
    """Model specification configuration."""
    initial_population_mean: float = 100.0
    initial_population_sd: float = 100.0
    strict_domain_checks: bool = False

    @validator('initial_population_sd')
    def validate_initial_population_sd(cls, v):
        if v <= 0:
            raise ValueError("initial_population_sd must be positive")
        return v


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: LogLevel = LogLevel.INFO
    file_logging: bool = False
    log_file: Optional[Path] = None
    console_logging: bool = True
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @validator('log_file', pre=True)
    def validate_log_file(cls, v):
        return Path(v) if v else None


class PerformanceConfig(BaseModel):
    """Performance and numerical configuration."""
    enable_jit_compilation: bool = True
    enable_x64: bool = True


class IpmJaxConfig(BaseModel):
    """Main configuration class for ipm-jax."""

    model: ModelConfig = Field(default_factory=ModelConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    performance: PerformanceConfig = Field(default_factory=PerformanceConfig)

    class Config:
        """Pydantic configuration."""
        validate_assignment = True
        use_enum_values = True

    def __init__(self, config_file: Optional[Union[str, Path]] = None, **kwargs):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML configuration file
            **kwargs: Override specific configuration values
        """
        config_data = {}
        if config_file:
            config_data = self._load_config_file(config_file)

        for section, values in self._load_environment_variables().items():
            config_data.setdefault(section, {}).update(values)

        config_data.update(kwargs)

        super().__init__(**config_data)

    @staticmethod
    def _load_config_file(config_file: Union[str, Path]) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        config_path = Path(config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}

    @staticmethod
    def _load_environment_variables() -> Dict[str, Dict[str, Any]]:
        """Load configuration from environment variables."""
        config: Dict[str, Dict[str, Any]] = {}

        env_mappings = {
            'IPM_JAX_LOG_LEVEL': ('logging', 'level'),
            'IPM_JAX_STRICT_DOMAIN': ('model', 'strict_domain_checks'),
            'IPM_JAX_ENABLE_X64': ('performance', 'enable_x64'),
            'IPM_JAX_DISABLE_JIT': ('performance', 'enable_jit_compilation'),
        }

        for env_var, (section, key) in env_mappings.items():
            value = os.getenv(env_var)
            if value is None:
                continue

            if key == 'level':
                value = value.upper()
            else:
                value = value.lower() in ('true', '1', 'yes', 'on')
                if env_var == 'IPM_JAX_DISABLE_JIT':
                    value = not value

            config.setdefault(section, {})[key] = value

        return config

    def save_config(self, config_file: Union[str, Path]) -> None:
        """Save current configuration to YAML file."""
        config_path = Path(config_file)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = self.dict()
        level = data['logging']['level']
        data['logging']['level'] = getattr(level, 'value', level)
        log_file = data['logging'].get('log_file')
        if log_file is not None:
            data['logging']['log_file'] = str(log_file)

        with open(config_path, 'w') as f:
            yaml.dump(data, f, default_flow_style=False, indent=2)

    def update(self, **kwargs) -> None:
        """Update configuration values, accepting ``section.key`` names."""
        for key, value in kwargs.items():
            if key in type(self).__fields__:
                setattr(self, key, value)
                continue

            section, _, subkey = key.partition('.')
            section_obj = getattr(self, section, None)
            if not isinstance(section_obj, BaseModel) or subkey not in type(section_obj).__fields__:
                raise ConfigurationError(config_key=key)
            setattr(section_obj, subkey, value)


# Default configuration instance
_default_config: Optional[IpmJaxConfig] = None


def get_default_config() -> IpmJaxConfig:
    """Get the default configuration instance."""
    global _default_config
    if _default_config is None:
        _default_config = IpmJaxConfig()
    return _default_config
