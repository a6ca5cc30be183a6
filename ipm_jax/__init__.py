"""
IPM-JAX: Integrated population models using JAX

Joint Bayesian analysis of population counts, capture-recapture m-arrays and
productivity data. Provides a differentiable log-density for an external
sampling engine and post-processing of its posterior draws.
"""

__version__ = "1.0.0"

import jax

# Configuration
from .config.settings import IpmJaxConfig, get_default_config

# M-array rows must sum to one within 1e-9, which needs 64-bit floats
if get_default_config().performance.enable_x64:
    jax.config.update("jax_enable_x64", True)

# Data
from .data.bundle import ObservationBundle
from .data.simulate import SimulatedData, simulate_ipm_data

# Models
from .models import (
    PopulationModel,
    IntegratedPopulationModel,
    build_marray,
    real_poisson_lpdf,
    real_binomial_lpdf,
    multinomial_lpmf,
    Flat,
    Uniform,
    TruncatedNormal,
)
from .models.base import ModelType, register_model, get_model, list_available_models

# Posterior post-processing
from .inference import DerivedQuantities, derived_quantities, process_draws, summarize_derived

# Import key exception classes
from .core.exceptions import (
    IpmJaxError,
    DataFormatError,
    ModelSpecificationError,
    DomainError,
    ConfigurationError,
)

from .utils.logging import get_logger, setup_logging

# Register built-in models
register_model(ModelType.IPM, IntegratedPopulationModel)

__all__ = [
    # Version info
    "__version__",

    # Data
    "ObservationBundle",
    "SimulatedData",
    "simulate_ipm_data",

    # Models
    "PopulationModel",
    "IntegratedPopulationModel",
    "build_marray",
    "real_poisson_lpdf",
    "real_binomial_lpdf",
    "multinomial_lpmf",
    "Flat",
    "Uniform",
    "TruncatedNormal",
    "ModelType",
    "register_model",
    "get_model",
    "list_available_models",

    # Post-processing
    "DerivedQuantities",
    "derived_quantities",
    "process_draws",
    "summarize_derived",

    # Configuration
    "IpmJaxConfig",
    "get_config",
    "configure",

    # Exceptions
    "IpmJaxError",
    "DataFormatError",
    "ModelSpecificationError",
    "DomainError",
    "ConfigurationError",

    # Logging
    "get_logger",
    "setup_logging",
]


def get_config() -> IpmJaxConfig:
    """Get the global configuration instance."""
    return get_default_config()


def configure(**kwargs) -> None:
    """
    Update global configuration.

    Accepts section objects (``model=ModelConfig(...)``) or dotted keys
    (``**{"model.strict_domain_checks": True}``).
    """
    get_default_config().update(**kwargs)
