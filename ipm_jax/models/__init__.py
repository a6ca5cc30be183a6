"""
Model implementations for ipm-jax.

Provides the integrated population model and the numerical pieces it is
built from.
"""

from .base import PopulationModel, ModelType, ModelRegistry
from .ipm import IntegratedPopulationModel, log_density_terms, total_log_density
from .marray import build_marray, build_marray_numpy
from .distributions import (
    real_poisson_lpdf,
    real_binomial_lpdf,
    multinomial_lpmf,
    normal_lpdf,
    truncated_normal_lpdf,
)
from .priors import Prior, Flat, Uniform, TruncatedNormal, default_priors
from .parameters import ParameterSpec, Support, ipm_parameter_specs, constrain, unconstrain
from .transforms import TransformedParameters, transform_parameters

__all__ = [
    "PopulationModel",
    "ModelType",
    "ModelRegistry",
    "IntegratedPopulationModel",
    "log_density_terms",
    "total_log_density",
    "build_marray",
    "build_marray_numpy",
    "real_poisson_lpdf",
    "real_binomial_lpdf",
    "multinomial_lpmf",
    "normal_lpdf",
    "truncated_normal_lpdf",
    "Prior",
    "Flat",
    "Uniform",
    "TruncatedNormal",
    "default_priors",
    "ParameterSpec",
    "Support",
    "ipm_parameter_specs",
    "constrain",
    "unconstrain",
    "TransformedParameters",
    "transform_parameters",
]
