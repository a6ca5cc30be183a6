"""
Posterior post-processing for ipm-jax.

Computes derived quantities from draws supplied by an external sampler.
"""

from .posterior import (
    DerivedQuantities,
    growth_rates,
    derived_quantities,
    process_draws,
    summarize_derived,
)

__all__ = [
    "DerivedQuantities",
    "growth_rates",
    "derived_quantities",
    "process_draws",
    "summarize_derived",
]
