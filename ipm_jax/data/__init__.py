"""
Data handling for ipm-jax.

Provides the observation bundle and a simulator for synthetic data.
"""

from .bundle import ObservationBundle
from .simulate import SimulatedData, simulate_ipm_data

__all__ = [
    "ObservationBundle",
    "SimulatedData",
    "simulate_ipm_data",
]
