"""
Shared pytest configuration and fixtures for IPM-JAX tests.

This module provides common test fixtures, utilities, and configuration
used across the test suite.
"""

import pytest
import numpy as np
import jax.numpy as jnp

from ipm_jax.config.settings import IpmJaxConfig
from ipm_jax.data.bundle import ObservationBundle
from ipm_jax.data.simulate import simulate_ipm_data
from ipm_jax.models.ipm import IntegratedPopulationModel


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep configuration environment variables from leaking into tests."""
    for name in ("IPM_JAX_LOG_LEVEL", "IPM_JAX_STRICT_DOMAIN", "IPM_JAX_ENABLE_X64", "IPM_JAX_DISABLE_JIT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def small_data():
    """Four-year study with hand-written counts and m-array."""
    return {
        "nyears": 4,
        "y": [100.0, 105.0, 98.0, 110.0],
        "J": [60, 55, 70],
        "R": [20, 20, 25],
        "m": [
            # juvenile cohorts
            [5, 2, 1, 92],
            [0, 6, 2, 80],
            [0, 0, 7, 90],
            # adult cohorts
            [12, 4, 1, 33],
            [0, 10, 3, 37],
            [0, 0, 11, 39],
        ],
    }


@pytest.fixture
def small_bundle(small_data):
    return ObservationBundle(**small_data)


@pytest.fixture
def valid_params():
    """Parameter values inside every support, with Nad[t] <= Ntot[t-1]."""
    return {
        "sigma_y": jnp.asarray(5.0),
        "N1": jnp.asarray([30.0, 32.0, 29.0, 33.0]),
        "Nad": jnp.asarray([70.0, 72.0, 70.0, 75.0]),
        "mean_sjuv": jnp.asarray(0.3),
        "mean_sad": jnp.asarray(0.6),
        "mean_p": jnp.asarray(0.5),
        "mean_fec": jnp.asarray(3.0),
    }


@pytest.fixture
def default_config():
    return IpmJaxConfig()


@pytest.fixture
def model(small_bundle, default_config):
    return IntegratedPopulationModel(small_bundle, config=default_config)


@pytest.fixture
def strict_model(small_bundle):
    config = IpmJaxConfig(model={"strict_domain_checks": True})
    return IntegratedPopulationModel(small_bundle, config=config)


@pytest.fixture
def simulated():
    """Simulated eight-year study with a fixed seed."""
    return simulate_ipm_data(nyears=8, seed=2024)


@pytest.fixture
def rng():
    return np.random.default_rng(42)


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (medium speed)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow (may take >10 seconds)"
    )
