"""
Tests for the explicit prior table.
"""

import pytest
import numpy as np
import jax.numpy as jnp
from scipy import stats

from ipm_jax.core.exceptions import ModelSpecificationError
from ipm_jax.models.priors import (
    Flat,
    Uniform,
    TruncatedNormal,
    default_priors,
    check_prior_table,
    merge_priors,
)
from ipm_jax.models.parameters import ipm_parameter_specs


pytestmark = pytest.mark.unit


class TestPriorDensities:

    def test_flat_is_zero(self):
        assert float(Flat().log_density(jnp.array([1.0, 1e6]))) == 0.0

    def test_uniform_inside(self):
        prior = Uniform(0.0, 1.0)
        assert float(prior.log_density(0.4)) == 0.0

    def test_uniform_scaled_interval(self):
        prior = Uniform(0.0, 4.0)
        assert float(prior.log_density(jnp.array([1.0, 2.0]))) == pytest.approx(-2 * np.log(4.0))

    def test_uniform_outside(self):
        assert float(Uniform(0.0, 1.0).log_density(1.5)) == -np.inf

    def test_uniform_rejects_bad_bounds(self):
        with pytest.raises(ModelSpecificationError):
            Uniform(1.0, 0.0)

    def test_truncated_normal_matches_scipy(self):
        prior = TruncatedNormal(loc=100.0, scale=100.0, lower=0.0)
        expected = stats.truncnorm.logpdf(30.0, a=-1.0, b=np.inf, loc=100.0, scale=100.0)
        assert float(prior.log_density(30.0)) == pytest.approx(expected, rel=1e-10)

    def test_truncated_normal_below_bound(self):
        prior = TruncatedNormal(loc=100.0, scale=100.0, lower=0.0)
        assert float(prior.log_density(-5.0)) == -np.inf

    def test_truncated_normal_rejects_bad_scale(self):
        with pytest.raises(ModelSpecificationError):
            TruncatedNormal(loc=0.0, scale=0.0)


class TestPriorTable:

    def test_default_table_covers_every_parameter(self):
        names = [spec.name for spec in ipm_parameter_specs(4)]
        table = default_priors()
        check_prior_table(table, names)
        assert set(table) == set(names)

    def test_default_choices(self):
        table = default_priors()
        assert isinstance(table["sigma_y"], Flat)
        assert isinstance(table["mean_fec"], Flat)
        for name in ("mean_sjuv", "mean_sad", "mean_p"):
            assert table[name] == Uniform(0.0, 1.0)
        assert table["N1"] == TruncatedNormal(loc=100.0, scale=100.0, lower=0.0)
        assert table["Nad"] == table["N1"]

    def test_configured_initial_population_prior(self):
        table = default_priors(initial_population_mean=50.0, initial_population_sd=10.0)
        assert table["N1"].loc == 50.0
        assert table["N1"].scale == 10.0

    def test_missing_prior(self):
        table = default_priors()
        del table["mean_p"]
        with pytest.raises(ModelSpecificationError) as excinfo:
            check_prior_table(table, [spec.name for spec in ipm_parameter_specs(4)])
        assert "mean_p" in str(excinfo.value)

    def test_unknown_prior(self):
        table = dict(default_priors(), phi=Flat())
        with pytest.raises(ModelSpecificationError):
            check_prior_table(table, [spec.name for spec in ipm_parameter_specs(4)])

    def test_non_prior_entry(self):
        table = dict(default_priors(), sigma_y="flat")
        with pytest.raises(ModelSpecificationError):
            check_prior_table(table, [spec.name for spec in ipm_parameter_specs(4)])

    def test_merge_overrides(self):
        merged = merge_priors(default_priors(), {"sigma_y": Uniform(0.0, 50.0)})
        assert merged["sigma_y"] == Uniform(0.0, 50.0)
        assert isinstance(merged["mean_fec"], Flat)

    def test_merge_without_overrides(self):
        base = default_priors()
        assert merge_priors(base, None) == base
