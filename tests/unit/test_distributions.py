"""
Tests for the real-valued Poisson / binomial densities and the multinomial helper.
"""

import pytest
import numpy as np
import jax
import jax.numpy as jnp
from scipy import stats

from ipm_jax.core.exceptions import DomainError
from ipm_jax.models.distributions import (
    real_poisson_lpdf,
    real_binomial_lpdf,
    multinomial_lpmf,
    normal_lpdf,
    truncated_normal_lpdf,
)


pytestmark = pytest.mark.unit


class TestRealPoisson:
    """Poisson log-density with real-valued outcomes."""

    @pytest.mark.parametrize("lam", [0.5, 3.0, 45.0])
    def test_matches_poisson_pmf_for_integer_counts(self, lam):
        n = np.arange(0, 30)
        expected = stats.poisson.logpmf(n, lam)
        np.testing.assert_allclose(real_poisson_lpdf(n, lam), expected, rtol=1e-10)

    def test_non_integer_counts_are_finite(self):
        values = real_poisson_lpdf(jnp.array([0.5, 12.3, 99.9]), 10.0)
        assert np.all(np.isfinite(values))

    def test_non_integer_count_lies_between_neighbours(self):
        # Log-gamma interpolates the factorial smoothly
        below = float(real_poisson_lpdf(4.0, 5.0))
        middle = float(real_poisson_lpdf(4.5, 5.0))
        above = float(real_poisson_lpdf(5.0, 5.0))
        assert min(below, above) - 0.2 < middle < max(below, above) + 0.2

    def test_negative_rate_is_rejected(self):
        assert float(real_poisson_lpdf(3.0, -1.0)) == -np.inf

    def test_negative_count_is_rejected(self):
        assert float(real_poisson_lpdf(-0.5, 2.0)) == -np.inf

    def test_zero_count_zero_rate(self):
        assert float(real_poisson_lpdf(0.0, 0.0)) == 0.0

    def test_positive_count_zero_rate(self):
        assert float(real_poisson_lpdf(2.0, 0.0)) == -np.inf

    def test_validate_args_raises(self):
        with pytest.raises(DomainError) as excinfo:
            real_poisson_lpdf(3.0, -1.0, validate_args=True)
        assert "lam" in str(excinfo.value)

        with pytest.raises(DomainError):
            real_poisson_lpdf(-3.0, 1.0, validate_args=True)

    def test_gradient_matches_analytic(self):
        n, lam = 7.0, 4.0
        grad = jax.grad(real_poisson_lpdf, argnums=1)(n, lam)
        assert float(grad) == pytest.approx(n / lam - 1.0)

    def test_rejected_input_never_nan(self):
        values = real_poisson_lpdf(jnp.array([-1.0, 2.0]), jnp.array([1.0, -2.0]))
        assert not np.any(np.isnan(values))


class TestRealBinomial:
    """Binomial log-density with real-valued outcomes and trial counts."""

    @pytest.mark.parametrize("N,theta", [(10, 0.3), (104, 0.6), (1, 0.99)])
    def test_matches_binomial_pmf_for_integers(self, N, theta):
        n = np.arange(0, N + 1)
        expected = stats.binom.logpmf(n, N, theta)
        np.testing.assert_allclose(real_binomial_lpdf(n, N, theta), expected, rtol=1e-9)

    def test_non_integer_arguments_are_finite(self):
        value = real_binomial_lpdf(71.4, 102.7, 0.6)
        assert np.isfinite(float(value))

    def test_outcome_above_trials_is_rejected(self):
        assert float(real_binomial_lpdf(11.0, 10.0, 0.5)) == -np.inf

    def test_negative_outcome_is_rejected(self):
        assert float(real_binomial_lpdf(-1.0, 10.0, 0.5)) == -np.inf

    def test_negative_trials_are_rejected(self):
        assert float(real_binomial_lpdf(0.0, -1.0, 0.5)) == -np.inf

    @pytest.mark.parametrize("theta", [-0.1, 1.1])
    def test_probability_outside_unit_interval_is_rejected(self, theta):
        assert float(real_binomial_lpdf(2.0, 10.0, theta)) == -np.inf

    def test_boundary_probabilities(self):
        assert float(real_binomial_lpdf(0.0, 10.0, 0.0)) == 0.0
        assert float(real_binomial_lpdf(10.0, 10.0, 1.0)) == 0.0
        assert float(real_binomial_lpdf(3.0, 10.0, 0.0)) == -np.inf

    def test_validate_args_raises(self):
        with pytest.raises(DomainError):
            real_binomial_lpdf(11.0, 10.0, 0.5, validate_args=True)
        with pytest.raises(DomainError):
            real_binomial_lpdf(1.0, 10.0, 1.5, validate_args=True)
        with pytest.raises(DomainError):
            real_binomial_lpdf(0.0, -2.0, 0.5, validate_args=True)

    def test_gradient_is_finite_inside_domain(self):
        grads = jax.grad(real_binomial_lpdf, argnums=(0, 1, 2))(70.0, 100.0, 0.6)
        assert all(np.isfinite(float(g)) for g in grads)


class TestMultinomial:
    """Multinomial log-probability used for m-array rows."""

    def test_matches_scipy(self):
        counts = np.array([5, 2, 1, 92])
        probs = np.array([0.15, 0.05, 0.02, 0.78])
        expected = stats.multinomial.logpmf(counts, n=counts.sum(), p=probs)
        assert float(multinomial_lpmf(counts, probs)) == pytest.approx(expected, rel=1e-10)

    @pytest.mark.parametrize("probs", [
        [0.1, 0.2, 0.7],
        [0.0, 0.0, 1.0],
        [1.0, 0.0, 0.0],
    ])
    def test_all_zero_row_contributes_nothing(self, probs):
        assert float(multinomial_lpmf(jnp.zeros(3), jnp.asarray(probs))) == 0.0

    def test_zero_probability_with_zero_count(self):
        value = multinomial_lpmf(jnp.array([0.0, 4.0, 6.0]), jnp.array([0.0, 0.4, 0.6]))
        expected = stats.binom.logpmf(4, 10, 0.4)
        assert float(value) == pytest.approx(expected, rel=1e-10)

    def test_zero_probability_with_positive_count(self):
        value = multinomial_lpmf(jnp.array([1.0, 4.0, 6.0]), jnp.array([0.0, 0.4, 0.6]))
        assert float(value) == -np.inf

    def test_rows_are_scored_independently(self):
        counts = jnp.array([[1.0, 2.0, 3.0], [0.0, 0.0, 0.0]])
        probs = jnp.array([[0.2, 0.3, 0.5], [0.2, 0.3, 0.5]])
        values = multinomial_lpmf(counts, probs)
        assert values.shape == (2,)
        assert float(values[1]) == 0.0
        assert float(values[0]) == pytest.approx(
            stats.multinomial.logpmf([1, 2, 3], n=6, p=[0.2, 0.3, 0.5]), rel=1e-10
        )

    def test_negative_probability_is_rejected(self):
        value = multinomial_lpmf(jnp.array([1.0, 1.0]), jnp.array([-0.1, 1.1]))
        assert float(value) == -np.inf
        with pytest.raises(DomainError):
            multinomial_lpmf(jnp.array([1.0, 1.0]), jnp.array([-0.1, 1.1]), validate_args=True)


class TestNormal:
    """Normal and truncated normal densities."""

    def test_normal_matches_scipy(self):
        x = np.array([95.0, 100.0, 130.0])
        expected = stats.norm.logpdf(x, loc=101.0, scale=5.0)
        np.testing.assert_allclose(normal_lpdf(x, 101.0, 5.0), expected, rtol=1e-10)

    def test_non_positive_scale_is_rejected(self):
        assert float(normal_lpdf(1.0, 0.0, 0.0)) == -np.inf
        assert float(normal_lpdf(1.0, 0.0, -2.0)) == -np.inf
        with pytest.raises(DomainError):
            normal_lpdf(1.0, 0.0, -2.0, validate_args=True)

    def test_truncated_normal_matches_scipy(self):
        x = np.array([0.5, 30.0, 100.0, 250.0])
        expected = stats.truncnorm.logpdf(x, a=-1.0, b=np.inf, loc=100.0, scale=100.0)
        np.testing.assert_allclose(truncated_normal_lpdf(x, 100.0, 100.0, 0.0), expected, rtol=1e-9)

    def test_truncated_normal_below_bound(self):
        assert float(truncated_normal_lpdf(-1.0, 100.0, 100.0, 0.0)) == -np.inf
        with pytest.raises(DomainError):
            truncated_normal_lpdf(-1.0, 100.0, 100.0, 0.0, validate_args=True)


class TestGradientsAtZero:
    """Zero rates and zero-probability cells with zero counts keep finite gradients."""

    def test_poisson_zero_rate_zero_count(self):
        grad = jax.grad(real_poisson_lpdf, argnums=1)(0.0, 0.0)
        assert float(grad) == pytest.approx(-1.0)

    def test_binomial_boundary_probabilities(self):
        at_zero = jax.grad(real_binomial_lpdf, argnums=2)(0.0, 10.0, 0.0)
        at_one = jax.grad(real_binomial_lpdf, argnums=2)(10.0, 10.0, 1.0)
        assert float(at_zero) == pytest.approx(-10.0)
        assert float(at_one) == pytest.approx(10.0)

    def test_multinomial_zero_cell(self):
        counts = jnp.array([0.0, 4.0, 6.0])

        def log_prob(probs):
            return multinomial_lpmf(counts, probs)

        grad = jax.grad(log_prob)(jnp.array([0.0, 0.4, 0.6]))
        assert np.all(np.isfinite(np.asarray(grad)))
        np.testing.assert_allclose(grad[1:], [10.0, 10.0])
