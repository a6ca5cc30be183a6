"""
Integration tests: simulate data, score it, and find the posterior mode.

These exercise the path an external sampler takes: build a model from an
observation bundle, evaluate the pure unconstrained log-density and its
gradient, then post-process draws into growth rates.
"""

import pytest
import numpy as np
import jax
import jax.numpy as jnp
from scipy.optimize import minimize

from ipm_jax import (
    IntegratedPopulationModel,
    get_model,
    process_draws,
    simulate_ipm_data,
    summarize_derived,
)
from ipm_jax.models.parameters import constrain, unconstrain


pytestmark = pytest.mark.integration


def true_parameters(sim):
    """Parameter dict at the simulated truth."""
    truth = sim.true_parameters
    return {
        "sigma_y": jnp.asarray(truth["sigma_y"]),
        "N1": jnp.asarray(sim.N1, dtype=float),
        "Nad": jnp.asarray(sim.Nad, dtype=float),
        "mean_sjuv": jnp.asarray(truth["sjuv"][0]),
        "mean_sad": jnp.asarray(truth["sad"][0]),
        "mean_p": jnp.asarray(truth["p"][0]),
        "mean_fec": jnp.asarray(truth["fec"][0]),
    }


class TestSimulatedData:

    def test_truth_has_finite_density(self, simulated):
        model = IntegratedPopulationModel(simulated.bundle)
        assert np.isfinite(float(model.log_density(true_parameters(simulated))))

    def test_truth_beats_distorted_survival(self, simulated):
        model = IntegratedPopulationModel(simulated.bundle)
        truth = true_parameters(simulated)
        distorted = dict(truth, mean_sad=jnp.asarray(0.2))
        assert float(model.log_density(truth)) > float(model.log_density(distorted))

    def test_registry_model_matches_direct_construction(self, simulated):
        truth = true_parameters(simulated)
        direct = IntegratedPopulationModel(simulated.bundle)
        registered = get_model("ipm", simulated.bundle)
        assert float(registered.log_density(truth)) == float(direct.log_density(truth))


@pytest.mark.slow
class TestPosteriorMode:

    def test_optimizer_improves_on_initial_values(self):
        sim = simulate_ipm_data(nyears=10, seed=11)
        model = IntegratedPopulationModel(sim.bundle)
        fn = jax.jit(jax.value_and_grad(model.log_density_fn(unconstrained=True)))

        def objective(z):
            value, grad = fn(jnp.asarray(z))
            return -float(value), -np.asarray(grad, dtype=float)

        z0 = np.asarray(unconstrain(model.get_initial_parameters(), model.parameter_specs()))
        start = objective(z0)[0]
        assert np.isfinite(start)

        result = minimize(objective, z0, jac=True, method="L-BFGS-B", options={"maxiter": 500})
        assert np.isfinite(result.fun)
        assert result.fun < start

        mode, _ = constrain(jnp.asarray(result.x), model.parameter_specs())
        assert 0.0 < float(mode["mean_sad"]) < 1.0
        assert np.all(np.asarray(mode["N1"]) > 0)

    def test_draws_to_summary(self, simulated):
        rng = np.random.default_rng(3)
        ntot = simulated.ntot.astype(float)
        draws = []
        for _ in range(50):
            scale = rng.normal(1.0, 0.02, size=ntot.shape)
            draws.append({
                "N1": 0.3 * ntot * scale,
                "Nad": 0.7 * ntot * scale,
                "sigma_y": np.asarray(rng.gamma(20.0, 0.5)),
            })

        summary = summarize_derived(process_draws(draws))
        assert len(summary) == simulated.bundle.nyears
        observed = ntot[1:] / ntot[:-1]
        for t, rate in enumerate(observed, start=1):
            if np.isfinite(rate):
                assert summary.loc[f"lambda[{t}]", "median"] == pytest.approx(rate, rel=0.1)
