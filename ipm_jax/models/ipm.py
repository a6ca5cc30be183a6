"""
Integrated population model implementation for ipm-jax.

Joins three data streams in one state-space model:

- population counts ``y`` observed with Gaussian error around the latent
  total population ``Ntot = N1 + Nad``,
- a capture-recapture m-array scored by multinomial likelihoods whose cell
  probabilities depend on juvenile survival, adult survival and recapture,
- nestling counts ``J`` over ``R`` surveyed broods, Poisson with mean
  ``R * fecundity``.

The latent process links years: first-year birds ``N1[t]`` are Poisson with
mean ``f/2 * sjuv * Ntot[t-1]`` and surviving adults ``Nad[t]`` binomial with
``Ntot[t-1]`` trials and probability ``sad``.
"""

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import jax
import jax.numpy as jnp

from .base import PopulationModel, ModelType
from .distributions import (
    real_poisson_lpdf,
    real_binomial_lpdf,
    multinomial_lpmf,
    normal_lpdf,
)
from .marray import build_marray
from .parameters import (
    ParameterSpec,
    ipm_parameter_specs,
    check_parameter_names,
    flatten_parameters,
    unflatten_parameters,
    constrain,
)
from .priors import Prior, default_priors, check_prior_table, merge_priors
from .transforms import TransformedParameters, transform_parameters
from ..config.settings import IpmJaxConfig, get_default_config
from ..data.bundle import ObservationBundle
from ..utils.logging import get_logger


logger = get_logger(__name__)

# State vectors whose prior covers the first year only
INITIAL_STATE_PARAMETERS = ("N1", "Nad")


def log_density_terms(
    params: Dict[str, jnp.ndarray],
    bundle: ObservationBundle,
    priors: Dict[str, Prior],
    validate_args: bool = False,
) -> Dict[str, jnp.ndarray]:
    """
    Log-density contributions of the model, one entry per component.

    Args:
        params: Parameter values keyed by name
        bundle: Observation data
        priors: Prior table covering every parameter
        validate_args: Raise DomainError on out-of-domain density arguments
            (concrete inputs only)

    Returns:
        Dict with keys ``prior``, ``population``, ``counts``,
        ``capture_recapture`` and ``productivity``
    """
    tp = transform_parameters(params, bundle.R)
    N1 = jnp.asarray(params["N1"])
    Nad = jnp.asarray(params["Nad"])
    ntot_prev = tp.ntot[:-1]

    prior_terms = []
    for name, prior in priors.items():
        value = jnp.asarray(params[name])
        if name in INITIAL_STATE_PARAMETERS:
            value = value[0]
        prior_terms.append(prior.log_density(value))

    recruitment = real_poisson_lpdf(
        N1[1:], tp.f / 2.0 * tp.sjuv * ntot_prev, validate_args=validate_args
    )
    survival = real_binomial_lpdf(Nad[1:], ntot_prev, tp.sad, validate_args=validate_args)

    counts = normal_lpdf(bundle.y, tp.ntot, params["sigma_y"], validate_args=validate_args)

    pr = build_marray(tp.sjuv, tp.sad, tp.p)
    capture = multinomial_lpmf(bundle.m, pr, validate_args=validate_args)

    productivity = real_poisson_lpdf(bundle.J, tp.rho, validate_args=validate_args)

    return {
        "prior": jnp.sum(jnp.stack(prior_terms)),
        "population": jnp.sum(recruitment) + jnp.sum(survival),
        "counts": jnp.sum(counts),
        "capture_recapture": jnp.sum(capture),
        "productivity": jnp.sum(productivity),
    }


def total_log_density(
    params: Dict[str, jnp.ndarray],
    bundle: ObservationBundle,
    priors: Dict[str, Prior],
    specs: List[ParameterSpec],
    validate_args: bool = False,
) -> jnp.ndarray:
    """
    Sum of :func:`log_density_terms`, ``-inf`` outside the parameter support.

    NaN never escapes: any undefined total is reported as ``-inf``.
    """
    terms = log_density_terms(params, bundle, priors, validate_args=validate_args)
    total = sum(terms.values())

    in_support = jnp.all(jnp.stack([spec.contains(params[spec.name]) for spec in specs]))
    return jnp.where(in_support & ~jnp.isnan(total), total, -jnp.inf)


class IntegratedPopulationModel(PopulationModel):
    """
    Integrated population model over counts, m-array and productivity data.

    Parameters:
    - sigma_y: Observation error SD of the population counts (> 0)
    - N1, Nad: Latent first-year and adult population sizes per year (> 0)
    - mean_sjuv, mean_sad: Juvenile and adult survival ([0, 1])
    - mean_p: Recapture probability ([0, 1])
    - mean_fec: Fecundity, nestlings per brood (> 0)

    Out-of-support parameter values give a log-density of ``-inf``. With
    ``config.model.strict_domain_checks`` they raise DomainError instead,
    evaluated eagerly without jit.
    """

    model_type = ModelType.IPM

    def __init__(
        self,
        bundle: ObservationBundle,
        config: Optional[IpmJaxConfig] = None,
        priors: Optional[Dict[str, Prior]] = None,
    ):
        if not isinstance(bundle, ObservationBundle):
            bundle = ObservationBundle.from_dict(bundle)
        super().__init__(bundle)

        self.config = config or get_default_config()
        model_config = self.config.model

        self.priors = merge_priors(
            default_priors(
                model_config.initial_population_mean,
                model_config.initial_population_sd,
            ),
            priors,
        )
        self._specs = ipm_parameter_specs(bundle.nyears)
        check_prior_table(self.priors, [spec.name for spec in self._specs])
        self.strict = bool(model_config.strict_domain_checks)

        specs = self._specs
        model_priors = self.priors

        def terms(params):
            return log_density_terms(params, bundle, model_priors)

        def total(params):
            return total_log_density(params, bundle, model_priors, specs)

        flat = self.log_density_fn()
        unconstrained = self.log_density_fn(unconstrained=True)

        if self.config.performance.enable_jit_compilation:
            self._terms_fn = jax.jit(terms)
            self._log_density_fn = jax.jit(total)
            self._value_and_grad_fn = jax.jit(jax.value_and_grad(total))
            self._flat_fn = jax.jit(flat)
            self._unconstrained_fn = jax.jit(unconstrained)
        else:
            self._terms_fn = terms
            self._log_density_fn = total
            self._value_and_grad_fn = jax.value_and_grad(total)
            self._flat_fn = flat
            self._unconstrained_fn = unconstrained

        self.logger.info(
            "Built integrated population model",
            nyears=bundle.nyears,
            n_parameters=sum(spec.n_values for spec in specs),
            strict_domain_checks=self.strict,
        )

    def parameter_specs(self) -> List[ParameterSpec]:
        return list(self._specs)

    def check_parameters(self, params: Dict[str, jnp.ndarray]) -> None:
        """
        Eagerly check parameter names and supports.

        Raises:
            ModelSpecificationError: On missing or unknown names
            DomainError: On a value outside its support
        """
        check_parameter_names(params, self._specs)
        for spec in self._specs:
            spec.check(params[spec.name])

    def log_density(self, params: Dict[str, jnp.ndarray]) -> jnp.ndarray:
        """
        Log posterior density at ``params`` (up to the normalizing constant).

        Returns ``-inf`` for rejected values, or raises DomainError in strict mode.
        """
        check_parameter_names(params, self._specs)
        if self.strict:
            self.check_parameters(params)
            return total_log_density(params, self.bundle, self.priors, self._specs, validate_args=True)
        return self._log_density_fn(params)

    def log_density_terms(self, params: Dict[str, jnp.ndarray]) -> Dict[str, jnp.ndarray]:
        """Per-component contributions to the log-density."""
        check_parameter_names(params, self._specs)
        if self.strict:
            self.check_parameters(params)
            return log_density_terms(params, self.bundle, self.priors, validate_args=True)
        return self._terms_fn(params)

    def log_density_and_grad(self, params: Dict[str, jnp.ndarray]) -> Tuple[jnp.ndarray, Dict[str, jnp.ndarray]]:
        """Log-density and its gradient, a dict shaped like ``params``."""
        check_parameter_names(params, self._specs)
        if self.strict:
            self.check_parameters(params)
        float_dtype = jnp.result_type(float)
        params = {name: jnp.asarray(value, dtype=float_dtype) for name, value in params.items()}
        return self._value_and_grad_fn(params)

    def log_density_fn(self, unconstrained: bool = False) -> Callable[[jnp.ndarray], jnp.ndarray]:
        """
        Pure log-density of a flat parameter vector, for an external sampler.

        The returned function can be jit-compiled and differentiated. With
        ``unconstrained=True`` it takes the vector produced by
        :func:`~ipm_jax.models.parameters.unconstrain` and adds the
        log-Jacobian of the back-transform.
        """
        bundle, priors, specs = self.bundle, self.priors, self._specs

        if unconstrained:
            def fn(z):
                params, log_jacobian = constrain(z, specs)
                return total_log_density(params, bundle, priors, specs) + log_jacobian
        else:
            def fn(x):
                return total_log_density(unflatten_parameters(x, specs), bundle, priors, specs)

        return fn

    def log_density_flat(self, x: jnp.ndarray) -> jnp.ndarray:
        """Log-density of a flat parameter vector in canonical order."""
        return self._flat_fn(jnp.asarray(x, dtype=jnp.result_type(float)))

    def log_density_unconstrained(self, z: jnp.ndarray) -> jnp.ndarray:
        """Log-density of an unconstrained vector, including the log-Jacobian."""
        return self._unconstrained_fn(jnp.asarray(z, dtype=jnp.result_type(float)))

    def flatten(self, params: Dict[str, jnp.ndarray]) -> jnp.ndarray:
        """Flat parameter vector in canonical order."""
        check_parameter_names(params, self._specs)
        return flatten_parameters(params, self._specs)

    def unflatten(self, x: jnp.ndarray) -> Dict[str, jnp.ndarray]:
        """Parameter dict from a flat vector."""
        return unflatten_parameters(jnp.asarray(x), self._specs)

    def transformed(self, params: Dict[str, jnp.ndarray]) -> TransformedParameters:
        """Per-interval rates, total population and expected nestlings."""
        return transform_parameters(params, self.bundle.R)

    def marray(self, params: Dict[str, jnp.ndarray]) -> jnp.ndarray:
        """M-array cell probabilities at ``params``."""
        tp = self.transformed(params)
        return build_marray(tp.sjuv, tp.sad, tp.p)

    def get_initial_parameters(self) -> Dict[str, jnp.ndarray]:
        """
        Data-driven starting values.

        Population sizes start constant at the mean count, split 30/70
        between first-years and adults, which keeps every ``Nad[t]`` below
        ``Ntot[t-1]``. Fecundity starts at nestlings per surveyed brood.
        """
        y = np.asarray(self.bundle.y)
        J = np.asarray(self.bundle.J)
        R = np.asarray(self.bundle.R)
        nyears = self.bundle.nyears

        level = max(float(np.mean(y)), 1.0)
        fecundity = max(float(np.sum(J)) / max(float(np.sum(R)), 1.0), 0.1)

        initial = {
            "sigma_y": jnp.asarray(max(float(np.std(y)), 1.0)),
            "N1": jnp.full((nyears,), 0.3 * level),
            "Nad": jnp.full((nyears,), 0.7 * level),
            "mean_sjuv": jnp.asarray(0.3),
            "mean_sad": jnp.asarray(0.6),
            "mean_p": jnp.asarray(0.5),
            "mean_fec": jnp.asarray(fecundity),
        }

        self.logger.debug(
            "Initial values",
            population_level=round(level, 3),
            fecundity=round(fecundity, 3),
        )
        return initial
