"""Transformed parameters of the integrated population model."""

from typing import Dict, NamedTuple

import jax.numpy as jnp


class TransformedParameters(NamedTuple):
    """Per-interval rates and derived population quantities."""

    sjuv: jnp.ndarray
    sad: jnp.ndarray
    p: jnp.ndarray
    f: jnp.ndarray
    ntot: jnp.ndarray
    rho: jnp.ndarray


def broadcast_rate(mean, n_intervals: int) -> jnp.ndarray:
    """Constant per-interval vector holding ``mean``."""
    return jnp.full((n_intervals,), mean)


def transform_parameters(params: Dict[str, jnp.ndarray], R: jnp.ndarray) -> TransformedParameters:
    """
    Compute the time-indexed rates, total population size and expected nestlings.

    The mean rates are broadcast to one value per interval so time-varying
    rates can later replace them without changing any consumer.

    Args:
        params: Parameter dict (see ``ipm_parameter_specs``)
        R: Broods surveyed per interval, shape (nyears-1,)

    Returns:
        TransformedParameters with ``ntot = N1 + Nad`` and ``rho = R * f``
    """
    n_intervals = R.shape[0]

    sjuv = broadcast_rate(params["mean_sjuv"], n_intervals)
    sad = broadcast_rate(params["mean_sad"], n_intervals)
    p = broadcast_rate(params["mean_p"], n_intervals)
    f = broadcast_rate(params["mean_fec"], n_intervals)

    ntot = jnp.asarray(params["Nad"]) + jnp.asarray(params["N1"])
    rho = R * f

    return TransformedParameters(sjuv=sjuv, sad=sad, p=p, f=f, ntot=ntot, rho=rho)
