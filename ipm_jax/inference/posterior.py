"""
Derived quantities from posterior draws.

Maps each retained draw to the yearly population growth rates
``lambda[t] = Ntot[t+1] / Ntot[t]`` and the count variance
``sigma2_y = sigma_y**2``. A year with a non-positive population makes the
following growth rate undefined; it is reported as NaN and the rest of the
pass carries on.
"""

import warnings
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Sequence, Union

import numpy as np
import pandas as pd
import jax
import jax.numpy as jnp

from ..utils.logging import get_logger


logger = get_logger(__name__)

Draw = Mapping[str, Any]
Draws = Union[Mapping[str, Any], Sequence[Draw]]


@dataclass
class DerivedQuantities:
    """Growth rates and count variance, for one draw or stacked over draws."""

    lambda_: np.ndarray
    sigma2_y: np.ndarray

    @property
    def n_undefined(self) -> int:
        """Number of growth rates that could not be computed."""
        return int(np.sum(np.isnan(self.lambda_)))

    def to_dict(self) -> Dict[str, np.ndarray]:
        return {"lambda": self.lambda_, "sigma2_y": self.sigma2_y}


@jax.jit
def growth_rates(ntot: jnp.ndarray) -> jnp.ndarray:
    """
    Population growth rates along the last axis.

    Args:
        ntot: Total population per year, shape (..., nyears)

    Returns:
        ``ntot[..., 1:] / ntot[..., :-1]``, NaN where the earlier year is not
        strictly positive
    """
    ntot = jnp.asarray(ntot)
    previous = ntot[..., :-1]
    defined = previous > 0
    ratio = ntot[..., 1:] / jnp.where(defined, previous, 1.0)
    return jnp.where(defined, ratio, jnp.nan)


def derived_quantities(draw: Draw) -> DerivedQuantities:
    """Derived quantities for a single posterior draw."""
    ntot = jnp.asarray(draw["N1"]) + jnp.asarray(draw["Nad"])
    sigma_y = jnp.asarray(draw["sigma_y"])
    return DerivedQuantities(
        lambda_=np.asarray(growth_rates(ntot)),
        sigma2_y=np.asarray(sigma_y ** 2),
    )


def _stack_draws(draws: Draws) -> Dict[str, np.ndarray]:
    if isinstance(draws, Mapping):
        # A single unstacked draw becomes a batch of one
        return {
            "N1": np.atleast_2d(np.asarray(draws["N1"])),
            "Nad": np.atleast_2d(np.asarray(draws["Nad"])),
            "sigma_y": np.atleast_1d(np.asarray(draws["sigma_y"])),
        }

    draws = list(draws)
    if not draws:
        raise ValueError("No posterior draws supplied")
    return {
        name: np.stack([np.asarray(draw[name]) for draw in draws])
        for name in ("N1", "Nad", "sigma_y")
    }


def process_draws(draws: Draws) -> DerivedQuantities:
    """
    Derived quantities for a batch of posterior draws.

    Args:
        draws: Either a sequence of per-draw parameter dicts or one dict of
            arrays stacked along a leading draw axis

    Returns:
        DerivedQuantities with ``lambda_`` of shape (n_draws, nyears-1) and
        ``sigma2_y`` of shape (n_draws,)
    """
    stacked = _stack_draws(draws)
    ntot = stacked["N1"] + stacked["Nad"]

    derived = DerivedQuantities(
        lambda_=np.asarray(growth_rates(jnp.asarray(ntot))),
        sigma2_y=np.asarray(stacked["sigma_y"]) ** 2,
    )

    n_draws = ntot.shape[0]
    if derived.n_undefined:
        logger.warning(
            "Undefined growth rates in posterior draws",
            n_undefined=derived.n_undefined,
            n_draws=n_draws,
        )
    logger.debug("Processed posterior draws", n_draws=n_draws)
    return derived


def summarize_derived(derived: DerivedQuantities, interval: float = 0.95) -> pd.DataFrame:
    """
    Posterior summary of derived quantities, ignoring undefined values.

    Returns:
        DataFrame indexed by ``lambda[1]``, ..., ``sigma2_y`` with mean, sd,
        median, interval bounds and the count of undefined values
    """
    lambdas = np.atleast_2d(derived.lambda_)
    sigma2 = np.atleast_1d(derived.sigma2_y)
    tail = (1.0 - interval) / 2.0

    columns = {f"lambda[{t + 1}]": lambdas[:, t] for t in range(lambdas.shape[1])}
    columns["sigma2_y"] = sigma2

    rows = {}
    with warnings.catch_warnings():
        # All-NaN columns summarize to NaN
        warnings.simplefilter("ignore", category=RuntimeWarning)
        for name, values in columns.items():
            rows[name] = {
                "mean": float(np.nanmean(values)),
                "sd": float(np.nanstd(values)),
                "median": float(np.nanmedian(values)),
                f"q{100 * tail:g}": float(np.nanquantile(values, tail)),
                f"q{100 * (1 - tail):g}": float(np.nanquantile(values, 1 - tail)),
                "n_undefined": int(np.sum(np.isnan(values))),
            }

    return pd.DataFrame.from_dict(rows, orient="index")
