"""
Explicit prior choices.

Every model parameter is assigned exactly one prior from this module, so a
flat or uniform prior is a value in the prior table rather than a missing
statement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

import jax.numpy as jnp

from .distributions import truncated_normal_lpdf
from ..core.exceptions import ModelSpecificationError


class Prior(ABC):
    """Base class for prior distributions over a parameter's values."""

    @abstractmethod
    def log_density(self, value) -> jnp.ndarray:
        """Summed log prior density over all elements of ``value``."""


@dataclass(frozen=True)
class Flat(Prior):
    """Improper flat prior over the parameter's declared support."""

    def log_density(self, value) -> jnp.ndarray:
        return jnp.zeros(())


@dataclass(frozen=True)
class Uniform(Prior):
    """Uniform prior on ``[lower, upper]``."""

    lower: float = 0.0
    upper: float = 1.0

    def __post_init__(self):
        if not self.upper > self.lower:
            raise ModelSpecificationError(issue=f"Uniform bounds must satisfy lower < upper, got ({self.lower}, {self.upper})")

    def log_density(self, value) -> jnp.ndarray:
        value = jnp.asarray(value)
        inside = jnp.all((value >= self.lower) & (value <= self.upper))
        log_prob = -jnp.log(self.upper - self.lower) * value.size
        return jnp.where(inside, log_prob, -jnp.inf)


@dataclass(frozen=True)
class TruncatedNormal(Prior):
    """Normal prior with mean ``loc`` and standard deviation ``scale``, truncated below."""

    loc: float = 0.0
    scale: float = 1.0
    lower: float = 0.0

    def __post_init__(self):
        if not self.scale > 0:
            raise ModelSpecificationError(issue=f"TruncatedNormal scale must be positive, got {self.scale}")

    def log_density(self, value) -> jnp.ndarray:
        return jnp.sum(truncated_normal_lpdf(value, self.loc, self.scale, self.lower))


def default_priors(initial_population_mean: float = 100.0, initial_population_sd: float = 100.0) -> Dict[str, Prior]:
    """
    Prior table of the integrated population model.

    The ``N1`` and ``Nad`` entries apply to the first year only; later years
    are scored by the population process model.
    """
    initial_size = TruncatedNormal(loc=initial_population_mean, scale=initial_population_sd, lower=0.0)
    return {
        "sigma_y": Flat(),
        "N1": initial_size,
        "Nad": initial_size,
        "mean_sjuv": Uniform(0.0, 1.0),
        "mean_sad": Uniform(0.0, 1.0),
        "mean_p": Uniform(0.0, 1.0),
        "mean_fec": Flat(),
    }


def check_prior_table(priors: Dict[str, Prior], parameter_names: Iterable[str]) -> None:
    """
    Check that ``priors`` assigns exactly one prior to each parameter.

    Raises:
        ModelSpecificationError: On a missing, unknown or non-Prior entry
    """
    names = list(parameter_names)
    for name in names:
        if name not in priors:
            raise ModelSpecificationError(parameter=name, issue="no prior assigned", available_parameters=names)

    for name, prior in priors.items():
        if name not in names:
            raise ModelSpecificationError(parameter=name, issue="prior given for unknown parameter", available_parameters=names)
        if not isinstance(prior, Prior):
            raise ModelSpecificationError(parameter=name, issue=f"expected a Prior instance, got {type(prior).__name__}")


def merge_priors(base: Dict[str, Prior], overrides: Optional[Dict[str, Prior]]) -> Dict[str, Prior]:
    """Return ``base`` with entries replaced by ``overrides``."""
    merged = dict(base)
    if overrides:
        merged.update(overrides)
    return merged
