"""
Parameter declarations for the integrated population model.

Each parameter has a declared support, either the positive half-line or the
unit interval. Samplers that work on an unconstrained space use the log and
logit links below together with the log-Jacobian of the inverse transform.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import jax
import jax.numpy as jnp

from ..core.exceptions import DomainError, ModelSpecificationError


@jax.jit
def logit(x: jnp.ndarray) -> jnp.ndarray:
    """Logit link function."""
    return jnp.log(x / (1 - x))


@jax.jit
def inv_logit(x: jnp.ndarray) -> jnp.ndarray:
    """Inverse logit (sigmoid) function."""
    return jax.nn.sigmoid(x)


@jax.jit
def log_link(x: jnp.ndarray) -> jnp.ndarray:
    """Log link function."""
    return jnp.log(x)


@jax.jit
def exp_link(x: jnp.ndarray) -> jnp.ndarray:
    """Exponential (inverse log) function."""
    return jnp.exp(x)


class Support(str, Enum):
    """Declared support of a parameter."""

    POSITIVE = "positive"
    UNIT_INTERVAL = "unit_interval"


@dataclass(frozen=True)
class ParameterSpec:
    """Name, shape and support of one model parameter."""

    name: str
    support: Support
    size: Optional[int] = None

    @property
    def shape(self) -> Tuple[int, ...]:
        return () if self.size is None else (self.size,)

    @property
    def n_values(self) -> int:
        return 1 if self.size is None else self.size

    @property
    def bounds(self) -> Tuple[float, float]:
        if self.support == Support.UNIT_INTERVAL:
            return (0.0, 1.0)
        return (0.0, math.inf)

    def contains(self, value) -> jnp.ndarray:
        """Whether every element lies in the support; usable inside jit."""
        value = jnp.asarray(value)
        if self.support == Support.UNIT_INTERVAL:
            return jnp.all((value >= 0) & (value <= 1))
        return jnp.all(value > 0)

    def check(self, value) -> None:
        """Raise DomainError if a concrete value lies outside the support."""
        if not bool(self.contains(value)):
            requirement = "0 <= value <= 1" if self.support == Support.UNIT_INTERVAL else "value > 0"
            raise DomainError(
                argument=self.name,
                value=jnp.asarray(value).tolist(),
                requirement=requirement,
            )


def ipm_parameter_specs(nyears: int) -> List[ParameterSpec]:
    """Parameters of the integrated population model, in canonical order."""
    return [
        ParameterSpec("sigma_y", Support.POSITIVE),
        ParameterSpec("N1", Support.POSITIVE, size=nyears),
        ParameterSpec("Nad", Support.POSITIVE, size=nyears),
        ParameterSpec("mean_sjuv", Support.UNIT_INTERVAL),
        ParameterSpec("mean_sad", Support.UNIT_INTERVAL),
        ParameterSpec("mean_p", Support.UNIT_INTERVAL),
        ParameterSpec("mean_fec", Support.POSITIVE),
    ]


def check_parameter_names(params: Dict[str, jnp.ndarray], specs: List[ParameterSpec]) -> None:
    """Raise ModelSpecificationError on missing or unknown parameter names."""
    expected = [spec.name for spec in specs]
    missing = [name for name in expected if name not in params]
    unknown = [name for name in params if name not in expected]

    if missing:
        raise ModelSpecificationError(
            parameter=missing[0],
            issue="missing from parameter values",
            available_parameters=expected,
        )
    if unknown:
        raise ModelSpecificationError(
            parameter=unknown[0],
            issue="not a parameter of this model",
            available_parameters=expected,
        )


def flatten_parameters(params: Dict[str, jnp.ndarray], specs: List[ParameterSpec]) -> jnp.ndarray:
    """Concatenate a parameter dict into one flat vector in canonical order."""
    return jnp.concatenate([jnp.ravel(jnp.asarray(params[spec.name])) for spec in specs])


def unflatten_parameters(x: jnp.ndarray, specs: List[ParameterSpec]) -> Dict[str, jnp.ndarray]:
    """Split a flat vector back into a parameter dict."""
    params = {}
    start = 0
    for spec in specs:
        values = x[start:start + spec.n_values]
        params[spec.name] = values.reshape(spec.shape)
        start += spec.n_values
    return params


def constrain(z: jnp.ndarray, specs: List[ParameterSpec]) -> Tuple[Dict[str, jnp.ndarray], jnp.ndarray]:
    """
    Map an unconstrained vector onto the parameter supports.

    Positive parameters use ``exp`` and unit-interval parameters the inverse
    logit.

    Returns:
        Parameter dict and the log absolute Jacobian determinant of the map
    """
    raw = unflatten_parameters(z, specs)
    params = {}
    log_jacobian = jnp.zeros((), dtype=z.dtype)

    for spec in specs:
        value = raw[spec.name]
        if spec.support == Support.UNIT_INTERVAL:
            params[spec.name] = inv_logit(value)
            log_jacobian += jnp.sum(-jax.nn.softplus(-value) - jax.nn.softplus(value))
        else:
            params[spec.name] = exp_link(value)
            log_jacobian += jnp.sum(value)

    return params, log_jacobian


def unconstrain(params: Dict[str, jnp.ndarray], specs: List[ParameterSpec]) -> jnp.ndarray:
    """Inverse of :func:`constrain`, returning a flat unconstrained vector."""
    pieces = []
    for spec in specs:
        value = jnp.ravel(jnp.asarray(params[spec.name]))
        if spec.support == Support.UNIT_INTERVAL:
            pieces.append(logit(value))
        else:
            pieces.append(log_link(value))
    return jnp.concatenate(pieces)
