"""
Log-density helpers for the integrated population model.

The Poisson and binomial densities accept real-valued counts, generalizing
the factorial through the log-gamma function. Latent population sizes are
continuous parameters, so the process model scores them with these
continuous relaxations of the discrete likelihoods.

Out-of-domain arguments return ``-inf`` so the sampler rejects the draw.
Passing ``validate_args=True`` with concrete (non-traced) inputs raises
:class:`~ipm_jax.core.exceptions.DomainError` instead.
"""

import numpy as np
import jax.numpy as jnp
from jax.scipy.special import gammaln, xlogy
from jax.scipy.stats import norm

from ..core.exceptions import DomainError


def _require(ok, function: str, argument: str, value, requirement: str) -> None:
    """Raise DomainError unless every element of ``ok`` holds."""
    if not bool(np.all(np.asarray(ok))):
        raise DomainError(
            function=function,
            argument=argument,
            value=np.asarray(value).tolist(),
            requirement=requirement,
        )


def _xlogy_nonzero(x, y):
    """
    ``x * log(y)`` for ``y >= 0`` that stays differentiable at ``y == 0``.

    The log is only taken where ``y > 0``. At ``y == 0`` the result is 0 for
    ``x == 0`` and ``-inf`` otherwise, with a zero gradient instead of the
    NaN that ``xlogy`` gives there.
    """
    positive = y > 0
    safe_y = jnp.where(positive, y, 1.0)
    return jnp.where(
        positive,
        xlogy(x, safe_y),
        jnp.where(x == 0, 0.0, -jnp.inf),
    )


def real_poisson_lpdf(n, lam, validate_args: bool = False):
    """
    Poisson log-density with a real-valued outcome.

    Computes ``n*log(lam) - lam - lgamma(n+1)`` elementwise.

    Args:
        n: Non-negative outcome(s), need not be whole numbers
        lam: Non-negative rate(s)
        validate_args: Raise DomainError on invalid input instead of returning -inf

    Returns:
        Elementwise log-density, ``-inf`` where ``n < 0`` or ``lam < 0``
    """
    n = jnp.asarray(n)
    lam = jnp.asarray(lam)

    if validate_args:
        _require(lam >= 0, "real_poisson_lpdf", "lam", lam, "lam >= 0")
        _require(n >= 0, "real_poisson_lpdf", "n", n, "n >= 0")

    valid = (lam >= 0) & (n >= 0)
    safe_n = jnp.where(valid, n, 0.0)
    safe_lam = jnp.where(valid, lam, 1.0)

    log_prob = _xlogy_nonzero(safe_n, safe_lam) - safe_lam - gammaln(safe_n + 1.0)
    return jnp.where(valid, log_prob, -jnp.inf)


def real_binomial_lpdf(n, N, theta, validate_args: bool = False):
    """
    Binomial log-density with real-valued outcome and trial count.

    Computes ``lchoose(N, n) + n*log(theta) + (N-n)*log(1-theta)``, the
    binomial coefficient taken through log-gamma.

    Args:
        n: Outcome(s), 0 <= n <= N
        N: Trial count(s), N >= 0
        theta: Success probability(ies) in [0, 1]
        validate_args: Raise DomainError on invalid input instead of returning -inf

    Returns:
        Elementwise log-density, ``-inf`` outside the domain
    """
    n = jnp.asarray(n)
    N = jnp.asarray(N)
    theta = jnp.asarray(theta)

    if validate_args:
        _require(N >= 0, "real_binomial_lpdf", "N", N, "N >= 0")
        _require((theta >= 0) & (theta <= 1), "real_binomial_lpdf", "theta", theta, "0 <= theta <= 1")
        _require((n >= 0) & (n <= N), "real_binomial_lpdf", "n", n, "0 <= n <= N")

    valid = (N >= 0) & (theta >= 0) & (theta <= 1) & (n >= 0) & (n <= N)
    safe_N = jnp.where(valid, N, 1.0)
    safe_n = jnp.where(valid, n, 0.0)
    safe_theta = jnp.where(valid, theta, 0.5)

    log_choose = (
        gammaln(safe_N + 1.0)
        - gammaln(safe_n + 1.0)
        - gammaln(safe_N - safe_n + 1.0)
    )
    log_prob = (
        log_choose
        + _xlogy_nonzero(safe_n, safe_theta)
        + _xlogy_nonzero(safe_N - safe_n, 1.0 - safe_theta)
    )
    return jnp.where(valid, log_prob, -jnp.inf)


def multinomial_lpmf(counts, probs, validate_args: bool = False):
    """
    Multinomial log-probability over the last axis.

    Cells with zero probability and zero count contribute 0, so an all-zero
    row scores 0 whatever its probabilities. A positive count in a
    zero-probability cell gives ``-inf``.

    Args:
        counts: Non-negative counts, shape ``(..., k)``
        probs: Cell probabilities, same shape as ``counts``
        validate_args: Raise DomainError on invalid input instead of returning -inf

    Returns:
        Log-probability per row, shape ``(...)``
    """
    counts = jnp.asarray(counts)
    probs = jnp.asarray(probs)

    if validate_args:
        _require(counts >= 0, "multinomial_lpmf", "counts", counts, "counts >= 0")
        _require((probs >= 0) & (probs <= 1), "multinomial_lpmf", "probs", probs, "0 <= probs <= 1")

    valid = jnp.all((counts >= 0) & (probs >= 0) & (probs <= 1), axis=-1)
    safe_counts = jnp.where(counts >= 0, counts, 0.0)
    safe_probs = jnp.clip(probs, 0.0, 1.0)

    total = jnp.sum(safe_counts, axis=-1)
    log_prob = (
        gammaln(total + 1.0)
        - jnp.sum(gammaln(safe_counts + 1.0), axis=-1)
        + jnp.sum(_xlogy_nonzero(safe_counts, safe_probs), axis=-1)
    )
    return jnp.where(valid, log_prob, -jnp.inf)


def normal_lpdf(x, loc, scale, validate_args: bool = False):
    """Normal log-density; ``-inf`` where ``scale <= 0``."""
    x = jnp.asarray(x)
    loc = jnp.asarray(loc)
    scale = jnp.asarray(scale)

    if validate_args:
        _require(scale > 0, "normal_lpdf", "scale", scale, "scale > 0")

    valid = scale > 0
    safe_scale = jnp.where(valid, scale, 1.0)
    return jnp.where(valid, norm.logpdf(x, loc, safe_scale), -jnp.inf)


def truncated_normal_lpdf(x, loc, scale, lower: float = 0.0, validate_args: bool = False):
    """
    Log-density of a normal distribution truncated below at ``lower``.

    Includes the normalizing term ``-log(1 - Phi((lower - loc) / scale))``.
    Returns ``-inf`` for ``x < lower`` or ``scale <= 0``.
    """
    x = jnp.asarray(x)

    if validate_args:
        _require(x >= lower, "truncated_normal_lpdf", "x", x, f"x >= {lower}")

    scale = jnp.asarray(scale)
    valid = (x >= lower) & (scale > 0)
    safe_scale = jnp.where(scale > 0, scale, 1.0)
    log_norm = norm.logcdf((loc - lower) / safe_scale)
    log_prob = normal_lpdf(x, loc, scale, validate_args=validate_args) - log_norm
    return jnp.where(valid, log_prob, -jnp.inf)
