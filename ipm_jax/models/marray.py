"""
Cell probabilities of the capture-recapture m-array.

For nyears study years there are nyears-1 release cohorts of each age class.
Row ``t`` of the table holds the probabilities that an animal released as a
juvenile in year ``t`` is next recaptured in each later year, with the last
column holding the probability it is never recaptured. Rows
``nyears-1+t`` hold the same for animals released as adults.

Juveniles survive their first year with ``sjuv[t]`` and every later year with
the adult rate, so for ``j >= t``::

    juvenile: sjuv[t] * prod(sad[t+1..j]) * prod(1 - p[t..j-1]) * p[j]
    adult:    prod(sad[t..j]) * prod(1 - p[t..j-1]) * p[j]

Empty products are 1, which makes ``j = t`` the diagonal ``sjuv[t] * p[t]``
(``sad[t] * p[t]`` for adults). Cells with ``j < t`` are 0.
"""

import numpy as np
import jax
import jax.numpy as jnp


@jax.jit
def build_marray(sjuv: jnp.ndarray, sad: jnp.ndarray, p: jnp.ndarray) -> jnp.ndarray:
    """
    Build the m-array cell probabilities.

    Scans over recapture columns carrying, for every cohort, the probability
    of being alive and not yet recaptured. Each step multiplies by survival
    and non-detection, so no ratios or logarithms of zero occur and work is
    O(nyears^2).

    Args:
        sjuv: Juvenile survival per interval, shape (nyears-1,)
        sad: Adult survival per interval, shape (nyears-1,)
        p: Recapture probability per interval, shape (nyears-1,)

    Returns:
        Array of shape (2*(nyears-1), nyears); each row sums to 1
    """
    sjuv = jnp.asarray(sjuv)
    sad = jnp.asarray(sad)
    p = jnp.asarray(p)
    n_intervals = p.shape[0]

    first_survival = jnp.concatenate([sjuv, sad])
    release = jnp.tile(jnp.arange(n_intervals), 2)
    # Adult survival over the following interval; the final entry is never used
    next_survival = jnp.concatenate([sad[1:], jnp.ones((1,), dtype=sad.dtype)])

    def recapture_column(alive, j):
        alive = alive + jnp.where(release == j, first_survival, 0.0)
        cell = alive * p[j]
        alive = alive * (1.0 - p[j]) * next_survival[j]
        return alive, cell

    init = jnp.zeros_like(first_survival)
    _, columns = jax.lax.scan(recapture_column, init, jnp.arange(n_intervals))
    cells = columns.T

    never_recaptured = jnp.maximum(1.0 - jnp.sum(cells, axis=1), 0.0)
    return jnp.concatenate([cells, never_recaptured[:, None]], axis=1)


def build_marray_numpy(sjuv, sad, p) -> np.ndarray:
    """
    Numpy version of :func:`build_marray` written with the explicit products.

    Used when simulating data; rates may vary by interval.
    """
    sjuv = np.asarray(sjuv, dtype=float)
    sad = np.asarray(sad, dtype=float)
    p = np.asarray(p, dtype=float)
    n_intervals = p.shape[0]
    q = 1.0 - p

    pr = np.zeros((2 * n_intervals, n_intervals + 1))
    for t in range(n_intervals):
        for j in range(t, n_intervals):
            pr[t, j] = sjuv[t] * np.prod(sad[t + 1:j + 1]) * np.prod(q[t:j]) * p[j]
            pr[n_intervals + t, j] = np.prod(sad[t:j + 1]) * np.prod(q[t:j]) * p[j]

    pr[:, -1] = np.maximum(1.0 - pr[:, :-1].sum(axis=1), 0.0)
    return pr
