"""
Branch-free numeric primitives for the batched fitters.

All functions in this module are TOTAL FUNCTIONS that always run.
They are arrays-only and JIT-safe so they can be used under jax.vmap.

Design invariants:
- No if/else branches that gate computation
- No early returns based on data values
- Degenerate inputs produce finite outputs; validity is reported separately
"""

from __future__ import annotations

from typing import Tuple

from localfit.common import constants
from localfit.common.jax_init import jnp


def symmetrize_core(M: jnp.ndarray) -> Tuple[jnp.ndarray, jnp.ndarray]:
    """
    Arrays-only Symmetrize core (JIT-safe).

    Returns:
        M_sym: 0.5 * (M + M^T)
        sym_delta: ||M_sym - M||_F
    """
    M_sym = 0.5 * (M + M.T)
    sym_delta = jnp.linalg.norm(M_sym - M, ord="fro")
    return M_sym, sym_delta


def conditioning_core(
    eigvals: jnp.ndarray,
    near_null_factor: float = constants.LF_NEAR_NULL_FACTOR,
) -> jnp.ndarray:
    """
    Conditioning summary from ascending eigenvalues (JIT-safe).

    Returns:
        cert_vec: (4,) [eig_min, eig_max, cond, near_null_count]
    """
    eig_min = jnp.maximum(eigvals[0], 0.0)
    eig_max = jnp.maximum(eigvals[-1], 0.0)
    cond = jnp.where(eig_min > 0.0, eig_max / jnp.where(eig_min > 0.0, eig_min, 1.0), jnp.inf)
    near_null_count = jnp.sum(eigvals <= near_null_factor * eig_max).astype(eigvals.dtype)
    return jnp.stack([eig_min, eig_max, cond, near_null_count])


def orient_normal_core(n: jnp.ndarray, eps: float = constants.LF_SIGN_EPS) -> jnp.ndarray:
    """
    Deterministic normal sign (JIT-safe): the last component with |n_k| > eps is positive.
    """
    d = n.shape[0]
    significant = jnp.abs(n) > eps
    # argmax over the reversed mask finds the last significant component
    last = (d - 1) - jnp.argmax(significant[::-1])
    return n * jnp.where(n[last] < 0.0, -1.0, 1.0)

