"""
Batched covariance plane fit (JAX, branch-free).

Same weighting, same primitive and same stability rule as
localfit.fitting.plane_fit.CovariancePlaneFit, evaluated for many queries at
once over fixed-size padded neighborhoods:

- One lane per query (jax.vmap), whole batch compiled once (jax.jit).
- Padding is a mask, not a branch: masked neighbors get weight exactly 0.
- Degenerate lanes still produce finite arrays; status codes say which lanes are usable.

Operator: fit_planes_batched(eval_positions, neighbors, mask, scale, kernel) -> PlaneBatchResult
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import partial
from typing import Optional, Tuple

import numpy as np

from localfit.common import constants
from localfit.common.jax_init import jax, jnp
from localfit.common.param_models import FitParams
from localfit.common.primitives import conditioning_core, orient_normal_core, symmetrize_core
from localfit.fitting.kernels import kernel_from_name


# =============================================================================
# Result
# =============================================================================


@dataclass
class PlaneBatchResult:
    """Per-query plane fits; row i belongs to eval_positions[i]."""
    centroids: np.ndarray  # (Q, D)
    normals: np.ndarray  # (Q, D)
    offsets: np.ndarray  # (Q,)
    eigvals: np.ndarray  # (Q, D) ascending
    weight_sums: np.ndarray  # (Q,)
    neighbor_counts: np.ndarray  # (Q,) int
    status: np.ndarray  # (Q,) int FitStatus codes
    conditioning: np.ndarray  # (Q, 4) [eig_min, eig_max, cond, near_null_count]

    @property
    def n_queries(self) -> int:
        return int(self.status.shape[0])

    @property
    def stable_mask(self) -> np.ndarray:
        return self.status == constants.LF_STATUS_STABLE

    @property
    def n_stable(self) -> int:
        return int(np.sum(self.stable_mask))


# =============================================================================
# Core (one lane)
# =============================================================================


def _fit_one_query(
    eval_pos: jnp.ndarray,  # (D,)
    neighbors: jnp.ndarray,  # (K, D)
    mask: jnp.ndarray,  # (K,) bool
    scale: jnp.ndarray,  # ()
    degeneracy_rel_eps: jnp.ndarray,  # ()
    eig_abs_eps: jnp.ndarray,  # ()
    *,
    kernel,
) -> Tuple[jnp.ndarray, ...]:
    """
    Weighted plane fit of one padded neighborhood.

    Returns:
        centroid (D,), normal (D,), offset (), eigvals (D,), w_sum (), count () int32,
        status () int32, cond_vec (4,)
    """
    dim = eval_pos.shape[0]
    q = neighbors - eval_pos[None, :]
    dist = jnp.linalg.norm(q, axis=1)
    inside = mask & (dist <= scale)

    # Masked lanes may evaluate the kernel outside its domain; jnp.where discards them.
    x = jnp.where(inside, dist / scale, 0.5)
    fx = kernel.f(x) + jnp.zeros_like(x)
    # Non-finite kernel weights (singular kernel at d = 0) are excluded, as on host.
    inside = inside & jnp.isfinite(fx)
    w = jnp.where(inside, fx, 0.0)
    accepted = inside & (w != 0.0)
    count = jnp.sum(accepted.astype(jnp.int32))

    w_sum = jnp.sum(w)
    w_den = jnp.where(w_sum > 0.0, w_sum, 1.0)
    mean = jnp.sum(q * w[:, None], axis=0) / w_den
    centered = q - mean[None, :]
    cov = (centered * w[:, None]).T @ centered / w_den
    cov, _ = symmetrize_core(cov)

    eigvals, eigvecs = jnp.linalg.eigh(cov)
    normal = orient_normal_core(eigvecs[:, 0])
    centroid = eval_pos + mean
    offset = -jnp.dot(normal, centroid)

    eig_max = eigvals[-1]
    stable = (count >= dim) & (w_sum > 0.0) & (eig_max > eig_abs_eps)
    if dim >= 2:
        stable = stable & (eigvals[1] > degeneracy_rel_eps * eig_max)
    status = jnp.where(stable, constants.LF_STATUS_STABLE, constants.LF_STATUS_UNSTABLE).astype(jnp.int32)

    return centroid, normal, offset, eigvals, w_sum, count, status, conditioning_core(eigvals)


@partial(jax.jit, static_argnames=("kernel_name",))
def _fit_planes_batched_jit(
    eval_positions: jnp.ndarray,
    neighbors: jnp.ndarray,
    mask: jnp.ndarray,
    scale: jnp.ndarray,
    degeneracy_rel_eps: jnp.ndarray,
    eig_abs_eps: jnp.ndarray,
    kernel_name: str,
) -> Tuple[jnp.ndarray, ...]:
    """
    JIT-compiled batch core.

    Contract:
    - eval_positions (Q, D), neighbors (Q, K, D), mask (Q, K): fixed shapes.
    - One compilation per (Q, K, D, kernel_name).
    """
    fit_fn = partial(_fit_one_query, kernel=kernel_from_name(kernel_name))
    return jax.vmap(fit_fn, in_axes=(0, 0, 0, None, None, None))(
        eval_positions, neighbors, mask, scale, degeneracy_rel_eps, eig_abs_eps
    )


# =============================================================================
# Public operator
# =============================================================================


def fit_planes_batched(
    eval_positions: np.ndarray,
    neighbors: np.ndarray,
    mask: Optional[np.ndarray] = None,
    scale: Optional[float] = None,
    kernel="smooth",
    params: Optional[FitParams] = None,
) -> PlaneBatchResult:
    """
    Fit one plane per query over padded neighborhoods.

    Args:
        eval_positions: (Q, D) query positions
        neighbors: (Q, K, D) neighbor positions (padding rows arbitrary)
        mask: (Q, K) True for real neighbors (default: all True)
        scale: Support radius of the distance weighting (default: params.scale)
        kernel: Kernel name or kernel instance
        params: Thresholds (degeneracy_rel_eps, eig_abs_eps) and default scale

    Returns:
        PlaneBatchResult with host (NumPy) arrays
    """
    params = params if params is not None else FitParams()
    scale = float(params.scale if scale is None else scale)
    if not np.isfinite(scale) or scale <= 0.0:
        raise ValueError(f"fit_planes_batched: scale must be positive and finite (got {scale})")
    kernel_name = kernel if isinstance(kernel, str) else kernel.name

    eval_positions = np.asarray(eval_positions, dtype=np.float64)
    neighbors = np.asarray(neighbors, dtype=np.float64)
    if eval_positions.ndim != 2 or neighbors.ndim != 3:
        raise ValueError(
            "fit_planes_batched: expected eval_positions (Q, D) and neighbors (Q, K, D), "
            f"got {eval_positions.shape} and {neighbors.shape}"
        )
    n_q, dim = eval_positions.shape
    if neighbors.shape[0] != n_q or neighbors.shape[2] != dim:
        raise ValueError(
            f"fit_planes_batched: neighbors shape {neighbors.shape} does not match queries {eval_positions.shape}"
        )
    if mask is None:
        mask = np.ones(neighbors.shape[:2], dtype=bool)
    mask = np.asarray(mask, dtype=bool).reshape(neighbors.shape[:2])

    centroids, normals, offsets, eigvals, w_sums, counts, status, cond = _fit_planes_batched_jit(
        jnp.asarray(eval_positions),
        jnp.asarray(neighbors),
        jnp.asarray(mask),
        jnp.asarray(scale, dtype=jnp.float64),
        jnp.asarray(params.degeneracy_rel_eps, dtype=jnp.float64),
        jnp.asarray(params.eig_abs_eps, dtype=jnp.float64),
        kernel_name=kernel_name,
    )
    centroids, normals, offsets, eigvals, w_sums, counts, status, cond = jax.device_get(
        (centroids, normals, offsets, eigvals, w_sums, counts, status, cond)
    )
    return PlaneBatchResult(
        centroids=np.asarray(centroids),
        normals=np.asarray(normals),
        offsets=np.asarray(offsets),
        eigvals=np.asarray(eigvals),
        weight_sums=np.asarray(w_sums),
        neighbor_counts=np.asarray(counts, dtype=np.int64),
        status=np.asarray(status, dtype=np.int64),
        conditioning=np.asarray(cond),
    )
