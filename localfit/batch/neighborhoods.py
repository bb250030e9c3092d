"""
Fixed-size neighborhood gathering for the batched fitters.

A k-d tree radius query is packed into dense (Q, K, D) blocks plus a (Q, K)
validity mask, the shape jax.vmap needs. Padding rows repeat the query
position and are masked out.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.spatial import KDTree

_logger = logging.getLogger(__name__)


@dataclass
class Neighborhoods:
    neighbors: np.ndarray  # (Q, K, D)
    mask: np.ndarray  # (Q, K) bool
    indices: np.ndarray  # (Q, K) int, -1 for padding

    @property
    def counts(self) -> np.ndarray:
        return np.sum(self.mask, axis=1)


def gather_neighborhoods(
    points: np.ndarray,
    queries: np.ndarray,
    radius: float,
    max_neighbors: int,
) -> Neighborhoods:
    """
    Up to `max_neighbors` nearest points within `radius` of each query.

    Args:
        points: (N, D) point cloud
        queries: (Q, D) query positions
        radius: Search radius (inclusive)
        max_neighbors: K, neighborhood capacity; nearer points are kept first

    Returns:
        Neighborhoods with padded neighbors, mask and source indices
    """
    points = np.asarray(points, dtype=np.float64)
    queries = np.asarray(queries, dtype=np.float64)
    if points.ndim != 2 or queries.ndim != 2 or points.shape[1] != queries.shape[1]:
        raise ValueError(
            f"gather_neighborhoods: expected points (N, D) and queries (Q, D), got {points.shape} and {queries.shape}"
        )
    if max_neighbors < 1:
        raise ValueError(f"gather_neighborhoods: max_neighbors must be >= 1 (got {max_neighbors})")
    radius = float(radius)
    if not np.isfinite(radius) or radius <= 0.0:
        raise ValueError(f"gather_neighborhoods: radius must be positive and finite (got {radius})")

    n_q = queries.shape[0]
    k = int(max_neighbors)
    if points.shape[0] == 0:
        return Neighborhoods(
            neighbors=np.repeat(queries[:, None, :], k, axis=1),
            mask=np.zeros((n_q, k), dtype=bool),
            indices=np.full((n_q, k), -1, dtype=np.int64),
        )

    tree = KDTree(points)
    # KDTree's upper bound is strict; nudge it so the radius is inclusive.
    dists, idx = tree.query(queries, k=k, distance_upper_bound=np.nextafter(radius, np.inf))
    dists = np.asarray(dists).reshape(n_q, k)
    idx = np.asarray(idx).reshape(n_q, k)

    mask = np.isfinite(dists)
    safe_idx = np.where(mask, idx, 0)
    neighbors = np.where(mask[..., None], points[safe_idx], queries[:, None, :])
    indices = np.where(mask, idx, -1).astype(np.int64)

    saturated = int(np.sum(np.all(mask, axis=1)))
    if saturated:
        _logger.debug("gather_neighborhoods: %d/%d queries filled all %d slots", saturated, n_q, k)
    return Neighborhoods(neighbors=neighbors, mask=mask, indices=indices)
