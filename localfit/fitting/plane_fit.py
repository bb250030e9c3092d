"""
Weighted covariance plane fit (reference fitting procedure).

Weighted PCA plane: min_{n,d} sum_k w_k (n'x_k + d)^2 s.t. ||n|| = 1.
Weighted centroid x̄, weighted covariance S = sum w_k (x_k - x̄)(x_k - x̄)' / sum w_k;
n = eigenvector of λ_min(S), d = -n'x̄.

Accumulation is West's weighted online update, in coordinates relative to the
evaluation position:

    W   <- W + w
    δ   =  q - m
    m   <- m + (w / W) δ
    M2  <- M2 + w δ (q - m)'

so the scatter is always taken about the running weighted centroid and no
large raw second moments are formed.

Reference: West (1979) "Updating mean and variance estimates: an improved method".
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from localfit.common import constants
from localfit.common.certificates import ConditioningCert, FitCert, SupportCert
from localfit.common.param_models import FitParams
from localfit.fitting.base import FitMember
from localfit.fitting.status import FitStatus


def orient_normal(n: np.ndarray, eps: float = constants.LF_SIGN_EPS) -> np.ndarray:
    """Deterministic sign: the last component with |n_k| > eps is positive."""
    significant = np.flatnonzero(np.abs(n) > eps)
    if significant.size and n[significant[-1]] < 0.0:
        return -n
    return n


class CovariancePlaneFit(FitMember):
    """
    Plane through the weighted centroid, normal along the least-variance direction.

    UNSTABLE when fewer than D neighbors were accepted, or when they do not
    span an affine (D-1)-flat: λ_1 <= degeneracy_rel_eps * λ_max, or
    λ_max <= eig_abs_eps.
    """

    ACCESSORS = (
        "normal",
        "offset",
        "centroid",
        "eigenvalues",
        "covariance",
        "potential",
        "project",
        "primitive_gradient",
        "weight_sum",
        "neighbor_count",
        "cert",
    )

    def __init__(self, params: Optional[FitParams] = None):
        super().__init__(params)
        self._w_sum = 0.0
        self._w2_sum = 0.0
        self._count = 0
        self._mean: Optional[np.ndarray] = None
        self._scatter: Optional[np.ndarray] = None
        self._centroid: Optional[np.ndarray] = None
        self._normal: Optional[np.ndarray] = None
        self._eigvals: Optional[np.ndarray] = None
        self._cov: Optional[np.ndarray] = None
        self._offset = float("nan")

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    def _reset(self, dim: int) -> None:
        self._w_sum = 0.0
        self._w2_sum = 0.0
        self._count = 0
        self._buffer("_mean", (dim,))
        self._buffer("_scatter", (dim, dim))
        self._centroid = np.full(dim, np.nan, dtype=self._dtype)
        self._normal = np.full(dim, np.nan, dtype=self._dtype)
        self._eigvals = np.full(dim, np.nan, dtype=self._dtype)
        self._cov = np.full((dim, dim), np.nan, dtype=self._dtype)
        self._offset = float("nan")

    def _accumulate(self, q: np.ndarray, w: float, sample) -> None:
        self._count += 1
        self._w_sum += w
        self._w2_sum += w * w
        delta = q - self._mean
        self._mean += (w / self._w_sum) * delta
        self._scatter += w * np.outer(delta, q - self._mean)

    def _solve(self) -> FitStatus:
        dim = self._mean.shape[0]
        if self._count == 0 or self._w_sum <= 0.0:
            return FitStatus.UNSTABLE

        cov = self._scatter / self._w_sum
        cov = 0.5 * (cov + cov.T)
        eigvals, eigvecs = np.linalg.eigh(cov)
        normal = orient_normal(eigvecs[:, 0])

        self._cov = cov
        self._eigvals = eigvals
        self._normal = normal
        self._centroid = self._eval_pos + self._mean
        self._offset = -float(np.dot(normal, self._centroid))

        if self._count < dim:
            return FitStatus.UNSTABLE
        eig_max = float(eigvals[-1])
        if eig_max <= self.params.eig_abs_eps:
            return FitStatus.UNSTABLE
        if dim >= 2 and float(eigvals[1]) <= self.params.degeneracy_rel_eps * eig_max:
            return FitStatus.UNSTABLE
        return FitStatus.STABLE

    # ------------------------------------------------------------------
    # Plane accessors
    # ------------------------------------------------------------------

    def normal(self) -> np.ndarray:
        """Unit plane normal (eigenvector of the smallest covariance eigenvalue)."""
        return self._normal.copy()

    def offset(self) -> float:
        """Plane offset d in n.x + d = 0."""
        return self._offset

    def centroid(self) -> np.ndarray:
        """Weighted centroid in world coordinates."""
        return self._centroid.copy()

    def eigenvalues(self) -> np.ndarray:
        """Ascending eigenvalues of the weighted covariance."""
        return self._eigvals.copy()

    def covariance(self) -> np.ndarray:
        """Weighted covariance (normalized by the weight sum)."""
        return self._cov.copy()

    def potential(self, x: np.ndarray) -> float:
        """Signed distance of `x` to the plane."""
        return float(np.dot(self._normal, np.asarray(x, dtype=self._dtype)) + self._offset)

    def project(self, x: np.ndarray) -> np.ndarray:
        """Orthogonal projection of `x` onto the plane."""
        x = np.asarray(x, dtype=self._dtype)
        return x - self.potential(x) * self._normal

    def primitive_gradient(self, x: Optional[np.ndarray] = None) -> np.ndarray:
        """Gradient of the potential (constant for a plane)."""
        return self._normal.copy()

    def weight_sum(self) -> float:
        return self._w_sum

    def weight_sq_sum(self) -> float:
        return self._w2_sum

    def neighbor_count(self) -> int:
        return self._count

    def cert(self) -> FitCert:
        if self._status == FitStatus.UNDEFINED:
            return FitCert.undefined(type(self).__name__)
        ess = (self._w_sum * self._w_sum) / self._w2_sum if self._w2_sum > 0.0 else 0.0
        conditioning = (
            ConditioningCert.from_eigenvalues(self._eigvals)
            if self._count > 0
            else ConditioningCert()
        )
        return FitCert(
            procedure=type(self).__name__,
            status=self._status.name,
            conditioning=conditioning,
            support=SupportCert(
                weight_sum=float(self._w_sum),
                neighbor_count=int(self._count),
                ess=float(ess),
            ),
        )
