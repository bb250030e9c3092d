"""
Fitting extensions: derived quantities computed alongside a fitting procedure.

An extension has the same lifecycle as a procedure and is constructed with
the sibling procedure it reads from. The Basket finalizes the procedure
first, so an extension's _solve() may read the finalized primitive.

Extensions here:
- SurfaceVariation:     pass-1-safe; shape indicators from covariance eigenvalues.
- CentroidDerivatives:  pass-1-safe; d(centroid)/d(scale), d(centroid)/d(query).
- PlaneResidual:        two-pass; weighted residuals to the pass-1 plane.

Reference: Pauly, Gross, Kobbelt (2002) "Efficient simplification of
point-sampled surfaces" (surface variation).
"""

from __future__ import annotations

from typing import Optional

import numpy as np

from localfit.common.param_models import FitParams
from localfit.fitting.base import FitMember
from localfit.fitting.status import FitStatus


class FitExtension(FitMember):
    """Base for extensions: holds the sibling procedure."""

    def __init__(self, procedure, params: Optional[FitParams] = None):
        super().__init__(params if params is not None else getattr(procedure, "params", None))
        self._procedure = procedure

    @property
    def procedure(self):
        return self._procedure

    def _procedure_gate(self) -> Optional[FitStatus]:
        """
        Status to return when the sibling did not produce a usable primitive.

        None means the procedure is STABLE and the extension may proceed.
        """
        proc_status = self._procedure.status
        if proc_status == FitStatus.STABLE:
            return None
        if proc_status == FitStatus.UNDEFINED:
            return FitStatus.UNDEFINED
        return FitStatus.UNSTABLE


# =============================================================================
# Surface variation (single pass)
# =============================================================================


class SurfaceVariation(FitExtension):
    """
    Shape indicators from the sibling's ascending covariance eigenvalues λ_0 <= ... <= λ_{D-1}.

    surface_variation = λ_0 / sum λ      (0 on a plane, 1/D for isotropic noise)
    planarity         = (λ_1 - λ_0) / λ_{D-1}
    linearity         = (λ_{D-1} - λ_{D-2}) / λ_{D-1}
    """

    ACCESSORS = ("surface_variation", "planarity", "linearity")

    def __init__(self, procedure, params: Optional[FitParams] = None):
        super().__init__(procedure, params)
        self._variation = float("nan")
        self._planarity = float("nan")
        self._linearity = float("nan")

    def _reset(self, dim: int) -> None:
        self._variation = float("nan")
        self._planarity = float("nan")
        self._linearity = float("nan")

    def _accumulate(self, q: np.ndarray, w: float, sample) -> None:
        # Everything is read from the procedure's moments at finalize.
        pass

    def _solve(self) -> FitStatus:
        gate = self._procedure_gate()
        if gate is not None:
            return gate
        eigvals = np.clip(self._procedure.eigenvalues(), 0.0, None)
        total = float(np.sum(eigvals))
        lam_max = float(eigvals[-1])
        self._variation = float(eigvals[0]) / total
        if eigvals.shape[0] < 2:
            # No shape to speak of on a line.
            return FitStatus.UNSTABLE
        self._planarity = float(eigvals[1] - eigvals[0]) / lam_max
        self._linearity = float(eigvals[-1] - eigvals[-2]) / lam_max
        return FitStatus.STABLE

    def surface_variation(self) -> float:
        return self._variation

    def planarity(self) -> float:
        return self._planarity

    def linearity(self) -> float:
        return self._linearity


# =============================================================================
# Centroid derivatives (single pass)
# =============================================================================


class CentroidDerivatives(FitExtension):
    """
    Derivatives of the weighted centroid c = sum w_i p_i / W with respect to
    the evaluation scale t and the query position x.

    With w_i = w(p_i - x, t):
        dc/dt = sum (dw_i/dt) (p_i - c) / W
        dc/dx = -sum (p_i - c) (dw_i/dq)' / W       (dq/dx = -I)
        dW/dt = sum dw_i/dt,   dW/dx = -sum dw_i/dq

    Raw sums are accumulated in pass 1; the centroid is read from the
    finalized procedure, so no second pass is needed.
    """

    ACCESSORS = ("d_centroid_d_scale", "d_centroid_d_pos", "d_weight_sum_d_scale", "d_weight_sum_d_pos")

    def __init__(self, procedure, params: Optional[FitParams] = None):
        super().__init__(procedure, params)
        self._dwt_sum = 0.0
        self._dwt_q: Optional[np.ndarray] = None
        self._dws_sum: Optional[np.ndarray] = None
        self._q_dws: Optional[np.ndarray] = None
        self._dc_dt: Optional[np.ndarray] = None
        self._dc_dx: Optional[np.ndarray] = None

    def _reset(self, dim: int) -> None:
        self._dwt_sum = 0.0
        self._buffer("_dwt_q", (dim,))
        self._buffer("_dws_sum", (dim,))
        self._buffer("_q_dws", (dim, dim))
        self._dc_dt = np.full(dim, np.nan, dtype=self._dtype)
        self._dc_dx = np.full((dim, dim), np.nan, dtype=self._dtype)

    def _accumulate(self, q: np.ndarray, w: float, sample) -> None:
        dwt = self._weight_func.scaledw(q, sample)
        dws = self._weight_func.spacedw(q, sample)
        self._dwt_sum += dwt
        self._dwt_q += dwt * q
        self._dws_sum += dws
        self._q_dws += np.outer(q, dws)

    def _solve(self) -> FitStatus:
        gate = self._procedure_gate()
        if gate is not None:
            return gate
        w_sum = self._procedure.weight_sum()
        c_local = self._procedure.centroid() - self._eval_pos
        self._dc_dt = (self._dwt_q - c_local * self._dwt_sum) / w_sum
        self._dc_dx = -(self._q_dws - np.outer(c_local, self._dws_sum)) / w_sum
        return FitStatus.STABLE

    def d_centroid_d_scale(self) -> np.ndarray:
        return self._dc_dt.copy()

    def d_centroid_d_pos(self) -> np.ndarray:
        """Jacobian J[j, k] = d c_j / d x_k."""
        return self._dc_dx.copy()

    def d_weight_sum_d_scale(self) -> float:
        return float(self._dwt_sum)

    def d_weight_sum_d_pos(self) -> np.ndarray:
        return -self._dws_sum.copy()


# =============================================================================
# Plane residual (two passes)
# =============================================================================


class PlaneResidual(FitExtension):
    """
    Weighted statistics of the signed distances to the fitted plane.

    The residuals are only defined once the plane exists, so the first
    finalize returns NEED_OTHER_PASS and keeps a snapshot of the plane.
    Every following pass of the same query (pass_index > 0, same evaluation
    position) accumulates against that snapshot and is STABLE on its own,
    however many extra passes sibling extensions ask for:

        residual_variance = sum w_i r_i^2 / W
        residual_rms      = sqrt(residual_variance)
        residual_max      = max |r_i|

    The snapshot is dropped when a new query starts (pass_index 0) or the
    evaluation position changes.
    """

    ACCESSORS = ("residual_variance", "residual_rms", "residual_max", "residual_mean")

    def __init__(self, procedure, params: Optional[FitParams] = None):
        super().__init__(procedure, params)
        self._ref_normal: Optional[np.ndarray] = None
        self._ref_offset = 0.0
        self._ref_eval_pos: Optional[np.ndarray] = None
        self._second_pass = False
        self._w_sum = 0.0
        self._wr_sum = 0.0
        self._wr2_sum = 0.0
        self._r_max = 0.0

    def init(self, eval_pos) -> None:
        super().init(eval_pos)
        self._second_pass = (
            self._pass_index > 0
            and self._ref_normal is not None
            and self._ref_eval_pos is not None
            and self._ref_eval_pos.shape == self._eval_pos.shape
            and bool(np.array_equal(self._ref_eval_pos, self._eval_pos))
        )
        if not self._second_pass:
            self._ref_normal = None
            self._ref_eval_pos = None

    @property
    def second_pass(self) -> bool:
        return self._second_pass

    def _reset(self, dim: int) -> None:
        self._w_sum = 0.0
        self._wr_sum = 0.0
        self._wr2_sum = 0.0
        self._r_max = 0.0

    def _accumulate(self, q: np.ndarray, w: float, sample) -> None:
        if not self._second_pass:
            return
        # Plane snapshot is stored in the local frame of the evaluation position.
        r = float(np.dot(self._ref_normal, q)) + self._ref_offset
        self._w_sum += w
        self._wr_sum += w * r
        self._wr2_sum += w * r * r
        self._r_max = max(self._r_max, abs(r))

    def _solve(self) -> FitStatus:
        gate = self._procedure_gate()
        if gate is not None:
            self._ref_normal = None
            self._ref_eval_pos = None
            return gate
        if not self._second_pass:
            normal = self._procedure.normal()
            self._ref_normal = normal
            self._ref_offset = self._procedure.offset() + float(np.dot(normal, self._eval_pos))
            self._ref_eval_pos = self._eval_pos.copy()
            return FitStatus.NEED_OTHER_PASS
        if self._w_sum <= 0.0:
            return FitStatus.UNSTABLE
        return FitStatus.STABLE

    def residual_mean(self) -> float:
        return self._wr_sum / self._w_sum if self._w_sum > 0.0 else float("nan")

    def residual_variance(self) -> float:
        return self._wr2_sum / self._w_sum if self._w_sum > 0.0 else float("nan")

    def residual_rms(self) -> float:
        return float(np.sqrt(self.residual_variance()))

    def residual_max(self) -> float:
        return self._r_max if self._w_sum > 0.0 else float("nan")
