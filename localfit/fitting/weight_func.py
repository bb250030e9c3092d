"""
Weight functions: kernel + spatial relation + evaluation scale.

Every method takes the relative position q = neighbor.pos - eval_pos and the
sample itself (unused by the distance weighting, available to weightings that
look at sample attributes). Weight functions are immutable; one instance can
be shared by any number of concurrent fits.

DistWeightFunc, with t the scale, d = ||q||, x = d / t and kernel f:

    w(q)         = f(x)                   (0 when d > t or f(x) is not finite)
    dw/dq        = f'(x) q / (d t)
    dw/dt        = -f'(x) d / t^2
    d2w/dq2      = f''(x) u u^T / t^2 + f'(x) (I - u u^T) / (d t),   u = q / d
    d2w/dt2      = 2 f'(x) d / t^3 + f''(x) d^2 / t^4
    d2w/dt dq    = -(f'(x) + x f''(x)) u / t^2
"""

from __future__ import annotations

import numpy as np


class DistWeightFunc:
    """
    Radial weighting f(||q|| / t) restricted to the ball of radius t.

    A neighbor whose kernel weight is not finite (the singular kernel at
    d = 0) is excluded like one outside the support: w = 0 and every
    derivative is zero.
    """

    def __init__(self, kernel, scale: float):
        scale = float(scale)
        if not np.isfinite(scale) or scale <= 0.0:
            raise ValueError(f"DistWeightFunc: scale must be positive and finite (got {scale})")
        self._kernel = kernel
        self._t = scale

    @property
    def kernel(self):
        return self._kernel

    def eval_scale(self) -> float:
        return self._t

    def _eval(self, fn, x: float) -> float:
        # NumPy scalar arithmetic: a pole gives inf instead of ZeroDivisionError.
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return float(fn(np.float64(x)))

    def _support(self, d: float):
        """Kernel value at d, or None when the neighbor is excluded."""
        if d > self._t:
            return None
        f = self._eval(self._kernel.f, d / self._t)
        return f if np.isfinite(f) else None

    def w(self, q: np.ndarray, sample=None) -> float:
        f = self._support(float(np.linalg.norm(q)))
        return 0.0 if f is None else f

    def spacedw(self, q: np.ndarray, sample=None) -> np.ndarray:
        q = np.asarray(q, dtype=np.float64)
        d = float(np.linalg.norm(q))
        if d == 0.0 or self._support(d) is None:
            return np.zeros_like(q)
        return q * (self._eval(self._kernel.df, d / self._t) / (d * self._t))

    def scaledw(self, q: np.ndarray, sample=None) -> float:
        d = float(np.linalg.norm(q))
        if self._support(d) is None:
            return 0.0
        t = self._t
        return -self._eval(self._kernel.df, d / t) * d / (t * t)

    def spaced2w(self, q: np.ndarray, sample=None) -> np.ndarray:
        q = np.asarray(q, dtype=np.float64)
        dim = q.shape[0]
        d = float(np.linalg.norm(q))
        t = self._t
        if self._support(d) is None:
            return np.zeros((dim, dim), dtype=np.float64)
        x = d / t
        ddf = self._eval(self._kernel.ddf, x)
        if d == 0.0:
            # Radial limit at the origin, valid for kernels with f'(0) = 0
            return np.eye(dim, dtype=np.float64) * (ddf / (t * t))
        u = q / d
        uu = np.outer(u, u)
        df = self._eval(self._kernel.df, x)
        return uu * (ddf / (t * t)) + (np.eye(dim, dtype=np.float64) - uu) * (df / (d * t))

    def scaled2w(self, q: np.ndarray, sample=None) -> float:
        d = float(np.linalg.norm(q))
        t = self._t
        if self._support(d) is None:
            return 0.0
        x = d / t
        return (
            2.0 * self._eval(self._kernel.df, x) * d / (t * t * t)
            + self._eval(self._kernel.ddf, x) * d * d / (t * t * t * t)
        )

    def scale_spaced2w(self, q: np.ndarray, sample=None) -> np.ndarray:
        q = np.asarray(q, dtype=np.float64)
        d = float(np.linalg.norm(q))
        t = self._t
        if d == 0.0 or self._support(d) is None:
            return np.zeros_like(q)
        x = d / t
        coeff = -(self._eval(self._kernel.df, x) + x * self._eval(self._kernel.ddf, x)) / (t * t)
        return (q / d) * coeff

    def __repr__(self) -> str:
        return f"DistWeightFunc(kernel={type(self._kernel).__name__}, scale={self._t})"


class NoWeightFunc:
    """Uniform weight 1 for every neighbor, unbounded support, zero derivatives."""

    def eval_scale(self) -> float:
        return float("inf")

    def w(self, q: np.ndarray, sample=None) -> float:
        return 1.0

    def spacedw(self, q: np.ndarray, sample=None) -> np.ndarray:
        return np.zeros_like(np.asarray(q, dtype=np.float64))

    def scaledw(self, q: np.ndarray, sample=None) -> float:
        return 0.0

    def spaced2w(self, q: np.ndarray, sample=None) -> np.ndarray:
        dim = np.asarray(q).shape[0]
        return np.zeros((dim, dim), dtype=np.float64)

    def scaled2w(self, q: np.ndarray, sample=None) -> float:
        return 0.0

    def scale_spaced2w(self, q: np.ndarray, sample=None) -> np.ndarray:
        return np.zeros_like(np.asarray(q, dtype=np.float64))

    def __repr__(self) -> str:
        return "NoWeightFunc()"
