"""
Reference point sample types.

Any object exposing a `pos` array can be fed to a fit; these two cover the
common cases (position only, position + normal).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np


@dataclass(frozen=True)
class PointPosition:
    """Point sample with a position in R^D."""

    pos: np.ndarray

    def __post_init__(self) -> None:
        pos = np.asarray(self.pos, dtype=np.float64).reshape(-1)
        pos.setflags(write=False)
        object.__setattr__(self, "pos", pos)

    @property
    def dim(self) -> int:
        return int(self.pos.shape[0])


@dataclass(frozen=True)
class PointPositionNormal(PointPosition):
    """Point sample with a position and a (not necessarily unit) normal."""

    normal: np.ndarray = field(default=None)

    def __post_init__(self) -> None:
        super().__post_init__()
        if self.normal is None:
            raise ValueError("PointPositionNormal requires a normal")
        normal = np.asarray(self.normal, dtype=np.float64).reshape(-1)
        if normal.shape != self.pos.shape:
            raise ValueError(
                f"normal shape {normal.shape} does not match position shape {self.pos.shape}"
            )
        normal.setflags(write=False)
        object.__setattr__(self, "normal", normal)


def points_from_array(points: np.ndarray, normals: np.ndarray | None = None) -> List[PointPosition]:
    """Wrap an (N, D) array (and optional (N, D) normals) as point samples."""
    points = np.asarray(points, dtype=np.float64)
    if points.ndim == 1:
        points = points.reshape(1, -1)
    if normals is None:
        return [PointPosition(p) for p in points]
    normals = np.asarray(normals, dtype=np.float64).reshape(points.shape)
    return [PointPositionNormal(p, n) for p, n in zip(points, normals)]
