import os
import sys

import numpy as np
import pytest

# Ensure local package import works for pytest collection.
_TEST_DIR = os.path.dirname(__file__)
_PKG_ROOT = os.path.abspath(os.path.join(_TEST_DIR, ".."))
if _PKG_ROOT not in sys.path:
    sys.path.insert(0, _PKG_ROOT)

from localfit.fitting.kernels import SmoothWeightKernel, WendlandWeightKernel  # noqa: E402
from localfit.fitting.points import points_from_array  # noqa: E402
from localfit.fitting.weight_func import DistWeightFunc  # noqa: E402


# =============================================================================
# Random state
# =============================================================================


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded generator; every test that draws points gets the same draw."""
    return np.random.default_rng(20240611)


# =============================================================================
# Point sets
# =============================================================================


@pytest.fixture
def coplanar_points() -> np.ndarray:
    """Five points in the z = 0 plane around the origin."""
    return np.array(
        [
            [0.0, 0.0, 0.0],
            [0.3, 0.0, 0.0],
            [0.0, 0.3, 0.0],
            [-0.3, 0.0, 0.0],
            [0.0, -0.3, 0.0],
        ]
    )


@pytest.fixture
def tilted_plane_points(rng) -> np.ndarray:
    """
    Points on z = 0.1 x - 0.2 y + 0.05 with small normal noise, inside the unit disk.

    Returns:
        (400, 3) array
    """
    n = 400
    radius = np.sqrt(rng.uniform(0.0, 1.0, n))
    angle = rng.uniform(0.0, 2.0 * np.pi, n)
    x = radius * np.cos(angle)
    y = radius * np.sin(angle)
    z = 0.1 * x - 0.2 * y + 0.05 + rng.normal(0.0, 0.01, n)
    return np.stack([x, y, z], axis=1)


@pytest.fixture
def ball_points(rng) -> np.ndarray:
    """Points uniformly distributed in the unit ball (isotropic, no preferred plane)."""
    n = 6000
    directions = rng.normal(size=(n, 3))
    directions /= np.linalg.norm(directions, axis=1, keepdims=True)
    radius = rng.uniform(0.0, 1.0, n) ** (1.0 / 3.0)
    return directions * radius[:, None]


@pytest.fixture
def coplanar_samples(coplanar_points):
    return points_from_array(coplanar_points)


@pytest.fixture
def tilted_plane_samples(tilted_plane_points):
    return points_from_array(tilted_plane_points)


# =============================================================================
# Weight functions
# =============================================================================


@pytest.fixture
def smooth_weight() -> DistWeightFunc:
    return DistWeightFunc(SmoothWeightKernel(), 1.0)


@pytest.fixture
def wendland_weight() -> DistWeightFunc:
    return DistWeightFunc(WendlandWeightKernel(), 0.8)
