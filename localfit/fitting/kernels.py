"""
1-D weight kernels.

A kernel maps a non-negative normalized distance x to a weight and gives its
first two derivatives. Kernels are stateless and use arithmetic only, so the
same object evaluates on Python floats, NumPy arrays and JAX tracers.

Reference: Wendland (1995) "Piecewise polynomial, positive definite and
compactly supported radial functions of minimal degree".
"""

from __future__ import annotations

from typing import Dict, Type


class ConstantWeightKernel:
    """f(x) = 1."""

    name = "constant"

    def f(self, x):
        # x * 0 keeps the input shape/type for array inputs
        return x * 0.0 + 1.0

    def df(self, x):
        return x * 0.0

    def ddf(self, x):
        return x * 0.0


class SmoothWeightKernel:
    """f(x) = (x^2 - 1)^2 on [0, 1]; f(1) = f'(1) = 0."""

    name = "smooth"

    def f(self, x):
        v = x * x - 1.0
        return v * v

    def df(self, x):
        return 4.0 * x * (x * x - 1.0)

    def ddf(self, x):
        return 12.0 * x * x - 4.0


class WendlandWeightKernel:
    """f(x) = (1 - x)^4 (4x + 1), C2 at the support boundary."""

    name = "wendland"

    def f(self, x):
        v = 1.0 - x
        return v * v * v * v * (4.0 * x + 1.0)

    def df(self, x):
        v = 1.0 - x
        return -20.0 * x * v * v * v

    def ddf(self, x):
        v = 1.0 - x
        return 20.0 * v * v * (4.0 * x - 1.0)


class SingularWeightKernel:
    """
    f(x) = 1 / x^2. Interpolating; infinite at x = 0.

    DistWeightFunc and the batched fit exclude a neighbor sitting exactly
    on the evaluation position instead of weighting it by inf.
    """

    name = "singular"

    def f(self, x):
        return 1.0 / (x * x)

    def df(self, x):
        return -2.0 / (x * x * x)

    def ddf(self, x):
        return 6.0 / (x * x * x * x)


KERNELS: Dict[str, Type] = {
    ConstantWeightKernel.name: ConstantWeightKernel,
    SmoothWeightKernel.name: SmoothWeightKernel,
    WendlandWeightKernel.name: WendlandWeightKernel,
    SingularWeightKernel.name: SingularWeightKernel,
}


def kernel_from_name(name: str):
    """Instantiate a kernel by its configuration name."""
    key = name.strip().lower()
    if key not in KERNELS:
        available = ", ".join(sorted(KERNELS))
        raise ValueError(f"Unknown weight kernel '{name}'. Available kernels: {available}")
    return KERNELS[key]()
