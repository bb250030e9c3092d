"""
Batched (data-parallel) fitters.

The JAX backend is imported on first attribute access only.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "PlaneBatchResult",
    "fit_planes_batched",
    "Neighborhoods",
    "gather_neighborhoods",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "PlaneBatchResult": ("localfit.batch.plane_fit_jax", "PlaneBatchResult"),
    "fit_planes_batched": ("localfit.batch.plane_fit_jax", "fit_planes_batched"),
    "Neighborhoods": ("localfit.batch.neighborhoods", "Neighborhoods"),
    "gather_neighborhoods": ("localfit.batch.neighborhoods", "gather_neighborhoods"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)
