"""
localfit: local weighted fitting of geometric primitives on point sets.

Host engine (localfit.fitting): weight kernels, weight functions, fitting
procedures and extensions composed into a Basket with one
init / add_neighbor / finalize lifecycle.

Batched path (localfit.batch): branch-free JAX plane fit over padded
neighborhoods. Not imported until used.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__version__ = "0.1.0"

__all__ = [
    "FitStatus",
    "DistWeightFunc",
    "NoWeightFunc",
    "CovariancePlaneFit",
    "SurfaceVariation",
    "CentroidDerivatives",
    "PlaneResidual",
    "make_basket",
    "fit",
    "FitParams",
    "load_fit_params",
    "fit_planes_batched",
]

_LAZY_ATTRS: dict[str, tuple[str, str]] = {
    "FitStatus": ("localfit.fitting.status", "FitStatus"),
    "DistWeightFunc": ("localfit.fitting.weight_func", "DistWeightFunc"),
    "NoWeightFunc": ("localfit.fitting.weight_func", "NoWeightFunc"),
    "CovariancePlaneFit": ("localfit.fitting.plane_fit", "CovariancePlaneFit"),
    "SurfaceVariation": ("localfit.fitting.extensions", "SurfaceVariation"),
    "CentroidDerivatives": ("localfit.fitting.extensions", "CentroidDerivatives"),
    "PlaneResidual": ("localfit.fitting.extensions", "PlaneResidual"),
    "make_basket": ("localfit.fitting.basket", "make_basket"),
    "fit": ("localfit.fitting.driver", "fit"),
    "FitParams": ("localfit.common.param_models", "FitParams"),
    "load_fit_params": ("localfit.common.config", "load_fit_params"),
    "fit_planes_batched": ("localfit.batch.plane_fit_jax", "fit_planes_batched"),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    return getattr(import_module(module_name), attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
