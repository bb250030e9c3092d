"""
Common package for localfit.

Shared constants, parameter models, configuration loading and certificates
used by both the host fitters (fitting/) and the batched fitters (batch/).

JAX-backed modules (jax_init, primitives) are not imported eagerly.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

__all__ = [
    "FitCert",
    "FitParams",
    "load_fit_params",
    "constants",
]

_LAZY_ATTRS: dict[str, tuple[str, str | None]] = {
    "FitCert": ("localfit.common.certificates", "FitCert"),
    "FitParams": ("localfit.common.param_models", "FitParams"),
    "load_fit_params": ("localfit.common.config", "load_fit_params"),
    # Expose as submodule, but do not eagerly import at package import time.
    "constants": ("localfit.common.constants", None),
}


def __getattr__(name: str) -> Any:
    target = _LAZY_ATTRS.get(name)
    if target is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module_name, attr_name = target
    module = import_module(module_name)
    return module if attr_name is None else getattr(module, attr_name)


def __dir__() -> list[str]:
    return sorted(set(globals().keys()) | set(_LAZY_ATTRS.keys()))
