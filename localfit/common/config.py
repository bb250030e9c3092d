"""
YAML configuration loading for localfit.

Files are plain mappings; parameters may sit at the root or under a
`fit:` section:

    fit:
      scale: 0.25
      kernel: smooth
      max_passes: 4
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, Optional

import yaml

from localfit.common.param_models import FitParams

_logger = logging.getLogger(__name__)

_CONFIG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "config")
DEFAULT_CONFIG_PATH = os.path.join(_CONFIG_DIR, "default.yaml")


class ConfigError(ValueError):
    """Raised when a configuration file cannot be used."""


def load_yaml_file(path: str) -> Dict[str, Any]:
    """Load a YAML mapping, unwrapping an optional `fit:` section."""
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a mapping at root: {path}")
    if "fit" in data:
        data = data["fit"] or {}
        if not isinstance(data, dict):
            raise ConfigError(f"'fit' section must be a mapping: {path}")
    return data


def load_fit_params(
    path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
) -> FitParams:
    """
    Resolve FitParams from the packaged defaults, an optional user file and overrides.

    Later sources win. Validation errors surface as pydantic ValidationError.
    """
    merged = load_yaml_file(DEFAULT_CONFIG_PATH)
    if path is not None:
        merged = {**merged, **load_yaml_file(path)}
        _logger.info("Loaded fit params from %s", path)
    if overrides:
        merged = {**merged, **overrides}
    return FitParams(**merged)


def weight_func_from_params(params: FitParams):
    """Build the distance weight function described by `params`."""
    # Local import: fitting depends on common, not the other way around.
    from localfit.fitting.kernels import kernel_from_name
    from localfit.fitting.weight_func import DistWeightFunc

    return DistWeightFunc(kernel_from_name(params.kernel), params.scale)
