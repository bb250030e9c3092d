"""
Common JAX Initialization Module.

This module initializes JAX once at import time.
All other modules should import JAX from here instead of importing jax directly
so that x64 precision is enabled before the first array is created.

Usage:
    from localfit.common.jax_init import jax, jnp

    # JAX is already configured for x64 precision
    devices = jax.devices()

Platform selection is left to JAX (JAX_PLATFORMS is honored when set), so the
batched fitters run on an accelerator when one is visible and on CPU otherwise.
"""

from __future__ import annotations

import logging
import os

# Configure XLA BEFORE importing JAX.
# Do not grab the whole device memory up front; fits run next to other work.
os.environ.setdefault("XLA_PYTHON_CLIENT_PREALLOCATE", "false")

import jax
import jax.numpy as jnp

# x64 is required for the stability thresholds to mean the same thing on host and device
jax.config.update("jax_enable_x64", True)

_logger = logging.getLogger(__name__)
_logger.debug("JAX initialized (x64 enabled, backend=%s)", jax.default_backend())

__all__ = ["jax", "jnp"]
