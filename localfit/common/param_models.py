"""Pydantic parameter models for localfit."""

from __future__ import annotations

from typing import Literal

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from localfit.common import constants


class FitParams(BaseModel):
    """Parameters shared by a weight function and the members of a Basket."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    scale: float = Field(constants.LF_DEFAULT_SCALE, gt=0.0)
    kernel: Literal["constant", "smooth", "wendland", "singular"] = constants.LF_DEFAULT_KERNEL

    degeneracy_rel_eps: float = Field(constants.LF_DEGENERACY_REL_EPS, ge=0.0, lt=1.0)
    eig_abs_eps: float = Field(constants.LF_EIG_ABS_EPS, ge=0.0)
    max_passes: int = Field(constants.LF_MAX_PASSES, ge=1)
    dtype: Literal["float32", "float64"] = constants.LF_DEFAULT_DTYPE

    @property
    def numpy_dtype(self) -> np.dtype:
        return np.dtype(self.dtype)
