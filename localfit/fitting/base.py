"""
Shared lifecycle for fitting procedures and extensions.

FitMember owns the UNINITIALIZED -> ACCUMULATING -> FINALIZED state machine
and the precondition guards; subclasses only supply

    _reset(dim)                 zero the accumulators for a new fit
    _accumulate(q, w, sample)   fold one accepted neighbor (w != 0)
    _solve() -> FitStatus       compute the primitive / derived quantities

Guards never raise: a call made in the wrong state is a no-op that returns
False (add_neighbor) or FitStatus.UNDEFINED (finalize).
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

import numpy as np

from localfit.common.param_models import FitParams
from localfit.fitting.status import FitStatus


class FitState(Enum):
    UNINITIALIZED = "uninitialized"
    ACCUMULATING = "accumulating"
    FINALIZED = "finalized"


class FitMember:
    """Base class for Basket members (procedures and extensions)."""

    # Read accessors a Basket forwards from this member.
    ACCESSORS: Tuple[str, ...] = ()

    def __init__(self, params: Optional[FitParams] = None):
        self.params = params if params is not None else FitParams()
        self._dtype = self.params.numpy_dtype
        self._weight_func = None
        self._eval_pos: Optional[np.ndarray] = None
        self._state = FitState.UNINITIALIZED
        self._status = FitStatus.UNDEFINED
        self._pass_index = 0

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def set_weight_func(self, weight_func) -> None:
        """Bind the weight function. Does not touch accumulated statistics."""
        self._weight_func = weight_func

    def set_pass_index(self, pass_index: int) -> None:
        """Traversal number of the coming init (0 = new query). Set by the Basket."""
        self._pass_index = int(pass_index)

    def init(self, eval_pos) -> None:
        """Reset statistics and start accumulating around `eval_pos`."""
        eval_pos = np.array(eval_pos, dtype=self._dtype).reshape(-1)
        self._eval_pos = eval_pos
        self._reset(eval_pos.shape[0])
        self._state = FitState.ACCUMULATING
        self._status = FitStatus.UNDEFINED

    def add_neighbor(self, sample) -> bool:
        """Weight `sample` and fold it in. False iff it was not accumulated (zero weight)."""
        if self._state is not FitState.ACCUMULATING or self._weight_func is None:
            return False
        q = np.asarray(sample.pos, dtype=self._dtype) - self._eval_pos
        w = self._weight_func.w(q, sample)
        if w == 0.0:
            return False
        self._accumulate(q, w, sample)
        return True

    def finalize(self) -> FitStatus:
        """Seal the fit and return its status."""
        if self._state is FitState.UNINITIALIZED or self._weight_func is None:
            return FitStatus.UNDEFINED
        if self._state is FitState.FINALIZED:
            return self._status
        self._status = FitStatus(self._solve())
        self._state = FitState.FINALIZED
        return self._status

    def is_stable(self) -> bool:
        return self._status == FitStatus.STABLE

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def status(self) -> FitStatus:
        return self._status

    @property
    def state(self) -> FitState:
        return self._state

    @property
    def pass_index(self) -> int:
        return self._pass_index

    @property
    def eval_pos(self) -> Optional[np.ndarray]:
        return self._eval_pos

    @property
    def weight_func(self):
        return self._weight_func

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    # ------------------------------------------------------------------
    # Subclass hooks
    # ------------------------------------------------------------------

    def _reset(self, dim: int) -> None:
        raise NotImplementedError

    def _accumulate(self, q: np.ndarray, w: float, sample) -> None:
        raise NotImplementedError

    def _solve(self) -> FitStatus:
        raise NotImplementedError

    def _buffer(self, name: str, shape: Tuple[int, ...]) -> np.ndarray:
        """Zeroed accumulator `name`, reused in place when shape and dtype match."""
        buf = getattr(self, name, None)
        if isinstance(buf, np.ndarray) and buf.shape == shape and buf.dtype == self._dtype:
            buf.fill(0)
        else:
            buf = np.zeros(shape, dtype=self._dtype)
            setattr(self, name, buf)
        return buf
