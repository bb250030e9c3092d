"""
Capability contracts for everything that plugs into a Basket.

These are structural (typing.Protocol): a class satisfies a contract by
having the right members, not by inheriting from it. make_basket() checks
member classes against FittingProcedure / FittingExtension when a Basket
class is composed, so a missing lifecycle call fails at composition time
rather than in the middle of a traversal.
"""

from __future__ import annotations

from typing import Any, Protocol, Tuple, runtime_checkable

import numpy as np

from localfit.fitting.status import FitStatus

LIFECYCLE_CALLS: Tuple[str, ...] = ("set_weight_func", "init", "add_neighbor", "finalize", "is_stable")


@runtime_checkable
class PointSample(Protocol):
    """A neighbor: read access to a position in R^D (plus attributes specific fits need)."""

    @property
    def pos(self) -> np.ndarray: ...


@runtime_checkable
class WeightKernel(Protocol):
    def f(self, x: Any) -> Any: ...

    def df(self, x: Any) -> Any: ...

    def ddf(self, x: Any) -> Any: ...


@runtime_checkable
class WeightFunction(Protocol):
    def w(self, q: np.ndarray, sample: Any) -> float: ...

    def spacedw(self, q: np.ndarray, sample: Any) -> np.ndarray: ...

    def scaledw(self, q: np.ndarray, sample: Any) -> float: ...

    def eval_scale(self) -> float: ...


@runtime_checkable
class FittingProcedure(Protocol):
    """Accumulate/finalize state machine producing a primitive."""

    def set_weight_func(self, weight_func: WeightFunction) -> None: ...

    def init(self, eval_pos: np.ndarray) -> None: ...

    def add_neighbor(self, sample: PointSample) -> bool: ...

    def finalize(self) -> FitStatus: ...

    def is_stable(self) -> bool: ...

    @property
    def status(self) -> FitStatus: ...


@runtime_checkable
class FittingExtension(FittingProcedure, Protocol):
    """
    Same lifecycle as FittingProcedure; constructed with the sibling procedure
    and finalized strictly after it.
    """

    @property
    def procedure(self) -> FittingProcedure: ...


def missing_lifecycle_calls(cls: type) -> Tuple[str, ...]:
    """Names of lifecycle calls `cls` does not provide as callables."""
    return tuple(name for name in LIFECYCLE_CALLS if not callable(getattr(cls, name, None)))
