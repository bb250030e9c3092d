"""
Basket: one fitting procedure + an ordered tuple of extensions, one lifecycle.

Composition happens once per combination, at class level:

    PlaneBasket = make_basket(CovariancePlaneFit, SurfaceVariation, PlaneResidual)
    fit = PlaneBasket(params)

make_basket() checks every member class against the lifecycle contract and
generates forwarding methods for the members' read accessors, so a Basket
instance exposes e.g. fit.normal() and fit.surface_variation() directly.
There is no runtime registry; membership and order are fixed by the class.

Call order is a hard contract: procedure first, then extensions in the order
they were given. finalize() relies on it (extensions read the procedure's
finalized primitive).
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional, Tuple

import numpy as np

from localfit.common.param_models import FitParams
from localfit.fitting.protocols import missing_lifecycle_calls
from localfit.fitting.status import FitStatus, aggregate_status

_logger = logging.getLogger(__name__)


class Basket:
    """
    Unified lifecycle over a procedure and its extensions.

    Do not instantiate directly; compose a subclass with make_basket().
    """

    PROCEDURE: Optional[type] = None
    EXTENSIONS: Tuple[type, ...] = ()

    def __init__(self, params: Optional[FitParams] = None):
        if self.PROCEDURE is None:
            raise TypeError("Basket has no fitting procedure; compose one with make_basket()")
        self.params = params if params is not None else FitParams()
        self._procedure = self.PROCEDURE(self.params)
        self._extensions = tuple(ext_cls(self._procedure, self.params) for ext_cls in self.EXTENSIONS)
        self._members = (self._procedure,) + self._extensions
        self._status = FitStatus.UNDEFINED
        self._pass_index = 0
        self._pending_eval_pos: Optional[np.ndarray] = None

    # ------------------------------------------------------------------
    # Lifecycle (fan-out: procedure, then extensions in declared order)
    # ------------------------------------------------------------------

    def set_weight_func(self, weight_func) -> None:
        for member in self._members:
            member.set_weight_func(weight_func)

    def init(self, eval_pos) -> None:
        """
        Reset every member around `eval_pos`.

        After a NEED_OTHER_PASS finalize, an init at the same position counts
        as the next pass; any other init starts over at pass 0. Members that
        have set_pass_index() are told the pass number before their init.
        """
        eval_pos = np.asarray(eval_pos, dtype=self._procedure.dtype).reshape(-1)
        continuing = (
            self._status == FitStatus.NEED_OTHER_PASS
            and self._pending_eval_pos is not None
            and self._pending_eval_pos.shape == eval_pos.shape
            and bool(np.array_equal(self._pending_eval_pos, eval_pos))
        )
        self._pass_index = self._pass_index + 1 if continuing else 0
        self._pending_eval_pos = None
        self._status = FitStatus.UNDEFINED
        for member in self._members:
            set_pass_index = getattr(member, "set_pass_index", None)
            if set_pass_index is not None:
                set_pass_index(self._pass_index)
            member.init(eval_pos)

    def add_neighbor(self, sample) -> bool:
        """True if at least one member accepted the sample."""
        used = False
        for member in self._members:
            used |= member.add_neighbor(sample)
        return used

    def finalize(self) -> FitStatus:
        proc_status = self._procedure.finalize()
        ext_statuses = [ext.finalize() for ext in self._extensions]
        self._status = aggregate_status(proc_status, ext_statuses)
        if self._status == FitStatus.NEED_OTHER_PASS:
            self._pending_eval_pos = self._procedure.eval_pos.copy()
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
    def pass_index(self) -> int:
        """0 for the first traversal of a query, incremented per re-driven pass."""
        return self._pass_index

    @property
    def procedure(self):
        return self._procedure

    @property
    def extensions(self) -> tuple:
        return self._extensions

    @property
    def members(self) -> tuple:
        return self._members

    def extension(self, ext_cls: type):
        """The member instance of extension class `ext_cls`."""
        for ext in self._extensions:
            if type(ext) is ext_cls:
                return ext
        raise KeyError(f"{ext_cls.__name__} is not an extension of {type(self).__name__}")

    def member_statuses(self) -> Tuple[FitStatus, ...]:
        return tuple(member.status for member in self._members)


def _make_forwarder(member_index: int, name: str, doc: Optional[str]):
    def accessor(self, *args, **kwargs):
        return getattr(self._members[member_index], name)(*args, **kwargs)

    accessor.__name__ = name
    accessor.__doc__ = doc
    return accessor


@lru_cache(maxsize=None)
def make_basket(procedure_cls: type, *extension_classes: type, name: Optional[str] = None) -> type:
    """
    Compose a Basket class from a procedure class and extension classes.

    Raises TypeError when a member lacks a lifecycle call or an extension does
    not expose its sibling procedure. The same composition returns the same class.
    """
    missing = missing_lifecycle_calls(procedure_cls)
    if missing:
        raise TypeError(f"{procedure_cls.__name__} is not a fitting procedure (missing {', '.join(missing)})")
    for ext_cls in extension_classes:
        missing = missing_lifecycle_calls(ext_cls)
        if missing:
            raise TypeError(f"{ext_cls.__name__} is not a fitting extension (missing {', '.join(missing)})")
        if not hasattr(ext_cls, "procedure"):
            raise TypeError(f"{ext_cls.__name__} is not a fitting extension (no 'procedure' accessor)")
    if len(set(extension_classes)) != len(extension_classes):
        raise TypeError("An extension class may appear only once in a Basket")

    namespace = {
        "PROCEDURE": procedure_cls,
        "EXTENSIONS": tuple(extension_classes),
        "__module__": __name__,
    }
    for index, member_cls in enumerate((procedure_cls,) + tuple(extension_classes)):
        for accessor in getattr(member_cls, "ACCESSORS", ()):
            if accessor in namespace or hasattr(Basket, accessor):
                _logger.debug("make_basket: %s.%s shadowed, not forwarded", member_cls.__name__, accessor)
                continue
            doc = getattr(getattr(member_cls, accessor, None), "__doc__", None)
            namespace[accessor] = _make_forwarder(index, accessor, doc)

    if name is None:
        member_names = ", ".join(cls.__name__ for cls in (procedure_cls,) + tuple(extension_classes))
        name = f"Basket[{member_names}]"
    basket_cls = type(name, (Basket,), namespace)
    _logger.debug("Composed %s", name)
    return basket_cls
