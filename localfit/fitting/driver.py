"""
Caller-side helper that drives a Basket through every pass it asks for.

The neighbor collection must be re-iterable (list, tuple, array of samples):
a NEED_OTHER_PASS answer is served by traversing exactly the same neighbors
again after a fresh init at the same evaluation position.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from localfit.fitting.status import FitStatus

_logger = logging.getLogger(__name__)


def fit(
    basket,
    eval_pos,
    neighbors: Iterable,
    weight_func=None,
    max_passes: Optional[int] = None,
) -> FitStatus:
    """
    Run init / add_neighbor* / finalize until the basket no longer asks for a pass.

    Args:
        basket: Basket instance (or any single procedure with the same lifecycle)
        eval_pos: Query position
        neighbors: Re-iterable collection of point samples
        weight_func: Bound before the first pass when given
        max_passes: Traversal budget (defaults to basket.params.max_passes)

    Returns:
        Final FitStatus; NEED_OTHER_PASS only if the budget ran out.
    """
    if weight_func is not None:
        basket.set_weight_func(weight_func)
    if max_passes is None:
        max_passes = basket.params.max_passes
    if iter(neighbors) is neighbors:
        # A one-shot iterator cannot be traversed twice.
        neighbors = list(neighbors)

    status = FitStatus.UNDEFINED
    for pass_index in range(max_passes):
        basket.init(eval_pos)
        for sample in neighbors:
            basket.add_neighbor(sample)
        status = basket.finalize()
        if status != FitStatus.NEED_OTHER_PASS:
            return status
        _logger.debug("fit: pass %d requested another traversal", pass_index)
    _logger.debug("fit: pass budget (%d) exhausted", max_passes)
    return status
