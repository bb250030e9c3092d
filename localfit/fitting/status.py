"""Fit status enumeration shared by procedures, extensions and baskets."""

from __future__ import annotations

from enum import IntEnum

from localfit.common import constants


class FitStatus(IntEnum):
    """
    Outcome of finalize().

    UNDEFINED: no valid init/accumulate/finalize sequence (initial state,
        or finalize called without init or without a weight function).
    STABLE: primitive is well-conditioned and usable.
    UNSTABLE: a result exists but is not trustworthy (degenerate, too little support).
    NEED_OTHER_PASS: repeat init + the same neighbor traversal, then finalize again.
    """

    UNDEFINED = constants.LF_STATUS_UNDEFINED
    STABLE = constants.LF_STATUS_STABLE
    UNSTABLE = constants.LF_STATUS_UNSTABLE
    NEED_OTHER_PASS = constants.LF_STATUS_NEED_OTHER_PASS


def aggregate_status(procedure_status: FitStatus, extension_statuses) -> FitStatus:
    """
    Combine member statuses into a Basket status.

    NEED_OTHER_PASS wins while any member still needs a pass; then STABLE only
    if every member is STABLE; an UNDEFINED procedure makes the whole fit UNDEFINED.
    """
    statuses = [procedure_status, *extension_statuses]
    if any(s == FitStatus.NEED_OTHER_PASS for s in statuses):
        return FitStatus.NEED_OTHER_PASS
    if all(s == FitStatus.STABLE for s in statuses):
        return FitStatus.STABLE
    if procedure_status == FitStatus.UNDEFINED:
        return FitStatus.UNDEFINED
    return FitStatus.UNSTABLE
