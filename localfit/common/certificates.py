"""
Certificate structures for localfit.

Certificates record how well-conditioned a finalized fit was and how much
neighbor support it had. They are produced at finalize (never in the
per-neighbor path) and are meant for diagnostics and logging.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np

from localfit.common import constants


# =============================================================================
# Component Certificates
# =============================================================================


@dataclass
class ConditioningCert:
    """Conditioning information from eigenvalue analysis."""
    eig_min: float = 0.0
    eig_max: float = 0.0
    cond: float = float("inf")
    near_null_count: int = 0

    @classmethod
    def from_eigenvalues(
        cls,
        eigvals: np.ndarray,
        near_null_factor: float = constants.LF_NEAR_NULL_FACTOR,
    ) -> "ConditioningCert":
        """Build from ascending eigenvalues of a symmetric PSD matrix."""
        vals = np.asarray(eigvals, dtype=np.float64).ravel()
        if vals.size == 0:
            return cls()
        eig_min = max(float(vals[0]), 0.0)
        eig_max = max(float(vals[-1]), 0.0)
        cond = eig_max / eig_min if eig_min > 0.0 else float("inf")
        near_null_count = int(np.sum(vals <= near_null_factor * eig_max))
        return cls(eig_min=eig_min, eig_max=eig_max, cond=cond, near_null_count=near_null_count)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "eig_min": self.eig_min,
            "eig_max": self.eig_max,
            "cond": self.cond,
            "near_null_count": self.near_null_count,
        }


@dataclass
class SupportCert:
    """Support/coverage information."""
    weight_sum: float = 0.0
    neighbor_count: int = 0
    ess: float = 0.0  # Effective sample size (sum w)^2 / sum w^2

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weight_sum": self.weight_sum,
            "neighbor_count": self.neighbor_count,
            "ess": self.ess,
        }


# =============================================================================
# Main Certificate
# =============================================================================


@dataclass
class FitCert:
    """
    Certificate for one finalized fitting procedure.

    `status` is the FitStatus name the procedure returned at finalize.
    """
    procedure: str
    status: str
    conditioning: ConditioningCert = field(default_factory=ConditioningCert)
    support: SupportCert = field(default_factory=SupportCert)

    @classmethod
    def undefined(cls, procedure: str) -> "FitCert":
        """Certificate of a procedure that never finalized a valid fit."""
        return cls(procedure=procedure, status="UNDEFINED")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "procedure": self.procedure,
            "status": self.status,
            "conditioning": self.conditioning.to_dict(),
            "support": self.support.to_dict(),
        }
