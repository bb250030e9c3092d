"""
Host-side fitting engine: kernels, weight functions, procedures, extensions, Basket.

All members follow the same lifecycle:
    set_weight_func(w); init(eval_pos); add_neighbor(sample)*; finalize() -> FitStatus
"""

from localfit.fitting.status import (
    FitStatus,
    aggregate_status,
)

from localfit.fitting.kernels import (
    ConstantWeightKernel,
    SmoothWeightKernel,
    WendlandWeightKernel,
    SingularWeightKernel,
    KERNELS,
    kernel_from_name,
)

from localfit.fitting.weight_func import (
    DistWeightFunc,
    NoWeightFunc,
)

from localfit.fitting.points import (
    PointPosition,
    PointPositionNormal,
    points_from_array,
)

from localfit.fitting.base import (
    FitMember,
    FitState,
)

from localfit.fitting.plane_fit import (
    CovariancePlaneFit,
    orient_normal,
)

from localfit.fitting.extensions import (
    FitExtension,
    SurfaceVariation,
    CentroidDerivatives,
    PlaneResidual,
)

from localfit.fitting.basket import (
    Basket,
    make_basket,
)

from localfit.fitting.driver import fit

__all__ = [
    "FitStatus",
    "aggregate_status",
    "ConstantWeightKernel",
    "SmoothWeightKernel",
    "WendlandWeightKernel",
    "SingularWeightKernel",
    "KERNELS",
    "kernel_from_name",
    "DistWeightFunc",
    "NoWeightFunc",
    "PointPosition",
    "PointPositionNormal",
    "points_from_array",
    "FitMember",
    "FitState",
    "CovariancePlaneFit",
    "orient_normal",
    "FitExtension",
    "SurfaceVariation",
    "CentroidDerivatives",
    "PlaneResidual",
    "Basket",
    "make_basket",
    "fit",
]
