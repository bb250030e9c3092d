"""
Tests for FitStatus, aggregate_status, point samples and protocol checks.
"""

import numpy as np
import pytest

from localfit.common import constants
from localfit.fitting.points import PointPosition, PointPositionNormal, points_from_array
from localfit.fitting.protocols import PointSample, missing_lifecycle_calls
from localfit.fitting.plane_fit import CovariancePlaneFit
from localfit.fitting.status import FitStatus, aggregate_status

S = FitStatus


class TestFitStatus:
    """Integer codes are shared with the batched fitters."""

    def test_codes(self):
        assert int(S.UNDEFINED) == constants.LF_STATUS_UNDEFINED == 0
        assert int(S.STABLE) == constants.LF_STATUS_STABLE == 1
        assert int(S.UNSTABLE) == constants.LF_STATUS_UNSTABLE == 2
        assert int(S.NEED_OTHER_PASS) == constants.LF_STATUS_NEED_OTHER_PASS == 3


class TestAggregateStatus:
    """Basket status precedence."""

    def test_all_stable(self):
        assert aggregate_status(S.STABLE, [S.STABLE, S.STABLE]) == S.STABLE

    def test_procedure_alone(self):
        assert aggregate_status(S.STABLE, []) == S.STABLE
        assert aggregate_status(S.UNSTABLE, []) == S.UNSTABLE
        assert aggregate_status(S.UNDEFINED, []) == S.UNDEFINED

    def test_need_other_pass_wins(self):
        assert aggregate_status(S.STABLE, [S.UNSTABLE, S.NEED_OTHER_PASS]) == S.NEED_OTHER_PASS

    def test_unstable_extension_makes_fit_unstable(self):
        assert aggregate_status(S.STABLE, [S.STABLE, S.UNSTABLE]) == S.UNSTABLE

    def test_undefined_procedure_makes_fit_undefined(self):
        assert aggregate_status(S.UNDEFINED, [S.UNDEFINED]) == S.UNDEFINED

    def test_undefined_extension_only(self):
        assert aggregate_status(S.STABLE, [S.UNDEFINED]) == S.UNSTABLE


class TestPointSamples:
    """Reference sample types."""

    def test_position_is_read_only_float64(self):
        p = PointPosition([1, 2, 3])
        assert p.pos.dtype == np.float64
        assert p.dim == 3
        with pytest.raises(ValueError):
            p.pos[0] = 5.0

    def test_position_normal(self):
        p = PointPositionNormal([0.0, 0.0, 0.0], normal=[0.0, 0.0, 2.0])
        np.testing.assert_array_equal(p.normal, [0.0, 0.0, 2.0])

    def test_position_normal_requires_matching_normal(self):
        with pytest.raises(ValueError, match="requires a normal"):
            PointPositionNormal([0.0, 0.0, 0.0])
        with pytest.raises(ValueError, match="does not match"):
            PointPositionNormal([0.0, 0.0, 0.0], normal=[1.0, 0.0])

    def test_points_from_array(self):
        pts = np.arange(12.0).reshape(4, 3)
        samples = points_from_array(pts)
        assert len(samples) == 4
        np.testing.assert_array_equal(samples[2].pos, pts[2])
        with_normals = points_from_array(pts, np.ones_like(pts))
        assert isinstance(with_normals[0], PointPositionNormal)

    def test_samples_satisfy_protocol(self):
        assert isinstance(PointPosition([0.0, 1.0]), PointSample)


class TestLifecycleCheck:
    """missing_lifecycle_calls names what a class lacks."""

    def test_complete_procedure(self):
        assert missing_lifecycle_calls(CovariancePlaneFit) == ()

    def test_incomplete_class(self):
        class HalfFit:
            def init(self, eval_pos):
                pass

            def finalize(self):
                return FitStatus.UNDEFINED

        assert missing_lifecycle_calls(HalfFit) == ("set_weight_func", "add_neighbor", "is_stable")


class TestPackageExports:
    """Top-level names resolve lazily to the implementing modules."""

    def test_lazy_attributes(self):
        import localfit
        from localfit.fitting.basket import make_basket

        assert localfit.FitStatus is FitStatus
        assert localfit.make_basket is make_basket
        assert localfit.__version__

    def test_unknown_attribute(self):
        import localfit

        with pytest.raises(AttributeError):
            localfit.not_a_name
