"""
Tests for FitParams and YAML configuration loading.
"""

import os

import pytest
from pydantic import ValidationError

from localfit.common import constants
from localfit.common.config import (
    DEFAULT_CONFIG_PATH,
    ConfigError,
    load_fit_params,
    load_yaml_file,
    weight_func_from_params,
)
from localfit.common.param_models import FitParams
from localfit.fitting.kernels import WendlandWeightKernel
from localfit.fitting.weight_func import DistWeightFunc


def _write(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text, encoding="utf-8")
    return str(path)


class TestFitParams:
    """Pydantic validation."""

    def test_defaults_come_from_constants(self):
        params = FitParams()
        assert params.scale == constants.LF_DEFAULT_SCALE
        assert params.kernel == constants.LF_DEFAULT_KERNEL
        assert params.max_passes == constants.LF_MAX_PASSES
        assert params.degeneracy_rel_eps == constants.LF_DEGENERACY_REL_EPS
        assert params.numpy_dtype.name == "float64"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"scale": 0.0},
            {"scale": -1.0},
            {"kernel": "gaussian"},
            {"max_passes": 0},
            {"degeneracy_rel_eps": 1.0},
            {"dtype": "float16"},
            {"unknown_field": 1},
        ],
    )
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(ValidationError):
            FitParams(**overrides)

    def test_assignment_is_validated(self):
        params = FitParams()
        with pytest.raises(ValidationError):
            params.scale = -0.5


class TestLoadFitParams:
    """Packaged defaults, user file and overrides, later sources winning."""

    def test_packaged_defaults(self):
        assert os.path.exists(DEFAULT_CONFIG_PATH)
        assert load_fit_params() == FitParams()

    def test_fit_section_is_unwrapped(self, tmp_path):
        path = _write(tmp_path, "fit.yaml", "fit:\n  scale: 0.25\n  kernel: wendland\n")
        params = load_fit_params(path)
        assert params.scale == 0.25
        assert params.kernel == "wendland"
        assert params.max_passes == constants.LF_MAX_PASSES

    def test_root_level_mapping(self, tmp_path):
        path = _write(tmp_path, "flat.yaml", "max_passes: 2\ndtype: float32\n")
        params = load_fit_params(path)
        assert params.max_passes == 2
        assert params.dtype == "float32"

    def test_overrides_win(self, tmp_path):
        path = _write(tmp_path, "fit.yaml", "fit:\n  scale: 0.25\n")
        assert load_fit_params(path, overrides={"scale": 2.0}).scale == 2.0

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_fit_params(str(tmp_path / "absent.yaml"))

    def test_non_mapping_root(self, tmp_path):
        path = _write(tmp_path, "list.yaml", "- 1\n- 2\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_file(path)

    def test_empty_file_is_empty_mapping(self, tmp_path):
        assert load_yaml_file(_write(tmp_path, "empty.yaml", "")) == {}

    def test_invalid_value_in_file(self, tmp_path):
        path = _write(tmp_path, "bad.yaml", "fit:\n  scale: -3\n")
        with pytest.raises(ValidationError):
            load_fit_params(path)


class TestWeightFuncFromParams:
    def test_builds_distance_weighting(self):
        wf = weight_func_from_params(FitParams(scale=0.4, kernel="wendland"))
        assert isinstance(wf, DistWeightFunc)
        assert isinstance(wf.kernel, WendlandWeightKernel)
        assert wf.eval_scale() == 0.4
