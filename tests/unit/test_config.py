"""Test configuration models, loading and saving."""

import tomllib
from pathlib import Path

import numpy as np
import pytest
from pydantic import ValidationError

from flimfit.core.domain.config import BatchConfig, FitParams, FlimFitConfig, OutputConfig
from flimfit.io.config import generate_default_config, load_config, save_config


class TestConfigLoading:
    """Tests for configuration file loading."""

    def test_load_valid_config(self, sample_config_file):
        config = load_config(sample_config_file)
        assert config.fitting.x_inc == 0.1
        assert config.fitting.fit_start == 2
        assert config.fitting.fit_end == 90
        assert config.fitting.n_comp == 2
        assert config.fitting.drop_bad is True
        assert config.fitting.i_thresh == 50.0
        assert config.batch.size == 64
        assert config.output.path == Path("results.npz")

    def test_load_nonexistent_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "does_not_exist.toml")

    def test_load_invalid_toml(self, tmp_path):
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("not valid toml {{{")
        with pytest.raises(tomllib.TOMLDecodeError):
            load_config(invalid_file)

    def test_load_minimal_config(self, tmp_path):
        minimal_file = tmp_path / "minimal.toml"
        minimal_file.write_text("")
        config = load_config(minimal_file)
        assert config.fitting.n_comp == 1
        assert config.fitting.noise == "poisson_fit"
        assert config.fitting.drop_bad is False
        assert config.batch.size == 256

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "typo.toml"
        path.write_text("[fitting]\nncomp = 2\n")
        with pytest.raises(ValidationError):
            load_config(path)


class TestConfigSaving:
    """Tests for configuration file saving."""

    def test_save_and_load_roundtrip(self, tmp_path):
        config = FlimFitConfig(
            fitting=FitParams(
                x_inc=0.05,
                fit_end=200,
                n_comp=2,
                instr=[0.25, 0.5, 0.25],
                param_free=[True, True, True, False, True],
                drop_bad=True,
            ),
            batch=BatchConfig(size=32),
            output=OutputConfig(path=Path("out/maps.npz"), log_format="json"),
        )
        save_path = tmp_path / "roundtrip.toml"
        save_config(config, save_path)

        assert load_config(save_path) == config

    def test_unset_optionals_omitted(self, tmp_path):
        save_path = tmp_path / "defaults.toml"
        save_config(FlimFitConfig(), save_path)
        with save_path.open("rb") as f:
            data = tomllib.load(f)
        assert "fit_end" not in data["fitting"]
        assert "param" not in data["fitting"]


class TestDefaultConfig:
    """The generated template is a valid configuration."""

    def test_parses_to_defaults(self):
        data = tomllib.loads(generate_default_config())
        assert FlimFitConfig.model_validate(data) == FlimFitConfig()

    def test_sections(self):
        content = generate_default_config()
        assert "[fitting]" in content
        assert "[batch]" in content
        assert "[output]" in content


class TestFitParamsValidation:
    """Tests for FitParams constraints."""

    def test_n_param(self):
        assert FitParams(n_comp=3).n_param == 7

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"x_inc": 0.0},
            {"n_comp": 0},
            {"n_comp": 11},
            {"fit_start": -1},
            {"fit_start": 10, "fit_end": 10},
            {"param": [1.0, 2.0]},
            {"param_free": [True] * 5},
            {"noise": "given"},
            {"noise": "gaussian"},
            {"instr": []},
            {"restrain": "strict"},
            {"chisq_delta": 0.0},
            {"i_thresh": -1.0},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValidationError):
            FitParams(**kwargs)

    def test_arrays(self):
        params = FitParams(n_comp=2, instr=[1.0, 3.0], sig=[2.0])
        np.testing.assert_array_equal(params.instr_array(), [1.0, 3.0])
        np.testing.assert_array_equal(params.sig_array(), [2.0])
        assert params.param_free_array().dtype == bool
        assert params.param_free_array().all()
        assert params.param_free_array().shape == (5,)

    def test_unset_arrays(self):
        params = FitParams()
        assert params.instr_array() is None
        assert params.sig_array() is None
