"""Test CLI commands."""

import json

import numpy as np
from typer.testing import CliRunner

from flimfit import __version__
from flimfit.cli.app import app

from conftest import make_decay_image

runner = CliRunner()


class TestCLIHelp:
    """Tests for CLI help messages."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "flimfit" in result.stdout
        assert "fit" in result.stdout
        assert "init" in result.stdout

    def test_fit_help(self):
        result = runner.invoke(app, ["fit", "--help"])
        assert result.exit_code == 0
        assert "--output" in result.stdout
        assert "--batch-size" in result.stdout
        assert "--drop-bad" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout


class TestInitCommand:
    """Tests for init command."""

    def test_init_creates_file(self, tmp_path):
        config_path = tmp_path / "test_config.toml"
        result = runner.invoke(app, ["init", str(config_path)])
        assert result.exit_code == 0
        assert config_path.exists()
        assert "Created" in result.stdout
        assert "[fitting]" in config_path.read_text()

    def test_init_no_overwrite_without_force(self, tmp_path):
        config_path = tmp_path / "existing.toml"
        config_path.write_text("# existing content")

        result = runner.invoke(app, ["init", str(config_path)])
        assert result.exit_code == 1
        assert "already exists" in result.stdout
        assert config_path.read_text() == "# existing content"

    def test_init_force_overwrites(self, tmp_path):
        config_path = tmp_path / "existing.toml"
        config_path.write_text("# existing content")

        result = runner.invoke(app, ["init", str(config_path), "--force"])
        assert result.exit_code == 0
        assert "[fitting]" in config_path.read_text()


class TestFitCommand:
    """Tests for the fit command on a small synthetic image."""

    def test_fit_writes_archive(self, tmp_path):
        image, _ = make_decay_image((2, 3))
        data = tmp_path / "decays.npy"
        np.save(data, image)
        output = tmp_path / "maps.npz"

        result = runner.invoke(
            app,
            ["fit", str(data), "--x-inc", "0.1", "--batch-size", "4", "--output", str(output)],
        )
        assert result.exit_code == 0, result.stdout
        assert "Results written" in result.stdout
        with np.load(output) as archive:
            assert archive["status"].shape == (2, 3)
            assert np.all(archive["status"] == 0)
            assert archive["batch_df"].size == 2
            np.testing.assert_allclose(archive["param"][..., 2], 2.0, rtol=2e-2)

    def test_fit_with_config_and_log(self, tmp_path, sample_config_file):
        image, _ = make_decay_image((2, 2))
        data = tmp_path / "decays.npy"
        np.save(data, image)
        output = tmp_path / "out.npz"
        log_file = tmp_path / "fit.log"

        result = runner.invoke(
            app,
            [
                "fit",
                str(data),
                "--config",
                str(sample_config_file),
                "--n-comp",
                "1",
                "--output",
                str(output),
                "--log-file",
                str(log_file),
            ],
        )
        assert result.exit_code == 0, result.stdout
        assert output.exists()
        log_text = log_file.read_text()
        assert "CONFIGURATION" in log_text
        assert "n_comp: 1" in log_text

    def test_invalid_override(self, tmp_path):
        image, _ = make_decay_image((2, 2))
        data = tmp_path / "decays.npy"
        np.save(data, image)
        result = runner.invoke(app, ["fit", str(data), "--x-inc=-1"])
        assert result.exit_code == 1
        assert "Configuration failed" in result.stdout

    def test_unsupported_data(self, tmp_path):
        data = tmp_path / "decays.csv"
        data.write_text("1,2,3")
        result = runner.invoke(app, ["fit", str(data), "--output", str(tmp_path / "o.npz")])
        assert result.exit_code == 1
        assert "Unsupported" in result.stdout

    def test_lifetime_axis_out_of_range(self, tmp_path):
        data = tmp_path / "decays.npy"
        np.save(data, np.ones((2, 2, 8)))
        config_path = tmp_path / "flimfit.toml"
        config_path.write_text("[fitting]\nlt_axis = 5\n")

        result = runner.invoke(
            app,
            ["fit", str(data), "--config", str(config_path), "--output", str(tmp_path / "o.npz")],
        )
        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "Fitting process failed" in result.stdout
        assert "out of range" in result.stdout

    def test_log_format_from_config(self, tmp_path):
        image, _ = make_decay_image((2, 2))
        data = tmp_path / "decays.npy"
        np.save(data, image)
        config_path = tmp_path / "flimfit.toml"
        config_path.write_text('[fitting]\nx_inc = 0.1\n\n[output]\nlog_format = "json"\n')
        log_file = tmp_path / "fit.log"

        result = runner.invoke(
            app,
            [
                "fit",
                str(data),
                "--config",
                str(config_path),
                "--output",
                str(tmp_path / "o.npz"),
                "--log-file",
                str(log_file),
            ],
        )
        assert result.exit_code == 0, result.stdout
        lines = log_file.read_text().splitlines()
        assert all(json.loads(line)["level"] for line in lines)
        assert json.loads(lines[0])["logger"] == "flimfit"
