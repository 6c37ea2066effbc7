"""Smoke tests for the Typer CLI."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest
from typer.testing import CliRunner

from siglip2.cli import app
from siglip2.errors import DownloadFailed

pytestmark = [pytest.mark.fast]

runner = CliRunner()
WIDE = {"COLUMNS": "200"}


def test_models_lists_every_identifier():
    result = runner.invoke(app, ["models"], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "base-patch16-224" in result.output
    assert "so400m-patch16-512" in result.output


def test_quantizations():
    result = runner.invoke(app, ["quantizations"])
    assert result.exit_code == 0
    assert result.output.split() == ["fp32", "fp16", "int8", "uint8", "q4", "q4f16", "bnb4"]


def test_path_uses_models_dir_option(tmp_path):
    result = runner.invoke(app, ["--models-dir", str(tmp_path), "path", "large-patch16-256", "-q", "int8"])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == str(tmp_path / "large-patch16-256" / "int8")


def test_path_defaults_from_config(tmp_path):
    result = runner.invoke(app, ["--models-dir", str(tmp_path), "path"])
    assert result.exit_code == 0
    assert result.output.strip() == str(tmp_path / "base-patch16-224" / "fp32")


def test_path_unknown_model_exits_1(tmp_path):
    result = runner.invoke(app, ["--models-dir", str(tmp_path), "path", "unknown-model"])
    assert result.exit_code == 1
    assert "Unknown model: unknown-model" in result.output


def test_status_reports_missing_and_present(installed_model):
    (installed_model / "tokenizer.json").unlink()
    result = runner.invoke(app, ["--models-dir", str(installed_model.parent.parent), "status"], env=WIDE)
    assert result.exit_code == 0, result.output
    assert "present" in result.output
    assert "missing" in result.output


def test_download_reports_already_present(installed_model):
    result = runner.invoke(app, ["--models-dir", str(installed_model.parent.parent), "download"])
    assert result.exit_code == 0, result.output
    assert "already present" in result.output


def test_download_failure_exits_1(tmp_path):
    with patch(
        "siglip2.cli.download_models",
        side_effect=DownloadFailed("https://huggingface.co/x", 404, "Not Found"),
    ):
        result = runner.invoke(app, ["--models-dir", str(tmp_path), "download"])
    assert result.exit_code == 1
    assert "404 Not Found" in result.output


def test_similarity_prints_score(tmp_path, red_image):
    fake = MagicMock()
    fake.similarity.return_value = 0.125
    with patch("siglip2.cli.Siglip2Model", return_value=fake) as ctor:
        result = runner.invoke(app, ["--models-dir", str(tmp_path), "similarity", "a red square", str(red_image)])
    assert result.exit_code == 0, result.output
    assert result.output.strip() == "0.125000"
    ctor.assert_called_once_with("base-patch16-224", "fp32")


def test_batch_prints_matrix(tmp_path, red_image, blue_image):
    fake = MagicMock()
    fake.batch_similarity.return_value = np.array([[0.5, 0.25], [0.1, 0.9]])
    with patch("siglip2.cli.Siglip2Model", return_value=fake):
        result = runner.invoke(
            app,
            ["batch", "-t", "red", "-t", "blue", "-i", str(red_image), "-i", str(blue_image), "-m", "base-patch16-256"],
            env=WIDE,
        )
    assert result.exit_code == 0, result.output
    assert "0.5000" in result.output
    assert "0.9000" in result.output
    assert "red.png" in result.output


def test_config_option_missing_file_exits_1(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "nope.yml"), "quantizations"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_config_option_malformed_yaml_exits_1(tmp_path):
    bad = tmp_path / "bad.yml"
    bad.write_text("models_dir: [unclosed\n")
    result = runner.invoke(app, ["--config", str(bad), "quantizations"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_invalid_discovered_config_exits_1(tmp_path):
    (tmp_path / "siglip2_config.yml").write_text("default_model: no-such-model\n")
    result = runner.invoke(app, ["quantizations"])
    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "Unknown model: no-such-model" in result.output
