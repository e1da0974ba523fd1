"""
Integration tests for the mint-tune CLI.

Runs the tune command end to end on a small CSV sample table with the
MINT sPLS-DA model.
"""

import json

import pandas as pd
import pytest
import yaml
from click.testing import CliRunner
from mint_tune import __version__
from mint_tune.cli.main import cli
from mint_tune.cli.tune import cli_args_to_config
from mint_tune.errors import InputValidationError


def _invoke(args):
    runner = CliRunner()
    result = runner.invoke(cli, args)
    if result.exit_code != 0 and result.exception is not None:
        print("STDOUT:", result.output)
        print("EXCEPTION:", repr(result.exception))
    return result


class TestCLIBasic:
    """Basic CLI functionality tests."""

    def test_help_command(self):
        """Test that --help works."""
        result = _invoke(["tune", "--help"])
        assert result.exit_code == 0
        assert "Tune keepX per component" in result.output
        assert "--test-keepx" in result.output
        assert "--signif-threshold" in result.output
        assert "--partial-results" in result.output

    def test_version(self):
        """Test that --version prints the package version."""
        result = _invoke(["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_infile_raises(self, tmp_path):
        """Test that a run without an input table fails."""
        result = _invoke(["tune", "--outdir", str(tmp_path / "out")])
        assert result.exit_code != 0
        assert isinstance(result.exception, InputValidationError)

    def test_config_command(self, tmp_path):
        """The config command prints the resolved configuration."""
        path = tmp_path / "tune.yaml"
        path.write_text(yaml.safe_dump({"ncomp": 3, "test_keepx": [5, 10]}))
        result = _invoke(["config", "--config", str(path), "--override", "measure=overall"])
        assert result.exit_code == 0
        assert "Configuration Summary" in result.output
        assert "overall" in result.output


class TestCliArgsToConfig:
    """Test mapping of flat CLI options onto the config layout."""

    def test_nested_sections(self):
        """Data, compute and output options land in their sections."""
        nested = cli_args_to_config(
            {
                "infile": "x.csv",
                "study_col": "batch",
                "n_jobs": 2,
                "outdir": "out",
                "plot": True,
                "ncomp": 3,
                "measure": None,
            }
        )
        assert nested == {
            "data": {"infile": "x.csv", "study_col": "batch"},
            "compute": {"n_jobs": 2},
            "output": {"outdir": "out", "plot": True},
            "ncomp": 3,
        }

    def test_lists_and_flags(self):
        """Comma lists are parsed, empty multiples dropped, full output inverted."""
        nested = cli_args_to_config(
            {"test_keepx": "5,10, 20", "already_tested_x": "8", "dist": (), "full_output": True}
        )
        assert nested == {"test_keepx": [5, 10, 20], "already_tested_x": [8], "light_output": False}

    def test_full_output_off_keeps_default(self):
        """Without --full-output light output is left to the config."""
        assert cli_args_to_config({"full_output": False, "dist": ("centroids.dist",)}) == {
            "dist": ["centroids.dist"]
        }

    def test_partial_results_is_top_level(self):
        """--partial-results maps onto the top-level setting."""
        assert cli_args_to_config({"partial_results": True, "plot": None}) == {"partial_results": True}

    def test_empty_grid(self):
        """An empty --test-keepx gives an empty grid."""
        assert cli_args_to_config({"test_keepx": ""}) == {"test_keepx": []}


@pytest.mark.slow
class TestTuneCommand:
    """End-to-end tune runs."""

    def test_tune_writes_outputs(self, sample_table, tmp_path):
        """A grid search writes the result files."""
        outdir = tmp_path / "out"
        result = _invoke(
            [
                "tune",
                "--infile",
                str(sample_table),
                "--ncomp",
                "2",
                "--test-keepx",
                "2,6",
                "--dist",
                "max.dist",
                "--outdir",
                str(outdir),
            ]
        )
        assert result.exit_code == 0, f"CLI failed: {result.output}"

        for name in (
            "tune_result.json",
            "error_rate.csv",
            "error_per_group.csv",
            "config.yaml",
            "tune.log",
        ):
            assert (outdir / name).exists()
        assert not (outdir / "tuning_curve.png").exists()

        payload = json.loads((outdir / "tune_result.json").read_text())
        assert set(payload["choice_keepx"]) == {"comp1", "comp2"}
        assert all(v in (2, 6) for v in payload["choice_keepx"].values())
        assert payload["dist"] == ["max.dist"]

        per_group = pd.read_csv(outdir / "error_per_group.csv", index_col="component")
        assert list(per_group.index) == ["comp1", "comp2"]
        assert list(per_group.columns) == ["S1", "S2", "S3"]

        saved = yaml.safe_load((outdir / "config.yaml").read_text())
        assert saved["test_keepx"] == [2, 6]

    def test_tune_with_plot(self, sample_table, tmp_path):
        """--plot saves the tuning curve."""
        outdir = tmp_path / "out"
        result = _invoke(
            [
                "tune",
                "--infile",
                str(sample_table),
                "--test-keepx",
                "2,6",
                "--dist",
                "max.dist",
                "--plot",
                "--outdir",
                str(outdir),
            ]
        )
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        assert (outdir / "tuning_curve.png").exists()

    def test_components_only(self, sample_table, tmp_path):
        """mint.plsda assesses the full model per component."""
        outdir = tmp_path / "out"
        result = _invoke(
            [
                "tune",
                "--infile",
                str(sample_table),
                "--method",
                "mint.plsda",
                "--ncomp",
                "2",
                "--outdir",
                str(outdir),
                "--override",
                "dist=max.dist,centroids.dist",
            ]
        )
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        payload = json.loads((outdir / "tune_result.json").read_text())
        assert payload["ncomp"] == 2
        assert set(payload["global_error"]["BER"]) == {"max.dist", "centroids.dist"}

    def test_yaml_config(self, sample_table, tmp_path):
        """Settings can come from a YAML file."""
        outdir = tmp_path / "out"
        path = tmp_path / "tune.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "ncomp": 1,
                    "test_keepx": [2, 4],
                    "dist": ["max.dist"],
                    "data": {"infile": str(sample_table)},
                    "output": {"outdir": str(outdir)},
                }
            )
        )
        result = _invoke(["tune", "--config", str(path)])
        assert result.exit_code == 0, f"CLI failed: {result.output}"
        payload = json.loads((outdir / "tune_result.json").read_text())
        assert list(payload["choice_keepx"]) == ["comp1"]
        assert payload["choice_ncomp"] is None
