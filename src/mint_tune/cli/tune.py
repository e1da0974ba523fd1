"""
CLI implementation for the tune command.

Loads a sample table, runs the configured tuner and writes:
    tune_result.json      full result (JSON)
    error_rate.csv        mean error, keepX grid × component
    error_per_group.csv   error of the chosen keepX, component × study
    config.yaml           resolved configuration
    tune.log              run log
    tuning_curve.png      error curves (with --plot)
"""

from pathlib import Path
from typing import Any

from mint_tune.config import format_config_summary, load_tune_config, save_config
from mint_tune.data.io import load_dataset
from mint_tune.errors import FoldEvaluationError, InputValidationError
from mint_tune.tuning.performance import PerformanceResult
from mint_tune.tuning.registry import get_tuner
from mint_tune.tuning.result import TuneResult
from mint_tune.utils.logging import log_section, setup_logger, verbosity_to_level
from mint_tune.utils.random import set_random_seed
from mint_tune.utils.serialization import save_joblib, save_json

# CLI option name -> nested config section
CLI_SECTIONS = {
    "infile": "data",
    "outcome_col": "data",
    "study_col": "data",
    "n_jobs": "compute",
    "outdir": "output",
    "plot": "output",
}


def _parse_int_list(value: str | None) -> list[int] | None:
    if value is None:
        return None
    return [int(tok) for tok in str(value).split(",") if tok.strip()]


def cli_args_to_config(cli_args: dict[str, Any]) -> dict[str, Any]:
    """Map flat CLI options onto the nested configuration layout."""
    nested: dict[str, Any] = {}
    for key, value in cli_args.items():
        if value is None:
            continue
        if key in ("test_keepx", "already_tested_x"):
            value = _parse_int_list(value)
        elif key == "dist":
            value = list(value) or None
            if value is None:
                continue
        elif key == "full_output":
            if value:
                nested["light_output"] = False
            continue

        section = CLI_SECTIONS.get(key)
        if section is None:
            nested[key] = value
        else:
            nested.setdefault(section, {})[key] = value
    return nested


def write_outputs(
    result: TuneResult | PerformanceResult, outdir: Path, logger, plot: bool = False
) -> None:
    outdir.mkdir(parents=True, exist_ok=True)
    save_json(result.to_dict(), outdir / "tune_result.json")
    logger.info(f"Saved result to: {outdir / 'tune_result.json'}")

    if isinstance(result, TuneResult):
        result.error_rate.to_csv(outdir / "error_rate.csv")
        result.error_per_group.to_csv(outdir / "error_per_group.csv", index_label="component")
    else:
        result.global_ber.to_csv(outdir / "error_rate.csv", index_label="component")
        first = result.dist[0]
        result.study_ber[first].to_csv(outdir / "error_per_group.csv", index_label="component")

    if plot:
        from mint_tune.plotting import plot_component_errors, plot_tuning_curve

        plot_path = outdir / "tuning_curve.png"
        if isinstance(result, TuneResult):
            plot_tuning_curve(result, plot_path)
        else:
            plot_component_errors(result, plot_path)
        logger.info(f"Saved plot to: {plot_path}")


def run_tune(
    config_file: str | None = None,
    cli_args: dict[str, Any] | None = None,
    overrides: list[str] | None = None,
    verbose: int = 0,
) -> TuneResult | PerformanceResult:
    """
    Run a tuning job from configuration.

    Args:
        config_file: Path to YAML config file (optional)
        cli_args: Flat dictionary of CLI options (optional)
        overrides: List of "key=value" config overrides (optional)
        verbose: Verbosity level (0=INFO, 1=DEBUG)

    Returns:
        TuneResult or PerformanceResult
    """
    logger = setup_logger("mint_tune", level=verbosity_to_level(verbose))
    log_section(logger, "MINT sPLS-DA tuning")

    config = load_tune_config(
        config_file=config_file,
        overrides=overrides,
        cli_args=cli_args_to_config(cli_args or {}),
    )
    logger.debug("\n" + format_config_summary(config))

    if config.data.infile is None:
        raise InputValidationError("An input table is required (--infile or data.infile)")
    if config.compute.seed is not None:
        set_random_seed(config.compute.seed)

    outdir = Path(config.output.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    logger = setup_logger(
        "mint_tune", level=verbosity_to_level(verbose), log_file=outdir / "tune.log"
    )
    save_config(config, outdir / "config.yaml")
    logger.info(f"Saved resolved config to: {outdir / 'config.yaml'}")

    dataset = load_dataset(
        config.data.infile,
        outcome_col=config.data.outcome_col,
        study_col=config.data.study_col,
        feature_cols=config.data.feature_cols,
        id_col=config.data.id_col,
    )

    tuner = get_tuner(config.method)
    try:
        result = tuner.search(config, dataset)
    except FoldEvaluationError as e:
        if e.partial is not None:
            log_section(logger, "Partial result (run aborted)")
            write_outputs(e.partial, outdir, logger, plot=config.output.plot)
        raise

    log_section(logger, "Summary")
    if isinstance(result, TuneResult):
        logger.info(f"Chosen keepX: {result.choice_keepx.tolist()}")
        if result.choice_ncomp is None:
            logger.info("Recommended ncomp: not available (needs > 2 studies and > 1 component)")
        else:
            logger.info(f"Recommended ncomp: {result.choice_ncomp}")
    else:
        logger.info(f"Global BER by component:\n{result.global_ber}")

    write_outputs(result, outdir, logger, plot=config.output.plot)
    if config.output.save_joblib:
        save_joblib(result, outdir / "tune_result.joblib")
        logger.info(f"Saved result object to: {outdir / 'tune_result.joblib'}")

    return result
