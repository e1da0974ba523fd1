"""
Main CLI entry point for mint-tune.

Provides subcommands:
  - mint-tune tune: Tune keepX and ncomp with leave-one-study-out CV
  - mint-tune config: Print the resolved configuration
"""

import click

from mint_tune import __version__
from mint_tune.config.defaults import VALID_DISTS, VALID_MEASURES, VALID_METHODS


@click.group()
@click.version_option(version=__version__, prog_name="mint-tune")
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv)",
)
@click.pass_context
def cli(ctx, verbose):
    """
    mint-tune: hyper-parameter tuning for MINT sPLS-DA

    Chooses the number of selected variables per component (keepX) and the
    number of components with leave-one-study-out cross-validation.
    """
    from mint_tune.utils.random import apply_seed_global

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    seed_applied = apply_seed_global()
    if seed_applied is not None:
        ctx.obj["seed_global"] = seed_applied


@cli.command("tune")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to YAML configuration file",
)
@click.option(
    "--infile",
    type=click.Path(exists=True),
    default=None,
    help="Input table (CSV/TSV/Parquet), one row per sample",
)
@click.option("--outcome-col", default=None, help="Outcome column (default: outcome)")
@click.option("--study-col", default=None, help="Study column (default: study)")
@click.option(
    "--method",
    type=click.Choice(VALID_METHODS),
    default=None,
    help="Tuning method",
)
@click.option("--ncomp", type=int, default=None, help="Number of components")
@click.option(
    "--test-keepx",
    default=None,
    help="Comma-separated keepX grid (e.g. 5,10,20); omit for the components-only assessment",
)
@click.option(
    "--already-tested-x",
    default=None,
    help="Comma-separated keepX values already chosen for the first components",
)
@click.option(
    "--measure",
    type=click.Choice(VALID_MEASURES),
    default=None,
    help="Error measure",
)
@click.option(
    "--dist",
    type=click.Choice(VALID_DISTS),
    multiple=True,
    help="Prediction distance (can be repeated; the first drives the selection)",
)
@click.option(
    "--signif-threshold",
    type=float,
    default=None,
    help="Significance level for choosing ncomp (default: 0.01)",
)
@click.option("--auc", is_flag=True, default=None, help="Compute AUC summaries")
@click.option(
    "--full-output",
    is_flag=True,
    default=False,
    help="Keep per-sample predictions for every candidate",
)
@click.option(
    "--partial-results",
    is_flag=True,
    default=None,
    help="Write the completed components when a fold fails",
)
@click.option("--plot", is_flag=True, default=None, help="Save the tuning curve plot")
@click.option("--n-jobs", type=int, default=None, help="Parallel workers (-1 = all cores)")
@click.option(
    "--outdir",
    type=click.Path(),
    default=None,
    help="Output directory for results (default: results/)",
)
@click.option(
    "--override",
    multiple=True,
    help="Override config values (format: key=value or nested.key=value)",
)
@click.pass_context
def tune(ctx, config, **kwargs):
    """Tune keepX per component and the number of components."""
    from mint_tune.cli.tune import run_tune

    cli_args = {k: v for k, v in kwargs.items() if k != "override"}
    overrides = list(kwargs.get("override", []))

    run_tune(
        config_file=config,
        cli_args=cli_args,
        overrides=overrides,
        verbose=ctx.obj.get("verbose", 0),
    )


@cli.command("config")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="Path to YAML configuration file",
)
@click.option(
    "--override",
    multiple=True,
    help="Override config values (format: key=value or nested.key=value)",
)
def config_cmd(config, override):
    """Print the resolved configuration."""
    from mint_tune.config import format_config_summary, load_tune_config

    resolved = load_tune_config(config_file=config, overrides=list(override))
    click.echo(format_config_summary(resolved))


if __name__ == "__main__":
    cli()
