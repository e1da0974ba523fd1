"""Tuning method registry.

Each tuner exposes `search(config, dataset)` and is looked up by method
name:

- mint.splsda: keepX grid search + component-count rule (or the
  components-only assessment when no grid is configured)
- mint.plsda: components-only assessment of the full (non-sparse) model
"""

import logging

from mint_tune.config.schema import TuneConfig
from mint_tune.data.io import Dataset
from mint_tune.errors import InputValidationError
from mint_tune.models.registry import build_model_factory
from mint_tune.tuning.api import tune_mint_splsda
from mint_tune.tuning.performance import PerformanceResult
from mint_tune.tuning.result import TuneResult

logger = logging.getLogger(__name__)


class MintSPLSDATuner:
    """Sparse MINT PLS-DA: tune keepX per component and ncomp."""

    method = "mint.splsda"

    def keepx_grid(self, config: TuneConfig) -> list[int] | None:
        return config.test_keepx or None

    def search(self, config: TuneConfig, dataset: Dataset) -> TuneResult | PerformanceResult:
        grid = self.keepx_grid(config)
        logger.info(
            f"Method {self.method}: ncomp={config.ncomp}, "
            f"keepX grid={grid if grid is not None else 'none (all variables)'}"
        )
        return tune_mint_splsda(
            dataset.X.to_numpy(dtype=float),
            dataset.y,
            dataset.study,
            ncomp=config.ncomp,
            test_keepx=grid,
            already_tested_x=config.already_tested_x if grid is not None else None,
            measure=config.measure,
            dist=config.dist,
            signif_threshold=config.signif_threshold,
            stopping_policy=config.stopping_policy,
            auc=config.auc,
            light_output=config.light_output,
            partial_results=config.partial_results,
            n_jobs=config.compute.n_jobs,
            backend=config.compute.backend,
            model_factory=build_model_factory(config.model),
        )


class MintPLSDATuner(MintSPLSDATuner):
    """Non-sparse MINT PLS-DA: every variable is kept, only ncomp is assessed."""

    method = "mint.plsda"

    def keepx_grid(self, config: TuneConfig) -> list[int] | None:
        if config.test_keepx:
            logger.warning("test_keepx is ignored for method 'mint.plsda'")
        return None


TUNERS = {tuner.method: tuner for tuner in (MintSPLSDATuner(), MintPLSDATuner())}


def get_tuner(method: str) -> MintSPLSDATuner:
    """
    Look up the tuner registered under `method`.

    Raises:
        InputValidationError: If no tuner is registered under that name
    """
    try:
        return TUNERS[method]
    except KeyError:
        raise InputValidationError(
            f"Unknown tuning method: {method!r}. Available: {sorted(TUNERS)}"
        ) from None
