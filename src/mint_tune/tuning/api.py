"""
Public entry point for MINT sPLS-DA tuning.

tune_mint_splsda validates every argument and checks the group structure
before any model is fitted. Then either:

- test_keepx is given: keepX is searched component by component with
  leave-one-group-out CV and the number of components is chosen with the
  paired t-test rule (TuneResult), or
- test_keepx is None or empty: the full model is assessed for 1..ncomp components
  over every prediction distance (PerformanceResult).
"""

import logging
from collections.abc import Sequence

from mint_tune.config.validation import validate_tune_inputs
from mint_tune.data.groups import make_logo_folds
from mint_tune.errors import FoldEvaluationError
from mint_tune.models.registry import build_model_factory
from mint_tune.tuning.performance import PerformanceResult, evaluate_components
from mint_tune.tuning.result import TuneResult, assemble_result, error_per_group_table
from mint_tune.tuning.sequential import SearchAccumulator, sequential_search
from mint_tune.tuning.stopping import select_ncomp

logger = logging.getLogger(__name__)

DEFAULT_DIST = ("max.dist", "centroids.dist", "mahalanobis.dist")


def tune_mint_splsda(
    X,
    Y,
    study,
    *,
    ncomp: int = 1,
    test_keepx: Sequence[int] | None = None,
    already_tested_x: Sequence[int] | None = None,
    measure: str = "BER",
    dist: Sequence[str] | str | None = DEFAULT_DIST,
    signif_threshold: float = 0.01,
    stopping_policy: str = "first_non_significant",
    auc: bool = False,
    light_output: bool = True,
    partial_results: bool = False,
    n_jobs: int = 1,
    backend: str = "loky",
    model_factory=None,
    scale: bool = True,
    tol: float = 1e-06,
    max_iter: int = 100,
) -> TuneResult | PerformanceResult:
    """
    Tune keepX and the number of components of a MINT sPLS-DA model.

    Args:
        X: Numeric matrix, samples × features
        Y: Outcome labels (at least 2 classes)
        study: Study label per sample
        ncomp: Number of components
        test_keepx: keepX grid (more than one value); None or empty runs the
            components-only assessment of the full model
        already_tested_x: keepX values already chosen for the first
            components (shorter than ncomp)
        measure: "BER" or "overall"
        dist: Prediction distance(s); the first one drives the selection
            ("all" = every distance)
        signif_threshold: Significance level of the component-count rule
        stopping_policy: "first_non_significant" or "last_significant"
        auc: Compute AUC summaries for the chosen keepX
        light_output: If False, keep predictions for every candidate
        partial_results: On a fold failure, attach the completed components
            to the raised FoldEvaluationError as `exc.partial`
        n_jobs: joblib workers for the grid × fold evaluations
        backend: joblib backend
        model_factory: Callable(n_components=..., keepx=...) -> unfitted
            model; default builds MintSPLSDA with `scale`, `tol`, `max_iter`
        scale: Scale variables within each study (default model only)
        tol: Convergence tolerance (default model only)
        max_iter: Maximum iterations per component (default model only)

    Returns:
        TuneResult, or PerformanceResult when test_keepx is None

    Raises:
        InputValidationError: Malformed argument (before any fit)
        InvalidGroupingError: Study with fewer than 2 samples
        DegenerateGroupError: Study holding a single outcome class
        FoldEvaluationError: Model failure on a held-out study
    """
    inputs = validate_tune_inputs(
        X,
        Y,
        study,
        ncomp=ncomp,
        test_keepx=test_keepx,
        already_tested_x=already_tested_x,
        measure=measure,
        dist=dist,
        signif_threshold=signif_threshold,
        stopping_policy=stopping_policy,
    )
    folds = make_logo_folds(inputs.y, inputs.study)
    groups = [f.group for f in folds]
    if model_factory is None:
        model_factory = build_model_factory(scale=scale, tol=tol, max_iter=max_iter)

    logger.info(
        "%d samples × %d features, %d studies, classes %s",
        len(inputs.y),
        inputs.n_features,
        len(groups),
        list(inputs.classes),
    )

    if inputs.test_keepx is None:
        return evaluate_components(
            inputs.X,
            inputs.y,
            inputs.study,
            folds,
            inputs.ncomp,
            inputs.dist,
            model_factory,
            inputs.classes,
            auc=auc,
            n_jobs=n_jobs,
            backend=backend,
        )

    assemble_kwargs = dict(
        grid=inputs.test_keepx,
        groups=groups,
        classes=inputs.classes,
        measure=inputs.measure,
        dist=inputs.dist,
        stopping_policy=inputs.stopping_policy,
        auc=auc,
        light_output=light_output,
    )

    logger.info(
        "keepX grid %s, %s measure, selection distance %s",
        list(inputs.test_keepx),
        inputs.measure,
        inputs.dist[0],
    )
    try:
        accumulator = sequential_search(
            inputs.X,
            inputs.y,
            inputs.study,
            folds,
            inputs.test_keepx,
            inputs.ncomp,
            inputs.classes,
            model_factory,
            already_tested_x=inputs.already_tested_x,
            measure=inputs.measure,
            dist=inputs.dist,
            auc=auc,
            light_output=light_output,
            n_jobs=n_jobs,
            backend=backend,
        )
    except FoldEvaluationError as exc:
        partial = exc.partial
        exc.partial = None
        if partial_results and isinstance(partial, SearchAccumulator):
            exc.partial = assemble_result(partial, None, **assemble_kwargs)
        raise

    searched = accumulator.searched
    decision = select_ncomp(
        error_per_group_table(searched, groups),
        alpha=inputs.signif_threshold,
        policy=inputs.stopping_policy,
        first_component=searched[0].component,
    )
    return assemble_result(accumulator, decision, **assemble_kwargs)
