"""
Leave-one-group-out search over the keepX grid for one component.

For every candidate keepX, every group is held out once; held-out
predictions are pooled and reduced to per-group, per-class and mean/sd
error. The candidate with the lowest mean error wins, and because the grid
is sorted ascending and the scan keeps the first minimum, ties go to the
sparsest model.

Only the first prediction distance drives the selection; the others are
kept in the traces.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from mint_tune.data.groups import Fold
from mint_tune.metrics.auc import auc_summary
from mint_tune.metrics.classification import (
    aggregate_class_error,
    confusion_table,
    per_group_error,
)
from mint_tune.tuning.evaluator import FoldPrediction, evaluate_fold

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CandidateError:
    """Error record of one candidate keepX."""

    keepx: int
    mean: float
    sd: float
    per_group: pd.Series
    per_class: pd.Series


@dataclass(frozen=True)
class ComponentSearch:
    """Outcome of the keepX search for one component.

    Attributes:
        component: Component number (1-based, absolute)
        grid: Candidate keepX values (ascending)
        keepx_opt: Winning keepX
        errors: One CandidateError per grid value, in grid order
        confusion: Confusion table of the winner (pooled held-out predictions)
        auc: AUC summary of the winner, or None if not requested
        predictions: Decision scores (n_samples × n_classes × n_candidates),
            or None when light output is requested
        classes: Predicted labels per distance (n_samples × n_candidates),
            or None when light output is requested
    """

    component: int
    grid: tuple[int, ...]
    keepx_opt: int
    errors: tuple[CandidateError, ...]
    confusion: pd.DataFrame
    auc: pd.DataFrame | None = None
    predictions: np.ndarray | None = None
    classes: dict[str, pd.DataFrame] | None = None

    @property
    def best(self) -> CandidateError:
        return self.errors[self.grid.index(self.keepx_opt)]

    @property
    def error_mean(self) -> pd.Series:
        return pd.Series([e.mean for e in self.errors], index=list(self.grid), dtype=float)

    @property
    def error_sd(self) -> pd.Series:
        return pd.Series([e.sd for e in self.errors], index=list(self.grid), dtype=float)


def select_keepx(grid: Sequence[int], mean_errors: Sequence[float]) -> int:
    """
    Pick the candidate with the lowest mean error; first minimum wins.

    NaN errors never win unless every candidate is NaN, in which case the
    first (smallest) candidate is returned.

    Examples:
        >>> select_keepx([5, 10, 20], [0.2, 0.2, 0.4])
        5
        >>> select_keepx([5, 10, 20], [0.3, 0.1, 0.2])
        10
    """
    errors = np.asarray(mean_errors, dtype=float)
    return int(grid[int(np.argmin(np.where(np.isnan(errors), np.inf, errors)))])


def _reduce_candidate(
    keepx: int,
    y: np.ndarray,
    predicted: np.ndarray,
    study: np.ndarray,
    groups: list[str],
    measure: str,
    classes: np.ndarray,
) -> CandidateError:
    per_group = per_group_error(y, predicted, study, measure, classes, groups=groups)
    per_class = aggregate_class_error(y, predicted, study, measure, classes)
    return CandidateError(
        keepx=int(keepx),
        mean=float(per_group.mean()),
        sd=float(per_group.std(ddof=1)) if len(per_group) > 1 else np.nan,
        per_group=per_group,
        per_class=per_class,
    )


def _gather(
    fold_predictions: list[FoldPrediction],
    grid: tuple[int, ...],
    dist: Sequence[str],
    n_samples: int,
    n_classes: int,
    with_scores: bool,
) -> tuple[dict[str, np.ndarray], np.ndarray | None]:
    column = {k: j for j, k in enumerate(grid)}
    labels = {d: np.empty((n_samples, len(grid)), dtype=object) for d in dist}
    scores = np.full((n_samples, n_classes, len(grid)), np.nan) if with_scores else None
    filled = np.zeros((n_samples, len(grid)), dtype=bool)

    for fp in fold_predictions:
        j = column[fp.keepx]
        for d in dist:
            labels[d][fp.test_idx, j] = fp.classes[d]
        if with_scores:
            scores[fp.test_idx, :, j] = fp.scores
        filled[fp.test_idx, j] = True

    if not filled.all():
        raise RuntimeError("Some samples have no held-out prediction. Check fold construction.")
    return labels, scores


def run_logocv(
    X: np.ndarray,
    y: np.ndarray,
    study: np.ndarray,
    folds: list[Fold],
    grid: Sequence[int],
    prefix: Sequence[int],
    measure: str,
    dist: Sequence[str],
    model_factory,
    classes: np.ndarray,
    auc: bool = False,
    light_output: bool = True,
    n_jobs: int = 1,
    backend: str = "loky",
) -> ComponentSearch:
    """
    Evaluate every keepX candidate for the next component with LOGOCV.

    Args:
        X: Feature matrix (read-only)
        y: Outcome labels
        study: Group labels
        folds: Leave-one-group-out folds (reused for every candidate)
        grid: Candidate keepX values, sorted ascending
        prefix: keepX values fixed for the earlier components
        measure: "BER" or "overall"
        dist: Prediction distances; dist[0] drives the selection
        model_factory: Callable(n_components=..., keepx=...) -> unfitted model
        classes: Class levels
        auc: Compute the winner's AUC summary
        light_output: If False, keep per-sample predictions for every candidate
        n_jobs: joblib workers for the grid × fold evaluations
        backend: joblib backend

    Returns:
        ComponentSearch

    Raises:
        FoldEvaluationError: If any fold fails for any candidate
    """
    grid = tuple(int(k) for k in grid)
    component = len(prefix) + 1
    need_scores = auc or not light_output
    groups = [f.group for f in folds]
    primary = dist[0]

    logger.debug(
        "comp %d: %d candidates × %d held-out studies (n_jobs=%s)",
        component,
        len(grid),
        len(folds),
        n_jobs,
    )
    fold_predictions = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(evaluate_fold)(
            X, y, study, fold, keepx, prefix, dist, model_factory, classes, need_scores
        )
        for keepx in grid
        for fold in folds
    )

    labels, scores = _gather(
        fold_predictions, grid, dist, len(y), len(classes), with_scores=need_scores
    )

    errors = tuple(
        _reduce_candidate(keepx, y, labels[primary][:, j], study, groups, measure, classes)
        for j, keepx in enumerate(grid)
    )
    for e in errors:
        logger.debug("comp %d keepX=%d: %s = %.4f (sd %.4f)", component, e.keepx, measure, e.mean, e.sd)

    keepx_opt = select_keepx(grid, [e.mean for e in errors])
    j_opt = grid.index(keepx_opt)
    best = errors[j_opt]
    logger.info(
        "comp %d: keepX=%d selected (%s %.4f ± %.4f)", component, keepx_opt, measure, best.mean, best.sd
    )

    auc_table = None
    if auc:
        auc_table = auc_summary(y, scores[:, :, j_opt], classes)

    traces_classes = None
    traces_scores = None
    if not light_output:
        traces_scores = scores
        traces_classes = {
            d: pd.DataFrame(labels[d], columns=list(grid)) for d in dist
        }

    return ComponentSearch(
        component=component,
        grid=grid,
        keepx_opt=keepx_opt,
        errors=errors,
        confusion=confusion_table(y, labels[primary][:, j_opt], classes),
        auc=auc_table,
        predictions=traces_scores,
        classes=traces_classes,
    )
