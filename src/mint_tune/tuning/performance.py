"""
Components-only performance assessment.

Used when no keepX grid is given: the full model (every variable kept) is
assessed with leave-one-group-out CV for 1..ncomp components and every
requested prediction distance. No sparsity search happens.

Errors are reported both per held-out study and globally (on the pooled
held-out predictions).
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd
from joblib import Parallel, delayed

from mint_tune.data.groups import Fold
from mint_tune.errors import FoldEvaluationError
from mint_tune.metrics.auc import auc_by_group, auc_summary
from mint_tune.metrics.classification import (
    error_rate,
    per_class_error,
    per_group_error,
)
from mint_tune.tuning.evaluator import FoldPrediction, align_scores
from mint_tune.utils.serialization import to_native

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PerformanceResult:
    """Cross-validated performance of the full model per component count.

    Attributes:
        ncomp: Largest number of components assessed
        dist: Prediction distances assessed
        global_ber: Pooled BER, component × distance
        global_overall: Pooled overall error, component × distance
        global_error_class: Pooled per-class error per distance, class × component
        study_ber: Per-study BER per distance, component × study
        study_overall: Per-study overall error per distance, component × study
        auc: Pooled AUC summary per component, if requested
        auc_study: Per-study AUC summaries per component, if requested
        classes: Predicted labels per distance (n × component)
    """

    ncomp: int
    dist: tuple[str, ...]
    global_ber: pd.DataFrame
    global_overall: pd.DataFrame
    global_error_class: dict[str, pd.DataFrame]
    study_ber: dict[str, pd.DataFrame]
    study_overall: dict[str, pd.DataFrame]
    auc: dict[str, pd.DataFrame] | None = None
    auc_study: dict[str, dict[str, pd.DataFrame]] | None = None
    classes: dict[str, pd.DataFrame] | None = None

    def to_dict(self, include_traces: bool = False) -> dict[str, Any]:
        """JSON-ready view of the result."""
        out = {
            "ncomp": self.ncomp,
            "dist": list(self.dist),
            "global_error": {
                "BER": self.global_ber,
                "overall": self.global_overall,
                "error_rate_class": self.global_error_class,
            },
            "study_specific_error": {
                "BER": {d: t.T for d, t in self.study_ber.items()},
                "overall": {d: t.T for d, t in self.study_overall.items()},
            },
            "auc": None if self.auc is None else {c: t.T for c, t in self.auc.items()},
            "auc_study": None
            if self.auc_study is None
            else {
                c: {g: t.T for g, t in per_group.items()} for c, per_group in self.auc_study.items()
            },
        }
        if include_traces:
            out["classes"] = self.classes
        return to_native(out)


def _evaluate_full_fold(
    X: np.ndarray,
    y: np.ndarray,
    study: np.ndarray,
    fold: Fold,
    n_components: int,
    dist: Sequence[str],
    model_factory,
    classes: np.ndarray,
    need_scores: bool,
) -> tuple[int, FoldPrediction]:
    train_idx, test_idx = fold.train_idx, fold.test_idx
    try:
        model = model_factory(n_components=n_components, keepx=None)
        model.fit(X[train_idx], y[train_idx], study=study[train_idx])
        predicted = {
            d: np.asarray(model.predict(X[test_idx], study=study[test_idx], dist=d)) for d in dist
        }
        scores = None
        if need_scores:
            scores = align_scores(
                model.decision_function(X[test_idx], study=study[test_idx]),
                np.asarray(model.classes_),
                classes,
                len(test_idx),
            )
    except Exception as exc:
        raise FoldEvaluationError(
            f"Full model failed on held-out study '{fold.group}' "
            f"({n_components} component(s)): {exc}",
            group=fold.group,
            component=n_components,
        ) from exc
    return n_components, FoldPrediction(
        group=fold.group, keepx=X.shape[1], test_idx=test_idx, classes=predicted, scores=scores
    )


def evaluate_components(
    X: np.ndarray,
    y: np.ndarray,
    study: np.ndarray,
    folds: list[Fold],
    ncomp: int,
    dist: Sequence[str],
    model_factory,
    classes: np.ndarray,
    auc: bool = False,
    n_jobs: int = 1,
    backend: str = "loky",
) -> PerformanceResult:
    """
    Leave-one-group-out performance of the full model for 1..ncomp components.

    Args:
        X: Feature matrix
        y: Outcome labels
        study: Group labels
        folds: Leave-one-group-out folds
        ncomp: Largest number of components
        dist: Prediction distances to assess
        model_factory: Callable(n_components=..., keepx=None) -> unfitted model
        classes: Class levels
        auc: Also compute AUC summaries
        n_jobs: joblib workers
        backend: joblib backend

    Returns:
        PerformanceResult

    Raises:
        FoldEvaluationError: If any fold fails
    """
    dist = tuple(dist)
    components = list(range(1, ncomp + 1))
    comp_labels = [f"comp{h}" for h in components]
    groups = [f.group for f in folds]
    n = len(y)

    logger.info(
        "Assessing the full model: %d component(s) × %d held-out studies", ncomp, len(folds)
    )
    outputs = Parallel(n_jobs=n_jobs, backend=backend)(
        delayed(_evaluate_full_fold)(X, y, study, fold, h, dist, model_factory, classes, auc)
        for h in components
        for fold in folds
    )

    labels = {d: np.empty((n, ncomp), dtype=object) for d in dist}
    scores = np.full((n, len(classes), ncomp), np.nan) if auc else None
    for h, fp in outputs:
        for d in dist:
            labels[d][fp.test_idx, h - 1] = fp.classes[d]
        if auc:
            scores[fp.test_idx, :, h - 1] = fp.scores

    global_ber = pd.DataFrame(index=comp_labels, columns=list(dist), dtype=float)
    global_overall = pd.DataFrame(index=comp_labels, columns=list(dist), dtype=float)
    global_error_class = {}
    study_ber = {}
    study_overall = {}
    for d in dist:
        class_cols = {}
        ber_rows = []
        overall_rows = []
        for j, label in enumerate(comp_labels):
            pred = labels[d][:, j]
            global_ber.loc[label, d] = error_rate(y, pred, "BER", classes)
            global_overall.loc[label, d] = error_rate(y, pred, "overall", classes)
            class_cols[label] = per_class_error(y, pred, classes)
            ber_rows.append(per_group_error(y, pred, study, "BER", classes, groups=groups))
            overall_rows.append(per_group_error(y, pred, study, "overall", classes, groups=groups))
        global_error_class[d] = pd.DataFrame(class_cols, index=list(classes), dtype=float)
        study_ber[d] = pd.DataFrame(ber_rows, index=comp_labels, columns=groups, dtype=float)
        study_overall[d] = pd.DataFrame(overall_rows, index=comp_labels, columns=groups, dtype=float)
        logger.info("%s: global BER by component %s", d, global_ber[d].round(4).tolist())

    auc_tables = None
    auc_study = None
    if auc:
        auc_tables = {
            label: auc_summary(y, scores[:, :, j], classes) for j, label in enumerate(comp_labels)
        }
        auc_study = {
            label: auc_by_group(y, scores[:, :, j], study, classes)
            for j, label in enumerate(comp_labels)
        }

    return PerformanceResult(
        ncomp=ncomp,
        dist=dist,
        global_ber=global_ber,
        global_overall=global_overall,
        global_error_class=global_error_class,
        study_ber=study_ber,
        study_overall=study_overall,
        auc=auc_tables,
        auc_study=auc_study,
        classes={d: pd.DataFrame(labels[d], columns=comp_labels) for d in dist},
    )
