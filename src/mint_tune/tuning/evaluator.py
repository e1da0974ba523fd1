"""
Single-fold candidate evaluation.

Fits the model on every group but one and predicts the held-out group for
one candidate keepX value. Evaluations are independent of each other and
only read their inputs, so they can be dispatched to joblib workers.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np

from mint_tune.data.groups import Fold
from mint_tune.errors import FoldEvaluationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FoldPrediction:
    """Held-out predictions of one fold for one candidate.

    Attributes:
        group: Held-out group
        keepx: Candidate keepX for the component under search
        test_idx: Row indices of the held-out samples
        classes: Predicted labels per prediction distance
        scores: Decision scores (n_test × n_classes, columns in global class
            order), or None when not requested
    """

    group: str
    keepx: int
    test_idx: np.ndarray
    classes: dict[str, np.ndarray]
    scores: np.ndarray | None = None


def align_scores(
    raw: np.ndarray, model_classes: np.ndarray, classes: np.ndarray, n_test: int
) -> np.ndarray:
    raw = np.asarray(raw, dtype=float).reshape(n_test, -1)
    if raw.shape[1] == len(classes) and np.array_equal(model_classes, classes):
        return raw
    # Training groups lacked a class: leave its column empty
    aligned = np.full((n_test, len(classes)), np.nan)
    for j, cls in enumerate(model_classes):
        aligned[:, int(np.flatnonzero(classes == cls)[0])] = raw[:, j]
    return aligned


def evaluate_fold(
    X: np.ndarray,
    y: np.ndarray,
    study: np.ndarray,
    fold: Fold,
    keepx: int,
    prefix: Sequence[int],
    dist: Sequence[str],
    model_factory,
    classes: np.ndarray,
    need_scores: bool = False,
) -> FoldPrediction:
    """
    Train on all groups but `fold.group` and predict the held-out group.

    The model has len(prefix) + 1 components with keepX = (*prefix, keepx):
    earlier components keep their already chosen values.

    Args:
        X: Feature matrix (read-only)
        y: Outcome labels
        study: Group labels
        fold: Fold to evaluate
        keepx: Candidate value for the component under search
        prefix: keepX values already chosen for the earlier components
        dist: Prediction distances to compute
        model_factory: Callable(n_components=..., keepx=...) -> unfitted model
        classes: Global class levels (orders score columns)
        need_scores: Also return decision scores (for AUC or traces)

    Returns:
        FoldPrediction

    Raises:
        FoldEvaluationError: If the model fails to fit or predict
    """
    component = len(prefix) + 1
    keepx_vector = [*prefix, int(keepx)]
    train_idx, test_idx = fold.train_idx, fold.test_idx

    try:
        model = model_factory(n_components=component, keepx=keepx_vector)
        model.fit(X[train_idx], y[train_idx], study=study[train_idx])

        X_test = X[test_idx]
        study_test = study[test_idx]
        predicted = {}
        for d in dist:
            labels = np.asarray(model.predict(X_test, study=study_test, dist=d))
            if labels.shape != (len(test_idx),):
                raise ValueError(
                    f"predict returned shape {labels.shape} for {len(test_idx)} samples"
                )
            predicted[d] = labels

        scores = None
        if need_scores:
            scores = align_scores(
                model.decision_function(X_test, study=study_test),
                np.asarray(model.classes_),
                classes,
                len(test_idx),
            )
    except Exception as exc:
        raise FoldEvaluationError(
            f"Model failed on held-out study '{fold.group}' "
            f"(component {component}, keepX={keepx_vector}): {exc}",
            group=fold.group,
            keepx=int(keepx),
            component=component,
        ) from exc

    logger.debug(
        "comp %d keepX=%s held-out %s: %d samples predicted",
        component,
        keepx_vector,
        fold.group,
        len(test_idx),
    )
    return FoldPrediction(
        group=fold.group,
        keepx=int(keepx),
        test_idx=test_idx,
        classes=predicted,
        scores=scores,
    )
