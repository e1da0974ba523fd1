"""
One-vs-rest AUROC summaries for multi-class decision scores.

Scores are the model's continuous predicted values (one column per class).
For two classes a single "A vs B" row is reported; otherwise each class is
compared against the rest. Each AUC comes with a two-sided Mann-Whitney
p-value testing whether the class scores are stochastically different.
"""

import logging
from collections.abc import Sequence

import numpy as np
import pandas as pd
from scipy.stats import mannwhitneyu
from sklearn.metrics import roc_auc_score

logger = logging.getLogger(__name__)


def _auc_row(positive: np.ndarray, score: np.ndarray) -> tuple[float, float]:
    valid = np.isfinite(score)
    positive, score = positive[valid], score[valid]
    n_pos = int(positive.sum())
    if n_pos == 0 or n_pos == len(positive):
        return np.nan, np.nan
    auc = float(roc_auc_score(positive.astype(int), score))
    p_value = float(mannwhitneyu(score[positive], score[~positive], alternative="two-sided").pvalue)
    return auc, p_value


def auc_summary(y_true: np.ndarray, scores: np.ndarray, classes: Sequence) -> pd.DataFrame:
    """
    AUROC and p-value per class comparison.

    Args:
        y_true: True class labels, shape (n_samples,)
        scores: Decision scores, shape (n_samples, n_classes), columns in `classes` order
        classes: Class levels

    Returns:
        DataFrame indexed by comparison label with columns "AUC" and "p-value".
        Comparisons whose positive or negative side is empty are NaN.
    """
    y_true = np.asarray(y_true)
    scores = np.asarray(scores, dtype=float)
    classes = list(classes)
    if scores.ndim != 2 or scores.shape[1] != len(classes):
        raise ValueError(
            f"scores must have shape (n_samples, {len(classes)}), got {scores.shape}"
        )

    rows = {}
    if len(classes) == 2:
        positive = y_true == classes[0]
        rows[f"{classes[0]} vs {classes[1]}"] = _auc_row(positive, scores[:, 0])
    else:
        for k, cls in enumerate(classes):
            positive = y_true == cls
            rows[f"{cls} vs Other(s)"] = _auc_row(positive, scores[:, k])

    return pd.DataFrame.from_dict(rows, orient="index", columns=["AUC", "p-value"])


def auc_by_group(
    y_true: np.ndarray,
    scores: np.ndarray,
    study: np.ndarray,
    classes: Sequence,
) -> dict[str, pd.DataFrame]:
    """AUC summary computed separately within each group."""
    y_true = np.asarray(y_true)
    scores = np.asarray(scores, dtype=float)
    study = np.asarray(study)
    return {
        str(g): auc_summary(y_true[study == g], scores[study == g], classes)
        for g in sorted(np.unique(study))
    }
