"""
Misclassification measures for multi-class predictions.

Two measures drive keepX selection:
- overall: fraction of misclassified samples
- BER (Balanced Error Rate): mean over outcome classes of the per-class
  misclassification rate. Each class counts equally regardless of its
  size, so a classifier that ignores a minority class is penalised.

Per-class rates are NaN for classes absent from y_true; BER averages the
classes that are present.
"""

from collections.abc import Sequence

import numpy as np
import pandas as pd
from sklearn.metrics import confusion_matrix


def confusion_table(
    y_true: np.ndarray, y_pred: np.ndarray, classes: Sequence
) -> pd.DataFrame:
    """
    Confusion matrix with truth in rows and predictions in columns.

    Args:
        y_true: True class labels
        y_pred: Predicted class labels
        classes: Class levels (fixes row/column order)

    Returns:
        DataFrame indexed by true class, columns "predicted.as.<class>"
    """
    classes = list(classes)
    cm = confusion_matrix(np.asarray(y_true), np.asarray(y_pred), labels=classes)
    return pd.DataFrame(
        cm,
        index=pd.Index(classes, name="truth"),
        columns=[f"predicted.as.{c}" for c in classes],
    )


def per_class_error(y_true: np.ndarray, y_pred: np.ndarray, classes: Sequence) -> pd.Series:
    """
    Misclassification rate of each class.

    Returns:
        Series indexed by class; NaN for classes with no true samples

    Examples:
        >>> per_class_error(np.array(["a", "a", "b"]), np.array(["a", "b", "b"]), ["a", "b"]).tolist()
        [0.5, 0.0]
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    rates = {}
    for cls in classes:
        mask = y_true == cls
        n = int(mask.sum())
        rates[cls] = float(np.mean(y_pred[mask] != cls)) if n > 0 else np.nan
    return pd.Series(rates, dtype=float)


def overall_error(y_true: np.ndarray, y_pred: np.ndarray) -> float:
    """Fraction of misclassified samples."""
    y_true = np.asarray(y_true)
    if len(y_true) == 0:
        return np.nan
    return float(np.mean(np.asarray(y_pred) != y_true))


def balanced_error_rate(
    y_true: np.ndarray, y_pred: np.ndarray, classes: Sequence | None = None
) -> float:
    """
    Balanced Error Rate: mean of per-class misclassification rates.

    Args:
        y_true: True class labels
        y_pred: Predicted class labels
        classes: Class levels (default: classes present in y_true)

    Returns:
        BER in [0, 1]

    Examples:
        >>> y_true = np.array(["A"] * 9 + ["B"])
        >>> y_pred = np.array(["A"] * 10)
        >>> overall_error(y_true, y_pred), balanced_error_rate(y_true, y_pred)
        (0.1, 0.5)
    """
    if classes is None:
        classes = np.unique(np.asarray(y_true))
    rates = per_class_error(y_true, y_pred, classes)
    if rates.isna().all():
        return np.nan
    return float(np.nanmean(rates.to_numpy()))


def error_rate(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    measure: str,
    classes: Sequence | None = None,
) -> float:
    """Dispatch to the requested measure ("overall" or "BER")."""
    if measure == "overall":
        return overall_error(y_true, y_pred)
    if measure == "BER":
        return balanced_error_rate(y_true, y_pred, classes)
    raise ValueError(f"Unknown error measure: {measure}")


def per_group_error(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    study: np.ndarray,
    measure: str,
    classes: Sequence,
    groups: Sequence[str] | None = None,
) -> pd.Series:
    """
    Error rate within each group.

    Args:
        y_true: True class labels
        y_pred: Predicted class labels
        study: Group labels
        measure: "overall" or "BER"
        classes: Class levels
        groups: Group order (default: sorted unique groups)

    Returns:
        Series indexed by group
    """
    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    study = np.asarray(study)
    if groups is None:
        groups = sorted(np.unique(study))
    values = {}
    for g in groups:
        mask = study == g
        values[g] = error_rate(y_true[mask], y_pred[mask], measure, classes)
    return pd.Series(values, dtype=float)


def aggregate_class_error(
    y_true: np.ndarray,
    y_pred: np.ndarray,
    study: np.ndarray,
    measure: str,
    classes: Sequence,
) -> pd.Series:
    """
    Per-class error aggregated across groups.

    For BER the groups are weighted by their class support, i.e. the rate is
    computed on the pooled held-out predictions. For overall error each
    group's per-class rate counts equally (groups missing a class are skipped).

    Returns:
        Series indexed by class
    """
    if measure == "BER":
        return per_class_error(y_true, y_pred, classes)

    y_true = np.asarray(y_true)
    y_pred = np.asarray(y_pred)
    study = np.asarray(study)
    rows = [
        per_class_error(y_true[study == g], y_pred[study == g], classes)
        for g in sorted(np.unique(study))
    ]
    return pd.concat(rows, axis=1).mean(axis=1, skipna=True).astype(float)
