"""Metrics module for classification error and AUC summaries."""

from mint_tune.metrics.auc import auc_by_group, auc_summary
from mint_tune.metrics.classification import (
    aggregate_class_error,
    balanced_error_rate,
    confusion_table,
    error_rate,
    overall_error,
    per_class_error,
    per_group_error,
)

__all__ = [
    "auc_summary",
    "auc_by_group",
    "aggregate_class_error",
    "balanced_error_rate",
    "confusion_table",
    "error_rate",
    "overall_error",
    "per_class_error",
    "per_group_error",
]
