"""
Tests for AUC summaries.
"""

import numpy as np
import pytest
from mint_tune.metrics.auc import auc_by_group, auc_summary


class TestAucSummary:
    """Test one-vs-rest AUROC tables."""

    def test_two_classes_single_row(self):
        """Two classes give one 'A vs B' row scored on the first column."""
        y = np.array(["A"] * 5 + ["B"] * 5)
        scores = np.column_stack([np.r_[np.ones(5), np.zeros(5)], np.r_[np.zeros(5), np.ones(5)]])
        table = auc_summary(y, scores, ["A", "B"])
        assert list(table.index) == ["A vs B"]
        assert list(table.columns) == ["AUC", "p-value"]
        assert table.loc["A vs B", "AUC"] == pytest.approx(1.0)
        assert table.loc["A vs B", "p-value"] < 0.05

    def test_multiclass_one_row_per_class(self):
        """More than two classes give one 'vs Other(s)' row per class."""
        rng = np.random.default_rng(0)
        y = np.repeat(["A", "B", "C"], 6)
        scores = rng.random((18, 3))
        table = auc_summary(y, scores, ["A", "B", "C"])
        assert list(table.index) == ["A vs Other(s)", "B vs Other(s)", "C vs Other(s)"]
        assert table["AUC"].between(0, 1).all()

    def test_missing_class_gives_nan(self):
        """A comparison with an empty side is NaN."""
        y = np.array(["A"] * 4)
        scores = np.random.default_rng(0).random((4, 2))
        table = auc_summary(y, scores, ["A", "B"])
        assert np.isnan(table.loc["A vs B", "AUC"])

    def test_nan_scores_are_skipped(self):
        """Samples without a score are left out."""
        y = np.array(["A", "A", "B", "B", "B"])
        scores = np.array([[0.9, 0.1], [0.8, 0.2], [0.1, 0.9], [0.2, 0.8], [np.nan, np.nan]])
        table = auc_summary(y, scores, ["A", "B"])
        assert table.loc["A vs B", "AUC"] == pytest.approx(1.0)

    def test_shape_mismatch_raises(self):
        """Score columns must match the classes."""
        with pytest.raises(ValueError, match="scores must have shape"):
            auc_summary(np.array(["A", "B"]), np.zeros((2, 3)), ["A", "B"])


class TestAucByGroup:
    """Test per-group AUC summaries."""

    def test_one_table_per_group(self):
        """Groups are summarised separately."""
        y = np.array(["A", "B"] * 6)
        study = np.array(["s1"] * 6 + ["s2"] * 6)
        scores = np.random.default_rng(1).random((12, 2))
        tables = auc_by_group(y, scores, study, ["A", "B"])
        assert sorted(tables) == ["s1", "s2"]
