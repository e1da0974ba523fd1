"""
Tests for the components-only assessment of the full model.
"""

import json

import numpy as np
import pytest
from conftest import FakeFactory, make_multistudy_data
from mint_tune.data.groups import make_logo_folds
from mint_tune.errors import FoldEvaluationError
from mint_tune.tuning.performance import evaluate_components

DISTS = ("max.dist", "centroids.dist")


@pytest.fixture
def setup():
    X, y, study = make_multistudy_data()
    return X, y, study, make_logo_folds(y, study), np.unique(y)


def _evaluate(setup, factory, ncomp=2, **kwargs):
    X, y, study, folds, classes = setup
    return evaluate_components(X, y, study, folds, ncomp, DISTS, factory, classes, **kwargs)


class TestEvaluateComponents:
    """Test the per-component assessment."""

    def test_tables(self, setup):
        """Global and per-study tables per component and distance."""
        result = _evaluate(setup, FakeFactory({None: 0.4}))
        assert result.ncomp == 2
        assert list(result.global_ber.index) == ["comp1", "comp2"]
        assert list(result.global_ber.columns) == list(DISTS)
        assert np.allclose(result.global_ber.to_numpy(), 2 / 6)
        assert np.allclose(result.global_overall.to_numpy(), 2 / 6)
        assert list(result.study_ber["max.dist"].columns) == ["S1", "S2", "S3"]
        assert list(result.global_error_class["centroids.dist"].index) == ["A", "B"]

    def test_full_model_is_fitted(self, setup):
        """Every fit keeps all variables."""
        factory = FakeFactory()
        _evaluate(setup, factory, ncomp=3)
        assert sorted(factory.calls) == sorted([(h, None) for h in (1, 2, 3) for _ in range(3)])

    def test_predicted_labels(self, setup):
        """Labels are kept for every sample and component."""
        X, y, *_ = setup
        result = _evaluate(setup, FakeFactory())
        labels = result.classes["max.dist"]
        assert labels.shape == (len(y), 2)
        assert (labels["comp1"].to_numpy() == y).all()

    def test_auc(self, setup):
        """Pooled and per-study AUC summaries on request."""
        result = _evaluate(setup, FakeFactory({None: 0.2}), auc=True)
        assert set(result.auc) == {"comp1", "comp2"}
        assert set(result.auc_study["comp1"]) == {"S1", "S2", "S3"}

    def test_to_dict(self, setup):
        """to_dict() output is JSON-ready."""
        out = _evaluate(setup, FakeFactory()).to_dict()
        json.dumps(out)
        assert out["global_error"]["BER"]["max.dist"]["comp1"] == 0.0
        assert out["auc"] is None

    def test_to_dict_auc_study(self, setup):
        """Per-study AUC summaries are serialized per component."""
        out = _evaluate(setup, FakeFactory({None: 0.2}), auc=True).to_dict()
        json.dumps(out)
        assert set(out["auc_study"]) == {"comp1", "comp2"}
        assert set(out["auc_study"]["comp1"]) == {"S1", "S2", "S3"}
        assert set(out["auc_study"]["comp1"]["S1"]["A vs B"]) == {"AUC", "p-value"}

    def test_to_dict_traces(self, setup):
        """Predicted labels are included only on request."""
        X, y, *_ = setup
        result = _evaluate(setup, FakeFactory())
        assert "classes" not in result.to_dict()
        out = result.to_dict(include_traces=True)
        json.dumps(out)
        assert set(out["classes"]) == set(DISTS)
        assert out["classes"]["max.dist"]["comp1"]["0"] == y[0]
        assert out["auc_study"] is None

    def test_failure(self, setup):
        """A failing fit is wrapped with its component."""
        factory = FakeFactory(fail_when=lambda ncomp, keepx: ncomp == 2)
        with pytest.raises(FoldEvaluationError) as exc_info:
            _evaluate(setup, factory)
        assert exc_info.value.component == 2
