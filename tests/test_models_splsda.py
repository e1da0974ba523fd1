"""
Tests for the reference MINT sPLS-DA model and its factory.
"""

import numpy as np
import pytest
from conftest import make_signal_data
from mint_tune.config.schema import ModelConfig
from mint_tune.models import DiscriminantModel, MintSPLSDA, build_model_factory, soft_threshold_keep


class TestSoftThresholdKeep:
    """Test the keepX soft-threshold."""

    def test_keeps_largest_entries(self):
        """Only the `keep` largest absolute values survive."""
        x = np.array([3.0, -1.0, 0.5, -4.0, 2.0])
        out = soft_threshold_keep(x, 2)
        assert np.count_nonzero(out) == 2
        assert out[0] > 0 and out[3] < 0

    def test_keep_all_returns_copy(self):
        """keep >= len(x) leaves the vector untouched."""
        x = np.array([1.0, -2.0])
        out = soft_threshold_keep(x, 5)
        np.testing.assert_array_equal(out, x)
        assert out is not x


class TestMintSPLSDA:
    """Test fitting and prediction."""

    def setup_method(self):
        self.X, self.y, self.study = make_signal_data(
            n_groups=3, n_per_class=10, n_features=20, n_informative=4, effect=3.0, seed=3
        )

    def test_satisfies_protocol(self):
        """The model exposes the collaborator contract."""
        model = MintSPLSDA(n_components=1, keepx=[5]).fit(self.X, self.y, study=self.study)
        assert isinstance(model, DiscriminantModel)
        assert list(model.classes_) == ["A", "B"]

    def test_keepx_controls_sparsity(self):
        """Each component keeps exactly keepx[h] variables."""
        model = MintSPLSDA(n_components=2, keepx=[3, 7]).fit(self.X, self.y, study=self.study)
        assert np.count_nonzero(model.weights_[:, 0]) == 3
        assert np.count_nonzero(model.weights_[:, 1]) == 7

    def test_selects_informative_variables(self):
        """With a strong signal the first component picks informative features."""
        model = MintSPLSDA(n_components=1, keepx=[4]).fit(self.X, self.y, study=self.study)
        selected = set(np.flatnonzero(model.weights_[:, 0]))
        assert len(selected & {0, 1, 2, 3}) >= 3

    @pytest.mark.parametrize("dist", ["max.dist", "centroids.dist", "mahalanobis.dist"])
    def test_predicts_held_out_study(self, dist):
        """Leaving one study out, the held-out study is mostly classified correctly."""
        train = self.study != "S3"
        model = MintSPLSDA(n_components=2, keepx=[4, 4]).fit(
            self.X[train], self.y[train], study=self.study[train]
        )
        pred = model.predict(self.X[~train], study=self.study[~train], dist=dist)
        assert pred.shape == (int((~train).sum()),)
        assert np.mean(pred == self.y[~train]) >= 0.8

    def test_decision_function_shape(self):
        """Scores have one column per class."""
        model = MintSPLSDA(n_components=1).fit(self.X, self.y, study=self.study)
        scores = model.decision_function(self.X[:5], study=self.study[:5])
        assert scores.shape == (5, 2)

    def test_keepx_length_mismatch_raises(self):
        """keepx must have one entry per component."""
        with pytest.raises(ValueError, match="one entry per component"):
            MintSPLSDA(n_components=2, keepx=[5]).fit(self.X, self.y, study=self.study)

    def test_unknown_distance_raises(self):
        """Unsupported distances are rejected."""
        model = MintSPLSDA(n_components=1).fit(self.X, self.y, study=self.study)
        with pytest.raises(ValueError, match="Unknown prediction distance"):
            model.predict(self.X, study=self.study, dist="manhattan")

    def test_missing_values_rejected(self):
        """NaN in X is not supported."""
        X = self.X.copy()
        X[0, 0] = np.nan
        with pytest.raises(ValueError):
            MintSPLSDA(n_components=1).fit(X, self.y, study=self.study)

    def test_deterministic(self):
        """Refitting on the same data gives the same model."""
        a = MintSPLSDA(n_components=2, keepx=[5, 5]).fit(self.X, self.y, study=self.study)
        b = MintSPLSDA(n_components=2, keepx=[5, 5]).fit(self.X, self.y, study=self.study)
        np.testing.assert_allclose(a.weights_, b.weights_)


class TestBuildModelFactory:
    """Test factory construction."""

    def test_config_values_forwarded(self):
        """Model parameters come from ModelConfig."""
        factory = build_model_factory(ModelConfig(scale=False, tol=1e-9, max_iter=7))
        model = factory(n_components=2, keepx=[10, 5])
        assert isinstance(model, MintSPLSDA)
        assert (model.scale, model.tol, model.max_iter) == (False, 1e-9, 7)
        assert model.keepx == [10, 5]

    def test_keyword_overrides_config(self):
        """Explicit keywords win over the config."""
        factory = build_model_factory(ModelConfig(tol=1e-9), tol=1e-3)
        assert factory(n_components=1, keepx=None).tol == 1e-3

    def test_factory_is_picklable(self):
        """The factory can be shipped to joblib workers."""
        import pickle

        factory = build_model_factory()
        restored = pickle.loads(pickle.dumps(factory))
        assert restored(n_components=1, keepx=[3]).keepx == [3]
