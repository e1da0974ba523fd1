"""
Shared pytest fixtures for mint-tune tests.
"""

import numpy as np
import pandas as pd
import pytest


def make_multistudy_data(
    n_groups: int = 3,
    n_per_class: int = 6,
    n_features: int = 30,
    classes=("A", "B"),
    seed: int = 0,
):
    """
    Create a balanced multi-study dataset for the fake model.

    Column 0 holds the class index, column 1 an evenly spaced position in
    (0, 1) within each (study, class) cell, and the remaining columns noise.

    Returns:
        (X, y, study)
    """
    rng = np.random.default_rng(seed)
    rows, y, study = [], [], []
    for g in range(n_groups):
        for k, cls in enumerate(classes):
            for i in range(n_per_class):
                row = rng.normal(size=n_features)
                row[0] = k
                row[1] = (i + 0.5) / n_per_class
                rows.append(row)
                y.append(cls)
                study.append(f"S{g + 1}")
    return np.vstack(rows), np.array(y), np.array(study)


def make_signal_data(
    n_groups: int = 3,
    n_per_class: int = 6,
    n_features: int = 30,
    n_informative: int = 5,
    effect: float = 2.0,
    seed: int = 0,
):
    """
    Two-class multi-study data where the first `n_informative` features are
    shifted for class B, with a study-specific offset on every feature.
    """
    rng = np.random.default_rng(seed)
    X_parts, y, study = [], [], []
    for g in range(n_groups):
        offset = rng.normal(scale=3.0, size=n_features)
        for cls in ("A", "B"):
            block = rng.normal(size=(n_per_class, n_features)) + offset
            if cls == "B":
                block[:, :n_informative] += effect
            X_parts.append(block)
            y.extend([cls] * n_per_class)
            study.extend([f"S{g + 1}"] * n_per_class)
    return np.vstack(X_parts), np.array(y), np.array(study)


class FakeModel:
    """
    Deterministic stand-in for the MINT sPLS-DA collaborator.

    Predicts the class stored in X[:, 0], except that samples whose X[:, 1]
    lies below error_by_keepx[keepx[-1]] are assigned the next class.
    """

    def __init__(self, n_components, keepx, error_by_keepx, calls, fail_when=None):
        self.n_components = n_components
        self.keepx = None if keepx is None else list(keepx)
        self.error_by_keepx = error_by_keepx
        self.calls = calls
        self.fail_when = fail_when

    def fit(self, X, y, study=None):
        self.calls.append((self.n_components, None if self.keepx is None else tuple(self.keepx)))
        if self.fail_when is not None and self.fail_when(self.n_components, self.keepx):
            raise RuntimeError("simulated fit failure")
        self.classes_ = np.unique(y)
        return self

    def _rate(self):
        if self.keepx is None:
            return self.error_by_keepx.get(None, 0.0)
        return self.error_by_keepx.get(self.keepx[-1], 0.0)

    def predict(self, X, study=None, dist="max.dist"):
        idx = X[:, 0].astype(int)
        flip = X[:, 1] < self._rate()
        return self.classes_[(idx + flip.astype(int)) % len(self.classes_)]

    def decision_function(self, X, study=None):
        pred = self.predict(X, study)
        return (pred[:, None] == self.classes_[None, :]).astype(float)


class FakeFactory:
    """Model factory recording every (n_components, keepx) fit."""

    def __init__(self, error_by_keepx=None, fail_when=None):
        self.error_by_keepx = dict(error_by_keepx or {})
        self.fail_when = fail_when
        self.calls = []

    def __call__(self, *, n_components, keepx):
        return FakeModel(n_components, keepx, self.error_by_keepx, self.calls, self.fail_when)


@pytest.fixture
def multistudy_data():
    """Three studies, two balanced classes, 30 features."""
    return make_multistudy_data()


@pytest.fixture
def fake_factory():
    """Fake factory with a U-shaped error curve over the keepX grid [5, 10, 20]."""
    return FakeFactory({5: 0.5, 10: 0.2, 20: 0.4})


@pytest.fixture
def sample_table(tmp_path):
    """CSV sample table with outcome, study and numeric features."""
    X, y, study = make_signal_data(n_groups=3, n_per_class=8, n_features=12, seed=1)
    df = pd.DataFrame(X, columns=[f"feat_{j}" for j in range(X.shape[1])])
    df.insert(0, "sample_id", [f"id{i}" for i in range(len(y))])
    df["outcome"] = y
    df["study"] = study
    path = tmp_path / "samples.csv"
    df.to_csv(path, index=False)
    return path
