"""
Contract between the tuning core and the discriminant model.

The core never looks inside the model. It only needs a factory that builds
an unfitted model for a given number of components and per-component keepX,
and the three methods below.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class DiscriminantModel(Protocol):
    """Sparse discriminant latent-variable classifier (fit/predict collaborator)."""

    classes_: np.ndarray

    def fit(self, X: np.ndarray, y: np.ndarray, study: np.ndarray | None = None):
        """Fit on training samples; `study` gives each sample's group."""
        ...

    def predict(
        self, X: np.ndarray, study: np.ndarray | None = None, dist: str = "max.dist"
    ) -> np.ndarray:
        """Predicted class labels using the given prediction distance."""
        ...

    def decision_function(self, X: np.ndarray, study: np.ndarray | None = None) -> np.ndarray:
        """Continuous predicted values, shape (n_samples, n_classes) in classes_ order."""
        ...


class ModelFactory(Protocol):
    """Callable building an unfitted DiscriminantModel."""

    def __call__(self, *, n_components: int, keepx: Sequence[int]) -> DiscriminantModel: ...
