"""
Reference MINT sparse PLS-DA classifier.

A compact scikit-learn estimator implementing the model the tuner searches
over, so the library runs end-to-end without an external modelling package.

Model:
- Y is recoded as a class-indicator matrix.
- X and Y are centred (and optionally scaled) within each study, which
  removes study-level location/scale shifts before the components are
  extracted on the pooled data.
- Each component h maximises the covariance between X and Y variates with
  an L1 (soft-threshold) constraint so that exactly the keepx[h] largest
  loadings survive. Components are extracted sequentially with
  regression-mode deflation.

Prediction distances:
- max.dist: class with the largest predicted indicator value
- centroids.dist: nearest class centroid in the variate space (Euclidean)
- mahalanobis.dist: nearest class centroid using the inverse covariance
  of the training variates

References:
    - Lê Cao K-A, Boitard S, Besse P (2011). Sparse PLS discriminant analysis.
      BMC Bioinformatics 12:253.
    - Rohart F, Eslami A, Matigian N, Bougeard S, Lê Cao K-A (2017). MINT: a
      multivariate integrative method to identify reproducible molecular
      signatures across independent experiments and platforms.
      BMC Bioinformatics 18:128.
"""

import logging
from collections.abc import Sequence

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_array, check_consistent_length, check_is_fitted

logger = logging.getLogger(__name__)

DISTANCES = ("max.dist", "centroids.dist", "mahalanobis.dist")


def soft_threshold_keep(x: np.ndarray, keep: int) -> np.ndarray:
    """
    Soft-threshold `x` so that (at most) its `keep` largest absolute entries survive.

    The threshold is the (keep + 1)-th largest absolute value.

    Examples:
        >>> soft_threshold_keep(np.array([3.0, -1.0, 0.5, -4.0]), 2)
        array([ 2., -0.,  0., -3.])
    """
    if keep >= len(x):
        return x.copy()
    lam = np.sort(np.abs(x))[::-1][keep]
    return np.sign(x) * np.maximum(np.abs(x) - lam, 0.0)


def _location_scale(M: np.ndarray, scale: bool) -> tuple[np.ndarray, np.ndarray]:
    mean = M.mean(axis=0)
    if scale and M.shape[0] > 1:
        sd = M.std(axis=0, ddof=1)
        sd = np.where(np.isfinite(sd) & (sd > 0), sd, 1.0)
    else:
        sd = np.ones(M.shape[1])
    return mean, sd


def _standardize_by_study(
    M: np.ndarray, study: np.ndarray, scale: bool
) -> tuple[np.ndarray, dict[str, tuple[np.ndarray, np.ndarray]]]:
    out = np.empty_like(M, dtype=float)
    stats = {}
    for s in np.unique(study):
        mask = study == s
        mean, sd = _location_scale(M[mask], scale)
        out[mask] = (M[mask] - mean) / sd
        stats[str(s)] = (mean, sd)
    return out, stats


class MintSPLSDA(ClassifierMixin, BaseEstimator):
    """
    MINT sparse PLS discriminant analysis.

    Args:
        n_components: Number of latent components
        keepx: Number of X variables kept on each component (length n_components).
            None keeps every variable (non-sparse PLS-DA).
        scale: If True, scale X and Y to unit variance within each study
        tol: Convergence tolerance of the per-component iterations
        max_iter: Maximum iterations per component

    Attributes:
        classes_: Sorted class labels
        weights_: Sparse X loading vectors, shape (n_features, n_components)
        x_scores_: Training variates, shape (n_samples, n_components)
        rotations_: Projection of scaled X onto the variates
        coef_: Regression coefficients of scaled X on scaled Y
        centroids_: Class centroids in the variate space
    """

    def __init__(
        self,
        n_components: int = 2,
        keepx: Sequence[int] | None = None,
        scale: bool = True,
        tol: float = 1e-06,
        max_iter: int = 100,
    ):
        self.n_components = n_components
        self.keepx = keepx
        self.scale = scale
        self.tol = tol
        self.max_iter = max_iter

    def _resolve_keepx(self, n_features: int) -> list[int]:
        if self.keepx is None:
            return [n_features] * self.n_components
        keepx = [int(k) for k in self.keepx]
        if len(keepx) != self.n_components:
            raise ValueError(
                f"keepx must have one entry per component: got {len(keepx)} for "
                f"n_components={self.n_components}"
            )
        if any(k < 1 or k > n_features for k in keepx):
            raise ValueError(f"keepx values must lie in [1, {n_features}], got {keepx}")
        return keepx

    def _sparse_component(self, Xh: np.ndarray, Yh: np.ndarray, keep: int) -> np.ndarray:
        M = Xh.T @ Yh
        _, _, vt = np.linalg.svd(M, full_matrices=False)
        b = vt[0]
        a = np.zeros(M.shape[0])
        for _ in range(self.max_iter):
            a_new = soft_threshold_keep(M @ b, keep)
            norm = np.linalg.norm(a_new)
            if norm == 0:
                break
            a_new /= norm
            b_new = M.T @ a_new
            b_norm = np.linalg.norm(b_new)
            if b_norm == 0:
                a = a_new
                break
            b = b_new / b_norm
            converged = np.linalg.norm(a_new - a) < self.tol
            a = a_new
            if converged:
                break
        if not np.any(a):
            raise ValueError("Sparse loading vector is empty; X carries no signal for Y")
        return a

    def fit(self, X, y, study=None):
        """
        Fit the model.

        Args:
            X: Features, shape (n_samples, n_features). Missing values are not supported.
            y: Class labels, shape (n_samples,)
            study: Study label per sample (None = a single study)

        Returns:
            self
        """
        X = check_array(X, dtype=float)
        y = np.asarray(y)
        check_consistent_length(X, y)
        n_samples, n_features = X.shape
        study = np.zeros(n_samples, dtype=str) if study is None else np.asarray(study).astype(str)
        check_consistent_length(X, study)

        self.classes_ = np.unique(y)
        if len(self.classes_) < 2:
            raise ValueError("MintSPLSDA needs at least two classes in y")
        keepx = self._resolve_keepx(n_features)

        Y = (y[:, None] == self.classes_[None, :]).astype(float)
        Xs, self.x_study_stats_ = _standardize_by_study(X, study, self.scale)
        Ys, _ = _standardize_by_study(Y, study, self.scale)
        self.x_mean_, self.x_sd_ = _location_scale(X, self.scale)
        self.y_mean_, self.y_sd_ = _location_scale(Y, self.scale)

        H = self.n_components
        W = np.zeros((n_features, H))
        P = np.zeros((n_features, H))
        C = np.zeros((Y.shape[1], H))
        T = np.zeros((n_samples, H))
        Xh, Yh = Xs.copy(), Ys.copy()
        for h in range(H):
            a = self._sparse_component(Xh, Yh, keepx[h])
            t = Xh @ a
            tt = float(t @ t)
            if tt <= np.finfo(float).eps:
                raise ValueError(f"Component {h + 1} has zero variance; reduce n_components")
            p_h = Xh.T @ t / tt
            c_h = Yh.T @ t / tt
            Xh = Xh - np.outer(t, p_h)
            Yh = Yh - np.outer(t, c_h)
            W[:, h], P[:, h], C[:, h], T[:, h] = a, p_h, c_h, t

        self.weights_ = W
        self.x_loadings_ = P
        self.y_loadings_ = C
        self.x_scores_ = T
        self.keepx_ = keepx
        self.rotations_ = W @ np.linalg.pinv(P.T @ W)
        self.coef_ = self.rotations_ @ C.T

        self.centroids_ = np.vstack([T[y == cls].mean(axis=0) for cls in self.classes_])
        cov = np.atleast_2d(np.cov(T, rowvar=False))
        self.variate_precision_ = np.linalg.pinv(cov)

        logger.debug(
            "Fitted MintSPLSDA: %d samples, %d features, keepx=%s, %d studies",
            n_samples,
            n_features,
            keepx,
            len(self.x_study_stats_),
        )
        return self

    def _scale_new(self, X, study=None) -> np.ndarray:
        check_is_fitted(self, "coef_")
        X = check_array(X, dtype=float)
        if X.shape[1] != self.coef_.shape[0]:
            raise ValueError(
                f"X has {X.shape[1]} features, model was fitted with {self.coef_.shape[0]}"
            )
        if study is None:
            return (X - self.x_mean_) / self.x_sd_

        # Each test study is standardised on its own statistics (MINT); a
        # single-sample study falls back to the pooled training statistics.
        study = np.asarray(study).astype(str)
        check_consistent_length(X, study)
        out = np.empty_like(X)
        for s in np.unique(study):
            mask = study == s
            if mask.sum() > 1:
                mean, sd = _location_scale(X[mask], self.scale)
            else:
                mean, sd = self.x_mean_, self.x_sd_
            out[mask] = (X[mask] - mean) / sd
        return out

    def transform(self, X, study=None) -> np.ndarray:
        """Project samples onto the latent variates, shape (n_samples, n_components)."""
        return self._scale_new(X, study) @ self.rotations_

    def decision_function(self, X, study=None) -> np.ndarray:
        """Predicted class-indicator values, shape (n_samples, n_classes)."""
        Xs = self._scale_new(X, study)
        return Xs @ self.coef_ * self.y_sd_ + self.y_mean_

    def predict(self, X, study=None, dist: str = "max.dist") -> np.ndarray:
        """
        Predict class labels.

        Args:
            X: Features, shape (n_samples, n_features)
            study: Study label per sample (None = pooled training scaling)
            dist: "max.dist", "centroids.dist" or "mahalanobis.dist"

        Returns:
            Predicted labels, shape (n_samples,)
        """
        if dist == "max.dist":
            return self.classes_[np.argmax(self.decision_function(X, study), axis=1)]

        variates = self.transform(X, study)
        diff = variates[:, None, :] - self.centroids_[None, :, :]
        if dist == "centroids.dist":
            d2 = np.einsum("nkh,nkh->nk", diff, diff)
        elif dist == "mahalanobis.dist":
            d2 = np.einsum("nkh,hg,nkg->nk", diff, self.variate_precision_, diff)
        else:
            raise ValueError(f"Unknown prediction distance: {dist}. Use one of {DISTANCES}")
        return self.classes_[np.argmin(d2, axis=1)]
