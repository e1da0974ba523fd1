"""
Input validation for tuning runs.

Every check here runs before any model is fitted; failures raise
InputValidationError with a message naming the offending argument.
"""

import numbers
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np
import pandas as pd

from mint_tune.config.defaults import VALID_DISTS, VALID_MEASURES, VALID_STOPPING_POLICIES
from mint_tune.errors import InputValidationError


@dataclass(frozen=True)
class TuneInputs:
    """Validated, coerced inputs of a tuning run."""

    X: np.ndarray
    y: np.ndarray
    study: np.ndarray
    classes: np.ndarray
    ncomp: int
    test_keepx: tuple[int, ...] | None
    already_tested_x: tuple[int, ...]
    measure: str
    dist: tuple[str, ...]
    signif_threshold: float
    stopping_policy: str

    @property
    def n_features(self) -> int:
        return self.X.shape[1]


def check_alpha(alpha: Any) -> float:
    """Validate a significance threshold in the open interval (0, 1)."""
    if isinstance(alpha, bool) or not isinstance(alpha, numbers.Real):
        raise InputValidationError(f"'signif_threshold' must be a number in (0, 1), got {alpha!r}")
    alpha = float(alpha)
    if not 0.0 < alpha < 1.0:
        raise InputValidationError(f"'signif_threshold' must be in (0, 1), got {alpha}")
    return alpha


def check_matrix(X: Any) -> np.ndarray:
    """Coerce X to a 2D float array."""
    if X is None:
        raise InputValidationError("'X' is missing")
    try:
        arr = np.asarray(X, dtype=float)
    except (TypeError, ValueError) as e:
        raise InputValidationError("'X' must be a numeric matrix.") from e
    if arr.ndim != 2:
        raise InputValidationError(f"'X' must be a numeric matrix, got {arr.ndim} dimension(s).")
    if arr.shape[0] < 2 or arr.shape[1] < 1:
        raise InputValidationError(f"'X' has an unusable shape {arr.shape}.")
    return arr


def check_outcome(Y: Any, n_samples: int) -> tuple[np.ndarray, np.ndarray]:
    """Validate the class vector; returns (labels, sorted class levels)."""
    if Y is None:
        raise InputValidationError("'Y' has to be something else than None.")
    y = np.asarray(Y)
    if y.ndim == 2 and y.shape[1] == 1:
        y = y.ravel()
    if y.ndim != 1:
        raise InputValidationError("'Y' should be a factor or a class vector.")
    if len(y) != n_samples:
        raise InputValidationError(
            f"'Y' must have one label per sample: got {len(y)} labels for {n_samples} samples."
        )
    if pd.isna(y).any():
        raise InputValidationError("'Y' contains missing labels.")
    classes = np.unique(y)
    if len(classes) < 2:
        raise InputValidationError("'Y' should be a factor with more than one level.")
    return y, classes


def check_study(study: Any, n_samples: int) -> np.ndarray:
    """Validate group labels; returns them as strings."""
    if study is None:
        raise InputValidationError("'study' is missing")
    arr = np.asarray(study)
    if arr.ndim != 1 or len(arr) != n_samples:
        raise InputValidationError(f"'study' must be a factor of length {n_samples}.")
    if pd.isna(arr).any():
        raise InputValidationError("'study' contains missing group labels.")
    return arr.astype(str)


def check_ncomp(ncomp: Any) -> int:
    """Validate the number of components."""
    if isinstance(ncomp, bool) or not isinstance(ncomp, numbers.Integral) or ncomp <= 0:
        raise InputValidationError(f"invalid number of variates, 'ncomp' ({ncomp!r}).")
    return int(ncomp)


def _as_positive_ints(values: Iterable[Any], name: str, n_features: int) -> list[int]:
    out = []
    for v in values:
        if (
            isinstance(v, bool)
            or not isinstance(v, numbers.Real)
            or not np.isfinite(v)
            or float(v) != int(v)
        ):
            raise InputValidationError(f"'{name}' must contain integers, got {v!r}")
        v = int(v)
        if v <= 0:
            raise InputValidationError(f"'{name}' must contain strictly positive values, got {v}")
        if v > n_features:
            raise InputValidationError(
                f"'{name}' value {v} exceeds the number of variables in X ({n_features})"
            )
        out.append(v)
    return out


def check_keepx_grid(test_keepx: Any, n_features: int) -> tuple[int, ...] | None:
    """Validate the sparsity grid: deduplicated, sorted ascending, more than one entry.

    Sorting means the first minimum found is the sparsest candidate. An unset
    or empty grid returns None (components-only assessment).
    """
    if test_keepx is None:
        return None
    if isinstance(test_keepx, str | bytes) or not isinstance(test_keepx, Iterable):
        raise InputValidationError("'test_keepx' must be a numeric vector with more than one entry")
    test_keepx = list(test_keepx)
    if not test_keepx:
        return None
    grid = sorted(set(_as_positive_ints(test_keepx, "test_keepx", n_features)))
    if len(grid) <= 1:
        raise InputValidationError(
            "'test_keepx' grid must contain more than one entry, "
            f"got {list(test_keepx)!r}"
        )
    return tuple(grid)


def check_already_tested(already_tested_x: Any, ncomp: int, n_features: int) -> tuple[int, ...]:
    """Validate the prefix of already chosen keepX values."""
    if already_tested_x is None:
        return ()
    if isinstance(already_tested_x, dict | str | bytes) or not isinstance(
        already_tested_x, Iterable
    ):
        raise InputValidationError("'already_tested_x' must be a vector of keepX values")
    prefix = _as_positive_ints(already_tested_x, "already_tested_x", n_features)
    if len(prefix) >= ncomp:
        raise InputValidationError(
            "'ncomp' needs to be higher than the number of components already tuned, "
            f"which is len(already_tested_x)={len(prefix)}"
        )
    return tuple(prefix)


def check_measure(measure: Any) -> str:
    if measure not in VALID_MEASURES:
        raise InputValidationError(f"'measure' must be one of {VALID_MEASURES}, got {measure!r}")
    return measure


def check_dist(dist: Any) -> tuple[str, ...]:
    """Validate prediction distances; 'all' expands to every distance.

    Order is kept: the first distance drives the keepX optimisation.
    """
    if dist is None or dist == "all":
        return tuple(VALID_DISTS)
    if isinstance(dist, str):
        dist = [dist]
    dist = list(dict.fromkeys(dist))
    if not dist:
        raise InputValidationError("'dist' must name at least one prediction distance")
    unknown = [d for d in dist if d not in VALID_DISTS]
    if unknown:
        raise InputValidationError(f"Unknown distance(s) {unknown}; valid: {VALID_DISTS}")
    return tuple(dist)


def check_stopping_policy(policy: Any) -> str:
    if policy not in VALID_STOPPING_POLICIES:
        raise InputValidationError(
            f"'stopping_policy' must be one of {VALID_STOPPING_POLICIES}, got {policy!r}"
        )
    return policy


def validate_tune_inputs(
    X: Any,
    Y: Any,
    study: Any,
    *,
    ncomp: Any = 1,
    test_keepx: Any = None,
    already_tested_x: Any = None,
    measure: Any = "BER",
    dist: Any = None,
    signif_threshold: Any = 0.01,
    stopping_policy: Any = "first_non_significant",
) -> TuneInputs:
    """
    Validate and coerce every argument of a tuning run.

    Raises:
        InputValidationError: On the first malformed argument
    """
    X = check_matrix(X)
    n_samples, n_features = X.shape
    y, classes = check_outcome(Y, n_samples)
    alpha = check_alpha(signif_threshold)
    ncomp = check_ncomp(ncomp)
    prefix = check_already_tested(already_tested_x, ncomp, n_features)
    study = check_study(study, n_samples)
    grid = check_keepx_grid(test_keepx, n_features)

    return TuneInputs(
        X=X,
        y=y,
        study=study,
        classes=classes,
        ncomp=ncomp,
        test_keepx=grid,
        already_tested_x=prefix,
        measure=check_measure(measure),
        dist=check_dist(dist),
        signif_threshold=alpha,
        stopping_policy=check_stopping_policy(stopping_policy),
    )
