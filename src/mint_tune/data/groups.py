"""
Leave-one-group-out fold construction.

Each distinct group ("study") is held out once; the model is trained on all
other groups. Folds are built once per run and reused for every candidate
keepX value and every component so that candidates are compared on the
same partition.
"""

import logging
import warnings
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.model_selection import LeaveOneGroupOut

from mint_tune.config.defaults import MIN_GROUP_SIZE_WARN
from mint_tune.errors import DegenerateGroupError, InvalidGroupingError, SparseGroupWarning

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Fold:
    """One held-out group and the indices of the samples on each side."""

    group: str
    train_idx: np.ndarray
    test_idx: np.ndarray

    @property
    def n_test(self) -> int:
        return len(self.test_idx)


def group_class_table(y: np.ndarray, study: np.ndarray) -> pd.DataFrame:
    """Contingency table of samples per group (rows) and outcome class (columns)."""
    return pd.crosstab(
        pd.Series(np.asarray(study), name="study"),
        pd.Series(np.asarray(y), name="class"),
    )


def check_groups(y: np.ndarray, study: np.ndarray) -> pd.DataFrame:
    """
    Check that every group can be held out and scored.

    Args:
        y: Outcome labels, shape (n_samples,)
        study: Group labels, shape (n_samples,)

    Returns:
        Group × class contingency table

    Raises:
        InvalidGroupingError: If lengths differ or a group has fewer than 2 samples
        DegenerateGroupError: If a group contains a single outcome class

    Warns:
        SparseGroupWarning: If a group has fewer than 5 samples or misses a class
    """
    y = np.asarray(y)
    study = np.asarray(study)
    if len(study) != len(y):
        raise InvalidGroupingError(f"'study' must be a factor of length {len(y)}.")

    table = group_class_table(y, study)
    sizes = table.sum(axis=1)

    if len(sizes) < 2:
        raise InvalidGroupingError(
            "Leave-one-group-out cross-validation needs at least 2 studies, "
            f"got {len(sizes)}"
        )

    too_small = sizes[sizes <= 1]
    if len(too_small) > 0:
        raise InvalidGroupingError(
            f"At least one study has only one sample ({', '.join(map(str, too_small.index))}), "
            "please consider removing it before calling the function again"
        )

    small = sizes[sizes < MIN_GROUP_SIZE_WARN]
    if len(small) > 0:
        warnings.warn(
            f"At least one study has less than {MIN_GROUP_SIZE_WARN} samples "
            f"({', '.join(map(str, small.index))}), mean centering might not do as expected",
            SparseGroupWarning,
            stacklevel=2,
        )

    n_present = (table > 0).sum(axis=1)
    single = n_present[n_present == 1]
    if len(single) > 0:
        groups = [str(g) for g in single.index]
        raise DegenerateGroupError(
            f"At least one study only contains a single level of the outcome ({', '.join(groups)}). "
            "Leave-one-group-out cross-validation cannot be computed.",
            groups=groups,
        )

    incomplete = n_present[n_present < table.shape[1]]
    if len(incomplete) > 0:
        warnings.warn(
            "At least one study does not contain all the levels of the outcome "
            f"({', '.join(map(str, incomplete.index))}). "
            "The MINT model might not perform as expected.",
            SparseGroupWarning,
            stacklevel=2,
        )

    return table


def make_logo_folds(y: np.ndarray, study: np.ndarray) -> list[Fold]:
    """
    Build one fold per distinct group, ordered by sorted group label.

    Args:
        y: Outcome labels, shape (n_samples,)
        study: Group labels, shape (n_samples,)

    Returns:
        List of Fold, one per group

    Raises:
        InvalidGroupingError, DegenerateGroupError: See check_groups
    """
    study = np.asarray(study).astype(str)
    check_groups(y, study)

    logo = LeaveOneGroupOut()
    folds = []
    for train_idx, test_idx in logo.split(np.zeros((len(study), 1)), groups=study):
        folds.append(Fold(group=str(study[test_idx[0]]), train_idx=train_idx, test_idx=test_idx))

    logger.debug(
        "Built %d leave-one-group-out folds: %s",
        len(folds),
        ", ".join(f"{f.group}(n={f.n_test})" for f in folds),
    )
    return folds
