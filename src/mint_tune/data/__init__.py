"""Data loading and group partitioning."""

from mint_tune.data.groups import Fold, check_groups, group_class_table, make_logo_folds
from mint_tune.data.io import Dataset, dataset_from_frame, load_dataset, read_table

__all__ = [
    "Fold",
    "check_groups",
    "group_class_table",
    "make_logo_folds",
    "Dataset",
    "dataset_from_frame",
    "load_dataset",
    "read_table",
]
