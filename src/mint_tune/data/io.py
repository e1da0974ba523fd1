"""
Data I/O for mint-tune.

Reads a sample table (CSV or Parquet) holding one row per sample, an outcome
column, a study column, and numeric feature columns.
"""

import logging
from dataclasses import dataclass
from pathlib import Path

import numpy as np
import pandas as pd

from mint_tune.errors import InputValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Dataset:
    """Feature matrix with aligned outcome and study labels."""

    X: pd.DataFrame
    y: np.ndarray
    study: np.ndarray

    @property
    def n_samples(self) -> int:
        return self.X.shape[0]

    @property
    def feature_names(self) -> list[str]:
        return [str(c) for c in self.X.columns]


def read_table(filepath: str | Path) -> pd.DataFrame:
    """
    Read a CSV or Parquet file based on its extension.

    Raises:
        FileNotFoundError: If filepath does not exist
        InputValidationError: If the extension is not supported
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File not found: {filepath}")

    suffix = filepath.suffix.lower()
    logger.info(f"Reading {suffix.lstrip('.')} file: {filepath}")
    if suffix in (".csv", ".txt"):
        df = pd.read_csv(filepath, low_memory=False)
    elif suffix == ".tsv":
        df = pd.read_csv(filepath, sep="\t", low_memory=False)
    elif suffix in (".parquet", ".pq"):
        df = pd.read_parquet(filepath)
    else:
        raise InputValidationError(
            f"Unsupported file format: {suffix}. Use .csv, .tsv or .parquet"
        )
    logger.info(f"Loaded {len(df):,} rows × {len(df.columns):,} columns")
    return df


def dataset_from_frame(
    df: pd.DataFrame,
    outcome_col: str,
    study_col: str,
    feature_cols: list[str] | None = None,
    id_col: str | None = None,
) -> Dataset:
    """
    Split a sample table into features, outcome and study labels.

    Args:
        df: Sample table
        outcome_col: Column holding the outcome class
        study_col: Column holding the group/study label
        feature_cols: Feature columns; default is every numeric column that is
            not the outcome, study, or id column
        id_col: Optional sample id column, used as the row index

    Returns:
        Dataset

    Raises:
        InputValidationError: If required columns are missing or features are not numeric
    """
    missing = [c for c in (outcome_col, study_col) if c not in df.columns]
    if id_col is not None and id_col not in df.columns:
        missing.append(id_col)
    if missing:
        raise InputValidationError(f"Missing required columns: {missing}")

    if id_col is not None:
        df = df.set_index(id_col)

    reserved = {outcome_col, study_col}
    if feature_cols is None:
        feature_cols = [
            c
            for c in df.columns
            if c not in reserved and pd.api.types.is_numeric_dtype(df[c])
        ]
    else:
        absent = [c for c in feature_cols if c not in df.columns]
        if absent:
            raise InputValidationError(f"Feature columns not found: {absent[:10]}")
        non_numeric = [c for c in feature_cols if not pd.api.types.is_numeric_dtype(df[c])]
        if non_numeric:
            raise InputValidationError(f"Feature columns must be numeric: {non_numeric[:10]}")

    if not feature_cols:
        raise InputValidationError("No numeric feature columns found")

    logger.info(
        f"Dataset: {len(df):,} samples, {len(feature_cols):,} features, "
        f"{df[study_col].nunique()} studies, {df[outcome_col].nunique()} classes"
    )
    return Dataset(
        X=df[feature_cols],
        y=df[outcome_col].to_numpy(),
        study=df[study_col].astype(str).to_numpy(),
    )


def load_dataset(
    filepath: str | Path,
    outcome_col: str,
    study_col: str,
    feature_cols: list[str] | None = None,
    id_col: str | None = None,
) -> Dataset:
    """Read a sample table and split it into a Dataset."""
    return dataset_from_frame(
        read_table(filepath),
        outcome_col=outcome_col,
        study_col=study_col,
        feature_cols=feature_cols,
        id_col=id_col,
    )
