"""
Data preparation before a sweep.

Selects numeric columns, drops incomplete rows and z-scores every column,
so every feature contributes on the same scale to the distances.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from .exceptions import InvalidParameter
from .utils.logging_config import get_logger

logger = get_logger(__name__)


def numeric_columns(df: pd.DataFrame) -> List[str]:
    """Names of the numeric, non-boolean columns of *df*."""
    return [
        col for col, dtype in df.dtypes.items()
        if pd.api.types.is_numeric_dtype(dtype) and not pd.api.types.is_bool_dtype(dtype)
    ]


def zscore(X: np.ndarray) -> np.ndarray:
    """
    Standardize each column to mean 0 and sample standard deviation 1.

    Raises:
        InvalidParameter: If a column is constant
    """
    X = np.asarray(X, dtype=np.float64)
    std = X.std(axis=0, ddof=1)
    constant = np.where(~(std > 0))[0]
    if len(constant):
        raise InvalidParameter(
            f"Cannot scale constant columns at positions {constant.tolist()}",
            details={"columns": constant.tolist()},
        )
    return (X - X.mean(axis=0)) / std


def prepare_dataset(
    df: pd.DataFrame,
    columns: Optional[Sequence[str]] = None,
    *,
    dropna: bool = True,
    scale: bool = True,
) -> pd.DataFrame:
    """
    Turn a raw table into a sweep-ready numeric table.

    Args:
        df: Raw input table
        columns: Columns to keep (default: every numeric column)
        dropna: Drop rows with any missing value in the kept columns
        scale: Z-score every kept column

    Returns:
        New DataFrame with float columns; the input is not modified

    Raises:
        InvalidParameter: If a requested column is missing or non-numeric,
            nothing numeric is left, or fewer than 2 complete rows remain
    """
    if columns is None:
        selected = numeric_columns(df)
    else:
        missing = [c for c in columns if c not in df.columns]
        if missing:
            raise InvalidParameter(f"Columns not found: {missing}", details={"columns": missing})
        numeric = set(numeric_columns(df))
        non_numeric = [c for c in columns if c not in numeric]
        if non_numeric:
            raise InvalidParameter(
                f"Columns are not numeric: {non_numeric}", details={"columns": non_numeric}
            )
        selected = list(columns)

    if not selected:
        raise InvalidParameter("No numeric columns to cluster")

    out = df.loc[:, selected].astype(np.float64)
    if dropna:
        before = len(out)
        out = out.dropna()
        if len(out) < before:
            logger.info("Dropped %d rows with missing values", before - len(out))
    if len(out) < 2:
        raise InvalidParameter(
            f"At least 2 complete rows are required, got {len(out)}",
            details={"n_rows": len(out)},
        )
    if scale:
        out = pd.DataFrame(zscore(out.to_numpy()), index=out.index, columns=out.columns)
    return out
