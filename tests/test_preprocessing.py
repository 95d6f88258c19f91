"""
Tests for data preparation.
"""

import numpy as np
import pandas as pd
import pytest

from cluster_sweep.exceptions import InvalidParameter
from cluster_sweep.preprocessing import numeric_columns, prepare_dataset, zscore


@pytest.fixture
def raw_frame():
    return pd.DataFrame(
        {
            "region": ["north", "south", "east", "west", "north"],
            "sales": [10.0, 20.0, np.nan, 40.0, 50.0],
            "visits": [1, 3, 5, 7, 9],
            "flag": [True, False, True, False, True],
        }
    )


def test_numeric_columns_skips_text_and_bool(raw_frame):
    """Only numeric, non-boolean columns are picked."""
    assert numeric_columns(raw_frame) == ["sales", "visits"]


def test_prepare_dataset_drops_na_and_scales(raw_frame):
    """Incomplete rows are dropped and every column is z-scored."""
    original = raw_frame.copy()
    out = prepare_dataset(raw_frame)

    assert list(out.columns) == ["sales", "visits"]
    assert len(out) == 4
    assert list(out.index) == [0, 1, 3, 4]
    np.testing.assert_allclose(out.mean().to_numpy(), 0.0, atol=1e-12)
    np.testing.assert_allclose(out.std(ddof=1).to_numpy(), 1.0)
    pd.testing.assert_frame_equal(raw_frame, original)


def test_prepare_dataset_without_scaling(raw_frame):
    """scale=False keeps raw values as floats."""
    out = prepare_dataset(raw_frame, ["visits"], scale=False)
    assert out["visits"].tolist() == [1.0, 3.0, 5.0, 7.0, 9.0]
    assert out["visits"].dtype == np.float64


def test_prepare_dataset_rejects_bad_columns(raw_frame):
    """Missing or non-numeric requested columns are rejected."""
    with pytest.raises(InvalidParameter, match="not found"):
        prepare_dataset(raw_frame, ["profit"])
    with pytest.raises(InvalidParameter, match="not numeric"):
        prepare_dataset(raw_frame, ["sales", "region"])
    with pytest.raises(InvalidParameter, match="No numeric columns"):
        prepare_dataset(raw_frame[["region"]])


def test_prepare_dataset_too_few_complete_rows():
    """Rows lost to dropna are reported before scaling is attempted."""
    df = pd.DataFrame({"a": [1.0, np.nan, np.nan], "b": [np.nan, 2.0, 3.0]})
    with pytest.raises(InvalidParameter, match="At least 2 complete rows are required, got 0"):
        prepare_dataset(df)


def test_zscore_constant_column():
    """Constant columns cannot be scaled."""
    X = np.array([[1.0, 2.0], [1.0, 3.0], [1.0, 4.0]])
    with pytest.raises(InvalidParameter, match="constant columns at positions \\[0\\]"):
        zscore(X)
