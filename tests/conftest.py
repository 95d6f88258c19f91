"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test modules.
"""

import numpy as np
import pytest

BLOB_CENTERS = np.array([[0.0, 0.0], [10.0, 0.0], [5.0, 10.0]])
POINTS_PER_BLOB = 30


def make_blobs(seed: int = 42):
    """Three well-separated 2-D Gaussian blobs, 30 points each."""
    rng = np.random.default_rng(seed)
    X = np.vstack([
        rng.normal(loc=center, scale=1.0, size=(POINTS_PER_BLOB, 2))
        for center in BLOB_CENTERS
    ])
    y = np.repeat(np.arange(len(BLOB_CENTERS)), POINTS_PER_BLOB)
    return X, y


@pytest.fixture
def blobs():
    """
    Fixture for the three-blob dataset.

    Returns (X, y) where X has shape (90, 2) and y holds the true blob index.
    """
    return make_blobs()


@pytest.fixture
def blob_data(blobs):
    """Just the blob features."""
    return blobs[0]


@pytest.fixture
def small_data():
    """Ten random points in 3-D, for validation tests."""
    rng = np.random.default_rng(7)
    return rng.standard_normal((10, 3))
