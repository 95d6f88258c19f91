"""
Pairwise distance primitive.

The sweep computes one distance matrix per dataset and shares it across
every candidate k.
"""

from __future__ import annotations

import numpy as np
from sklearn.metrics import pairwise_distances

Array2D = np.ndarray

SUPPORTED_METRICS = ("euclidean", "cosine", "manhattan", "sqeuclidean")


def cosine_distance_matrix(X: Array2D) -> Array2D:
    """
    Cosine distance matrix via L2-normalized dot products.

    Args:
        X: Data of shape (n_samples, n_features)

    Returns:
        Matrix of shape (n_samples, n_samples) clipped to [0, 2]
    """
    norms = np.linalg.norm(X, axis=1, keepdims=True)
    X_norm = X / np.maximum(norms, 1e-12)
    dist = np.clip(1.0 - (X_norm @ X_norm.T), 0.0, 2.0)
    np.fill_diagonal(dist, 0.0)
    return dist


def pairwise_distance(X: Array2D, metric: str = "euclidean") -> Array2D:
    """
    Compute the symmetric pairwise distance matrix of *X*.

    Args:
        X: Data of shape (n_samples, n_features)
        metric: One of ``SUPPORTED_METRICS``

    Returns:
        Non-negative matrix of shape (n_samples, n_samples)

    Raises:
        ValueError: If metric is not supported
    """
    if metric not in SUPPORTED_METRICS:
        raise ValueError(
            f"Unsupported distance metric: {metric}. Available: {list(SUPPORTED_METRICS)}"
        )
    X = np.asarray(X, dtype=np.float64)
    if metric == "cosine":
        return cosine_distance_matrix(X)
    dist = pairwise_distances(X, metric=metric)
    # Symmetrize away floating-point asymmetry from the BLAS path
    dist = 0.5 * (dist + dist.T)
    np.fill_diagonal(dist, 0.0)
    return np.maximum(dist, 0.0)
