"""
Cluster validity metrics.

Sum-of-squares metrics work on the data directly; the silhouette width uses
the shared precomputed distance matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np
from sklearn.metrics import silhouette_score

Array2D = np.ndarray


@dataclass(frozen=True)
class GapResult:
    """Gap statistic for one k."""

    gap: float
    gap_sd: float
    log_wk: float
    ref_log_wk_mean: float


def cluster_centroids(
    X: Array2D, labels: np.ndarray
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Centroid and size of every non-empty cluster.

    Returns:
        Tuple of (unique labels, centroids of shape (n_clusters, d), sizes)
    """
    labels = np.asarray(labels)
    unique = np.unique(labels)
    centroids = np.stack([X[labels == c].mean(axis=0) for c in unique])
    sizes = np.array([(labels == c).sum() for c in unique])
    return unique, centroids, sizes


def total_sum_of_squares(X: Array2D) -> float:
    """Sum of squared distances from every point to the global centroid."""
    return float(np.sum((X - X.mean(axis=0)) ** 2))


def within_cluster_ss(X: Array2D, labels: np.ndarray) -> float:
    """Raw WCSS: sum of squared distances from each point to its cluster centroid."""
    labels = np.asarray(labels)
    if labels.shape[0] != X.shape[0]:
        raise ValueError(
            f"labels length ({labels.shape[0]}) does not match samples ({X.shape[0]})"
        )
    wcss = 0.0
    for c in np.unique(labels):
        Xc = X[labels == c]
        wcss += float(np.sum((Xc - Xc.mean(axis=0)) ** 2))
    return wcss


def between_cluster_ss(X: Array2D, labels: np.ndarray) -> float:
    """BCSS: size-weighted squared distances from cluster centroids to the global centroid."""
    _, centroids, sizes = cluster_centroids(X, labels)
    diffs = centroids - X.mean(axis=0)
    return float(np.sum(sizes * np.sum(diffs ** 2, axis=1)))


def silhouette_precomputed(dist: Array2D, labels: np.ndarray) -> float:
    """
    Mean silhouette width from a precomputed distance matrix.

    Singleton clusters contribute 0, following scikit-learn.

    Raises:
        ValueError: If there are fewer than 2 or more than n_samples - 1 clusters
    """
    return float(silhouette_score(dist, np.asarray(labels), metric="precomputed"))


def calinski_harabasz(wcss_raw: float, bcss: float, n_samples: int, k: int) -> float:
    """
    Variance-ratio criterion ``(BCSS / (k - 1)) / (WCSS / (n - k))``.

    A perfectly compact clustering (WCSS = 0) with separated centroids scores
    ``inf``; one with no spread at all scores 0.
    """
    if k < 2 or n_samples <= k:
        raise ValueError(f"Calinski-Harabasz needs 2 <= k < n_samples, got k={k}, n={n_samples}")
    if wcss_raw == 0.0:
        return float("inf") if bcss > 0.0 else 0.0
    return float((bcss / (k - 1)) / (wcss_raw / (n_samples - k)))


def _log_dispersion(wcss: float) -> float:
    return float(np.log(wcss)) if wcss > 0.0 else float("-inf")


def gap_statistic(
    X: Array2D,
    k: int,
    fit: Callable[..., np.ndarray],
    *,
    n_refs: int = 10,
    seed: Optional[int] = 0,
    observed_wcss: Optional[float] = None,
) -> GapResult:
    """
    Gap statistic of Tibshirani, Walther & Hastie (2001).

    Gap(k) = mean_b log(W*_kb) - log(W_k), where W is the within-cluster sum
    of squares and the W*_kb come from ``n_refs`` reference datasets drawn
    uniformly within the per-feature bounding box of *X*, each clustered with
    *fit* at the same k.

    Args:
        X: Data of shape (n_samples, n_features)
        k: Number of clusters
        fit: Clustering routine ``fit(X, k, seed=...) -> labels``
        n_refs: Number of reference datasets (B)
        seed: Seed for reference sampling and the reference fits
        observed_wcss: WCSS of the observed clustering; recomputed with
            ``fit`` when omitted

    Returns:
        GapResult with the gap and its simulation error ``sd * sqrt(1 + 1/B)``
    """
    if n_refs < 1:
        raise ValueError(f"n_refs must be >= 1, got {n_refs}")
    X = np.asarray(X, dtype=np.float64)
    rng = np.random.default_rng(seed)

    if observed_wcss is None:
        observed_wcss = within_cluster_ss(X, fit(X, k, seed=int(rng.integers(0, 2**31 - 1))))

    lo = X.min(axis=0)
    hi = X.max(axis=0)
    ref_logs = np.empty(n_refs, dtype=np.float64)
    for b in range(n_refs):
        X_ref = rng.uniform(lo, hi, size=X.shape)
        ref_labels = fit(X_ref, k, seed=int(rng.integers(0, 2**31 - 1)))
        ref_logs[b] = _log_dispersion(within_cluster_ss(X_ref, ref_labels))

    log_wk = _log_dispersion(observed_wcss)
    ref_mean = float(ref_logs.mean())
    gap_sd = float(ref_logs.std() * np.sqrt(1.0 + 1.0 / n_refs))
    return GapResult(
        gap=ref_mean - log_wk,
        gap_sd=gap_sd,
        log_wk=log_wk,
        ref_log_wk_mean=ref_mean,
    )
