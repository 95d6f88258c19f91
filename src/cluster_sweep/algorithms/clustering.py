"""
Clustering routines usable by the sweep.

Every routine has the signature ``fit(X, k, seed=...) -> labels`` and returns
integer labels in ``1..k``. Any other callable with that signature works with
the sweep too.
"""

from __future__ import annotations

from functools import partial
from typing import Callable, Dict, Optional, Tuple

import numpy as np
from sklearn.cluster import AgglomerativeClustering, KMeans

Array2D = np.ndarray
ClusteringFn = Callable[..., np.ndarray]


def _check_k(X: Array2D, k: int) -> None:
    n = X.shape[0]
    if k > n:
        raise ValueError(f"k ({k}) cannot exceed number of samples ({n})")
    if k < 1:
        raise ValueError(f"k must be >= 1, got {k}")


# ------------------------------------------------------------------
# Lloyd helpers
# ------------------------------------------------------------------

def _sq_distances(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Squared Euclidean distances of shape (n_samples, n_centroids)."""
    cross = X @ centroids.T
    sq = np.einsum("ij,ij->i", X, X)[:, None] + np.einsum("ij,ij->i", centroids, centroids)[None, :]
    return np.maximum(sq - 2.0 * cross, 0.0)


def _kmeanspp_init(
    X: np.ndarray, k: int, rng: np.random.Generator
) -> np.ndarray:
    """
    Pick k starting centroids among the rows of *X*.

    Each new centroid is drawn with probability proportional to its squared
    distance from the closest centroid so far. When every row coincides with
    a centroid the draw falls back to uniform.
    """
    n = X.shape[0]
    picks = [int(rng.integers(0, n))]
    closest = _sq_distances(X, X[picks])[:, 0]
    while len(picks) < k:
        mass = closest.sum()
        idx = int(rng.choice(n, p=closest / mass if mass > 0 else None))
        picks.append(idx)
        np.minimum(closest, _sq_distances(X, X[idx:idx + 1])[:, 0], out=closest)
    return X[picks].copy()


def _assign(X: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid for each row of *X*."""
    return np.argmin(_sq_distances(X, centroids), axis=1)


def _lloyd(
    X: np.ndarray, k: int, rng: np.random.Generator, max_iter: int
) -> Tuple[np.ndarray, float, int]:
    """One k-means run from a k-means++ start. Returns (labels, inertia, n_iter)."""
    centroids = _kmeanspp_init(X, k, rng)
    labels = _assign(X, centroids)

    n_iter = 0
    for t in range(1, max_iter + 1):
        n_iter = t
        for j in range(k):
            members = labels == j
            # Empty clusters keep their previous centroid
            if members.any():
                centroids[j] = X[members].mean(axis=0)
        new_labels = _assign(X, centroids)
        if np.array_equal(new_labels, labels):
            break
        labels = new_labels

    inertia = float(np.sum((X - centroids[labels]) ** 2))
    return labels, inertia, n_iter


def kmeans(
    X: Array2D,
    k: int,
    seed: Optional[int] = 0,
    *,
    n_init: int = 10,
    max_iter: int = 300,
) -> np.ndarray:
    """
    Euclidean k-means with k-means++ seeding.

    Runs ``n_init`` independent starts from one seeded generator and keeps
    the run with the lowest inertia, so the result is fully determined by
    ``seed``.

    Args:
        X: Data of shape (n_samples, n_features)
        k: Number of clusters
        seed: Random seed for initialization
        n_init: Number of k-means++ restarts
        max_iter: Maximum Lloyd iterations per restart

    Returns:
        Labels of shape (n_samples,) with values in 1..k

    Raises:
        ValueError: If k is out of range or n_init < 1
    """
    X = np.asarray(X, dtype=np.float64)
    _check_k(X, k)
    if n_init < 1:
        raise ValueError(f"n_init must be >= 1, got {n_init}")

    rng = np.random.default_rng(seed)
    best_labels: Optional[np.ndarray] = None
    best_inertia = np.inf
    for _ in range(n_init):
        labels, inertia, _ = _lloyd(X, k, rng, max_iter)
        if inertia < best_inertia:
            best_labels, best_inertia = labels, inertia

    return best_labels.astype(int) + 1


def sklearn_kmeans(
    X: Array2D, k: int, seed: Optional[int] = 0, *, n_init: int = 10
) -> np.ndarray:
    """scikit-learn KMeans, labels shifted to 1..k."""
    X = np.asarray(X, dtype=np.float64)
    _check_k(X, k)
    model = KMeans(n_clusters=k, random_state=seed, n_init=n_init)
    return model.fit_predict(X).astype(int) + 1


def hierarchical(
    X: Array2D, k: int, seed: Optional[int] = None, *, linkage: str = "ward"
) -> np.ndarray:
    """
    Agglomerative clustering cut at k clusters.

    Deterministic; ``seed`` is accepted for signature compatibility and ignored.
    Cuts of one tree at increasing k are nested, so WCSS never increases with k.
    """
    X = np.asarray(X, dtype=np.float64)
    _check_k(X, k)
    model = AgglomerativeClustering(n_clusters=k, linkage=linkage)
    return model.fit_predict(X).astype(int) + 1


_ROUTINES: Dict[str, ClusteringFn] = {
    "kmeans": kmeans,
    "k-means": kmeans,  # Alternative name
    "sklearn-kmeans": sklearn_kmeans,
    "hierarchical": hierarchical,
    "agglomerative": hierarchical,  # Alternative name
}


def available_routines() -> list[str]:
    """Names accepted by ``get_clustering_routine``."""
    return sorted(_ROUTINES)


def get_clustering_routine(name: str, **params) -> ClusteringFn:
    """
    Look up a built-in clustering routine by name.

    Args:
        name: Routine name (case-insensitive)
        **params: Keyword arguments bound onto the routine (e.g. ``n_init``)

    Returns:
        Callable ``fit(X, k, seed=...) -> labels``

    Raises:
        ValueError: If the name is unknown
    """
    key = name.lower()
    if key not in _ROUTINES:
        raise ValueError(f"Unknown clustering routine: {name}. Available: {available_routines()}")
    routine = _ROUTINES[key]
    if params:
        return partial(routine, **params)
    return routine
