"""
Sweep core - clustering routines, validity metrics and the k sweep.

Kept free of I/O so it can be reused from scripts, notebooks and tests.
"""

from .distance import pairwise_distance, cosine_distance_matrix
from .clustering import (
    kmeans,
    sklearn_kmeans,
    hierarchical,
    get_clustering_routine,
    available_routines,
)
from .metrics import (
    within_cluster_ss,
    between_cluster_ss,
    total_sum_of_squares,
    silhouette_precomputed,
    calinski_harabasz,
    gap_statistic,
    GapResult,
)
from .sweep import (
    SweepConfig,
    MetricRow,
    MetricsTable,
    ClusterSweepEvaluator,
    run_sweep,
)

__all__ = [
    # Distance
    "pairwise_distance",
    "cosine_distance_matrix",
    # Clustering
    "kmeans",
    "sklearn_kmeans",
    "hierarchical",
    "get_clustering_routine",
    "available_routines",
    # Metrics
    "within_cluster_ss",
    "between_cluster_ss",
    "total_sum_of_squares",
    "silhouette_precomputed",
    "calinski_harabasz",
    "gap_statistic",
    "GapResult",
    # Sweep orchestration
    "SweepConfig",
    "MetricRow",
    "MetricsTable",
    "ClusterSweepEvaluator",
    "run_sweep",
]
