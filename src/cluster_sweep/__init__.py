"""
cluster_sweep - Core Package

Evaluates candidate cluster counts for a numeric dataset by sweeping
k = 2..k_max and collecting comparable validity metrics per k.

This package provides:
- Clustering and distance primitives (numpy / scikit-learn)
- The k sweep and its metrics table
- Data preparation, model selection and plotting helpers
"""

__version__ = "0.1.0"

from .exceptions import (
    ClusterSweepError,
    InvalidParameter,
    ClusteringFailure,
    DegenerateClusteringError,
    SweepCancelled,
)
from .algorithms import (
    SweepConfig,
    MetricRow,
    MetricsTable,
    ClusterSweepEvaluator,
    run_sweep,
)

from . import algorithms
from . import experiments
from . import utils

__all__ = [
    "ClusterSweepError",
    "InvalidParameter",
    "ClusteringFailure",
    "DegenerateClusteringError",
    "SweepCancelled",
    "SweepConfig",
    "MetricRow",
    "MetricsTable",
    "ClusterSweepEvaluator",
    "run_sweep",
    "algorithms",
    "experiments",
    "utils",
]
