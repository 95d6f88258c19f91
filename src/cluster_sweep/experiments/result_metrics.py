"""Model-selection helpers over a sweep's MetricsTable.

All metric columns are oriented so that higher is better, so picking the
best k for a single metric is an argmax.
"""

from typing import Dict

import numpy as np

from ..algorithms.sweep import MetricsTable

METRICS = [
    "wcss",
    "bcss",
    "silhouette",
    "calinski_harabasz",
    "gap",
]

# Monotone in k for nested clusterings, so their argmax is always k_max
MONOTONE_METRICS = {"wcss", "bcss"}


def best_k(table: MetricsTable, metric: str) -> int:
    """Return the k with the highest value of *metric* (smallest k on ties)."""
    if metric not in METRICS:
        raise ValueError(f"Unknown metric: {metric}. Available: {METRICS}")
    if len(table) == 0:
        raise ValueError("Cannot select k from an empty table")
    values = table.column(metric)
    return int(table.ks[int(np.argmax(values))])


def best_k_by_metric(table: MetricsTable) -> Dict[str, int]:
    """Best k for every non-monotone metric."""
    return {
        metric: best_k(table, metric)
        for metric in METRICS
        if metric not in MONOTONE_METRICS
    }


def select_k_by_gap(table: MetricsTable) -> int:
    """
    Tibshirani's rule: smallest k with Gap(k) >= Gap(k+1) - s(k+1).

    Falls back to the k with the largest gap when no k satisfies the rule.
    """
    if len(table) == 0:
        raise ValueError("Cannot select k from an empty table")
    rows = table.rows
    for current, following in zip(rows, rows[1:]):
        if following.k != current.k + 1:
            continue
        if current.gap >= following.gap - following.gap_sd:
            return current.k
    return best_k(table, "gap")
