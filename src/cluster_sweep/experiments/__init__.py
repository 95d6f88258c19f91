"""Model selection and plotting on top of sweep results."""

from .result_metrics import METRICS, best_k, best_k_by_metric, select_k_by_gap

__all__ = [
    "METRICS",
    "best_k",
    "best_k_by_metric",
    "select_k_by_gap",
]
