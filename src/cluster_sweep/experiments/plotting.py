"""
Plot a sweep's metrics: one panel per metric against k.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Sequence, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..algorithms.sweep import MetricsTable
from .result_metrics import METRICS

TITLES = {
    "wcss": "WCSS (negated)",
    "bcss": "BCSS",
    "silhouette": "Mean silhouette width",
    "calinski_harabasz": "Calinski-Harabasz",
    "gap": "Gap statistic",
}


def plot_metrics(
    table: MetricsTable,
    out_path: Optional[Union[str, Path]] = None,
    *,
    metrics: Sequence[str] = METRICS,
    best: Optional[Dict[str, int]] = None,
    title: Optional[str] = None,
):
    """
    Facet-per-metric line chart of a MetricsTable.

    Args:
        table: Sweep result
        out_path: Where to save the PNG (not saved when None)
        metrics: Metric columns to draw, one panel each
        best: Optional mapping metric -> k to highlight
        title: Optional figure title

    Returns:
        The matplotlib Figure
    """
    if len(table) == 0:
        raise ValueError("Cannot plot an empty table")
    unknown = [m for m in metrics if m not in METRICS]
    if unknown:
        raise ValueError(f"Unknown metrics: {unknown}. Available: {METRICS}")

    ks = list(table.ks)
    fig, axes = plt.subplots(1, len(metrics), figsize=(3.2 * len(metrics), 3.0), squeeze=False)
    for ax, metric in zip(axes[0], metrics):
        values = table.column(metric)
        ax.plot(ks, values, marker="o")
        if metric == "gap":
            ax.errorbar(ks, values, yerr=table.column("gap_sd"), fmt="none", capsize=3)
        if best and metric in best:
            k_best = best[metric]
            ax.axvline(k_best, color="grey", linestyle="--", linewidth=1)
        ax.set_title(TITLES.get(metric, metric))
        ax.set_xlabel("k")
        ax.set_xticks(ks)
    if title:
        fig.suptitle(title)
    fig.tight_layout()

    if out_path is not None:
        out_path = Path(out_path)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(out_path, dpi=120)
    return fig
