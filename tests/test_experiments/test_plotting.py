"""
Tests for metric plots.
"""

import matplotlib.pyplot as plt
import pytest

from cluster_sweep.algorithms.clustering import hierarchical
from cluster_sweep.algorithms.sweep import MetricsTable, SweepConfig, run_sweep
from cluster_sweep.experiments.plotting import plot_metrics


@pytest.fixture
def table(blob_data):
    return run_sweep(blob_data, SweepConfig(k_max=4, n_refs=2), fit=hierarchical)


def test_plot_metrics_writes_png(table, tmp_path):
    """One panel per metric, saved to disk."""
    out = tmp_path / "plots" / "metrics.png"
    fig = plot_metrics(table, out, best={"silhouette": 3}, title="blobs")
    try:
        assert out.exists()
        assert out.stat().st_size > 0
        assert len(fig.axes) == 5
        assert fig.axes[2].get_title() == "Mean silhouette width"
    finally:
        plt.close(fig)


def test_plot_metrics_subset(table):
    """Only the requested metrics are drawn."""
    fig = plot_metrics(table, metrics=["silhouette", "gap"])
    try:
        assert len(fig.axes) == 2
    finally:
        plt.close(fig)


def test_plot_metrics_validation(table):
    """Unknown metrics and empty tables are rejected."""
    with pytest.raises(ValueError, match="Unknown metrics"):
        plot_metrics(table, metrics=["inertia"])
    with pytest.raises(ValueError, match="empty"):
        plot_metrics(MetricsTable(rows=(), seed=0, total_ss=0.0))
