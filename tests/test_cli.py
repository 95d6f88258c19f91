"""
Tests for the command line entry point.
"""

import pandas as pd
import pytest

from cluster_sweep.cli import EXIT_FAILURE, EXIT_INVALID, EXIT_OK, main


@pytest.fixture
def blobs_csv(blobs, tmp_path):
    X, _ = blobs
    df = pd.DataFrame(X, columns=["x", "y"])
    df["label"] = [f"p{i}" for i in range(len(df))]
    path = tmp_path / "blobs.csv"
    df.to_csv(path, index=False)
    return path


def test_cli_writes_table(blobs_csv, tmp_path, capsys):
    """A full run prints the table and writes the CSV."""
    out = tmp_path / "metrics.csv"
    code = main([
        str(blobs_csv), "--k-max", "4", "--n-refs", "2", "--seed", "0",
        "--algorithm", "hierarchical", "--out", str(out), "--log-level", "ERROR",
    ])

    assert code == EXIT_OK
    written = pd.read_csv(out)
    assert written["k"].tolist() == [2, 3, 4]
    printed = capsys.readouterr().out
    assert "calinski_harabasz" in printed
    assert "best k by silhouette: 3" in printed


def test_cli_writes_plot(blobs_csv, tmp_path):
    """--plot saves the metrics chart."""
    plot = tmp_path / "metrics.png"
    code = main([
        str(blobs_csv), "--k-max", "3", "--n-refs", "1",
        "--algorithm", "hierarchical", "--plot", str(plot), "--log-level", "ERROR",
    ])
    assert code == EXIT_OK
    assert plot.exists()


def test_cli_invalid_k_max(blobs_csv, capsys):
    """k_max >= n_samples is a parameter error."""
    code = main([str(blobs_csv), "--k-max", "90", "--log-level", "ERROR"])
    assert code == EXIT_INVALID
    assert "k_max" in capsys.readouterr().err


def test_cli_missing_file(tmp_path, capsys):
    """A missing input file is a parameter error."""
    code = main([str(tmp_path / "nope.csv"), "--log-level", "ERROR"])
    assert code == EXIT_INVALID
    assert "not found" in capsys.readouterr().err


def test_cli_clustering_failure(blobs_csv, monkeypatch, capsys):
    """Clustering failures exit with status 1."""

    def broken(X, k, seed=None):
        raise RuntimeError("no convergence")

    monkeypatch.setattr("cluster_sweep.cli.get_clustering_routine", lambda name: broken)
    code = main([str(blobs_csv), "--k-max", "3", "--log-level", "CRITICAL"])
    assert code == EXIT_FAILURE
    assert "k=2" in capsys.readouterr().err


def test_cli_unreadable_csv(tmp_path, capsys):
    """An empty or undecodable file is a parameter error."""
    empty = tmp_path / "empty.csv"
    empty.write_text("")
    assert main([str(empty), "--log-level", "ERROR"]) == EXIT_INVALID
    assert "Cannot read" in capsys.readouterr().err

    binary = tmp_path / "binary.csv"
    binary.write_bytes(b"x,y\n\xff\xfe\xfa,1\n")
    assert main([str(binary), "--log-level", "ERROR"]) == EXIT_INVALID
    assert "Cannot read" in capsys.readouterr().err


def test_cli_all_rows_incomplete(tmp_path, capsys):
    """A file with no complete rows is a parameter error."""
    path = tmp_path / "gaps.csv"
    path.write_text("x,y\n1.0,\n,2.0\n3.0,\n")
    assert main([str(path), "--log-level", "ERROR"]) == EXIT_INVALID
    assert "complete rows" in capsys.readouterr().err


def test_cli_seed_none(blobs_csv):
    """--seed none draws fresh entropy."""
    code = main([
        str(blobs_csv), "--k-max", "3", "--n-refs", "1", "--seed", "none",
        "--algorithm", "hierarchical", "--log-level", "ERROR",
    ])
    assert code == EXIT_OK


def test_cli_seed_malformed(blobs_csv):
    """A seed that is neither an integer nor 'none' is an argparse error."""
    with pytest.raises(SystemExit) as exc:
        main([str(blobs_csv), "--seed", "abc"])
    assert exc.value.code == 2
