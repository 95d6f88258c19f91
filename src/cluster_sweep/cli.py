"""
Command line entry point: sweep k over a CSV file.

Usage:
  cluster-sweep data.csv --k-max 8 --algorithm hierarchical --out metrics.csv --plot metrics.png
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .algorithms.clustering import available_routines, get_clustering_routine
from .algorithms.distance import SUPPORTED_METRICS
from .algorithms.sweep import SweepConfig, run_sweep
from .config import config
from .exceptions import ClusterSweepError, InvalidParameter
from .experiments.result_metrics import best_k_by_metric, select_k_by_gap
from .preprocessing import prepare_dataset
from .utils.logging_config import get_logger, setup_logging

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID = 2


def _seed(value: str) -> Optional[int]:
    """Integer seed, or ``none`` for fresh entropy."""
    if value.strip().lower() == "none":
        return None
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"must be an integer or 'none', got {value!r}")


def _read_csv(path: Path, index_col: Optional[str]) -> pd.DataFrame:
    if not path.exists():
        raise InvalidParameter(f"Input file not found: {path}")
    try:
        return pd.read_csv(path, index_col=index_col)
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as e:
        raise InvalidParameter(f"Cannot read {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    defaults = config.sweep
    p = argparse.ArgumentParser(
        prog="cluster-sweep",
        description="Sweep candidate cluster counts and report validity metrics per k.",
    )
    p.add_argument("csv", type=Path, help="Input CSV file")
    p.add_argument("--columns", nargs="+", default=None, help="Columns to cluster (default: all numeric)")
    p.add_argument("--index-col", default=None, help="Column to use as row labels")
    p.add_argument("--k-max", type=int, default=defaults.k_max, help="Largest k to evaluate")
    p.add_argument(
        "--algorithm", choices=available_routines(), default=defaults.algorithm,
        help="Clustering routine",
    )
    p.add_argument(
        "--distance", choices=SUPPORTED_METRICS, default=defaults.distance_metric,
        help="Distance metric for the silhouette width",
    )
    p.add_argument("--n-refs", type=int, default=defaults.n_refs, help="Gap statistic reference datasets")
    p.add_argument("--seed", type=_seed, default=defaults.seed, help="Random seed, or 'none' for fresh entropy")
    p.add_argument("--workers", type=int, default=defaults.n_workers, help="Worker threads")
    p.add_argument("--timeout", type=float, default=defaults.fit_timeout, help="Seconds allowed per k")
    p.add_argument("--no-scale", action="store_true", help="Skip z-scoring")
    p.add_argument("--out", type=Path, default=None, help="Write the metrics table to this CSV")
    p.add_argument("--plot", type=Path, default=None, help="Write a metrics plot to this PNG")
    p.add_argument("--log-level", default=config.log_level, help="Logging level")
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        raw = _read_csv(args.csv, args.index_col)
        data = prepare_dataset(raw, args.columns, scale=not args.no_scale)
        cfg = SweepConfig(
            k_max=args.k_max,
            n_refs=args.n_refs,
            seed=args.seed,
            n_workers=args.workers,
            fit_timeout=args.timeout,
            distance_metric=args.distance,
        )
        table = run_sweep(data, cfg, fit=get_clustering_routine(args.algorithm))
    except InvalidParameter as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_INVALID
    except ClusterSweepError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return EXIT_FAILURE

    frame = table.to_frame()
    print(frame.to_string(index=False))

    best = best_k_by_metric(table)
    best["gap"] = select_k_by_gap(table)
    print()
    for metric, k in best.items():
        print(f"best k by {metric}: {k}")

    if args.out is not None:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(args.out, index=False)
        logger.info("Wrote metrics table to %s", args.out)
    if args.plot is not None:
        from .experiments.plotting import plot_metrics

        plot_metrics(table, args.plot, best=best, title=args.csv.name)
        logger.info("Wrote metrics plot to %s", args.plot)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
