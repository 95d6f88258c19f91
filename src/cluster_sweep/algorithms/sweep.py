"""
Sweep orchestration for cluster-count selection.

For every k in [2, k_max] the sweep fits a clustering routine and computes
five comparable validity metrics, all oriented so that higher is better:

- ``wcss``: within-cluster sum of squares, negated
- ``bcss``: between-cluster sum of squares
- ``silhouette``: mean silhouette width (from the shared distance matrix)
- ``calinski_harabasz``: variance-ratio criterion
- ``gap``: gap statistic against a uniform bounding-box reference

The distance matrix is computed once per sweep. Each k is an independent
unit of work, so units can run on a thread pool; rows are merged by k.
"""

from __future__ import annotations

import threading
import time
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Tuple, Union

import numpy as np
import pandas as pd

from ..config import SweepDefaults, config as app_config
from ..exceptions import (
    ClusterSweepError,
    ClusteringFailure,
    DegenerateClusteringError,
    InvalidParameter,
    SweepCancelled,
)
from ..utils.logging_config import get_logger
from .clustering import ClusteringFn, kmeans
from .distance import SUPPORTED_METRICS, pairwise_distance
from .metrics import (
    between_cluster_ss,
    calinski_harabasz,
    gap_statistic,
    silhouette_precomputed,
    total_sum_of_squares,
    within_cluster_ss,
)

logger = get_logger(__name__)

Array2D = np.ndarray
DataIn = Union[np.ndarray, pd.DataFrame]
DistanceFn = Callable[..., np.ndarray]

K_MIN = 2
COLUMNS = ("k", "wcss", "bcss", "silhouette", "calinski_harabasz", "gap", "gap_sd")

# Seed streams derived per k
_FIT_STREAM = 0
_GAP_STREAM = 1

_POLL_INTERVAL = 0.05


@dataclass
class SweepConfig:
    """Configuration for a cluster-count sweep."""

    k_max: int = 10
    n_refs: int = 10  # reference datasets per k for the gap statistic
    seed: Optional[int] = 0  # None draws fresh entropy once per sweep
    n_workers: int = 1
    fit_timeout: Optional[float] = None  # seconds per k unit
    distance_metric: str = "euclidean"
    return_assignments: bool = False

    @classmethod
    def from_defaults(
        cls, defaults: Optional[SweepDefaults] = None, **overrides: Any
    ) -> "SweepConfig":
        """Build a config from environment defaults, applying explicit overrides."""
        defaults = defaults or app_config.sweep
        values = {
            "k_max": defaults.k_max,
            "n_refs": defaults.n_refs,
            "seed": defaults.seed,
            "n_workers": defaults.n_workers,
            "fit_timeout": defaults.fit_timeout,
            "distance_metric": defaults.distance_metric,
        }
        values.update(overrides)
        return cls(**values)


@dataclass(frozen=True)
class MetricRow:
    """Metrics for one candidate k. ``wcss`` is stored negated."""

    k: int
    wcss: float
    bcss: float
    silhouette: float
    calinski_harabasz: float
    gap: float
    gap_sd: float

    @property
    def wcss_raw(self) -> float:
        """Within-cluster sum of squares before the sign flip."""
        return -self.wcss

    def as_dict(self) -> Dict[str, float]:
        return {name: getattr(self, name) for name in COLUMNS}


@dataclass(frozen=True, eq=False)
class MetricsTable:
    """Immutable sweep result: one MetricRow per k, ascending."""

    rows: Tuple[MetricRow, ...]
    seed: int
    total_ss: float
    assignments: Optional[Mapping[int, np.ndarray]] = None
    _index: Mapping[int, MetricRow] = field(init=False, repr=False)

    def __post_init__(self):
        """Order rows by k and build the k lookup."""
        ordered = tuple(sorted(self.rows, key=lambda row: row.k))
        object.__setattr__(self, "rows", ordered)
        object.__setattr__(self, "_index", MappingProxyType({row.k: row for row in ordered}))
        if self.assignments is not None:
            object.__setattr__(
                self, "assignments", MappingProxyType(dict(sorted(self.assignments.items())))
            )

    @property
    def ks(self) -> Tuple[int, ...]:
        return tuple(row.k for row in self.rows)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[MetricRow]:
        return iter(self.rows)

    def __contains__(self, k: object) -> bool:
        return k in self._index

    def __getitem__(self, k: int) -> MetricRow:
        try:
            return self._index[k]
        except KeyError:
            raise KeyError(f"No row for k={k}; available: {list(self.ks)}") from None

    def column(self, name: str) -> np.ndarray:
        """Values of one metric column, ordered by k."""
        if name not in COLUMNS:
            raise KeyError(f"Unknown column: {name}. Available: {list(COLUMNS)}")
        return np.array([getattr(row, name) for row in self.rows])

    def to_frame(self) -> pd.DataFrame:
        """Row-ordered DataFrame with columns ``COLUMNS``."""
        return pd.DataFrame([row.as_dict() for row in self.rows], columns=list(COLUMNS))


def derive_seed(seed: int, k: int, stream: int) -> int:
    """Seed for one stochastic call, independent of execution order."""
    return int(np.random.SeedSequence([seed, k, stream]).generate_state(1)[0])


def as_dataset(data: DataIn) -> Array2D:
    """
    Validate *data* and return a private read-only float64 copy.

    Raises:
        InvalidParameter: If the data is not a 2-D numeric table with at
            least 2 rows and 1 column
    """
    if isinstance(data, pd.DataFrame):
        non_numeric = [
            str(col) for col, dtype in data.dtypes.items()
            if not pd.api.types.is_numeric_dtype(dtype) or pd.api.types.is_bool_dtype(dtype)
        ]
        if non_numeric:
            raise InvalidParameter(
                f"Dataset has non-numeric columns: {non_numeric}",
                details={"columns": non_numeric},
            )
        X = data.to_numpy(dtype=np.float64, copy=True)
    else:
        arr = np.asarray(data)
        if arr.dtype.kind not in "iuf":
            raise InvalidParameter(f"Dataset must be numeric, got dtype {arr.dtype}")
        X = np.array(arr, dtype=np.float64, copy=True)

    if X.ndim != 2:
        raise InvalidParameter(f"Dataset must be 2-D (n_samples, n_features), got shape {X.shape}")
    n, p = X.shape
    if n < 2:
        raise InvalidParameter(f"Dataset needs at least 2 rows, got {n}")
    if p < 1:
        raise InvalidParameter("Dataset needs at least 1 numeric column")

    X.setflags(write=False)
    return X


def _validate_config(cfg: SweepConfig, n_samples: int) -> None:
    k_max = cfg.k_max
    if isinstance(k_max, bool) or not isinstance(k_max, (int, np.integer)):
        raise InvalidParameter(f"k_max must be an integer, got {k_max!r}")
    if k_max < K_MIN:
        raise InvalidParameter(f"k_max ({k_max}) must be >= {K_MIN}", k=int(k_max))
    if k_max >= n_samples:
        raise InvalidParameter(
            f"k_max ({k_max}) must be < n_samples ({n_samples})", k=int(k_max)
        )
    if cfg.n_refs < 1:
        raise InvalidParameter(f"n_refs must be >= 1, got {cfg.n_refs}")
    if cfg.n_workers < 1:
        raise InvalidParameter(f"n_workers must be >= 1, got {cfg.n_workers}")
    if cfg.fit_timeout is not None and cfg.fit_timeout <= 0:
        raise InvalidParameter(f"fit_timeout must be positive, got {cfg.fit_timeout}")
    if cfg.seed is not None and cfg.seed < 0:
        raise InvalidParameter(f"seed must be non-negative, got {cfg.seed}")


class _KUnit:
    """Bookkeeping for one k scheduled on the pool."""

    def __init__(self, k: int):
        self.k = k
        self.started_at: Optional[float] = None


class ClusterSweepEvaluator:
    """
    Evaluate candidate cluster counts k = 2..k_max.

    Args:
        fit: Clustering routine ``fit(X, k, seed=...) -> labels``
        distance: Distance routine ``distance(X, metric=...) -> (n, n) matrix``;
            defaults to ``pairwise_distance``
        config: Sweep configuration

    Example:
        evaluator = ClusterSweepEvaluator(kmeans, config=SweepConfig(k_max=6))
        table = evaluator.evaluate(X)
        table.to_frame()
    """

    def __init__(
        self,
        fit: ClusteringFn = kmeans,
        distance: Optional[DistanceFn] = None,
        config: Optional[SweepConfig] = None,
    ):
        self.fit = fit
        self.distance = distance if distance is not None else pairwise_distance
        self._default_distance = distance is None
        self.config = config or SweepConfig()

    def evaluate(
        self, data: DataIn, cancel_event: Optional[threading.Event] = None
    ) -> MetricsTable:
        """
        Run the sweep.

        Args:
            data: Pre-cleaned, pre-scaled numeric table (n_samples, n_features)
            cancel_event: Optional event; when set, the sweep stops between
                units and raises SweepCancelled with the completed rows

        Returns:
            MetricsTable with exactly k_max - 1 rows

        Raises:
            InvalidParameter: Before any work, if inputs are invalid
            ClusteringFailure: If the routine fails or times out for some k
            DegenerateClusteringError: If some k yields empty clusters
            SweepCancelled: If cancel_event was set
        """
        cfg = self.config
        X = as_dataset(data)
        n_samples, n_features = X.shape
        _validate_config(cfg, n_samples)
        if self._default_distance and cfg.distance_metric not in SUPPORTED_METRICS:
            raise InvalidParameter(
                f"Unsupported distance metric: {cfg.distance_metric}. "
                f"Available: {list(SUPPORTED_METRICS)}"
            )

        seed = cfg.seed
        if seed is None:
            seed = int(np.random.SeedSequence().generate_state(1)[0])
        ks = list(range(K_MIN, int(cfg.k_max) + 1))

        logger.info(
            "Starting sweep: n_samples=%d, n_features=%d, k=%d..%d, n_refs=%d, "
            "n_workers=%d, seed=%d",
            n_samples, n_features, K_MIN, cfg.k_max, cfg.n_refs, cfg.n_workers, seed,
        )
        started = time.monotonic()

        dist = self._distance_matrix(X)
        tss = total_sum_of_squares(X)

        if cfg.n_workers == 1 and cfg.fit_timeout is None:
            results = self._run_sequential(X, dist, ks, seed, cancel_event)
        else:
            results = self._run_pooled(X, dist, ks, seed, cancel_event)

        table = self._build_table(results, seed, tss)
        logger.info(
            "Sweep finished: %d rows in %.2fs", len(table), time.monotonic() - started
        )
        return table

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _distance_matrix(self, X: Array2D) -> Array2D:
        n = X.shape[0]
        dist = np.array(self.distance(X, metric=self.config.distance_metric), dtype=np.float64)
        if dist.shape != (n, n):
            raise InvalidParameter(
                f"Distance routine returned shape {dist.shape}, expected {(n, n)}"
            )
        if np.any(dist < 0) or not np.all(np.isfinite(dist)):
            raise InvalidParameter("Distance matrix must be finite and non-negative")
        if not np.allclose(dist, dist.T):
            raise InvalidParameter("Distance matrix must be symmetric")
        if not np.allclose(np.diag(dist), 0.0):
            raise InvalidParameter("Distance matrix must have a zero diagonal")
        # Exact symmetry and zero diagonal from here on
        dist = (dist + dist.T) / 2.0
        np.fill_diagonal(dist, 0.0)
        dist.setflags(write=False)
        return dist

    def _evaluate_k(
        self, X: Array2D, dist: Array2D, k: int, seed: int
    ) -> Tuple[MetricRow, np.ndarray]:
        n_samples = X.shape[0]
        try:
            labels = np.asarray(self.fit(X, k, seed=derive_seed(seed, k, _FIT_STREAM)))
        except Exception as exc:
            raise ClusteringFailure(
                f"Clustering routine failed for k={k}: {exc}", k=k
            ) from exc

        if labels.ndim != 1 or labels.shape[0] != n_samples:
            raise ClusteringFailure(
                f"Clustering routine returned labels of shape {labels.shape} for k={k}, "
                f"expected ({n_samples},)",
                k=k,
            )
        n_nonempty = len(np.unique(labels))
        if n_nonempty < k:
            raise DegenerateClusteringError(k, n_nonempty)
        if n_nonempty > k:
            raise ClusteringFailure(
                f"Clustering routine returned {n_nonempty} clusters for k={k}",
                k=k,
                details={"n_clusters": n_nonempty},
            )

        wcss_raw = within_cluster_ss(X, labels)
        bcss = between_cluster_ss(X, labels)
        silhouette = silhouette_precomputed(dist, labels)
        ch = calinski_harabasz(wcss_raw, bcss, n_samples, k)
        try:
            gap = gap_statistic(
                X,
                k,
                self.fit,
                n_refs=self.config.n_refs,
                seed=derive_seed(seed, k, _GAP_STREAM),
                observed_wcss=wcss_raw,
            )
        except Exception as exc:
            raise ClusteringFailure(
                f"Gap statistic reference fit failed for k={k}: {exc}", k=k
            ) from exc

        row = MetricRow(
            k=k,
            wcss=-wcss_raw,
            bcss=bcss,
            silhouette=silhouette,
            calinski_harabasz=ch,
            gap=gap.gap,
            gap_sd=gap.gap_sd,
        )
        logger.debug(
            "k=%d: wcss=%.4f bcss=%.4f silhouette=%.4f ch=%.4f gap=%.4f",
            k, row.wcss, row.bcss, row.silhouette, row.calinski_harabasz, row.gap,
        )
        return row, labels

    def _run_unit(
        self, unit: _KUnit, X: Array2D, dist: Array2D, seed: int
    ) -> Tuple[MetricRow, np.ndarray]:
        unit.started_at = time.monotonic()
        return self._evaluate_k(X, dist, unit.k, seed)

    def _run_sequential(
        self,
        X: Array2D,
        dist: Array2D,
        ks: list[int],
        seed: int,
        cancel_event: Optional[threading.Event],
    ) -> Dict[int, Tuple[MetricRow, np.ndarray]]:
        results: Dict[int, Tuple[MetricRow, np.ndarray]] = {}
        for k in ks:
            if cancel_event is not None and cancel_event.is_set():
                self._cancel(results, seed, X)
            results[k] = self._log_failures(k, lambda: self._evaluate_k(X, dist, k, seed))
        return results

    def _run_pooled(
        self,
        X: Array2D,
        dist: Array2D,
        ks: list[int],
        seed: int,
        cancel_event: Optional[threading.Event],
    ) -> Dict[int, Tuple[MetricRow, np.ndarray]]:
        cfg = self.config
        results: Dict[int, Tuple[MetricRow, np.ndarray]] = {}
        units = {k: _KUnit(k) for k in ks}

        executor = ThreadPoolExecutor(
            max_workers=cfg.n_workers, thread_name_prefix="cluster-sweep"
        )
        try:
            futures = {
                executor.submit(self._run_unit, units[k], X, dist, seed): k for k in ks
            }
            pending = set(futures)
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    self._cancel(results, seed, X)
                done, pending = wait(pending, timeout=_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                for fut in sorted(done, key=futures.get):
                    k = futures[fut]
                    results[k] = self._log_failures(k, fut.result)

                if cfg.fit_timeout is None:
                    continue
                now = time.monotonic()
                for fut in pending:
                    unit = units[futures[fut]]
                    if unit.started_at is not None and now - unit.started_at > cfg.fit_timeout:
                        logger.error("k=%d timed out after %.2fs", unit.k, cfg.fit_timeout)
                        raise ClusteringFailure(
                            f"Clustering for k={unit.k} timed out after {cfg.fit_timeout}s",
                            k=unit.k,
                            details={"timeout": cfg.fit_timeout},
                        )
        finally:
            # Stuck units keep their thread; the sweep does not wait for them
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    @staticmethod
    def _log_failures(k: int, run: Callable[[], Tuple[MetricRow, np.ndarray]]):
        try:
            return run()
        except ClusterSweepError as exc:
            logger.error("Sweep aborted at k=%d: %s", k, exc.message)
            raise

    def _cancel(
        self, results: Dict[int, Tuple[MetricRow, np.ndarray]], seed: int, X: Array2D
    ) -> None:
        partial = self._build_table(results, seed, total_sum_of_squares(X))
        logger.warning("Sweep cancelled; %d completed rows kept", len(partial))
        raise SweepCancelled(partial)

    def _build_table(
        self, results: Dict[int, Tuple[MetricRow, np.ndarray]], seed: int, tss: float
    ) -> MetricsTable:
        assignments = None
        if self.config.return_assignments:
            assignments = {}
            for k, (_, labels) in results.items():
                frozen = np.array(labels, copy=True)
                frozen.setflags(write=False)
                assignments[k] = frozen
        return MetricsTable(
            rows=tuple(row for row, _ in results.values()),
            seed=seed,
            total_ss=tss,
            assignments=assignments,
        )


def run_sweep(
    data: DataIn,
    cfg: Optional[SweepConfig] = None,
    *,
    fit: ClusteringFn = kmeans,
    distance: Optional[DistanceFn] = None,
    cancel_event: Optional[threading.Event] = None,
) -> MetricsTable:
    """
    Run a cluster-count sweep over k = 2..cfg.k_max.

    Example:
        cfg = SweepConfig(k_max=5, n_refs=10, seed=0)
        table = run_sweep(X, cfg, fit=hierarchical)

    Args:
        data: Numeric table of shape (n_samples, n_features)
        cfg: SweepConfig (defaults to ``SweepConfig()``)
        fit: Clustering routine ``fit(X, k, seed=...) -> labels``
        distance: Distance routine ``distance(X, metric=...) -> matrix``
        cancel_event: Optional cancellation event

    Returns:
        MetricsTable sorted by k

    Raises:
        InvalidParameter: If k_max < 2 or k_max >= n_samples, among others
    """
    evaluator = ClusterSweepEvaluator(fit=fit, distance=distance, config=cfg)
    return evaluator.evaluate(data, cancel_event=cancel_event)
