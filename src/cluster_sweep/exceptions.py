"""
Exception hierarchy for cluster sweeps.

Every error carries the offending ``k`` (when there is one) so callers can
lower ``k_max`` and retry the sweep themselves.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ClusterSweepError(Exception):
    """Base exception for all cluster sweep errors."""

    def __init__(
        self,
        message: str,
        k: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.k = k
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary for logging/reporting."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "k": self.k,
            "details": self.details,
        }


class InvalidParameter(ClusterSweepError, ValueError):
    """Sweep inputs failed validation before any work started."""


class ClusteringFailure(ClusterSweepError, RuntimeError):
    """The clustering routine raised, timed out or returned bad labels for k."""


class DegenerateClusteringError(ClusterSweepError):
    """A fitted assignment has fewer than k non-empty clusters."""

    def __init__(self, k: int, n_nonempty: int):
        super().__init__(
            f"Clustering for k={k} produced only {n_nonempty} non-empty clusters",
            k=k,
            details={"n_nonempty": n_nonempty},
        )
        self.n_nonempty = n_nonempty


class SweepCancelled(ClusterSweepError):
    """The caller cancelled the sweep.

    ``partial`` holds a MetricsTable of the rows that fully completed.
    """

    def __init__(self, partial: Any):
        completed = list(partial.ks) if partial is not None else []
        super().__init__(
            f"Sweep cancelled after {len(completed)} completed rows",
            details={"completed_ks": completed},
        )
        self.partial = partial
