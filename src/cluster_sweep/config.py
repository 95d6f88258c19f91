"""
Configuration management for cluster_sweep.

Loads defaults from environment variables (typically from a .env file).
Uses python-dotenv to load .env automatically.

Usage:
    from cluster_sweep.config import config

    k_max = config.sweep.k_max
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Look for .env in project root (parent of src/)
env_path = Path(__file__).parent.parent.parent / ".env"
if env_path.exists():
    load_dotenv(env_path)

ENV_PREFIX = "CLUSTER_SWEEP_"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be an integer, got {raw!r}") from e


def _env_optional_int(name: str, default: Optional[int]) -> Optional[int]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return default
    if raw.strip().lower() == "none":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(
            f"{ENV_PREFIX}{name} must be an integer or 'none', got {raw!r}"
        ) from e


def _env_optional_float(name: str) -> Optional[float]:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ValueError(f"{ENV_PREFIX}{name} must be a number, got {raw!r}") from e


@dataclass
class SweepDefaults:
    """Default sweep parameters."""
    k_max: int = 10
    n_refs: int = 10
    seed: Optional[int] = 0
    n_workers: int = 1
    fit_timeout: Optional[float] = None
    distance_metric: str = "euclidean"
    algorithm: str = "kmeans"

    def __post_init__(self):
        """Validate ranges that do not depend on the dataset."""
        if self.n_refs < 1:
            raise ValueError(f"{ENV_PREFIX}N_REFS must be >= 1, got {self.n_refs}")
        if self.n_workers < 1:
            raise ValueError(f"{ENV_PREFIX}N_WORKERS must be >= 1, got {self.n_workers}")
        if self.fit_timeout is not None and self.fit_timeout <= 0:
            raise ValueError(
                f"{ENV_PREFIX}FIT_TIMEOUT must be positive, got {self.fit_timeout}"
            )


class Config:
    """
    Application configuration loaded from environment variables.

    Environment variables can be set:
    1. In a .env file in the project root
    2. In the system environment
    """

    def __init__(self):
        """Load configuration from environment."""
        self.sweep = SweepDefaults(
            k_max=_env_int("K_MAX", 10),
            n_refs=_env_int("N_REFS", 10),
            seed=_env_optional_int("SEED", 0),
            n_workers=_env_int("N_WORKERS", 1),
            fit_timeout=_env_optional_float("FIT_TIMEOUT"),
            distance_metric=os.getenv(ENV_PREFIX + "DISTANCE", "euclidean"),
            algorithm=os.getenv(ENV_PREFIX + "ALGORITHM", "kmeans"),
        )
        self.log_level = os.getenv(ENV_PREFIX + "LOG_LEVEL", "INFO")


# Global config instance
config = Config()
