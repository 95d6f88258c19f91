"""
Tests for environment-driven configuration.
"""

import pytest

from cluster_sweep.config import Config, SweepDefaults


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "K_MAX", "N_REFS", "SEED", "N_WORKERS", "FIT_TIMEOUT",
        "DISTANCE", "ALGORITHM", "LOG_LEVEL",
    ):
        monkeypatch.delenv(f"CLUSTER_SWEEP_{name}", raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    """Without environment variables the built-in defaults apply."""
    cfg = Config()
    assert cfg.sweep == SweepDefaults()
    assert cfg.log_level == "INFO"


def test_config_from_environment(clean_env):
    """Environment variables override defaults."""
    clean_env.setenv("CLUSTER_SWEEP_K_MAX", "7")
    clean_env.setenv("CLUSTER_SWEEP_N_REFS", "20")
    clean_env.setenv("CLUSTER_SWEEP_SEED", "none")
    clean_env.setenv("CLUSTER_SWEEP_N_WORKERS", "4")
    clean_env.setenv("CLUSTER_SWEEP_FIT_TIMEOUT", "2.5")
    clean_env.setenv("CLUSTER_SWEEP_DISTANCE", "cosine")
    clean_env.setenv("CLUSTER_SWEEP_ALGORITHM", "hierarchical")
    clean_env.setenv("CLUSTER_SWEEP_LOG_LEVEL", "DEBUG")

    cfg = Config()

    assert cfg.sweep.k_max == 7
    assert cfg.sweep.n_refs == 20
    assert cfg.sweep.seed is None
    assert cfg.sweep.n_workers == 4
    assert cfg.sweep.fit_timeout == 2.5
    assert cfg.sweep.distance_metric == "cosine"
    assert cfg.sweep.algorithm == "hierarchical"
    assert cfg.log_level == "DEBUG"


def test_config_malformed_values(clean_env):
    """Malformed values name the offending variable."""
    clean_env.setenv("CLUSTER_SWEEP_K_MAX", "ten")
    with pytest.raises(ValueError, match="CLUSTER_SWEEP_K_MAX"):
        Config()


def test_config_out_of_range_values(clean_env):
    """Range checks apply to environment values too."""
    clean_env.setenv("CLUSTER_SWEEP_N_WORKERS", "0")
    with pytest.raises(ValueError, match="CLUSTER_SWEEP_N_WORKERS"):
        Config()
