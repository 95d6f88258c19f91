"""
Test suite for cluster_sweep.

This package contains all tests organized by component:
- test_algorithms/: distance, clustering, metrics and the sweep
- test_experiments/: model selection and plotting
- top-level modules: preprocessing, config and the CLI
"""
