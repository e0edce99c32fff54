"""
JobNest Observability Module.

Provides in-process metrics collection for auth attempts, store conflicts and errors.
"""

from jobnest.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
