"""
JobNest Metrics Store.

In-process metrics collection for observability without external dependencies.
Tracks:
- Auth attempts per entry path (latency percentiles, successes, error codes)
- Store conflicts reconciled by the identity resolver, per path
- Error counts by code (JobNestException.code)

Thread-safe via locks. Singleton pattern for global access.
"""

from __future__ import annotations

import statistics
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any


@dataclass
class PathMetrics:
    """Metrics for a single auth entry path."""

    latencies_ms: list[float] = field(default_factory=list)
    error_counts: dict[str, int] = field(default_factory=lambda: defaultdict(int))
    attempt_count: int = 0
    success_count: int = 0
    store_conflicts: int = 0
    last_attempt: datetime | None = None

    # Keep last N latencies to avoid unbounded memory
    MAX_LATENCIES = 1000

    def record_attempt(self, ms: float, success: bool, error_code: str | None = None) -> None:
        self.latencies_ms.append(ms)
        if len(self.latencies_ms) > self.MAX_LATENCIES:
            self.latencies_ms = self.latencies_ms[-self.MAX_LATENCIES :]
        self.attempt_count += 1
        self.last_attempt = datetime.now(timezone.utc)
        if success:
            self.success_count += 1
        elif error_code:
            self.error_counts[error_code] += 1

    def get_percentiles(self) -> dict[str, float]:
        if not self.latencies_ms:
            return {}
        sorted_latencies = sorted(self.latencies_ms)
        n = len(sorted_latencies)
        return {
            "p50_ms": sorted_latencies[int(n * 0.5)],
            "p90_ms": sorted_latencies[int(n * 0.9)],
            "p99_ms": sorted_latencies[int(n * 0.99)] if n > 1 else sorted_latencies[-1],
            "mean_ms": statistics.mean(sorted_latencies),
            "max_ms": sorted_latencies[-1],
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempts": self.attempt_count,
            "successes": self.success_count,
            "store_conflicts": self.store_conflicts,
            "last_attempt": self.last_attempt.isoformat() if self.last_attempt else None,
            **self.get_percentiles(),
            "errors": dict(self.error_counts),
        }


class MetricsStore:
    """
    Central metrics store for JobNest observability.

    Thread-safe singleton for collecting metrics across the application.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._paths: dict[str, PathMetrics] = defaultdict(PathMetrics)
        self._global_errors: dict[str, int] = defaultdict(int)
        self._started_at = datetime.now(timezone.utc)

    # -------------------------------------------------------------------------
    # Auth Metrics
    # -------------------------------------------------------------------------

    def record_auth_attempt(
        self, path: str, ms: float, success: bool, error_code: str | None = None
    ) -> None:
        """Record one authentication attempt on an entry path."""
        with self._lock:
            self._paths[path].record_attempt(ms, success, error_code)

    def record_store_conflict(self, path: str) -> None:
        """Record a create conflict the resolver reconciled."""
        with self._lock:
            self._paths[path].store_conflicts += 1

    # -------------------------------------------------------------------------
    # Global Errors
    # -------------------------------------------------------------------------

    def record_error(self, code: str) -> None:
        """Record a global error (not tied to an auth path)."""
        with self._lock:
            self._global_errors[code] += 1

    # -------------------------------------------------------------------------
    # Summary / Export
    # -------------------------------------------------------------------------

    def get_summary(self) -> dict[str, Any]:
        """
        Get a summary of all metrics.

        Returns a dict suitable for JSON serialization and /metrics endpoint.
        """
        with self._lock:
            now = datetime.now(timezone.utc)
            uptime_seconds = (now - self._started_at).total_seconds()

            return {
                "uptime_seconds": round(uptime_seconds, 1),
                "collected_at": now.isoformat(),
                "auth": {path: metrics.to_dict() for path, metrics in self._paths.items()},
                "global_errors": dict(self._global_errors),
            }

    def reset(self) -> None:
        """Reset all metrics. Useful for testing."""
        with self._lock:
            self._paths.clear()
            self._global_errors.clear()
            self._started_at = datetime.now(timezone.utc)


# -----------------------------------------------------------------------------
# Singleton accessor
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def get_metrics_store() -> MetricsStore:
    """Get the global MetricsStore singleton."""
    return MetricsStore()
