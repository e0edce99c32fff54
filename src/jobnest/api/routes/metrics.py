"""
JobNest Metrics Endpoint.

Exposes observability metrics for monitoring and debugging.
"""

from fastapi import APIRouter

from jobnest.observability import get_metrics_store

router = APIRouter(prefix="/api", tags=["metrics"])


@router.get("/metrics")
def get_metrics() -> dict:
    """
    Get current metrics summary.

    Example response:
    ```json
    {
      "uptime_seconds": 3600.5,
      "collected_at": "2026-10-17T19:00:00Z",
      "auth": {
        "google": {
          "attempts": 42,
          "successes": 40,
          "store_conflicts": 1,
          "p50_ms": 85.2,
          "errors": {"INVALID_CREDENTIAL": 2}
        }
      },
      "global_errors": {"MISSING_FIELD": 3}
    }
    ```
    """
    return get_metrics_store().get_summary()
