"""Tests for observability metrics module."""

from jobnest.observability.metrics import MetricsStore, get_metrics_store


class TestAuthMetrics:
    """Tests for per-path auth attempt metrics."""

    def test_record_latency(self):
        store = MetricsStore()
        store.record_auth_attempt("google", 50.0, success=True)
        store.record_auth_attempt("google", 100.0, success=True)
        store.record_auth_attempt("google", 150.0, success=True)

        google = store.get_summary()["auth"]["google"]

        assert google["attempts"] == 3
        assert google["successes"] == 3
        assert google["p50_ms"] == 100.0
        assert google["max_ms"] == 150.0
        assert google["last_attempt"] is not None

    def test_record_failures_by_code(self):
        store = MetricsStore()
        store.record_auth_attempt("supabase", 10.0, success=False, error_code="INVALID_CREDENTIAL")
        store.record_auth_attempt("supabase", 10.0, success=False, error_code="INVALID_CREDENTIAL")
        store.record_auth_attempt("supabase", 10.0, success=False, error_code="UPSTREAM_UNAVAILABLE")

        supabase = store.get_summary()["auth"]["supabase"]

        assert supabase["attempts"] == 3
        assert supabase["successes"] == 0
        assert supabase["errors"] == {"INVALID_CREDENTIAL": 2, "UPSTREAM_UNAVAILABLE": 1}

    def test_paths_are_tracked_separately(self):
        store = MetricsStore()
        store.record_auth_attempt("plain", 1.0, success=True)
        store.record_store_conflict("google")

        summary = store.get_summary()["auth"]

        assert summary["plain"]["attempts"] == 1
        assert summary["plain"]["store_conflicts"] == 0
        assert summary["google"]["attempts"] == 0
        assert summary["google"]["store_conflicts"] == 1

    def test_latency_window_is_bounded(self):
        store = MetricsStore()
        for i in range(1100):
            store.record_auth_attempt("plain", float(i), success=True)

        plain = store._paths["plain"]
        assert len(plain.latencies_ms) == plain.MAX_LATENCIES
        assert plain.attempt_count == 1100


class TestGlobalErrors:
    def test_global_errors(self):
        store = MetricsStore()
        store.record_error("STORE_UNAVAILABLE")
        store.record_error("STORE_UNAVAILABLE")
        store.record_error("INTERNAL_ERROR")

        summary = store.get_summary()
        assert summary["global_errors"]["STORE_UNAVAILABLE"] == 2
        assert summary["global_errors"]["INTERNAL_ERROR"] == 1


class TestSummary:
    def test_empty_summary(self):
        summary = MetricsStore().get_summary()

        assert summary["auth"] == {}
        assert summary["global_errors"] == {}
        assert summary["uptime_seconds"] >= 0

    def test_reset(self):
        store = MetricsStore()
        store.record_auth_attempt("plain", 5.0, success=True)
        store.record_error("INTERNAL_ERROR")

        store.reset()

        assert store.get_summary()["auth"] == {}
        assert store.get_summary()["global_errors"] == {}

    def test_singleton(self):
        assert get_metrics_store() is get_metrics_store()
