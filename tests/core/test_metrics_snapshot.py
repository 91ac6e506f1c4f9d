from modcore import metrics
from modcore.events import (
    emit,
    reset_listeners_for_tests,
    LoadErrorRaised,
    ReloadCompleted,
)


def test_metrics_snapshot_counters_increment():
    metrics.reset_for_tests()
    reset_listeners_for_tests()
    emit(
        ReloadCompleted(
            status="ok",
            package_count=2,
            imported_count=2,
            error_count=0,
            duration_ms=5,
        )
    )
    emit(LoadErrorRaised(kind="manifest-error", message="x", involved_ids=[]))
    snap = metrics.snapshot()
    counters = snap["counters"]
    assert counters["mod_reload_total{status=ok}"] == 1
    assert counters["mod_load_errors_total{kind=manifest-error}"] == 1
    assert snap["histograms"]["mod_reload_latency_ms"]["last"] == 5


def test_get_counter_labels_order_insensitive():
    metrics.reset_for_tests()
    metrics.inc("x_total", {"a": 1, "b": 2})
    metrics.inc("x_total", {"b": 2, "a": 1}, value=2)
    assert metrics.get_counter("x_total", {"a": 1, "b": 2}) == 3
    assert metrics.get_counter("x_total") == 0
