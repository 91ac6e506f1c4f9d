from modcore import metrics
from modcore.events import on, emit, reset_listeners_for_tests, PackageSkipped


def test_handler_exception_increments_metric():
    reset_listeners_for_tests()
    metrics.reset_for_tests()

    # faulty handler that raises
    def boom(name, payload):  # noqa: D401
        raise RuntimeError("boom")

    on(boom)
    # also add a no-op to ensure continued dispatch
    on(lambda n, p: None)

    emit(PackageSkipped(mod_id="a", order=0, reason="disabled"))

    counters = metrics.snapshot()["counters"]
    matching = [
        v
        for k, v in counters.items()
        if k.startswith("handler_exceptions_total{event=PackageSkipped")
    ]
    assert matching, f"No handler_exceptions_total counter: {counters}"
    assert sum(matching) >= 1
    # metrics collector still ran despite the faulty handler
    assert counters["mod_imports_total{status=skipped}"] >= 1
    reset_listeners_for_tests()
