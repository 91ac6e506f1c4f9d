from modcore.eventbus import subscribe, emit
from modcore import metrics


def test_eventbus_basic_dispatch():
    got = []
    subscribe("TestEvent", lambda p: got.append(p["value"]))
    subscribe("TestEvent", lambda p: got.append(p["value"] * 2))
    emit("TestEvent", {"value": 3})
    assert sorted(got) == [3, 6]
    snap = metrics.snapshot()["counters"]
    assert any("events_emitted_total" in k for k in snap)


def test_eventbus_unsubscribe_stops_delivery():
    got = []
    unsub = subscribe("UnsubEvent", lambda p: got.append(p))
    emit("UnsubEvent", {})
    unsub()
    emit("UnsubEvent", {})
    assert len(got) == 1
    assert "ts" in got[0]
