"""EventBus v1 (sync in-process).

Features:
  - subscribe(event_name, handler) -> unsubscribe callable
  - emit(event_name, payload) adds ts if missing
  - handler isolation (exceptions counted + logged, not propagated)
    - metrics counters:
            events_emitted_total{event}, handler_exceptions_total{event},
            dispatch_latency_accum_ms{event}, dispatch_count{event}

Dispatch happens on the emitting thread; a reload running in the background
delivers its events on that background thread.
"""
from __future__ import annotations

import logging
from threading import RLock
from time import time
from typing import Any, Callable, Dict, List

from modcore import metrics

Handler = Callable[[Dict[str, Any]], None]

_log = logging.getLogger(__name__)


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Handler]] = {}
        self._lock = RLock()

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        with self._lock:
            self._subs.setdefault(event, []).append(handler)

        def _unsub() -> None:
            with self._lock:
                try:
                    self._subs.get(event, []).remove(handler)
                except ValueError:
                    pass

        return _unsub

    def emit(self, event: str, payload: Dict[str, Any]) -> None:
        t0 = time()
        if "ts" not in payload:
            payload["ts"] = t0
        with self._lock:
            subs = list(self._subs.get(event, ()))
        metrics.inc("events_emitted_total", {"event": event})
        for h in subs:
            try:
                h(dict(payload))  # shallow copy per handler
            except Exception:  # noqa: BLE001
                metrics.inc("handler_exceptions_total", {"event": event})
                _log.exception("event handler failed for %s", event)
        latency_ms = int((time() - t0) * 1000)
        metrics.inc(
            "dispatch_latency_accum_ms", {"event": event}, latency_ms
        )
        metrics.inc("dispatch_count", {"event": event})

    def reset_for_tests(self) -> None:  # pragma: no cover
        with self._lock:
            self._subs.clear()


_BUS = EventBus()


def subscribe(event: str, handler: Handler) -> Callable[[], None]:
    return _BUS.subscribe(event, handler)


def emit(event: str, payload: Dict[str, Any]) -> None:
    _BUS.emit(event, payload)


def reset_for_tests() -> None:  # pragma: no cover
    _BUS.reset_for_tests()


__all__ = ["emit", "subscribe", "EventBus", "reset_for_tests"]
