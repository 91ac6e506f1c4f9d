"""Event dataclasses + any-subscriber bridge for the mod loader.

Each event is published on `modcore.eventbus` under its class name, and
every any-subscriber registered via `on(handler)` receives
handler(name, payload). The built-in metrics collector is always
subscribed.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict
from time import time
from typing import Any, Callable, Dict, List, Protocol

from modcore import metrics as _metrics
from modcore.eventbus import emit as _emit_bus

EventHandler = Callable[[str, Dict[str, Any]], None]


class SupportsEvent(Protocol):  # pragma: no cover
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        ...


@dataclass(slots=True)
class BaseEvent:
    def to_event(self) -> Dict[str, Any]:  # noqa: D401
        data = asdict(self)
        data["ts"] = data.get("ts") or time()
        return data


@dataclass(slots=True)
class ReloadCompleted(BaseEvent):
    """Outcome of one reload attempt.

    status: ok|failed (failed = graph resolution aborted the run)
    """
    status: str
    package_count: int
    imported_count: int
    error_count: int
    duration_ms: int


@dataclass(slots=True)
class LoadErrorRaised(BaseEvent):
    kind: str
    message: str
    involved_ids: list[str]


@dataclass(slots=True)
class PackageImported(BaseEvent):
    mod_id: str
    order: int
    status: str  # ok|error
    duration_ms: int


@dataclass(slots=True)
class PackageSkipped(BaseEvent):
    mod_id: str
    order: int
    reason: str  # disabled


@dataclass(slots=True)
class ModStateChanged(BaseEvent):
    """User edit of the persisted state table.

    action: enable|disable|move
    persisted: False when the state store rejected the write.
    """
    mod_id: str
    action: str
    order: int
    enabled: bool
    persisted: bool


@dataclass(slots=True)
class OrderOverridden(BaseEvent):
    """A manual move broke loadBefore/loadAfter constraints.

    The next reload will restore a valid order; violations lists
    "a->b" pairs that the saved order currently contradicts.
    """
    mod_id: str
    violations: list[str]


@dataclass(slots=True)
class CatalogueCleared(BaseEvent):
    entry_count: int


_ANY_SUBS: List[EventHandler] = []


def _metrics_collector(
    name: str, payload: Dict[str, Any]
) -> None:  # noqa: D401
    if name == "ReloadCompleted":
        _metrics.inc(
            "mod_reload_total", {"status": payload.get("status", "unknown")}
        )
        _metrics.observe(
            "mod_reload_latency_ms", payload.get("duration_ms", 0)
        )
    elif name == "LoadErrorRaised":
        _metrics.inc(
            "mod_load_errors_total",
            {"kind": payload.get("kind", "unknown")},
        )
    elif name == "PackageImported":
        _metrics.inc(
            "mod_imports_total", {"status": payload.get("status", "unknown")}
        )
        _metrics.observe(
            "mod_import_latency_ms", payload.get("duration_ms", 0)
        )
    elif name == "PackageSkipped":
        _metrics.inc(
            "mod_imports_total", {"status": "skipped"}
        )
    elif name == "ModStateChanged":
        _metrics.inc(
            "mod_state_changes_total",
            {"action": payload.get("action", "unknown")},
        )
    elif name == "OrderOverridden":
        _metrics.inc("mod_order_overridden_total")
    elif name == "CatalogueCleared":
        _metrics.inc("catalogue_clears_total")


_ANY_SUBS.append(_metrics_collector)


def emit(ev: BaseEvent | SupportsEvent) -> None:
    name = ev.__class__.__name__
    payload = ev.to_event()
    _emit_bus(name, payload)
    for h in list(_ANY_SUBS):  # copy for isolation
        try:
            h(name, dict(payload))
        except Exception:  # noqa: BLE001
            _metrics.inc("handler_exceptions_total", {"event": name})


def on(handler: EventHandler) -> None:
    _ANY_SUBS.append(handler)


def subscribe(handler: EventHandler):
    on(handler)

    def _unsub() -> None:  # noqa: D401
        try:
            _ANY_SUBS.remove(handler)
        except ValueError:
            pass
    return _unsub


def reset_listeners_for_tests() -> None:  # pragma: no cover
    _ANY_SUBS.clear()
    _ANY_SUBS.append(_metrics_collector)


__all__ = [
    "emit",
    "on",
    "subscribe",
    "BaseEvent",
    "ReloadCompleted",
    "LoadErrorRaised",
    "PackageImported",
    "PackageSkipped",
    "ModStateChanged",
    "OrderOverridden",
    "CatalogueCleared",
    "reset_listeners_for_tests",
]
