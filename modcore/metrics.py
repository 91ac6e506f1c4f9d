"""Minimal in-memory metrics collector.

Purpose:
    - Counters and simple latency samples for reload / import health.
    - Zero external deps; can be swapped by a Prometheus exporter later.

Core API (intentionally tiny):
    inc(name, labels=None, value=1)
    observe(name, value, labels=None)
    snapshot() -> dict (copy for safe reading)

Thread-safety: coarse RLock; overhead negligible for reload-rate volume.

Mod loader metric names (documented for discoverability):
    - mod_reload_total{status}
    - mod_reload_latency_ms
    - mod_load_errors_total{kind}
    - mod_imports_total{status}
    - mod_import_latency_ms
    - mod_state_changes_total{action}
    - mod_order_overridden_total
    - catalogue_writes_total{type}
    - catalogue_replacements_total{type}
    - content_files_failed_total{reason}
"""
from __future__ import annotations

from threading import RLock
from time import time
from typing import Any, Dict, Tuple

_COUNTERS: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], float] = {}
_HIST: Dict[Tuple[str, Tuple[Tuple[str, str], ...]], list] = {}
_LOCK = RLock()


def _norm_labels(labels: dict[str, Any] | None) -> Tuple[Tuple[str, str], ...]:
    if not labels:
        return tuple()
    return tuple(sorted((str(k), str(v)) for k, v in labels.items()))


def _label_str(labels: Tuple[Tuple[str, str], ...]) -> str:
    if not labels:
        return ""
    return "{" + ",".join(f"{k}={v}" for k, v in labels) + "}"


def inc(
    name: str,
    labels: dict[str, Any] | None = None,
    value: float = 1.0,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _COUNTERS[key] = _COUNTERS.get(key, 0.0) + value


def observe(
    name: str,
    value: float,
    labels: dict[str, Any] | None = None,
) -> None:
    key = (name, _norm_labels(labels))
    with _LOCK:
        _HIST.setdefault(key, []).append(value)


def snapshot() -> dict[str, Any]:
    with _LOCK:
        counters: dict[str, float] = {}
        for (name, labels), v in _COUNTERS.items():
            counters[name + _label_str(labels)] = v
        hist = {}
        for (name, labels), vals in _HIST.items():
            if not vals:
                continue
            hist[name + _label_str(labels)] = {
                "count": len(vals),
                "min": min(vals),
                "max": max(vals),
                "p50": sorted(vals)[len(vals) // 2],
                "last": vals[-1],
            }
        return {
            "ts": time(),
            "counters": counters,
            "histograms": hist,
        }


def get_counter(name: str, labels: dict[str, Any] | None = None) -> float:
    with _LOCK:
        return _COUNTERS.get((name, _norm_labels(labels)), 0.0)


def reset_for_tests() -> None:  # pragma: no cover
    with _LOCK:
        _COUNTERS.clear()
        _HIST.clear()


__all__ = [
    "inc",
    "observe",
    "snapshot",
    "get_counter",
    "reset_for_tests",
]


# ------------------- Helper wrappers -------------------

def inc_content_file_failed(reason: str) -> None:
    """Increment failed content file counter.

    reason: classifier for the failure:
        - malformed_json
        - validation
        - missing_id
        - unreadable
    """
    if reason:
        inc("content_files_failed_total", {"reason": reason})


def inc_catalogue_write(type_name: str, replaced: bool) -> None:
    inc("catalogue_writes_total", {"type": type_name})
    if replaced:
        inc("catalogue_replacements_total", {"type": type_name})


__all__ += ["inc_content_file_failed", "inc_catalogue_write"]
