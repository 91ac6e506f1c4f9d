"""Persisted mod state (enabled flags + user order)."""
from __future__ import annotations

from .table import ModStateTable, StateEntry  # noqa: F401
from .store import JsonStateStore, MemoryStateStore, StateStore  # noqa: F401

__all__ = [
    "ModStateTable",
    "StateEntry",
    "JsonStateStore",
    "MemoryStateStore",
    "StateStore",
]
