"""Dependency graph resolver.

Turns the discovered manifest set into one total load order consistent with
every loadBefore/loadAfter edge, or fails with a ResolutionError naming the
offending ids (missing reference or cycle).
"""
from __future__ import annotations

from .graph import (  # noqa: F401
    build_graph,
    find_order_violations,
    resolve,
    seed_order,
    topological_sort,
    validate_references,
)

__all__ = [
    "build_graph",
    "find_order_violations",
    "resolve",
    "seed_order",
    "topological_sort",
    "validate_references",
]
