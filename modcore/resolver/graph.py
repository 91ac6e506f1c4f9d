"""Load-order resolution: reference validation + seeded Kahn sort.

Edge "a -> b" means a must load before b:
  - a -> x for each x in a.load_before
  - y -> a for each y in a.load_after
`requires` only gates existence; it adds no edge.

Ties between simultaneously eligible vertices are broken by seed rank
(previous saved order first, then unseen ids in discovery order), so the
output is stable across reloads unless an edge forces a change.
"""
from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Sequence, Set, Tuple

from modcore.errors import ErrorKind, ResolutionError
from modcore.registry.manifest import ModManifest

Graph = Dict[str, List[str]]


def validate_references(manifests: Sequence[ModManifest]) -> None:
    """Fail on the first reference to an id outside the set."""
    ids = {m.id for m in manifests}
    for m in manifests:
        for req in m.requires:
            if req not in ids:
                raise ResolutionError(
                    ErrorKind.MISSING_DEPENDENCY,
                    f"{m.id} requires missing mod {req}",
                    (m.id, req),
                )
        for tgt in m.load_before + m.load_after:
            if tgt not in ids:
                raise ResolutionError(
                    ErrorKind.MISSING_DEPENDENCY,
                    f"{m.id} references non-existent mod {tgt}",
                    (m.id, tgt),
                )


def build_graph(manifests: Sequence[ModManifest]) -> Graph:
    graph: Graph = {m.id: [] for m in manifests}

    def add_edge(a: str, b: str) -> None:
        if b not in graph[a]:
            graph[a].append(b)

    for m in manifests:
        for before in m.load_before:
            add_edge(m.id, before)
        for after in m.load_after:
            add_edge(after, m.id)
    return graph


def edges(graph: Graph) -> Iterable[Tuple[str, str]]:
    for a, targets in graph.items():
        for b in targets:
            yield a, b


def seed_order(
    manifests: Sequence[ModManifest], previous_ids: Sequence[str] = ()
) -> List[str]:
    """Previous ids still present (in their saved order), then new ids."""
    present = {m.id for m in manifests}
    seed: List[str] = []
    seen: Set[str] = set()
    for mid in previous_ids:
        if mid in present and mid not in seen:
            seed.append(mid)
            seen.add(mid)
    for m in manifests:
        if m.id not in seen:
            seed.append(m.id)
            seen.add(m.id)
    return seed


def topological_sort(graph: Graph, seed: Sequence[str]) -> List[str]:
    rank = {mid: i for i, mid in enumerate(seed)}
    in_deg = {mid: 0 for mid in graph}
    for _, b in edges(graph):
        in_deg[b] += 1

    ready = [(rank[mid], mid) for mid, d in in_deg.items() if d == 0]
    heapq.heapify(ready)
    ordered: List[str] = []
    while ready:
        _, mid = heapq.heappop(ready)
        ordered.append(mid)
        for nxt in graph[mid]:
            in_deg[nxt] -= 1
            if in_deg[nxt] == 0:
                heapq.heappush(ready, (rank[nxt], nxt))

    if len(ordered) < len(graph):
        # edges out of never-emitted vertices; their targets are stuck too
        stuck = {mid for mid, d in in_deg.items() if d > 0}
        remaining = sorted(
            ((a, b) for a, b in edges(graph) if a in stuck),
            key=lambda e: (rank[e[0]], rank[e[1]]),
        )
        involved = sorted(
            {mid for edge in remaining for mid in edge}, key=rank.__getitem__
        )
        raise ResolutionError(
            ErrorKind.CIRCULAR_DEPENDENCY,
            "Cycle in loadBefore/loadAfter: "
            + ", ".join(f"{a}->{b}" for a, b in remaining),
            tuple(involved),
        )
    return ordered


def resolve(
    manifests: Sequence[ModManifest], previous_ids: Sequence[str] = ()
) -> List[ModManifest]:
    """Validate references and return manifests in load order.

    Raises ResolutionError (missing-dependency | circular-dependency); no
    partial order is ever returned.
    """
    validate_references(manifests)
    by_id = {m.id: m for m in manifests}
    graph = build_graph(manifests)
    ordered_ids = topological_sort(graph, seed_order(manifests, previous_ids))
    return [by_id[mid] for mid in ordered_ids]


def find_order_violations(
    manifests: Sequence[ModManifest], ordered_ids: Sequence[str]
) -> List[Tuple[str, str]]:
    """Edges (a, b) that `ordered_ids` places with b at or before a.

    Ids absent from `ordered_ids` are ignored.
    """
    pos = {mid: i for i, mid in enumerate(ordered_ids)}
    pairs = [(m.id, x) for m in manifests for x in m.load_before]
    pairs += [(y, m.id) for m in manifests for y in m.load_after]
    violations: List[Tuple[str, str]] = []
    for a, b in pairs:
        if a not in pos or b not in pos or (a, b) in violations:
            continue
        if pos[a] >= pos[b]:
            violations.append((a, b))
    return violations


__all__ = [
    "validate_references",
    "build_graph",
    "edges",
    "seed_order",
    "topological_sort",
    "resolve",
    "find_order_violations",
]
