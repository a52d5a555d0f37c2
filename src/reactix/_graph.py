"""Dependency graph: producer id -> dependent node ids.

The graph is derived data. Each node's edges are rebuilt from its lastDeps
after every evaluation, so dependencies are dynamic: a branch not taken
this time is not a dependency until it is taken again.
"""

from __future__ import annotations

from typing import Iterable


class DependencyGraph:
    """Edges between producers (Values, Calcs) and their dependents."""

    __slots__ = ("_edges", "_sources")

    def __init__(self) -> None:
        # producer id -> ids of nodes that read it during their last evaluation
        self._edges: dict[int, set[int]] = {}
        # node id -> producer ids it read during its last evaluation (lastDeps)
        self._sources: dict[int, frozenset[int]] = {}

    def replace(self, node_id: int, producer_ids: Iterable[int]) -> None:
        """Swap node_id's dependencies for producer_ids."""
        new = frozenset(producer_ids)
        old = self._sources.get(node_id, frozenset())
        for producer_id in old - new:
            dependents = self._edges.get(producer_id)
            if dependents is not None:
                dependents.discard(node_id)
                if not dependents:
                    del self._edges[producer_id]
        for producer_id in new - old:
            self._edges.setdefault(producer_id, set()).add(node_id)
        if new:
            self._sources[node_id] = new
        else:
            self._sources.pop(node_id, None)

    def dependents(self, producer_id: int) -> list[int]:
        """Ids of nodes depending on producer_id, in declaration order."""
        return sorted(self._edges.get(producer_id, ()))

    def sources(self, node_id: int) -> frozenset[int]:
        return self._sources.get(node_id, frozenset())

    def forget(self, node_id: int) -> None:
        """Drop node_id both as a dependent and as a producer."""
        self.replace(node_id, ())
        for dependent_id in self._edges.pop(node_id, ()):
            sources = self._sources.get(dependent_id)
            if sources is not None:
                remaining = sources - {node_id}
                if remaining:
                    self._sources[dependent_id] = remaining
                else:
                    del self._sources[dependent_id]

    def is_consistent(self) -> bool:
        """Edges equal the union of every node's lastDeps, inverted."""
        rebuilt: dict[int, set[int]] = {}
        for node_id, sources in self._sources.items():
            for producer_id in sources:
                rebuilt.setdefault(producer_id, set()).add(node_id)
        return rebuilt == self._edges

    def __len__(self) -> int:
        return sum(len(d) for d in self._edges.values())

    def __repr__(self) -> str:
        return f"DependencyGraph({len(self._sources)} nodes, {len(self)} edges)"
