#!/usr/bin/env python3

"""Directed dependency graph over symbol identities."""

from collections import deque
from collections.abc import Iterator

from benchmine.errors import CycleError, DuplicateNodeError, SelfLoopError, UnknownNodeError
from benchmine.symbols import SymbolKey


class DependencyGraph:
    """
    Nodes are symbol identities, an edge ``a -> b`` means ``a`` depends on ``b``.

    Nodes live in an arena and edges are stored as indices into it, so mutually
    referring declarations never turn into reference cycles between objects.
    """

    def __init__(self):
        self._nodes: list[SymbolKey] = []
        self._indices: dict[SymbolKey, int] = {}
        self._successors: list[dict[int, None]] = []

    def __contains__(self, key: SymbolKey) -> bool:
        return key in self._indices

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[SymbolKey]:
        return iter(self._nodes)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    @property
    def edge_count(self) -> int:
        return sum(len(succ) for succ in self._successors)

    def index_of(self, key: SymbolKey) -> int:
        try:
            return self._indices[key]
        except KeyError:
            raise UnknownNodeError(f"Node {key} not found") from None

    def add_node(self, key: SymbolKey) -> int:
        if key in self._indices:
            raise DuplicateNodeError(f"Node {key} already exists")
        idx = len(self._nodes)
        self._nodes.append(key)
        self._indices[key] = idx
        self._successors.append({})
        return idx

    def add_edge(self, source: SymbolKey, target: SymbolKey) -> None:
        if source == target:
            raise SelfLoopError(f"Cannot add self-loop edge on {source}")
        source_idx = self.index_of(source)
        target_idx = self.index_of(target)
        self._successors[source_idx][target_idx] = None

    def successors(self, key: SymbolKey) -> list[SymbolKey]:
        return [self._nodes[i] for i in self._successors[self.index_of(key)]]

    def edges(self) -> Iterator[tuple[SymbolKey, SymbolKey]]:
        for source_idx, succ in enumerate(self._successors):
            for target_idx in succ:
                yield self._nodes[source_idx], self._nodes[target_idx]

    def toposort(self) -> list[SymbolKey]:
        """Order nodes so every edge points forward; raise CycleError otherwise."""
        in_degree = [0] * len(self._nodes)
        for succ in self._successors:
            for target_idx in succ:
                in_degree[target_idx] += 1

        queue: deque[int] = deque(i for i, degree in enumerate(in_degree) if degree == 0)
        order: list[int] = []
        while queue:
            current = queue.popleft()
            order.append(current)
            for neighbor in self._successors[current]:
                in_degree[neighbor] -= 1
                if in_degree[neighbor] == 0:
                    queue.append(neighbor)

        if len(order) != len(self._nodes):
            remaining = [self._nodes[i] for i, degree in enumerate(in_degree) if degree > 0]
            raise CycleError(remaining)

        return [self._nodes[i] for i in order]
