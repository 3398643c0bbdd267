#!/usr/bin/env python3

import pytest

from benchmine.errors import CycleError, DuplicateNodeError, SelfLoopError, UnknownNodeError
from benchmine.graph import DependencyGraph
from benchmine.symbols import SymbolKey


def k(name: str) -> SymbolKey:
    return SymbolKey(usr=f"c:@F@{name}", name=name)


@pytest.fixture
def graph():
    return DependencyGraph()


def test_add_node_rejects_duplicates(graph):
    assert graph.add_node(k("a")) == 0
    assert graph.add_node(k("b")) == 1
    with pytest.raises(DuplicateNodeError):
        graph.add_node(k("a"))
    assert graph.node_count == 2


def test_add_edge_rejects_self_loop(graph):
    graph.add_node(k("a"))
    with pytest.raises(SelfLoopError):
        graph.add_edge(k("a"), k("a"))
    assert graph.edge_count == 0


def test_add_edge_requires_known_nodes(graph):
    graph.add_node(k("a"))
    with pytest.raises(UnknownNodeError):
        graph.add_edge(k("a"), k("missing"))


def test_repeated_edge_is_stored_once(graph):
    graph.add_node(k("a"))
    graph.add_node(k("b"))
    graph.add_edge(k("a"), k("b"))
    graph.add_edge(k("a"), k("b"))
    assert graph.edge_count == 1
    assert graph.successors(k("a")) == [k("b")]
    assert list(graph.edges()) == [(k("a"), k("b"))]


def test_toposort_respects_edges(graph):
    # main -> (stack_push, Stack), stack_push -> (Node, Stack), Node -> node_t
    for name in ["main", "stack_push", "Stack", "Node", "node_t"]:
        graph.add_node(k(name))
    edges = [
        ("main", "stack_push"),
        ("main", "Stack"),
        ("stack_push", "Node"),
        ("stack_push", "Stack"),
        ("Node", "node_t"),
    ]
    for a, b in edges:
        graph.add_edge(k(a), k(b))

    order = graph.toposort()
    assert len(order) == 5
    position = {key: i for i, key in enumerate(order)}
    for a, b in edges:
        assert position[k(a)] < position[k(b)]


def test_toposort_of_empty_graph(graph):
    assert graph.toposort() == []


def test_cycle_detected(graph):
    for name in ["root", "even", "odd"]:
        graph.add_node(k(name))
    graph.add_edge(k("root"), k("even"))
    graph.add_edge(k("even"), k("odd"))
    graph.add_edge(k("odd"), k("even"))

    with pytest.raises(CycleError) as exc_info:
        graph.toposort()
    assert set(exc_info.value.remaining) == {k("even"), k("odd")}
