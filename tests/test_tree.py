"""Tests for tree queries derived from the edge list."""

from mindmapper.models import Node, Edge
from mindmapper.tree import (
    children, descendants, connectivity, roots, visible_set, visible_graph,
)


def _edges(*pairs):
    return [Edge(id=f"e{i}", source=s, target=t) for i, (s, t) in enumerate(pairs)]


class TestDescendants:

    def test_includes_start_node(self):
        assert descendants("1", []) == {"1"}

    def test_follows_edges_transitively(self):
        edges = _edges(("1", "a"), ("1", "b"), ("a", "c"), ("x", "y"))
        assert descendants("1", edges) == {"1", "a", "b", "c"}
        assert descendants("a", edges) == {"a", "c"}

    def test_ignores_edge_direction_upwards(self):
        edges = _edges(("1", "a"), ("a", "c"))
        assert descendants("c", edges) == {"c"}

    def test_terminates_on_cycle_through_start(self):
        edges = _edges(("a", "b"), ("b", "c"), ("c", "a"))
        assert descendants("a", edges) == {"a", "b", "c"}

    def test_terminates_on_self_loop(self):
        assert descendants("a", _edges(("a", "a"))) == {"a"}

    def test_dangling_target_is_reported(self):
        assert descendants("1", _edges(("1", "ghost"))) == {"1", "ghost"}


class TestConnectivity:

    def test_flags(self):
        edges = _edges(("1", "a"), ("a", "b"))
        assert connectivity("1", edges) == (False, True)
        assert connectivity("a", edges) == (True, True)
        assert connectivity("b", edges) == (True, False)
        assert connectivity("lonely", edges).has_incoming is False


def test_children_in_edge_order():
    edges = _edges(("1", "b"), ("1", "a"), ("a", "c"))
    assert children("1", edges) == ["b", "a"]


def test_roots():
    nodes = [Node("1"), Node("a"), Node("loose")]
    assert [n.id for n in roots(nodes, _edges(("1", "a")))] == ["1", "loose"]


class TestVisibility:

    def test_visible_set_skips_hidden(self):
        nodes = [Node("1"), Node("a", hidden=True), Node("b")]
        assert visible_set(nodes) == {"1", "b"}

    def test_edges_need_both_endpoints_visible(self):
        nodes = [Node("1"), Node("a", hidden=True), Node("b")]
        edges = _edges(("1", "a"), ("1", "b"), ("1", "ghost"))
        shown_nodes, shown_edges = visible_graph(nodes, edges)
        assert [n.id for n in shown_nodes] == ["1", "b"]
        assert [(e.source, e.target) for e in shown_edges] == [("1", "b")]
