"""Tests for the in-memory graph store and the document model."""

import pytest

from mindmapper.graph import GraphStore
from mindmapper.models import Node, Edge, Position, Document, DEFAULT_COLOR


@pytest.fixture
def graph():
    return GraphStore(
        [Node("1", label="Root"), Node("a", label="A")],
        [Edge("e1", "1", "a")],
    )


class TestGraphStore:

    def test_add_node_replaces_same_id(self, graph):
        graph.add_node(Node("a", label="Renamed"))
        assert [n.id for n in graph.nodes] == ["1", "a"]
        assert graph.get_node("a").label == "Renamed"

    def test_remove_unknown_ids_is_noop(self, graph):
        graph.remove_nodes({"nope"})
        assert len(graph) == 2

    def test_remove_edges_by_predicate(self, graph):
        graph.add_edge(Edge("e2", "a", "1"))
        graph.remove_edges(lambda e: e.source == "a")
        assert [e.id for e in graph.edges] == ["e1"]

    def test_update_node_patch(self, graph):
        updated = graph.update_node("a", color="#f00", hidden=True)
        assert updated.color == "#f00"
        assert graph.get_node("a").hidden is True
        assert graph.get_node("a").label == "A"

    def test_update_position_from_mapping(self, graph):
        graph.update_node("a", position={"x": 5, "y": 6})
        assert graph.get_node("a").position == Position(5, 6)

    def test_update_unknown_node(self, graph):
        assert graph.update_node("nope", label="x") is None

    def test_snapshot_is_detached(self, graph):
        nodes, edges = graph.get_snapshot()
        graph.remove_nodes({"a"})
        graph.remove_edges(lambda e: True)
        assert len(nodes) == 2
        assert len(edges) == 1

    def test_replace_keeps_first_duplicate(self, graph):
        graph.replace([Node("x", label="first"), Node("x", label="second")],
                      [Edge("e", "x", "x"), Edge("e", "x", "y")])
        assert [n.label for n in graph.nodes] == ["first"]
        assert [e.target for e in graph.edges] == ["x"]


class TestModels:

    def test_node_defaults(self):
        node = Node("1")
        assert node.color == DEFAULT_COLOR == "#333"
        assert node.hidden is False

    def test_node_dict_layout(self):
        node = Node("1", position=Position(1, 2), label="Root")
        assert node.to_dict() == {
            "id": "1",
            "position": {"x": 1, "y": 2},
            "label": "Root",
            "color": "#333",
            "hidden": False,
        }

    def test_node_from_browser_dump(self):
        node = Node.from_dict({"id": 7, "position": {"x": 250, "y": 0},
                               "data": {"label": "Legacy"}, "type": "custom"})
        assert node.id == "7"
        assert node.label == "Legacy"
        assert node.position == Position(250.0, 0.0)

    def test_document_from_dict_tolerates_missing_edges(self):
        document = Document.from_dict({"name": "M", "nodes": [{"id": "1"}]})
        assert document.edges == []
        assert document.nodes[0].label == ""

    def test_document_from_dict_rejects_non_mapping(self):
        with pytest.raises(TypeError):
            Document.from_dict(["not", "a", "map"])

    def test_default_document(self):
        document = Document.default()
        assert document.name == "New Map"
        assert [n.id for n in document.nodes] == ["1"]
        assert document.nodes[0].position == Position(250, 0)
        assert document.edges == []
