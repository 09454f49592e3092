"""In-memory node/edge store for the active document."""

from dataclasses import replace
from typing import Optional, List, Tuple, Iterable, Callable

from loguru import logger

from mindmapper.models import Node, Edge, Position


class GraphStore:
    """Owns the active document's nodes and edges.

    Every operation is total: unknown ids are ignored, and nothing here
    checks that the edges form a tree.
    """

    def __init__(self, nodes: Optional[Iterable[Node]] = None,
                 edges: Optional[Iterable[Edge]] = None):
        self._nodes: List[Node] = []
        self._edges: List[Edge] = []
        self.replace(nodes or [], edges or [])

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def nodes(self) -> Tuple[Node, ...]:
        return tuple(self._nodes)

    @property
    def edges(self) -> Tuple[Edge, ...]:
        return tuple(self._edges)

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self._nodes:
            if node.id == node_id:
                return node
        return None

    # ==================== Mutations ====================

    def add_node(self, node: Node):
        """Append a node; a node with the same id is replaced in place."""
        for i, existing in enumerate(self._nodes):
            if existing.id == node.id:
                logger.debug(f"Replacing node {node.id} with a node of the same id")
                self._nodes[i] = node
                return
        self._nodes.append(node)

    def remove_nodes(self, ids: Iterable[str]):
        doomed = set(ids)
        self._nodes = [n for n in self._nodes if n.id not in doomed]

    def add_edge(self, edge: Edge):
        """Append an edge; an edge with the same id is replaced in place."""
        for i, existing in enumerate(self._edges):
            if existing.id == edge.id:
                self._edges[i] = edge
                return
        self._edges.append(edge)

    def remove_edges(self, predicate: Callable[[Edge], bool]):
        self._edges = [e for e in self._edges if not predicate(e)]

    def update_node(self, node_id: str, **patch) -> Optional[Node]:
        """Apply a field patch to one node and return the updated node.

        ``position`` may be given as a ``Position`` or an ``{x, y}`` mapping.
        """
        if "position" in patch and not isinstance(patch["position"], Position):
            patch["position"] = Position.from_dict(patch["position"])
        for i, node in enumerate(self._nodes):
            if node.id == node_id:
                updated = replace(node, **patch)
                self._nodes[i] = updated
                return updated
        return None

    # ==================== Snapshots ====================

    def get_snapshot(self) -> Tuple[Tuple[Node, ...], Tuple[Edge, ...]]:
        return self.nodes, self.edges

    def replace(self, nodes: Iterable[Node], edges: Iterable[Edge]):
        """Swap in a whole new graph, keeping the first of any duplicate ids."""
        self._nodes = []
        self._edges = []
        seen_nodes = set()
        for node in nodes:
            if node.id in seen_nodes:
                logger.warning(f"Dropping duplicate node id {node.id}")
                continue
            seen_nodes.add(node.id)
            self._nodes.append(node)
        seen_edges = set()
        for edge in edges:
            if edge.id in seen_edges:
                logger.warning(f"Dropping duplicate edge id {edge.id}")
                continue
            seen_edges.add(edge.id)
            self._edges.append(edge)
