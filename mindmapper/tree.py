"""Tree queries derived from the edge list.

Parent/child structure is never stored on nodes; everything here is
recomputed from ``edges`` on each call. Traversals keep a visited set, so
cycles and dangling endpoints are tolerated.
"""

from typing import NamedTuple, Iterable, List, Set, Tuple

from mindmapper.models import Node, Edge


class Connectivity(NamedTuple):
    has_incoming: bool
    has_outgoing: bool


def children(node_id: str, edges: Iterable[Edge]) -> List[str]:
    """Direct targets of ``node_id``, in edge order."""
    return [e.target for e in edges if e.source == node_id]


def descendants(parent_id: str, edges: Iterable[Edge]) -> Set[str]:
    """All ids reachable from ``parent_id``, including ``parent_id`` itself."""
    adjacency = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)

    visited = {parent_id}
    worklist = [parent_id]
    while worklist:
        current = worklist.pop()
        for target in adjacency.get(current, ()):
            if target not in visited:
                visited.add(target)
                worklist.append(target)
    return visited


def connectivity(node_id: str, edges: Iterable[Edge]) -> Connectivity:
    has_incoming = False
    has_outgoing = False
    for edge in edges:
        if edge.target == node_id:
            has_incoming = True
        if edge.source == node_id:
            has_outgoing = True
    return Connectivity(has_incoming, has_outgoing)


def roots(nodes: Iterable[Node], edges: Iterable[Edge]) -> List[Node]:
    """Nodes with no incoming edge, in document order."""
    targets = {e.target for e in edges}
    return [n for n in nodes if n.id not in targets]


def visible_set(nodes: Iterable[Node]) -> Set[str]:
    return {n.id for n in nodes if not n.hidden}


def visible_graph(nodes: Iterable[Node],
                  edges: Iterable[Edge]) -> Tuple[List[Node], List[Edge]]:
    """Nodes and edges a renderer should draw.

    An edge is visible only when both endpoints exist and are visible.
    """
    nodes = list(nodes)
    shown = visible_set(nodes)
    return (
        [n for n in nodes if n.id in shown],
        [e for e in edges if e.source in shown and e.target in shown],
    )
