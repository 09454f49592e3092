"""Document model for MindMapper: nodes, edges and named documents."""

import json
from dataclasses import dataclass, field, asdict, replace
from typing import Optional, List, Dict, Any

DEFAULT_COLOR = "#333"
DEFAULT_MAP_NAME = "New Map"
DEFAULT_ROOT_LABEL = "New Mind Map"
ROOT_NODE_ID = "1"


@dataclass(frozen=True)
class Position:
    """Canvas coordinates of a node."""
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Position":
        if not data:
            return cls()
        return cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))


@dataclass(frozen=True)
class Node:
    """A labeled node. Parent/child links are never stored here, see tree.py."""
    id: str
    position: Position = field(default_factory=Position)
    label: str = ""
    color: str = DEFAULT_COLOR
    hidden: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Node":
        label = data.get("label")
        if label is None:
            # Older browser dumps kept the label under "data"
            label = (data.get("data") or {}).get("label", "")
        return cls(
            id=str(data["id"]),
            position=Position.from_dict(data.get("position")),
            label=str(label),
            color=data.get("color") or DEFAULT_COLOR,
            hidden=bool(data.get("hidden", False)),
        )

    def moved_to(self, x: float, y: float) -> "Node":
        return replace(self, position=Position(float(x), float(y)))


@dataclass(frozen=True)
class Edge:
    """A directed parent -> child link."""
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target}

    @classmethod
    def from_dict(cls, data: dict) -> "Edge":
        return cls(id=str(data["id"]), source=str(data["source"]), target=str(data["target"]))

    def touches(self, node_id: str) -> bool:
        return self.source == node_id or self.target == node_id


@dataclass
class Document:
    """A named mind map."""
    name: str = DEFAULT_MAP_NAME
    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Document":
        """Build a document from its persisted form.

        Raises ``KeyError``/``TypeError``/``ValueError`` on malformed input;
        callers at the storage boundary turn those into "no data".
        """
        if not isinstance(data, dict):
            raise TypeError(f"expected a mapping, got {type(data).__name__}")
        return cls(
            name=str(data.get("name") or DEFAULT_MAP_NAME),
            nodes=[Node.from_dict(n) for n in data.get("nodes") or []],
            edges=[Edge.from_dict(e) for e in data.get("edges") or []],
        )

    @classmethod
    def default(cls, name: str = DEFAULT_MAP_NAME,
                root_label: str = DEFAULT_ROOT_LABEL) -> "Document":
        """A fresh document holding a single root node."""
        root = Node(id=ROOT_NODE_ID, position=Position(250.0, 0.0), label=root_label)
        return cls(name=name, nodes=[root], edges=[])


def nodes_to_json(nodes: List[Node]) -> str:
    return json.dumps([n.to_dict() for n in nodes], ensure_ascii=False, separators=(",", ":"))


def edges_to_json(edges: List[Edge]) -> str:
    return json.dumps([e.to_dict() for e in edges], ensure_ascii=False, separators=(",", ":"))


def nodes_from_json(data: Optional[str]) -> List[Node]:
    if not data:
        return []
    return [Node.from_dict(n) for n in json.loads(data)]


def edges_from_json(data: Optional[str]) -> List[Edge]:
    if not data:
        return []
    return [Edge.from_dict(e) for e in json.loads(data)]
