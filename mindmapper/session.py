"""Editing session: the command surface a view layer drives."""

import uuid
from typing import Optional, Callable, Set, Union, List, Tuple

from loguru import logger

from mindmapper.config import EditorSettings
from mindmapper.graph import GraphStore
from mindmapper.layout import column_count, place_child
from mindmapper.models import Node, Edge, Document
from mindmapper.store import DocumentStore, MapCatalog
from mindmapper.tree import descendants, connectivity, visible_graph, Connectivity
from mindmapper.undo import HistoryManager

# Gesture name -> session command
KEY_BINDINGS = {
    "tab": "add_child",
    "delete": "delete_subtree",
    "backspace": "delete_subtree",
    "ctrl+z": "undo",
}


class EditorSession:
    """Applies user commands to the active document.

    Commands run to completion one at a time. Every change is written back
    through the ``DocumentStore`` when autosave is on.
    """

    def __init__(self, store: DocumentStore, catalog: Optional[MapCatalog] = None,
                 settings: Optional[EditorSettings] = None,
                 clock: Optional[Callable[[], float]] = None):
        self.store = store
        self.catalog = catalog
        self.settings = settings or EditorSettings()
        self.graph = GraphStore()
        self.history = HistoryManager(
            max_entries=self.settings.history_limit,
            debounce=self.settings.history_debounce,
            clock=clock,
        )
        self.document_id: Optional[str] = None
        self.selected_id: Optional[str] = None

        # Callbacks
        self.on_notice: Optional[Callable[[str], None]] = None
        self.on_changed: Optional[Callable[[], None]] = None
        self.on_node_selected: Optional[Callable[[Optional[Node]], None]] = None

    # ==================== Documents ====================

    def open_document(self, document_id: str) -> Document:
        """Make a stored document the active one.

        A missing or unreadable document is replaced by a fresh single-node one.
        """
        document = self.store.load(document_id)
        if document is None:
            logger.warning(f"No usable data for map {document_id}, starting a new one")
            document = Document.default(self.settings.default_map_name, self.settings.root_label)
            self.store.save(document_id, document.nodes, document.edges)

        self.document_id = document_id
        self.graph.replace(document.nodes, document.edges)
        self.history.reset(*self.graph.get_snapshot())
        self.select_node(None)
        logger.info(f"Opened map {document_id} with {len(self.graph)} node(s)")
        if self.on_changed:
            self.on_changed()
        return document

    def new_document(self, name: Optional[str] = None) -> str:
        """Create a map through the catalog and open it."""
        if self.catalog is None:
            raise RuntimeError("new_document needs a MapCatalog")
        document = Document.default(name or self.settings.default_map_name,
                                    self.settings.root_label)
        document_id = self.catalog.create(document)
        self.open_document(document_id)
        return document_id

    def close_document(self):
        if self.document_id is not None:
            self.save()
        self.document_id = None
        self.graph.replace([], [])
        self.history.clear()
        self.select_node(None)

    def save(self) -> bool:
        """Write the active document now."""
        if self.document_id is None:
            return False
        self.store.save(self.document_id, *self.graph.get_snapshot())
        return True

    # ==================== Selection ====================

    @property
    def selected_node(self) -> Optional[Node]:
        if self.selected_id is None:
            return None
        return self.graph.get_node(self.selected_id)

    def select_node(self, node: Union[Node, str, None]):
        node_id = node.id if isinstance(node, Node) else node
        if node_id is not None and self.graph.get_node(node_id) is None:
            logger.debug(f"Ignoring selection of unknown node {node_id}")
            node_id = None
        self.selected_id = node_id
        if self.on_node_selected:
            self.on_node_selected(self.selected_node)

    def _require_selection(self, message: str) -> Optional[Node]:
        node = self.selected_node
        if node is None:
            self._notice(message)
        return node

    # ==================== Commands ====================

    def add_child(self) -> Optional[Node]:
        """Add a child under the selected node, one column to the right."""
        parent = self._require_selection("Select a parent node before adding a child")
        if parent is None:
            return None

        # The pre-add state must be on the stack even inside the debounce window
        before = self.graph.get_snapshot()
        self.history.push(*before, checkpoint=not self.history.matches_top(*before))

        siblings = column_count(parent, self.graph.nodes, self.settings.column_offset)
        position = place_child(parent, siblings,
                               self.settings.column_offset, self.settings.row_offset)
        child = Node(id=str(uuid.uuid4()), position=position, label=self.settings.node_label)
        self.graph.add_node(child)
        self.graph.add_edge(Edge(id=str(uuid.uuid4()), source=parent.id, target=child.id))

        self.history.push(*self.graph.get_snapshot(), checkpoint=True)
        logger.debug(f"Added node {child.id} under {parent.id}")
        self._changed()
        return child

    def delete_subtree(self) -> Set[str]:
        """Delete the selected node and everything below it."""
        selected = self._require_selection("Select the node to delete")
        if selected is None:
            return set()

        self.history.push(*self.graph.get_snapshot())

        doomed = descendants(selected.id, self.graph.edges)
        self.graph.remove_nodes(doomed)
        self.graph.remove_edges(lambda e: e.source in doomed or e.target in doomed)
        self.select_node(None)

        logger.debug(f"Deleted {len(doomed)} node(s) under {selected.id}")
        self._changed()
        return doomed

    def rename_node(self, node_id: str, label: str) -> bool:
        """Commit a new label, then record history."""
        node = self.graph.get_node(node_id)
        if node is None:
            self._notice("Select the node to edit")
            return False
        if label is None or label == node.label:
            return False

        self.graph.update_node(node_id, label=label)
        self.history.push(*self.graph.get_snapshot())
        self._changed()
        return True

    def recolor(self, node_id: str, color: str) -> bool:
        """Record history, then change the node's color."""
        node = self.graph.get_node(node_id)
        if node is None:
            self._notice("Select the node to recolor")
            return False

        self.history.push(*self.graph.get_snapshot())
        self.graph.update_node(node_id, color=color)
        self._changed()
        return True

    def toggle_collapse(self, node_id: str) -> bool:
        """Hide or show everything below ``node_id`` as one unit.

        The new state is the negation of the first descendant's current one,
        so a mixed subtree becomes uniform.
        """
        below = descendants(node_id, self.graph.edges) - {node_id}
        members = [n for n in self.graph.nodes if n.id in below]
        if not members:
            return False

        hidden = not members[0].hidden
        for node in members:
            self.graph.update_node(node.id, hidden=hidden)
        self._changed()
        return True

    def undo(self) -> bool:
        entry = self.history.undo()
        if entry is None:
            return False

        self.graph.replace(entry.nodes, entry.edges)
        if self.selected_id is not None and self.graph.get_node(self.selected_id) is None:
            self.select_node(None)
        self._changed()
        return True

    def connect(self, source_id: str, target_id: str) -> Optional[Edge]:
        """Link two existing nodes, then record history."""
        if self.graph.get_node(source_id) is None or self.graph.get_node(target_id) is None:
            self._notice("Both nodes must exist to connect them")
            return None
        if source_id == target_id:
            self._notice("A node cannot be connected to itself")
            return None
        if any(e.source == source_id and e.target == target_id for e in self.graph.edges):
            self._notice("These nodes are already connected")
            return None

        edge = Edge(id=str(uuid.uuid4()), source=source_id, target=target_id)
        self.graph.add_edge(edge)
        self.history.push(*self.graph.get_snapshot())
        self._changed()
        return edge

    def move_node(self, node_id: str, x: float, y: float) -> bool:
        node = self.graph.get_node(node_id)
        if node is None:
            return False
        self.graph.add_node(node.moved_to(x, y))
        self.history.push(*self.graph.get_snapshot())
        self._changed()
        return True

    def handle_key(self, key: str) -> bool:
        """Run the command bound to a key gesture; False if none is bound."""
        command = KEY_BINDINGS.get(key.lower())
        if command is None:
            return False
        getattr(self, command)()
        return True

    # ==================== Rendering feed ====================

    def visible_graph(self) -> Tuple[List[Node], List[Edge]]:
        return visible_graph(self.graph.nodes, self.graph.edges)

    def node_connectivity(self, node_id: str) -> Connectivity:
        return connectivity(node_id, self.graph.edges)

    # ==================== Internals ====================

    def _changed(self):
        if self.settings.autosave:
            self.save()
        if self.on_changed:
            self.on_changed()

    def _notice(self, message: str):
        logger.info(message)
        if self.on_notice:
            self.on_notice(message)
