"""Document persistence and the multi-document catalog."""

import json
import sqlite3
import uuid
from dataclasses import dataclass
from typing import Optional, Dict, Iterable

from loguru import logger

from mindmapper.database import Database
from mindmapper.models import (
    Document, Node, Edge, DEFAULT_MAP_NAME, DEFAULT_ROOT_LABEL,
    nodes_to_json, edges_to_json, nodes_from_json, edges_from_json,
)

# Errors that mean a stored record cannot be decoded
DECODE_ERRORS = (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError)


class DocumentStore:
    """Loads and saves single documents by id."""

    def __init__(self, db: Database, default_name: str = DEFAULT_MAP_NAME):
        self.db = db
        self.default_name = default_name

    def load(self, document_id: str) -> Optional[Document]:
        """Return the stored document, or None if it is missing or corrupt."""
        row = self.db.get_document_row(document_id)
        if row is None:
            return None
        try:
            return Document(
                name=row["name"] or self.default_name,
                nodes=nodes_from_json(row["nodes"]),
                edges=edges_from_json(row["edges"]),
            )
        except DECODE_ERRORS as exc:
            logger.warning(f"Stored document {document_id} is corrupt, ignoring it: {exc}")
            return None

    def save(self, document_id: str, nodes: Iterable[Node], edges: Iterable[Edge]):
        """Overwrite nodes/edges of a document, keeping its name.

        A document that does not exist yet is created under the default name.
        """
        nodes_json = nodes_to_json(list(nodes))
        edges_json = edges_to_json(list(edges))
        if self.db.get_document_row(document_id) is None:
            logger.info(f"Creating document {document_id} on first save")
            self.db.insert_document(document_id, self.default_name, nodes_json, edges_json)
            return
        if self.db.update_document_content(document_id, nodes_json, edges_json):
            logger.debug(f"Saved document {document_id}")

    def put(self, document_id: str, document: Document):
        """Write a whole document, name included."""
        nodes_json = nodes_to_json(document.nodes)
        edges_json = edges_to_json(document.edges)
        if self.db.get_document_row(document_id) is None:
            self.db.insert_document(document_id, document.name, nodes_json, edges_json)
        else:
            self.db.update_document_content(document_id, nodes_json, edges_json)
            self.db.rename_document(document_id, document.name)

    def record(self) -> Dict[str, dict]:
        """The whole store as ``{document_id: {name, nodes, edges}}``.

        Corrupt documents are left out.
        """
        record = {}
        for row in self.db.get_document_rows():
            document = self.load(row["id"])
            if document is not None:
                record[row["id"]] = document.to_dict()
        return record


@dataclass(frozen=True)
class MapSummary:
    """One line of the map list."""
    name: str
    node_count: int


class MapCatalog:
    """Directory of all stored documents."""

    def __init__(self, db: Database, default_name: str = DEFAULT_MAP_NAME,
                 root_label: str = DEFAULT_ROOT_LABEL):
        self.db = db
        self.default_name = default_name
        self.root_label = root_label

    def list(self) -> Dict[str, MapSummary]:
        """Map every document id to its summary, in creation order."""
        try:
            rows = self.db.get_document_rows()
        except sqlite3.DatabaseError as exc:
            logger.warning(f"Could not read the map list, treating it as empty: {exc}")
            return {}

        maps = {}
        for row in rows:
            try:
                node_count = len(json.loads(row["nodes"] or "[]"))
            except DECODE_ERRORS:
                node_count = 0
            maps[row["id"]] = MapSummary(name=row["name"] or self.default_name,
                                         node_count=node_count)
        return maps

    def get(self, document_id: str) -> Optional[MapSummary]:
        return self.list().get(document_id)

    def create(self, initial_document: Optional[Document] = None) -> str:
        """Store a new document under a fresh id and return the id."""
        document = initial_document or Document.default(self.default_name, self.root_label)
        document_id = str(uuid.uuid4())
        self.db.insert_document(
            document_id, document.name,
            nodes_to_json(document.nodes), edges_to_json(document.edges)
        )
        logger.info(f"Created map {document_id} ({document.name!r})")
        return document_id

    def rename(self, document_id: str, new_name: str) -> bool:
        """Rename a map. An empty or unchanged name is ignored."""
        current = self.db.get_document_row(document_id)
        if current is None or not new_name or new_name == current["name"]:
            return False
        self.db.rename_document(document_id, new_name)
        logger.info(f"Renamed map {document_id} to {new_name!r}")
        return True

    def delete(self, document_id: str) -> bool:
        """Remove a map. Callers are responsible for asking the user first."""
        deleted = self.db.delete_document(document_id)
        if deleted:
            logger.info(f"Deleted map {document_id}")
        return deleted
