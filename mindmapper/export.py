"""Export and import of MindMapper data."""

import json
from pathlib import Path
from typing import Tuple, List, Set, Dict

from loguru import logger

from mindmapper.database import get_data_dir
from mindmapper.models import Document, Node
from mindmapper.store import DocumentStore, DECODE_ERRORS
from mindmapper.tree import roots, children


class MindMapExporter:
    """Handles exporting the store and single maps to files."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def export_json(self, filepath: str) -> int:
        """Write every map as ``{id: {name, nodes, edges}}``; returns the map count."""
        record = self.store.record()
        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(record, f, ensure_ascii=False, indent=2)
        logger.info(f"Exported {len(record)} map(s) to {filepath}")
        return len(record)

    def import_json(self, filepath: str, overwrite: bool = False) -> Tuple[int, int]:
        """Load maps from a file in the export layout.

        Existing ids are kept unless ``overwrite`` is set; entries that do not
        decode are skipped. Returns ``(imported, skipped)``.
        """
        with open(filepath, encoding='utf-8') as f:
            try:
                record = json.load(f)
            except json.JSONDecodeError as exc:
                logger.warning(f"{filepath} is not valid JSON: {exc}")
                return 0, 0

        if not isinstance(record, dict):
            logger.warning(f"{filepath} does not hold a map record")
            return 0, 0

        imported = skipped = 0
        for document_id, data in record.items():
            if not overwrite and self.store.db.get_document_row(document_id) is not None:
                skipped += 1
                continue
            try:
                document = Document.from_dict(data)
            except DECODE_ERRORS as exc:
                logger.warning(f"Skipping map {document_id}: {exc}")
                skipped += 1
                continue
            self.store.put(document_id, document)
            imported += 1

        logger.info(f"Imported {imported} map(s), skipped {skipped}")
        return imported, skipped

    def export_markdown(self, document: Document, filepath: str) -> bool:
        """Export a map as a Markdown outline."""
        if not document.nodes:
            return False

        by_id: Dict[str, Node] = {n.id: n for n in document.nodes}
        top = roots(document.nodes, document.edges) or [document.nodes[0]]
        visited: Set[str] = set()

        lines: List[str] = []

        # Frontmatter
        lines.append("---")
        lines.append(f"title: {document.name}")
        lines.append("---")
        lines.append("")

        def add_line(node: Node, depth: int):
            if depth == 0:
                lines.append(f"# {node.label}")
                lines.append("")
            elif depth == 1:
                lines.append(f"## {node.label}")
            elif depth == 2:
                lines.append(f"### {node.label}")
            else:
                indent = "  " * (depth - 3)
                lines.append(f"{indent}- {node.label}")

        # Pre-order walk with an explicit stack; children pushed in reverse keep edge order
        stack: List[Tuple[Node, int]] = [(root, 0) for root in reversed(top)]
        while stack:
            node, depth = stack.pop()
            if node.id in visited:
                continue
            visited.add(node.id)
            add_line(node, depth)
            for child_id in reversed(children(node.id, document.edges)):
                child = by_id.get(child_id)
                if child is not None and child.id not in visited:
                    stack.append((child, depth + 1))

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("\n".join(lines) + "\n")

        return True


def get_export_dir() -> Path:
    """Get the default export directory."""
    export_dir = get_data_dir() / "exports"
    export_dir.mkdir(exist_ok=True)
    return export_dir
