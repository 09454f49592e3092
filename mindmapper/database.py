"""SQLite database layer for MindMapper.

All documents of one installation live in a single database file, one row
per document keyed by document id.
"""

import json
import os
import shutil
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Any

from loguru import logger


def get_data_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get("MINDMAPPER_DATA_DIR")
    if override:
        data_dir = Path(override).expanduser()
    else:
        data_dir = Path.home() / ".local" / "share" / "mindmapper"
    data_dir.mkdir(parents=True, exist_ok=True)
    (data_dir / "exports").mkdir(exist_ok=True)
    return data_dir


def get_db_path() -> Path:
    """Get the database file path."""
    return get_data_dir() / "mindmapper.db"


class Database:
    """Database manager for MindMapper."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path) if db_path else get_db_path()
        self._conn: Optional[sqlite3.Connection] = None
        try:
            self._init_db()
        except sqlite3.DatabaseError as exc:
            if not self.db_path.is_file():
                raise
            self._move_aside(exc)
            self._init_db()

    @property
    def conn(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_db(self):
        """Initialize the database schema."""
        cursor = self.conn.cursor()

        cursor.executescript("""
            -- Documents table: one row per mind map
            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                nodes JSON NOT NULL DEFAULT '[]',
                edges JSON NOT NULL DEFAULT '[]',
                created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
                modified_at DATETIME DEFAULT CURRENT_TIMESTAMP
            );

            -- App settings table
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value JSON
            );
        """)

        self.conn.commit()

    def _move_aside(self, exc: Exception):
        """Keep an unreadable database file for inspection and start fresh."""
        self.close()
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        corrupt_path = self.db_path.with_name(f"{self.db_path.name}.corrupt-{timestamp}")
        logger.warning(f"Database {self.db_path} is unreadable ({exc}); moving it to {corrupt_path}")
        shutil.move(str(self.db_path), str(corrupt_path))

    def close(self):
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None

    # ==================== Document Operations ====================

    def get_document_row(self, document_id: str) -> Optional[sqlite3.Row]:
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM documents WHERE id = ?", (document_id,))
        return cursor.fetchone()

    def get_document_rows(self) -> List[sqlite3.Row]:
        """All document rows in creation order."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM documents ORDER BY rowid")
        return cursor.fetchall()

    def insert_document(self, document_id: str, name: str, nodes: str, edges: str):
        cursor = self.conn.cursor()
        now = datetime.now().isoformat()
        cursor.execute(
            """INSERT INTO documents (id, name, nodes, edges, created_at, modified_at)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (document_id, name, nodes, edges, now, now)
        )
        self.conn.commit()

    def update_document_content(self, document_id: str, nodes: str, edges: str) -> bool:
        """Overwrite a document's nodes/edges; True if anything changed.

        Identical content leaves the row, including ``modified_at``, untouched.
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """UPDATE documents SET nodes = ?, edges = ?, modified_at = ?
               WHERE id = ? AND (nodes != ? OR edges != ?)""",
            (nodes, edges, datetime.now().isoformat(), document_id, nodes, edges)
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def rename_document(self, document_id: str, name: str) -> bool:
        cursor = self.conn.cursor()
        cursor.execute(
            "UPDATE documents SET name = ?, modified_at = ? WHERE id = ?",
            (name, datetime.now().isoformat(), document_id)
        )
        self.conn.commit()
        return cursor.rowcount > 0

    def delete_document(self, document_id: str) -> bool:
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM documents WHERE id = ?", (document_id,))
        self.conn.commit()
        return cursor.rowcount > 0

    # ==================== Settings Operations ====================

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get an application setting."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT value FROM settings WHERE key = ?", (key,))
        row = cursor.fetchone()

        if not row:
            return default

        try:
            return json.loads(row["value"])
        except (json.JSONDecodeError, TypeError):
            return default

    def set_setting(self, key: str, value: Any):
        """Set an application setting."""
        cursor = self.conn.cursor()
        cursor.execute(
            "INSERT OR REPLACE INTO settings (key, value) VALUES (?, ?)",
            (key, json.dumps(value))
        )
        self.conn.commit()

    # ==================== Maintenance ====================

    def integrity_ok(self) -> bool:
        cursor = self.conn.cursor()
        cursor.execute("PRAGMA integrity_check")
        row = cursor.fetchone()
        return bool(row) and str(row[0]).lower() == "ok"

    def counts(self) -> dict:
        cursor = self.conn.cursor()
        out = {}
        for table in ("documents", "settings"):
            cursor.execute(f"SELECT COUNT(*) FROM {table}")
            out[table] = int(cursor.fetchone()[0])
        return out
