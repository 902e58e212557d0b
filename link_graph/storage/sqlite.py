"""SQLite document collection storing one JSON row per document.

Each document is one row holding its JSON body, keyed by the JSON encoding
of its ``_id`` so integer and string ids stay distinct. Documents survive
process restarts when a file path is used.

Usage::

    from link_graph import CollectionGraph
    from link_graph.storage import SQLiteCollection

    links = SQLiteCollection("links.db", table="links")
    graph = CollectionGraph(links, {"id": "_id", "source": "from", "target": "to"})
"""

from __future__ import annotations

import json
import re
import sqlite3
from typing import Any, List

from link_graph.core.models import Document
from link_graph.storage.base import BaseCollection

_TABLE_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteCollection(BaseCollection):
    """Persistent document collection backed by a SQLite table.

    Args:
        db_path: SQLite database file, or ``":memory:"`` (the default) for a
            collection that lives only as long as this object.
        table: Table holding the documents. Several collections can share
            one database file under different table names.

    Raises:
        ValueError: If ``table`` is not a plain SQL identifier.
    """

    def __init__(self, db_path: str = ":memory:", table: str = "documents") -> None:
        super().__init__()
        if not _TABLE_NAME.match(table):
            raise ValueError(f"Invalid table name '{table}'")
        self._table = table
        self._conn = sqlite3.connect(db_path)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._create_table()

    def _create_table(self) -> None:
        # seq keeps insertion order stable across updates.
        self._conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {self._table} (
                seq INTEGER PRIMARY KEY AUTOINCREMENT,
                id TEXT NOT NULL UNIQUE,
                body TEXT NOT NULL
            )
            """
        )
        self._conn.commit()

    def _all_documents(self) -> List[Document]:
        rows = self._conn.execute(
            f"SELECT body FROM {self._table} ORDER BY seq"
        ).fetchall()
        return [json.loads(r["body"]) for r in rows]

    def _store(self, document: Document) -> None:
        try:
            self._conn.execute(
                f"INSERT INTO {self._table} (id, body) VALUES (?, ?)",
                (json.dumps(document["_id"]), json.dumps(document)),
            )
        except sqlite3.IntegrityError as exc:
            raise KeyError(f"Duplicate _id '{document['_id']}'") from exc
        self._conn.commit()

    def _replace(self, document: Document) -> None:
        self._conn.execute(
            f"UPDATE {self._table} SET body = ? WHERE id = ?",
            (json.dumps(document), json.dumps(document["_id"])),
        )
        self._conn.commit()

    def _delete(self, document_id: Any) -> None:
        self._conn.execute(
            f"DELETE FROM {self._table} WHERE id = ?", (json.dumps(document_id),)
        )
        self._conn.commit()

    def __len__(self) -> int:
        row = self._conn.execute(f"SELECT COUNT(*) AS n FROM {self._table}").fetchone()
        return int(row["n"])

    # ── Lifecycle ────────────────────────────────────────────────────

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()
