"""SQLite repository for document metadata."""
from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from pathlib import Path

from domain.entities import Document
from domain.interfaces import DocumentRepository

_COLUMNS = "id, tenant_id, title, content, source, type, metadata, chunk_ids, created_at, updated_at"


class SqliteDocumentRepository(DocumentRepository):
    """Stores documents in a lightweight SQLite database."""

    def __init__(self, db_path: str | Path = "tenantsearch.db") -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self._db_path)

    def _ensure_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS schema_version (
                    id INTEGER PRIMARY KEY CHECK (id = 1),
                    version INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                """
                INSERT OR IGNORE INTO schema_version (id, version) VALUES (1, 1)
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id TEXT PRIMARY KEY,
                    tenant_id TEXT NOT NULL,
                    title TEXT NOT NULL,
                    content TEXT NOT NULL,
                    source TEXT NOT NULL,
                    type TEXT NOT NULL,
                    metadata TEXT NOT NULL,
                    chunk_ids TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_documents_tenant
                ON documents (tenant_id)
                """
            )

    def add(self, document: Document) -> None:
        with self._connect() as conn:
            conn.execute(
                f"REPLACE INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    document.id,
                    document.tenant_id,
                    document.title,
                    document.content,
                    document.source,
                    document.type,
                    json.dumps(document.metadata),
                    json.dumps(list(document.chunk_ids)),
                    document.created_at.isoformat(),
                    document.updated_at.isoformat(),
                ),
            )

    def get(self, document_id: str) -> Document | None:
        with self._connect() as conn:
            row = conn.execute(
                f"SELECT {_COLUMNS} FROM documents WHERE id = ?",
                (document_id,),
            ).fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    def list_for_tenant(self, tenant_id: str) -> list[Document]:
        with self._connect() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM documents WHERE tenant_id = ? ORDER BY rowid",
                (tenant_id,),
            ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def delete(self, document_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
            return cursor.rowcount > 0

    def delete_by_tenant(self, tenant_id: str) -> list[Document]:
        removed = self.list_for_tenant(tenant_id)
        with self._connect() as conn:
            conn.execute("DELETE FROM documents WHERE tenant_id = ?", (tenant_id,))
        return removed

    def count(self) -> int:
        with self._connect() as conn:
            row = conn.execute("SELECT COUNT(*) FROM documents").fetchone()
        return int(row[0]) if row else 0

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM documents")

    @staticmethod
    def _row_to_document(row: tuple) -> Document:
        return Document(
            id=row[0],
            tenant_id=row[1],
            title=row[2],
            content=row[3],
            source=row[4],
            type=row[5],
            metadata=json.loads(row[6]),
            chunk_ids=tuple(json.loads(row[7])),
            created_at=datetime.fromisoformat(row[8]),
            updated_at=datetime.fromisoformat(row[9]),
        )


__all__ = ["SqliteDocumentRepository"]
