"""Vector index persisted in SQLite with brute-force search."""
from __future__ import annotations

import json
import logging
import sqlite3
import uuid
from pathlib import Path
from typing import Iterable, Sequence

from domain.entities import Chunk, SearchResult, VectorIndexStats
from domain.interfaces import VectorIndex
from domain.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class SqliteVectorIndex(VectorIndex):
    """Stores chunks and their vectors in SQLite, keyed by tenant."""

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
                CREATE TABLE IF NOT EXISTS chunks (
                    id TEXT PRIMARY KEY,
                    tenant_id TEXT NOT NULL,
                    document_id TEXT NOT NULL,
                    chunk_index INTEGER NOT NULL,
                    content TEXT NOT NULL,
                    embedding TEXT,
                    metadata TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE INDEX IF NOT EXISTS idx_chunks_tenant
                ON chunks (tenant_id)
                """
            )

    def upsert(self, chunks: Sequence[Chunk]) -> None:
        if not chunks:
            return
        for chunk in chunks:
            if not chunk.id:
                chunk.id = str(uuid.uuid4())
        # One transaction per batch: readers see all of it or none of it.
        with self._connect() as conn:
            conn.executemany(
                """
                INSERT OR REPLACE INTO chunks (
                    id, tenant_id, document_id, chunk_index, content, embedding, metadata
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                [
                    (
                        chunk.id,
                        chunk.tenant_id,
                        chunk.document_id,
                        chunk.chunk_index,
                        chunk.content,
                        json.dumps(chunk.embedding) if chunk.embedding is not None else None,
                        json.dumps(chunk.metadata),
                    )
                    for chunk in chunks
                ],
            )
        logger.debug("Upserted %d chunks into %s", len(chunks), self._db_path)

    def search(
        self,
        query_vector: Sequence[float],
        tenant_id: str,
        top_k: int,
    ) -> list[SearchResult]:
        if top_k <= 0:
            return []
        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT id, tenant_id, document_id, chunk_index, content, embedding, metadata
                FROM chunks
                WHERE tenant_id = ? AND embedding IS NOT NULL
                ORDER BY rowid
                """,
                (tenant_id,),
            ).fetchall()
        if not rows:
            return []

        results: list[SearchResult] = []
        for row in rows:
            vector = json.loads(row[5])
            results.append(SearchResult(chunk=self._row_to_chunk(row), score=cosine_similarity(query_vector, vector)))
        results.sort(key=lambda result: result.score, reverse=True)
        return results[:top_k]

    def delete(self, ids: Iterable[str]) -> None:
        id_list = list(ids)
        if not id_list:
            return
        with self._connect() as conn:
            conn.executemany("DELETE FROM chunks WHERE id = ?", [(chunk_id,) for chunk_id in id_list])

    def delete_by_tenant(self, tenant_id: str) -> int:
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM chunks WHERE tenant_id = ?", (tenant_id,))
            deleted = cursor.rowcount
        logger.info("Deleted all chunks for tenant %s: %d", tenant_id, deleted)
        return deleted

    def stats(self) -> VectorIndexStats:
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT tenant_id, COUNT(*) FROM chunks GROUP BY tenant_id"
            ).fetchall()
        chunks_by_tenant = {tenant_id: int(count) for tenant_id, count in rows}
        return VectorIndexStats(
            total_chunks=sum(chunks_by_tenant.values()),
            tenant_count=len(chunks_by_tenant),
            chunks_by_tenant=chunks_by_tenant,
        )

    def clear(self) -> None:
        with self._connect() as conn:
            conn.execute("DELETE FROM chunks")

    @staticmethod
    def _row_to_chunk(row: tuple) -> Chunk:
        return Chunk(
            id=row[0],
            tenant_id=row[1],
            document_id=row[2],
            chunk_index=int(row[3]),
            content=row[4],
            embedding=json.loads(row[5]) if row[5] is not None else None,
            metadata=json.loads(row[6]),
        )


__all__ = ["SqliteVectorIndex"]
