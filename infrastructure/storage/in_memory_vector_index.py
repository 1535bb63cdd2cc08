"""In-memory, tenant-partitioned vector index."""
from __future__ import annotations

import logging
import threading
import uuid
from typing import Iterable, Sequence

from domain.entities import Chunk, SearchResult, VectorIndexStats
from domain.interfaces import VectorIndex
from domain.similarity import cosine_similarity

logger = logging.getLogger(__name__)


class InMemoryVectorIndex(VectorIndex):
    """Keeps chunks in dicts and scores a tenant's chunks by brute force.

    ``_tenant_index`` maps each tenant to its chunk ids in insertion order,
    so searches and purges never touch other tenants' chunks.
    """

    def __init__(self) -> None:
        self._chunks: dict[str, Chunk] = {}
        self._tenant_index: dict[str, dict[str, None]] = {}
        self._lock = threading.RLock()

    def upsert(self, chunks: Sequence[Chunk]) -> None:
        with self._lock:
            for chunk in chunks:
                if not chunk.id:
                    chunk.id = str(uuid.uuid4())
                previous = self._chunks.get(chunk.id)
                if previous is not None and previous.tenant_id != chunk.tenant_id:
                    self._forget(previous)
                self._chunks[chunk.id] = chunk
                self._tenant_index.setdefault(chunk.tenant_id, {})[chunk.id] = None
        logger.debug(
            "Upserted %d chunks for tenants %s",
            len(chunks),
            sorted({chunk.tenant_id for chunk in chunks}),
        )

    def search(
        self,
        query_vector: Sequence[float],
        tenant_id: str,
        top_k: int,
    ) -> list[SearchResult]:
        with self._lock:
            ids = self._tenant_index.get(tenant_id)
            candidates = [self._chunks[chunk_id] for chunk_id in ids] if ids else []
        if not candidates or top_k <= 0:
            logger.debug("No chunks to search for tenant %s", tenant_id)
            return []

        results = [
            SearchResult(chunk=chunk, score=cosine_similarity(query_vector, chunk.embedding))
            for chunk in candidates
            if chunk.embedding is not None
        ]
        results.sort(key=lambda result: result.score, reverse=True)
        top = results[:top_k]
        logger.debug(
            "Vector search for tenant %s: %d chunks, %d returned, top score %.4f",
            tenant_id,
            len(candidates),
            len(top),
            top[0].score if top else 0.0,
        )
        return top

    def delete(self, ids: Iterable[str]) -> None:
        removed = 0
        with self._lock:
            for chunk_id in ids:
                chunk = self._chunks.pop(chunk_id, None)
                if chunk is None:
                    continue
                self._forget(chunk)
                removed += 1
        logger.debug("Deleted %d chunks", removed)

    def delete_by_tenant(self, tenant_id: str) -> int:
        with self._lock:
            ids = self._tenant_index.pop(tenant_id, None)
            if not ids:
                return 0
            for chunk_id in ids:
                self._chunks.pop(chunk_id, None)
        logger.info("Deleted all chunks for tenant %s: %d", tenant_id, len(ids))
        return len(ids)

    def stats(self) -> VectorIndexStats:
        with self._lock:
            return VectorIndexStats(
                total_chunks=len(self._chunks),
                tenant_count=len(self._tenant_index),
                chunks_by_tenant={tenant: len(ids) for tenant, ids in self._tenant_index.items()},
            )

    def clear(self) -> None:
        with self._lock:
            self._chunks.clear()
            self._tenant_index.clear()
        logger.info("Vector index cleared")

    def _forget(self, chunk: Chunk) -> None:
        members = self._tenant_index.get(chunk.tenant_id)
        if members is None:
            return
        members.pop(chunk.id, None)
        if not members:
            del self._tenant_index[chunk.tenant_id]


__all__ = ["InMemoryVectorIndex"]
