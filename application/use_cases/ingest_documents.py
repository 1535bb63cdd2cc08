"""Use case for ingesting tenant documents into the knowledge base."""
from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime, timezone
from typing import Sequence

from domain.entities import Document, DocumentSpec, IngestResult
from domain.interfaces import ChunkSplitter, DocumentRepository, Embedder, VectorIndex
from application.use_cases.validation import validate_documents, validate_tenant_id

logger = logging.getLogger(__name__)


def ingest_documents(
    tenant_id: str,
    documents: Sequence[DocumentSpec],
    *,
    splitter: ChunkSplitter,
    embedder: Embedder,
    vector_index: VectorIndex,
    document_repository: DocumentRepository,
) -> list[IngestResult]:
    """Chunk, embed and index each document independently.

    Malformed input raises ``ValidationError`` before anything is stored.
    After that a failing document is reported in its own result and does
    not affect the others.
    """

    validate_tenant_id(tenant_id)
    validate_documents(documents)

    results: list[IngestResult] = []
    for raw in documents:
        try:
            results.append(
                _ingest_one(
                    tenant_id,
                    raw,
                    splitter=splitter,
                    embedder=embedder,
                    vector_index=vector_index,
                    document_repository=document_repository,
                )
            )
        except Exception as exc:
            logger.exception("Document ingestion failed: %s", raw.title)
            results.append(
                IngestResult(document_id=None, chunks_created=0, status="failed", error=str(exc) or type(exc).__name__)
            )
    return results


def _ingest_one(
    tenant_id: str,
    raw: DocumentSpec,
    *,
    splitter: ChunkSplitter,
    embedder: Embedder,
    vector_index: VectorIndex,
    document_repository: DocumentRepository,
) -> IngestResult:
    now = datetime.now(timezone.utc)
    document = Document(
        id=str(uuid.uuid4()),
        tenant_id=tenant_id,
        title=raw.title,
        content=raw.content,
        source=raw.source,
        type=raw.type,  # type: ignore[arg-type]
        metadata=dict(raw.metadata or {}),
        created_at=now,
        updated_at=now,
    )

    chunks = splitter.split(document)
    embeddings = embedder.embed_batch([chunk.content for chunk in chunks])
    if len(embeddings) != len(chunks):
        raise RuntimeError(f"Expected {len(chunks)} embeddings, got {len(embeddings)}")
    for chunk, embedding in zip(chunks, embeddings):
        chunk.embedding = embedding.values

    vector_index.upsert(chunks)
    document = dataclasses.replace(document, chunk_ids=tuple(chunk.id for chunk in chunks))
    try:
        document_repository.add(document)
    except Exception:
        vector_index.delete(document.chunk_ids)
        raise

    logger.info(
        "Document ingested: id=%s title=%r chunks=%d tenant=%s",
        document.id,
        document.title,
        len(chunks),
        tenant_id,
    )
    return IngestResult(document_id=document.id, chunks_created=len(chunks), status="success")


__all__ = ["ingest_documents"]
