"""Domain entities for the TenantSearch system."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

DocumentType = Literal["faq", "manual", "article", "policy", "other"]
DOCUMENT_TYPES: tuple[str, ...] = ("faq", "manual", "article", "policy", "other")

IngestStatus = Literal["success", "failed"]


@dataclass(frozen=True, slots=True)
class Document:
    """A tenant-owned document. Never mutated after ingest."""

    id: str
    tenant_id: str
    title: str
    content: str
    source: str
    type: DocumentType
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)
    chunk_ids: tuple[str, ...] = ()


@dataclass(slots=True)
class DocumentSpec:
    """Raw document as submitted for ingestion."""

    title: str
    content: str
    source: str
    type: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class Chunk:
    """A retrievable piece of a document."""

    id: str
    document_id: str
    tenant_id: str
    content: str
    chunk_index: int
    embedding: list[float] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class EmbeddingVector:
    """Vector produced by an embedding model."""

    values: list[float]
    model: str
    token_count: int = 0

    def __len__(self) -> int:
        return len(self.values)


@dataclass(slots=True)
class SearchResult:
    """A chunk paired with its similarity to the query."""

    chunk: Chunk
    score: float


@dataclass(slots=True)
class KnowledgeBaseResult:
    """Search hit shaped for prompt assembly."""

    content: str
    source: str
    relevance_score: float


@dataclass(slots=True)
class IngestResult:
    """Outcome of ingesting a single document."""

    document_id: str | None
    chunks_created: int
    status: IngestStatus
    error: str | None = None


@dataclass(slots=True)
class VectorIndexStats:
    total_chunks: int
    tenant_count: int
    chunks_by_tenant: dict[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class KnowledgeBaseStats:
    total_documents: int
    vector_store_stats: VectorIndexStats


__all__ = [
    "DOCUMENT_TYPES",
    "Chunk",
    "Document",
    "DocumentSpec",
    "DocumentType",
    "EmbeddingVector",
    "IngestResult",
    "IngestStatus",
    "KnowledgeBaseResult",
    "KnowledgeBaseStats",
    "SearchResult",
    "VectorIndexStats",
]
