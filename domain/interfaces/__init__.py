"""Abstract interfaces for the TenantSearch system."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Sequence

from domain.entities import (
    Chunk,
    Document,
    EmbeddingVector,
    SearchResult,
    VectorIndexStats,
)


class ChunkSplitter(ABC):
    """Splits documents into chunks for retrieval."""

    @abstractmethod
    def split(self, document: Document) -> list[Chunk]:
        """Return ordered chunks for the provided document."""


class Embedder(ABC):
    """Turns text (document chunks or queries) into vector embeddings."""

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Return the stable identifier for this embedding model."""

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the embedding dimension for this model."""

    @abstractmethod
    def embed(self, text: str) -> EmbeddingVector:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        """Embed texts, returning one vector per input in input order."""

    def provider_info(self) -> dict[str, object]:
        """Describe the active provider for status reporting."""
        return {"provider": "local", "model": self.model_id, "available": True}


class RemoteEmbeddingClient(ABC):
    """An embedding service the system does not control.

    Implementations raise ``ProviderError`` for every failure mode.
    """

    name: str

    @property
    @abstractmethod
    def model_id(self) -> str:
        """Return the default model used by the client."""

    @abstractmethod
    def embed(self, text: str, model: str | None = None) -> EmbeddingVector:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        """Embed several texts in one call."""


class VectorIndex(ABC):
    """Tenant-partitioned chunk store with similarity search."""

    @abstractmethod
    def upsert(self, chunks: Sequence[Chunk]) -> None:
        """Insert or replace chunks by id."""

    @abstractmethod
    def search(
        self,
        query_vector: Sequence[float],
        tenant_id: str,
        top_k: int,
    ) -> list[SearchResult]:
        """Return the tenant's best matching chunks, best first."""

    @abstractmethod
    def delete(self, ids: Iterable[str]) -> None:
        """Remove chunks by id. Unknown ids are ignored."""

    @abstractmethod
    def delete_by_tenant(self, tenant_id: str) -> int:
        """Remove every chunk owned by a tenant and return how many."""

    @abstractmethod
    def stats(self) -> VectorIndexStats:
        """Return chunk counts overall and per tenant."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every chunk."""


class DocumentRepository(ABC):
    """Persists document metadata."""

    @abstractmethod
    def add(self, document: Document) -> None:
        """Store a document record."""

    @abstractmethod
    def get(self, document_id: str) -> Document | None:
        """Retrieve a document by id."""

    @abstractmethod
    def list_for_tenant(self, tenant_id: str) -> list[Document]:
        """Return all documents owned by a tenant."""

    @abstractmethod
    def delete(self, document_id: str) -> bool:
        """Remove a document. Return whether it existed."""

    @abstractmethod
    def delete_by_tenant(self, tenant_id: str) -> list[Document]:
        """Remove all documents of a tenant and return them."""

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored documents."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every document."""


__all__ = [
    "ChunkSplitter",
    "DocumentRepository",
    "Embedder",
    "RemoteEmbeddingClient",
    "VectorIndex",
]
