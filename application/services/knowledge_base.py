"""Knowledge base service: the entry point used by the HTTP and chat layers."""
from __future__ import annotations

import logging
from typing import Sequence

from domain.entities import Document, DocumentSpec, IngestResult, KnowledgeBaseResult, KnowledgeBaseStats
from domain.interfaces import ChunkSplitter, DocumentRepository, Embedder, VectorIndex
from application.use_cases.ingest_documents import ingest_documents
from application.use_cases.search import DEFAULT_MIN_SCORE, DEFAULT_TOP_K, search
from application.use_cases.validation import validate_tenant_id

logger = logging.getLogger(__name__)


class KnowledgeBase:
    """Owns document metadata and drives chunk -> embed -> index -> search.

    Construct one per process and hand it to whatever serves requests;
    ``clear`` resets both stores.
    """

    def __init__(
        self,
        *,
        splitter: ChunkSplitter,
        embedder: Embedder,
        vector_index: VectorIndex,
        document_repository: DocumentRepository,
    ) -> None:
        self.splitter = splitter
        self.embedder = embedder
        self.vector_index = vector_index
        self.document_repository = document_repository
        logger.info("KnowledgeBase initialized with embedder %s", embedder.model_id)

    def ingest(self, tenant_id: str, documents: Sequence[DocumentSpec]) -> list[IngestResult]:
        return ingest_documents(
            tenant_id,
            documents,
            splitter=self.splitter,
            embedder=self.embedder,
            vector_index=self.vector_index,
            document_repository=self.document_repository,
        )

    def search(
        self,
        query: str,
        tenant_id: str,
        top_k: int = DEFAULT_TOP_K,
        min_score: float = DEFAULT_MIN_SCORE,
    ) -> list[KnowledgeBaseResult]:
        return search(
            query,
            tenant_id,
            embedder=self.embedder,
            vector_index=self.vector_index,
            top_k=top_k,
            min_score=min_score,
        )

    def get_documents(self, tenant_id: str) -> list[Document]:
        validate_tenant_id(tenant_id)
        return self.document_repository.list_for_tenant(tenant_id)

    def delete_document(self, document_id: str, tenant_id: str) -> bool:
        """Delete a document and its chunks if ``tenant_id`` owns it."""
        document = self.document_repository.get(document_id)
        if document is None or document.tenant_id != tenant_id:
            return False
        self.vector_index.delete(document.chunk_ids)
        self.document_repository.delete(document_id)
        logger.info("Document deleted: id=%s tenant=%s chunks=%d", document_id, tenant_id, len(document.chunk_ids))
        return True

    def delete_all_for_tenant(self, tenant_id: str) -> int:
        """Remove every document and chunk of a tenant; return the document count."""
        validate_tenant_id(tenant_id)
        removed = self.document_repository.delete_by_tenant(tenant_id)
        self.vector_index.delete_by_tenant(tenant_id)
        logger.info("All documents deleted for tenant %s: %d", tenant_id, len(removed))
        return len(removed)

    def get_stats(self) -> KnowledgeBaseStats:
        return KnowledgeBaseStats(
            total_documents=self.document_repository.count(),
            vector_store_stats=self.vector_index.stats(),
        )

    def clear(self) -> None:
        self.document_repository.clear()
        self.vector_index.clear()


__all__ = ["KnowledgeBase"]
