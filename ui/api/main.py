"""FastAPI layer that exposes the knowledge base operations.

Run with ``uvicorn ui.api.main:create_app --factory``.
"""
from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from domain.entities import Document, DocumentSpec
from domain.errors import ValidationError
from infrastructure.config import Container, ContainerConfig, build_default_container
from ui.logging_utils import setup_logging

logger = logging.getLogger(__name__)


class DocumentPayload(BaseModel):
    title: str = ""
    content: str = ""
    source: str = ""
    type: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)


class IngestRequest(BaseModel):
    tenantId: str = ""
    documents: list[DocumentPayload] = Field(default_factory=list)


class IngestResultPayload(BaseModel):
    documentId: str | None
    chunksCreated: int
    status: Literal["success", "failed"]
    error: str | None = None


class IngestResponse(BaseModel):
    message: str
    results: list[IngestResultPayload]


class SearchRequest(BaseModel):
    query: str = ""
    tenantId: str = ""
    topK: int = 3
    minScore: float = 0.5


class SearchResultPayload(BaseModel):
    content: str
    source: str
    relevanceScore: float


class SearchResponse(BaseModel):
    results: list[SearchResultPayload]
    count: int


def _document_payload(document: Document) -> dict[str, Any]:
    return {
        "id": document.id,
        "tenantId": document.tenant_id,
        "title": document.title,
        "content": document.content,
        "source": document.source,
        "type": document.type,
        "metadata": document.metadata,
        "createdAt": document.created_at.isoformat(),
        "updatedAt": document.updated_at.isoformat(),
    }


def build_router(container: Container) -> APIRouter:
    knowledge_base = container.knowledge_base
    router = APIRouter(prefix="/api/v1/knowledge")

    @router.post("/ingest", response_model=IngestResponse)
    def ingest_endpoint(payload: IngestRequest) -> IngestResponse:
        payloads = [
            DocumentSpec(
                title=doc.title,
                content=doc.content,
                source=doc.source,
                type=doc.type,
                metadata=doc.metadata,
            )
            for doc in payload.documents
        ]
        logger.info("Ingest request received: tenant=%s documents=%d", payload.tenantId, len(payloads))
        results = knowledge_base.ingest(payload.tenantId, payloads)
        succeeded = sum(1 for result in results if result.status == "success")
        return IngestResponse(
            message=f"Ingested {succeeded} documents, {len(results) - succeeded} failed",
            results=[
                IngestResultPayload(
                    documentId=result.document_id,
                    chunksCreated=result.chunks_created,
                    status=result.status,
                    error=result.error,
                )
                for result in results
            ],
        )

    @router.post("/search", response_model=SearchResponse)
    def search_endpoint(payload: SearchRequest) -> SearchResponse:
        results = knowledge_base.search(
            payload.query,
            payload.tenantId,
            top_k=payload.topK,
            min_score=payload.minScore,
        )
        return SearchResponse(
            results=[
                SearchResultPayload(
                    content=result.content,
                    source=result.source,
                    relevanceScore=result.relevance_score,
                )
                for result in results
            ],
            count=len(results),
        )

    @router.get("/documents/{tenant_id}")
    def documents_endpoint(tenant_id: str) -> dict[str, Any]:
        documents = knowledge_base.get_documents(tenant_id)
        return {"documents": [_document_payload(doc) for doc in documents], "count": len(documents)}

    @router.delete("/documents/{tenant_id}/{document_id}")
    def delete_document_endpoint(tenant_id: str, document_id: str) -> dict[str, str]:
        if not knowledge_base.delete_document(document_id, tenant_id):
            raise HTTPException(status_code=404, detail="Document not found or access denied")
        return {"message": "Document deleted successfully"}

    @router.delete("/documents/{tenant_id}")
    def delete_tenant_endpoint(tenant_id: str) -> dict[str, Any]:
        deleted = knowledge_base.delete_all_for_tenant(tenant_id)
        return {"message": f"Deleted {deleted} documents for tenant {tenant_id}", "deletedCount": deleted}

    @router.get("/stats")
    def stats_endpoint() -> dict[str, Any]:
        stats = knowledge_base.get_stats()
        vector_stats = stats.vector_store_stats
        return {
            "totalDocuments": stats.total_documents,
            "vectorStoreStats": {
                "totalChunks": vector_stats.total_chunks,
                "tenantCount": vector_stats.tenant_count,
                "chunksByTenant": dict(vector_stats.chunks_by_tenant),
            },
            "embedding": container.embedder.provider_info(),
        }

    return router


def create_app(container: Container | None = None) -> FastAPI:
    """Build the API around ``container`` (or one built from the environment)."""
    setup_logging()
    container = container or build_default_container(ContainerConfig.from_env())
    app = FastAPI(title="TenantSearch API")
    app.state.container = container

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    app.include_router(build_router(container))
    return app


__all__ = ["create_app", "build_router"]
