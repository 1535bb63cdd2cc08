"""Use case that performs tenant-scoped semantic search."""
from __future__ import annotations

import logging

from domain.entities import KnowledgeBaseResult
from domain.interfaces import Embedder, VectorIndex
from application.use_cases.validation import validate_search

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 3
DEFAULT_MIN_SCORE = 0.5
UNKNOWN_SOURCE = "Unknown"


def search(
    query_text: str,
    tenant_id: str,
    *,
    embedder: Embedder,
    vector_index: VectorIndex,
    top_k: int = DEFAULT_TOP_K,
    min_score: float = DEFAULT_MIN_SCORE,
) -> list[KnowledgeBaseResult]:
    """Return up to ``top_k`` chunks of the tenant scoring at least ``min_score``."""

    validate_search(query_text, tenant_id, top_k, min_score)
    logger.debug(
        "Searching knowledge base: tenant=%s query_length=%d top_k=%d min_score=%.2f",
        tenant_id,
        len(query_text),
        top_k,
        min_score,
    )

    query_embedding = embedder.embed(query_text)
    # Over-fetch so score filtering still leaves up to top_k results.
    candidates = vector_index.search(query_embedding.values, tenant_id, top_k * 2)

    results = [
        KnowledgeBaseResult(
            content=candidate.chunk.content,
            source=str(candidate.chunk.metadata.get("source") or UNKNOWN_SOURCE),
            relevance_score=candidate.score,
        )
        for candidate in candidates
        if candidate.score >= min_score
    ][:top_k]

    logger.info(
        "Knowledge base search completed: tenant=%s query=%r candidates=%d results=%d",
        tenant_id,
        query_text[:50],
        len(candidates),
        len(results),
    )
    return results


__all__ = ["DEFAULT_MIN_SCORE", "DEFAULT_TOP_K", "UNKNOWN_SOURCE", "search"]
