"""Dependency wiring for the TenantSearch application."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Callable, Literal

from application.services.knowledge_base import KnowledgeBase
from domain.errors import ProviderError
from domain.interfaces import (
    ChunkSplitter,
    DocumentRepository,
    Embedder,
    RemoteEmbeddingClient,
    VectorIndex,
)
from infrastructure.embedding.hash_embedder import HashEmbedder
from infrastructure.embedding.openai_embedding_client import OpenAIEmbeddingClient, OpenAIEmbeddingConfig
from infrastructure.embedding.resilient_embedder import ResilientEmbedder
from infrastructure.repositories.in_memory_document_repository import InMemoryDocumentRepository
from infrastructure.repositories.sqlite_document_repository import SqliteDocumentRepository
from infrastructure.splitting.recursive_character_splitter import ChunkConfig, RecursiveCharacterSplitter
from infrastructure.storage.in_memory_vector_index import InMemoryVectorIndex
from infrastructure.storage.sqlite_vector_index import SqliteVectorIndex

logger = logging.getLogger(__name__)

EmbeddingProviderName = Literal["auto", "openai", "sentence_transformers", "hash"]
StorageName = Literal["memory", "sqlite"]


@dataclass(slots=True)
class Container:
    """Simple container bundling concrete infrastructure implementations."""

    splitter: ChunkSplitter
    embedder: Embedder
    vector_index: VectorIndex
    document_repository: DocumentRepository
    knowledge_base: KnowledgeBase


@dataclass(slots=True)
class ContainerConfig:
    """Configuration for selecting the embedding provider and storage."""

    embedding_provider: EmbeddingProviderName = "auto"
    openai_api_key: str | None = None
    openai_url: str = "https://api.openai.com/v1/embeddings"
    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 384
    request_timeout: float = 30.0
    sentence_transformers_model: str = "sentence-transformers/all-MiniLM-L6-v2"
    max_chunk_size: int = 500
    overlap_size: int = 50
    storage: StorageName = "memory"
    db_path: str = "tenantsearch.db"

    @classmethod
    def from_env(cls) -> "ContainerConfig":
        """Build a config from ``TENANTSEARCH_*`` environment variables."""
        defaults = cls()
        return cls(
            embedding_provider=os.getenv("TENANTSEARCH_EMBEDDING_PROVIDER", defaults.embedding_provider),  # type: ignore[arg-type]
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_url=os.getenv("TENANTSEARCH_OPENAI_URL", defaults.openai_url),
            embedding_model=os.getenv("TENANTSEARCH_EMBEDDING_MODEL", defaults.embedding_model),
            embedding_dimensions=int(os.getenv("TENANTSEARCH_EMBEDDING_DIMENSIONS", str(defaults.embedding_dimensions))),
            request_timeout=float(os.getenv("TENANTSEARCH_REQUEST_TIMEOUT", str(defaults.request_timeout))),
            sentence_transformers_model=os.getenv("TENANTSEARCH_ST_MODEL", defaults.sentence_transformers_model),
            max_chunk_size=int(os.getenv("TENANTSEARCH_MAX_CHUNK_SIZE", str(defaults.max_chunk_size))),
            overlap_size=int(os.getenv("TENANTSEARCH_OVERLAP_SIZE", str(defaults.overlap_size))),
            storage=os.getenv("TENANTSEARCH_STORAGE", defaults.storage),  # type: ignore[arg-type]
            db_path=os.getenv("TENANTSEARCH_DB_PATH", defaults.db_path),
        )


def _openai_client(cfg: ContainerConfig) -> RemoteEmbeddingClient | None:
    if not cfg.openai_api_key:
        return None
    return OpenAIEmbeddingClient(
        OpenAIEmbeddingConfig(
            api_key=cfg.openai_api_key,
            model=cfg.embedding_model,
            url=cfg.openai_url,
            dimensions=cfg.embedding_dimensions or None,
            timeout=cfg.request_timeout,
        )
    )


def _sentence_transformers_client(cfg: ContainerConfig) -> RemoteEmbeddingClient | None:
    try:
        from infrastructure.embedding.sentence_transformers_embedder import (  # noqa: PLC0415
            SentenceTransformersConfig,
            SentenceTransformersEmbeddingClient,
        )

        return SentenceTransformersEmbeddingClient(
            SentenceTransformersConfig(model_name=cfg.sentence_transformers_model)
        )
    except (ImportError, ProviderError) as exc:
        logger.warning("sentence-transformers unavailable, using fallback: %s", exc)
        return None


_PRIMARY_FACTORIES: dict[str, Callable[[ContainerConfig], RemoteEmbeddingClient | None]] = {
    "auto": _openai_client,
    "openai": _openai_client,
    "sentence_transformers": _sentence_transformers_client,
    "hash": lambda _cfg: None,
}


def build_embedder(cfg: ContainerConfig) -> Embedder:
    """Return a resilient embedder for the configured provider.

    ``auto`` and ``openai`` use OpenAI only when an API key is present.
    """
    try:
        factory = _PRIMARY_FACTORIES[cfg.embedding_provider]
    except KeyError as exc:
        raise ValueError(f"Unknown embedding provider '{cfg.embedding_provider}'") from exc
    primary = factory(cfg)
    if primary is None and cfg.embedding_provider == "openai":
        logger.warning("OPENAI_API_KEY is not set; embeddings will use the fallback.")
    return ResilientEmbedder(primary=primary, fallback=HashEmbedder())


def _build_storage(cfg: ContainerConfig) -> tuple[VectorIndex, DocumentRepository]:
    if cfg.storage == "memory":
        return InMemoryVectorIndex(), InMemoryDocumentRepository()
    if cfg.storage == "sqlite":
        return SqliteVectorIndex(db_path=cfg.db_path), SqliteDocumentRepository(db_path=cfg.db_path)
    raise ValueError(f"Unknown storage '{cfg.storage}'")


def build_default_container(config: ContainerConfig | None = None) -> Container:
    """Instantiate the default infrastructure stack."""

    cfg = config or ContainerConfig()
    splitter = RecursiveCharacterSplitter(
        ChunkConfig(max_chunk_size=cfg.max_chunk_size, overlap_size=cfg.overlap_size)
    )
    embedder = build_embedder(cfg)
    vector_index, document_repository = _build_storage(cfg)
    knowledge_base = KnowledgeBase(
        splitter=splitter,
        embedder=embedder,
        vector_index=vector_index,
        document_repository=document_repository,
    )

    return Container(
        splitter=splitter,
        embedder=embedder,
        vector_index=vector_index,
        document_repository=document_repository,
        knowledge_base=knowledge_base,
    )


__all__ = ["Container", "ContainerConfig", "build_default_container", "build_embedder"]
