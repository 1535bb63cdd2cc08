"""Two-tier embedder: a primary provider with a deterministic local fallback."""
from __future__ import annotations

import logging
from typing import Sequence

from domain.entities import EmbeddingVector
from domain.errors import ProviderError
from domain.interfaces import Embedder, RemoteEmbeddingClient
from infrastructure.embedding.hash_embedder import HashEmbedder

logger = logging.getLogger(__name__)


class ResilientEmbedder(Embedder):
    """Prefer ``primary`` and degrade to ``fallback`` whenever it fails.

    Provider failures are logged and never reach the caller. Without a
    primary client every call goes straight to the fallback.
    """

    def __init__(
        self,
        primary: RemoteEmbeddingClient | None = None,
        fallback: HashEmbedder | None = None,
    ) -> None:
        self._primary = primary
        self._fallback = fallback or HashEmbedder()
        if primary is None:
            logger.warning("No embedding provider configured. Using fallback hash embedding.")
        else:
            logger.info("Embedding service initialized with %s (%s)", primary.name, primary.model_id)

    @property
    def model_id(self) -> str:
        if self._primary is not None:
            return self._primary.model_id
        return self._fallback.model_id

    @property
    def dimension(self) -> int:
        return self._fallback.dimension

    @property
    def fallback(self) -> HashEmbedder:
        return self._fallback

    def provider_info(self) -> dict[str, object]:
        return {
            "provider": self._primary.name if self._primary else "none",
            "model": self.model_id,
            "available": self._primary is not None,
        }

    def embed(self, text: str) -> EmbeddingVector:
        if self._primary is None:
            return self._fallback.embed(text)
        try:
            return self._primary.embed(text)
        except ProviderError as exc:
            logger.warning("Embedding generation failed, using fallback: %s", exc)
            return self._fallback.embed(text)

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        if self._primary is not None and texts:
            try:
                return self._primary.embed_batch(texts)
            except ProviderError as exc:
                logger.warning("Batch embedding failed, falling back to individual calls: %s", exc)
        return [self.embed(text) for text in texts]


__all__ = ["ResilientEmbedder"]
