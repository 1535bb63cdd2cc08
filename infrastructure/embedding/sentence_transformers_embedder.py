"""Embedding client backed by a local sentence-transformers model."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from sentence_transformers import SentenceTransformer

from domain.entities import EmbeddingVector
from domain.errors import ProviderError
from domain.interfaces import RemoteEmbeddingClient
from infrastructure.embedding.hash_embedder import estimate_tokens


@dataclass(slots=True)
class SentenceTransformersConfig:
    model_name: str = "sentence-transformers/all-MiniLM-L6-v2"
    device: str = "cpu"
    normalize_embeddings: bool = True
    batch_size: int = 16


logger = logging.getLogger(__name__)


class SentenceTransformersEmbeddingClient(RemoteEmbeddingClient):
    """Serve embeddings from a sentence-transformers model.

    Loading or encoding failures surface as ``ProviderError`` so the
    caller can degrade exactly as it does for an HTTP provider.
    """

    name = "sentence_transformers"

    def __init__(self, config: SentenceTransformersConfig) -> None:
        self._config = config
        logger.info("Loading sentence-transformers model: %s", config.model_name)
        try:
            self._model = SentenceTransformer(config.model_name, device=config.device)
        except Exception as exc:
            raise ProviderError(self.name, f"cannot load {config.model_name}: {exc}") from exc
        self._dimension = int(self._model.get_sentence_embedding_dimension())

    @property
    def model_id(self) -> str:
        return self._config.model_name

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str, model: str | None = None) -> EmbeddingVector:
        if model and model != self._config.model_name:
            raise ProviderError(self.name, f"model {model} is not loaded")
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        if not texts:
            return []
        logger.debug("Encoding %d texts with %s", len(texts), self._config.model_name)
        try:
            embeddings = self._model.encode(
                list(texts),
                batch_size=self._config.batch_size,
                normalize_embeddings=self._config.normalize_embeddings,
                show_progress_bar=False,
            )
        except Exception as exc:
            raise ProviderError(self.name, f"encoding failed: {exc}") from exc
        return [
            EmbeddingVector(values=row.tolist(), model=self._config.model_name, token_count=estimate_tokens(text))
            for row, text in zip(embeddings, texts)
        ]


__all__ = ["SentenceTransformersConfig", "SentenceTransformersEmbeddingClient"]
