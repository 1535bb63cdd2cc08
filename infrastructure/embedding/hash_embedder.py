"""Deterministic character-position embedder used when no provider is reachable."""
from __future__ import annotations

import logging
import math
from typing import Sequence

from domain.entities import EmbeddingVector
from domain.interfaces import Embedder

logger = logging.getLogger(__name__)

FALLBACK_DIMENSION = 384
FALLBACK_MODEL_ID = "simple-fallback"


def estimate_tokens(text: str) -> int:
    """Rough token count: one token per four characters."""
    return math.ceil(len(text) / 4)


class HashEmbedder(Embedder):
    """Bucket lower-cased characters by ``(code point + position) % dimension``.

    Not a semantic model. Output is stable for stable input and needs no
    network, so retrieval keeps working when the real provider is missing.
    """

    def __init__(self, dimension: int = FALLBACK_DIMENSION) -> None:
        self._dimension = dimension
        self._model_id = FALLBACK_MODEL_ID

    @property
    def model_id(self) -> str:
        return self._model_id

    @property
    def dimension(self) -> int:
        return self._dimension

    def _vectorize(self, text: str) -> list[float]:
        vector = [0.0] * self._dimension
        for position, char in enumerate(text.lower()):
            vector[(ord(char) + position) % self._dimension] += 1.0
        norm = math.sqrt(sum(value * value for value in vector))
        if norm == 0.0:
            return vector
        return [value / norm for value in vector]

    def embed(self, text: str) -> EmbeddingVector:
        logger.debug("Using hash fallback embedding for %d characters", len(text))
        return EmbeddingVector(
            values=self._vectorize(text),
            model=self._model_id,
            token_count=estimate_tokens(text),
        )

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        return [self.embed(text) for text in texts]


__all__ = ["FALLBACK_DIMENSION", "FALLBACK_MODEL_ID", "HashEmbedder", "estimate_tokens"]
