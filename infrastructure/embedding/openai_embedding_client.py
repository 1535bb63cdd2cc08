"""Remote embedding client for the OpenAI embeddings HTTP API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Sequence

import requests

from domain.entities import EmbeddingVector
from domain.errors import ProviderError
from domain.interfaces import RemoteEmbeddingClient
from infrastructure.embedding.hash_embedder import estimate_tokens

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OpenAIEmbeddingConfig:
    api_key: str
    model: str = "text-embedding-3-small"
    url: str = "https://api.openai.com/v1/embeddings"
    dimensions: int | None = 384
    timeout: float = 30.0


class OpenAIEmbeddingClient(RemoteEmbeddingClient):
    """Call ``POST /v1/embeddings`` and normalise the response."""

    name = "openai"

    def __init__(self, config: OpenAIEmbeddingConfig) -> None:
        if not config.api_key:
            raise ValueError("OpenAI embedding client requires an API key.")
        self._config = config

    @property
    def model_id(self) -> str:
        return self._config.model

    def embed(self, text: str, model: str | None = None) -> EmbeddingVector:
        model_name = model or self._config.model
        payload = self._request([text], model_name)
        vectors = self._parse_vectors(payload, expected=1)
        token_count = self._parse_token_count(payload, text)
        logger.debug("OpenAI embedding generated: dimensions=%d tokens=%d", len(vectors[0]), token_count)
        return EmbeddingVector(values=vectors[0], model=model_name, token_count=token_count)

    def embed_batch(self, texts: Sequence[str]) -> list[EmbeddingVector]:
        if not texts:
            return []
        payload = self._request(list(texts), self._config.model)
        vectors = self._parse_vectors(payload, expected=len(texts))
        return [
            EmbeddingVector(values=vector, model=self._config.model, token_count=estimate_tokens(text))
            for vector, text in zip(vectors, texts)
        ]

    def _request(self, inputs: list[str], model: str) -> dict[str, Any]:
        body: dict[str, Any] = {"model": model, "input": inputs}
        if self._config.dimensions:
            body["dimensions"] = self._config.dimensions
        try:
            response = requests.post(
                self._config.url,
                headers={"Authorization": f"Bearer {self._config.api_key}"},
                json=body,
                timeout=self._config.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise ProviderError(self.name, f"request failed: {exc}") from exc
        except ValueError as exc:
            raise ProviderError(self.name, f"response is not JSON: {exc}") from exc
        if not isinstance(payload, dict):
            raise ProviderError(self.name, f"unexpected response type {type(payload).__name__}")
        return payload

    def _parse_vectors(self, payload: dict[str, Any], *, expected: int) -> list[list[float]]:
        data = payload.get("data")
        if not isinstance(data, list) or len(data) != expected:
            count = len(data) if isinstance(data, list) else "n/a"
            raise ProviderError(self.name, f"expected {expected} embeddings, got {count}")
        try:
            ordered = sorted(data, key=lambda item: int(item.get("index", 0)))
            vectors = [[float(value) for value in item["embedding"]] for item in ordered]
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, f"malformed embedding payload: {exc}") from exc

        lengths = {len(vector) for vector in vectors}
        if 0 in lengths or len(lengths) > 1:
            raise ProviderError(self.name, f"invalid vector lengths {sorted(lengths)}")
        if self._config.dimensions and lengths != {self._config.dimensions}:
            raise ProviderError(
                self.name, f"expected {self._config.dimensions} dimensions, got {len(vectors[0])}"
            )
        return vectors

    def _parse_token_count(self, payload: dict[str, Any], text: str) -> int:
        usage = payload.get("usage")
        if usage is None:
            return estimate_tokens(text)
        try:
            return int(usage.get("total_tokens") or 0)
        except (AttributeError, TypeError, ValueError) as exc:
            raise ProviderError(self.name, f"malformed usage payload: {usage!r}") from exc


__all__ = ["OpenAIEmbeddingClient", "OpenAIEmbeddingConfig"]
