"""Error types raised by the TenantSearch system."""
from __future__ import annotations


class TenantSearchError(Exception):
    """Base class for all TenantSearch errors."""


class ValidationError(TenantSearchError, ValueError):
    """Malformed ingest or search input."""


class ProviderError(TenantSearchError):
    """A remote embedding provider call failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class DimensionMismatch(TenantSearchError, ValueError):
    """Two embeddings of different length were compared."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Embedding dimension mismatch: {expected} != {actual}. "
            "Vectors from different embedding models cannot be compared."
        )
        self.expected = expected
        self.actual = actual


__all__ = [
    "DimensionMismatch",
    "ProviderError",
    "TenantSearchError",
    "ValidationError",
]
