"""Input checks shared by the ingest and search use cases."""
from __future__ import annotations

from typing import Any, Sequence

from domain.entities import DOCUMENT_TYPES, DocumentSpec
from domain.errors import ValidationError

_REQUIRED_DOCUMENT_FIELDS = ("title", "content", "source", "type")


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_tenant_id(tenant_id: Any) -> None:
    if _is_blank(tenant_id):
        raise ValidationError("tenantId is required")


def validate_documents(documents: Sequence[DocumentSpec]) -> None:
    """Reject the whole request if any document is malformed."""
    if not documents:
        raise ValidationError("documents array is required and must not be empty")
    for position, document in enumerate(documents):
        missing = [name for name in _REQUIRED_DOCUMENT_FIELDS if _is_blank(getattr(document, name, None))]
        if missing:
            raise ValidationError(
                f"Document {position} is missing required fields: {', '.join(missing)}. "
                "Each document must have title, content, source, and type"
            )
        if document.type not in DOCUMENT_TYPES:
            raise ValidationError(
                f"Document {position} has unknown type '{document.type}'. "
                f"Expected one of: {', '.join(DOCUMENT_TYPES)}"
            )


def validate_search(query: Any, tenant_id: Any, top_k: Any, min_score: Any) -> None:
    if _is_blank(query):
        raise ValidationError("query is required and must be a string")
    validate_tenant_id(tenant_id)
    if isinstance(top_k, bool) or not isinstance(top_k, int) or top_k < 1:
        raise ValidationError("topK must be a positive integer")
    if isinstance(min_score, bool) or not isinstance(min_score, (int, float)):
        raise ValidationError("minScore must be a number")


__all__ = ["validate_documents", "validate_search", "validate_tenant_id"]
