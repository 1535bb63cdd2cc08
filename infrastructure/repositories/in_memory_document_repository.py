"""Document repository kept in process memory."""
from __future__ import annotations

import threading

from domain.entities import Document
from domain.interfaces import DocumentRepository


class InMemoryDocumentRepository(DocumentRepository):
    """Volatile document store; rebuilt by re-ingesting."""

    def __init__(self) -> None:
        self._documents: dict[str, Document] = {}
        self._lock = threading.RLock()

    def add(self, document: Document) -> None:
        with self._lock:
            self._documents[document.id] = document

    def get(self, document_id: str) -> Document | None:
        with self._lock:
            return self._documents.get(document_id)

    def list_for_tenant(self, tenant_id: str) -> list[Document]:
        with self._lock:
            return [doc for doc in self._documents.values() if doc.tenant_id == tenant_id]

    def delete(self, document_id: str) -> bool:
        with self._lock:
            return self._documents.pop(document_id, None) is not None

    def delete_by_tenant(self, tenant_id: str) -> list[Document]:
        with self._lock:
            removed = [doc for doc in self._documents.values() if doc.tenant_id == tenant_id]
            for doc in removed:
                del self._documents[doc.id]
        return removed

    def count(self) -> int:
        with self._lock:
            return len(self._documents)

    def clear(self) -> None:
        with self._lock:
            self._documents.clear()


__all__ = ["InMemoryDocumentRepository"]
