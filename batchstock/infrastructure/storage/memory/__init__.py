"""In-memory storage implementation."""

from batchstock.infrastructure.storage.memory.document_store import InMemoryDocumentStore

__all__ = ["InMemoryDocumentStore"]
