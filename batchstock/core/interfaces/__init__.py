"""Core interfaces (ports) for dependency injection."""

from batchstock.core.interfaces.document_store import (
    DocRef,
    Document,
    IDocumentStore,
    Mutator,
)

__all__ = [
    "DocRef",
    "Document",
    "IDocumentStore",
    "Mutator",
]
