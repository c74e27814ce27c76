"""Storage implementations and factory."""

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.exceptions import ConfigurationError
from batchstock.core.interfaces import IDocumentStore

logger = get_logger(__name__)


def create_document_store(settings: Settings | None = None) -> IDocumentStore:
    """
    Build a new document store for the configured backend.

    Each call returns a fresh store; callers own and share the handle.
    """
    settings = settings or get_settings()
    backend = settings.storage.backend

    if backend == "memory":
        from batchstock.infrastructure.storage.memory import InMemoryDocumentStore

        store: IDocumentStore = InMemoryDocumentStore()
    elif backend == "sqlite":
        from batchstock.infrastructure.storage.sqlite import (
            ConnectionPool,
            SQLiteDocumentStore,
        )

        store = SQLiteDocumentStore(ConnectionPool.from_settings(settings.storage))
    else:
        raise ConfigurationError(f"Unknown storage backend: {backend}")

    logger.info("document_store_created", backend=backend)
    return store


__all__ = ["create_document_store"]
