"""SQLite storage implementation."""

from batchstock.infrastructure.storage.sqlite.connection import ConnectionPool
from batchstock.infrastructure.storage.sqlite.document_store import SQLiteDocumentStore

__all__ = [
    "ConnectionPool",
    "SQLiteDocumentStore",
]
