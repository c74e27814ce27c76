"""Abstract interface for the transactional document store."""

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

Document = dict[str, Any]


@dataclass(frozen=True)
class DocRef:
    """Address of a document: collection name plus document id."""

    collection: str
    doc_id: str

    def __str__(self) -> str:
        return f"{self.collection}/{self.doc_id}"


# Receives a snapshot of every requested ref (None when absent) and returns
# the documents to write. Raising aborts the transaction with no writes.
Mutator = Callable[[dict[DocRef, Document | None]], dict[DocRef, Document]]


class IDocumentStore(ABC):
    """
    Interface for document persistence with optimistic transactions.

    Implementations commit a transaction only if none of the documents it
    read changed between the read and the commit; otherwise they raise
    ConflictError and write nothing. Retrying is the caller's job.
    """

    @abstractmethod
    async def get(self, ref: DocRef) -> Document | None:
        """Get a document snapshot, or None if absent."""
        pass

    @abstractmethod
    async def set(self, ref: DocRef, doc: Document) -> None:
        """Unconditionally write a document."""
        pass

    @abstractmethod
    async def list(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
    ) -> list[Document]:
        """List documents in a collection, optionally filtered by field equality."""
        pass

    @abstractmethod
    async def transaction(
        self,
        refs: Sequence[DocRef],
        mutator: Mutator,
    ) -> dict[DocRef, Document]:
        """
        Read ``refs``, apply ``mutator`` and commit its writes atomically.

        Writes may only target refs that were read, so absent refs act as
        insert-if-still-absent preconditions.

        Returns:
            The documents written.

        Raises:
            ConflictError: If any read document changed before commit.
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the store."""
        return None
