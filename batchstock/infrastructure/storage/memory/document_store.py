"""In-memory implementation of the document store."""

import asyncio
import copy
from collections.abc import Sequence
from typing import Any

from batchstock.config import get_logger
from batchstock.core.exceptions import ConflictError
from batchstock.core.interfaces import DocRef, Document, IDocumentStore, Mutator

logger = get_logger(__name__)


class InMemoryDocumentStore(IDocumentStore):
    """
    Versioned in-process document store.

    Transactions read without locking and validate versions at commit time
    under a short asyncio lock, so concurrent tasks race the way callers of
    a remote store do.
    """

    def __init__(self, read_latency: float = 0.0) -> None:
        # ref -> (version, document)
        self._docs: dict[DocRef, tuple[int, Document]] = {}
        self._commit_lock = asyncio.Lock()
        self._read_latency = read_latency

    async def get(self, ref: DocRef) -> Document | None:
        entry = self._docs.get(ref)
        return copy.deepcopy(entry[1]) if entry is not None else None

    async def set(self, ref: DocRef, doc: Document) -> None:
        async with self._commit_lock:
            version = self._version(ref)
            self._docs[ref] = (version + 1, copy.deepcopy(doc))

    async def list(
        self,
        collection: str,
        where: dict[str, Any] | None = None,
    ) -> list[Document]:
        results = []
        for ref, (_, doc) in list(self._docs.items()):
            if ref.collection != collection:
                continue
            if where and any(doc.get(k) != v for k, v in where.items()):
                continue
            results.append(copy.deepcopy(doc))
        return results

    async def transaction(
        self,
        refs: Sequence[DocRef],
        mutator: Mutator,
    ) -> dict[DocRef, Document]:
        read_versions = {ref: self._version(ref) for ref in refs}
        snapshot = {ref: await self.get(ref) for ref in refs}

        # Round-trip gap between read and commit
        await asyncio.sleep(self._read_latency)

        writes = mutator(snapshot)
        stray = set(writes) - set(refs)
        if stray:
            raise ValueError(f"mutator wrote unread documents: {sorted(map(str, stray))}")

        async with self._commit_lock:
            for ref, version in read_versions.items():
                if self._version(ref) != version:
                    logger.debug("memory_store_conflict", ref=str(ref))
                    raise ConflictError(str(ref))
            for ref, doc in writes.items():
                self._docs[ref] = (read_versions[ref] + 1, copy.deepcopy(doc))

        return copy.deepcopy(writes)

    def _version(self, ref: DocRef) -> int:
        entry = self._docs.get(ref)
        return entry[0] if entry is not None else 0
