"""Paginated reads over the append-only allocation and reorder logs."""

from __future__ import annotations

from batchstock.config import Settings, get_settings
from batchstock.core.entities.audit import AllocationRecord, ReorderRecord
from batchstock.core.interfaces import IDocumentStore
from batchstock.core.services.transactions import ALLOCATIONS, REORDERS


class AuditLog:
    """Read side of the audit log, keyed by variant id, oldest first (ties in write order)."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def allocations(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> list[AllocationRecord]:
        docs = await self._store.list(ALLOCATIONS, where={"variant_id": variant_id})
        records = sorted(
            (AllocationRecord.model_validate(doc) for doc in docs),
            key=lambda r: r.at,
        )
        return self._page(records, limit, offset)

    async def reorders(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> list[ReorderRecord]:
        docs = await self._store.list(REORDERS, where={"variant_id": variant_id})
        records = sorted(
            (ReorderRecord.model_validate(doc) for doc in docs),
            key=lambda r: r.at,
        )
        return self._page(records, limit, offset)

    async def count_allocations(self, variant_id: str) -> int:
        return len(await self._store.list(ALLOCATIONS, where={"variant_id": variant_id}))

    async def count_reorders(self, variant_id: str) -> int:
        return len(await self._store.list(REORDERS, where={"variant_id": variant_id}))

    def _page(self, records: list, limit: int | None, offset: int) -> list:
        if limit is None:
            limit = self._settings.storage.history_page_size
        offset = max(offset, 0)
        return records[offset : offset + max(limit, 0)]
