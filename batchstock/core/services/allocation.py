"""
Allocation Service.

Issues variant stock to recipients. The quantity check that gates a mutation
always runs inside the transaction against the authoritative document;
check_availability is advisory only.
"""

from __future__ import annotations

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.audit import AllocationRecord, new_record_id
from batchstock.core.entities.stock import Availability
from batchstock.core.exceptions import (
    InsufficientStockError,
    SizeNotFoundError,
    ValidationError,
)
from batchstock.core.interfaces import DocRef, Document, IDocumentStore
from batchstock.core.services.audit_log import AuditLog
from batchstock.core.services.transactions import (
    allocation_ref,
    run_transaction,
    variant_ref,
)
from batchstock.core.services.validation import require_positive, require_text
from batchstock.core.services.variant_store import dump_variant, load_variant

logger = get_logger(__name__)


class AllocationService:
    """Deducts variant stock and records who received it."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._audit = AuditLog(store, self._settings)

    async def check_availability(self, variant_id: str, size: str, qty: int) -> Availability:
        """Advisory stock check. Never use as the only guard for a mutation."""
        require_positive("qty", qty)
        variant = load_variant(variant_id, await self._store.get(variant_ref(variant_id)))
        stock = variant.find_size(size)
        if stock is None:
            raise SizeNotFoundError(variant_id, size)
        return Availability(
            available=stock.quantity >= qty,
            current_stock=stock.quantity,
            requested=qty,
        )

    async def allocate(
        self,
        variant_id: str,
        size: str,
        qty: int,
        recipient_id: str,
        actor: str,
        record_id: str | None = None,
    ) -> AllocationRecord:
        """
        Issue ``qty`` units of one size to a recipient.

        Passing the same ``record_id`` again returns the committed record
        without deducting a second time.

        Raises:
            VariantNotFoundError, SizeNotFoundError: If the target is absent.
            InsufficientStockError: If the re-read quantity is below ``qty``.
            ConflictError: If retries are exhausted.
        """
        require_text("variant_id", variant_id)
        require_text("size", size)
        require_positive("qty", qty)
        require_text("recipient_id", recipient_id)
        require_text("actor", actor)
        record_id = record_id or new_record_id()

        v_ref = variant_ref(variant_id)
        r_ref = allocation_ref(record_id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            existing = snapshot[r_ref]
            if existing is not None:
                if existing.get("variant_id") != variant_id:
                    raise ValidationError("record_id", "already used by another variant", record_id)
                return {}

            variant = load_variant(variant_id, snapshot[v_ref])
            stock = variant.find_size(size)
            if stock is None:
                raise SizeNotFoundError(variant_id, size)
            if stock.quantity < qty:
                raise InsufficientStockError(variant_id, size, qty, stock.quantity)

            stock.quantity -= qty
            stock.allocated += qty
            record = AllocationRecord(
                id=record_id,
                variant_id=variant_id,
                size=size,
                quantity=qty,
                recipient_id=recipient_id,
                actor=actor,
            )
            return {
                v_ref: dump_variant(variant, snapshot[v_ref]),
                r_ref: record.model_dump(mode="json"),
            }

        try:
            writes = await run_transaction(
                self._store,
                [v_ref, r_ref],
                mutate,
                operation="allocate",
                settings=self._settings.transactions,
            )
        except InsufficientStockError as e:
            logger.info(
                "allocation_rejected",
                variant_id=variant_id,
                size=size,
                requested=qty,
                current_stock=e.current_stock,
            )
            raise

        if r_ref not in writes:
            logger.info("allocation_replayed", variant_id=variant_id, record_id=record_id)
            return AllocationRecord.model_validate(await self._store.get(r_ref))

        record = AllocationRecord.model_validate(writes[r_ref])
        logger.info(
            "allocation_complete",
            variant_id=variant_id,
            size=size,
            qty=qty,
            recipient_id=recipient_id,
            record_id=record.id,
        )
        return record

    async def allocation_history(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> list[AllocationRecord]:
        """Allocation records for a variant, oldest first."""
        return await self._audit.allocations(variant_id, limit=limit, offset=offset)

    async def count_allocations(self, variant_id: str) -> int:
        return await self._audit.count_allocations(variant_id)
