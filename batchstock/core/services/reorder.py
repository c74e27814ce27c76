"""
Reorder Service.

Moves stock from a batch into a variant. The batch deduction, the variant
increment and the audit record commit together in one transaction, so a
partially applied reorder is never visible.
"""

from __future__ import annotations

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.audit import ReorderRecord, new_record_id
from batchstock.core.entities.stock import VariantSizeStock
from batchstock.core.exceptions import (
    BatchClosedError,
    InsufficientStockError,
    LineItemNotFoundError,
    SizeNotFoundError,
    ValidationError,
)
from batchstock.core.interfaces import DocRef, Document, IDocumentStore
from batchstock.core.services.audit_log import AuditLog
from batchstock.core.services.batch_ledger import apply_batch_deduction, load_batch
from batchstock.core.services.transactions import (
    batch_ref,
    reorder_ref,
    run_transaction,
    variant_ref,
)
from batchstock.core.services.validation import require_positive, require_text
from batchstock.core.services.variant_store import dump_variant, load_variant

logger = get_logger(__name__)


class ReorderService:
    """Replenishes variant stock from the batch ledger."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()
        self._audit = AuditLog(store, self._settings)

    def suggested_quantity(self, reorder_level: int | None) -> int:
        """Default reorder amount: a multiple of the reorder level, or a fallback."""
        stock = self._settings.stock
        if reorder_level:
            return reorder_level * stock.suggested_reorder_multiplier
        return stock.suggested_reorder_fallback

    async def reorder(
        self,
        variant_id: str,
        batch_id: str | None,
        size: str,
        qty: int,
        actor: str,
        record_id: str | None = None,
    ) -> ReorderRecord:
        """
        Move ``qty`` units of ``size`` from a batch into a variant.

        ``batch_id`` defaults to the variant's origin batch. A size the
        variant does not carry yet is added with the default reorder level.

        Raises:
            VariantNotFoundError, BatchNotFoundError, LineItemNotFoundError,
            SizeNotFoundError: If either side is absent.
            BatchClosedError: If the source batch is closed.
            InsufficientStockError: If the batch holds fewer than ``qty``;
                neither the batch nor the variant is changed.
            ConflictError: If retries are exhausted.
        """
        require_text("variant_id", variant_id)
        require_text("size", size)
        require_positive("qty", qty)
        require_text("actor", actor)
        if batch_id is not None:
            require_text("batch_id", batch_id)
        record_id = record_id or new_record_id()

        v_ref = variant_ref(variant_id)
        r_ref = reorder_ref(record_id)

        committed = await self._store.get(r_ref)
        if committed is not None and committed.get("variant_id") == variant_id:
            logger.info("reorder_replayed", variant_id=variant_id, record_id=record_id)
            return ReorderRecord.model_validate(committed)

        # Early precondition on a snapshot; re-checked inside the transaction.
        variant = load_variant(variant_id, await self._store.get(v_ref))
        source_batch_id = batch_id or variant.origin_batch_id
        b_ref = batch_ref(source_batch_id)
        batch = load_batch(source_batch_id, await self._store.get(b_ref))
        if not batch.is_active:
            raise BatchClosedError(source_batch_id)
        line = batch.find_line(variant.variant_type, variant.color)
        if line is None:
            raise LineItemNotFoundError(source_batch_id, variant.variant_type, variant.color)
        batch_stock = line.find_size(size)
        if batch_stock is None:
            raise SizeNotFoundError(source_batch_id, size)
        if batch_stock.quantity < qty:
            logger.info(
                "reorder_rejected",
                variant_id=variant_id,
                batch_id=source_batch_id,
                size=size,
                requested=qty,
                batch_stock=batch_stock.quantity,
            )
            raise InsufficientStockError(source_batch_id, size, qty, batch_stock.quantity)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            existing = snapshot[r_ref]
            if existing is not None:
                if existing.get("variant_id") != variant_id:
                    raise ValidationError("record_id", "already used by another variant", record_id)
                return {}

            current_variant = load_variant(variant_id, snapshot[v_ref])
            current_batch = load_batch(source_batch_id, snapshot[b_ref])
            remaining = apply_batch_deduction(
                current_batch,
                current_variant.variant_type,
                current_variant.color,
                size,
                qty,
            )

            stock = current_variant.find_size(size)
            if stock is None:
                stock = VariantSizeStock(size=size, quantity=0)
                current_variant.size_stocks.append(stock)
            stock.quantity += qty

            record = ReorderRecord(
                id=record_id,
                variant_id=variant_id,
                size=size,
                quantity_added=qty,
                source_batch_id=source_batch_id,
                remaining_batch_stock=remaining,
                actor=actor,
            )
            return {
                b_ref: current_batch.model_dump(mode="json"),
                v_ref: dump_variant(current_variant, snapshot[v_ref]),
                r_ref: record.model_dump(mode="json"),
            }

        writes = await run_transaction(
            self._store,
            [b_ref, v_ref, r_ref],
            mutate,
            operation="reorder",
            settings=self._settings.transactions,
        )

        if r_ref not in writes:
            logger.info("reorder_replayed", variant_id=variant_id, record_id=record_id)
            return ReorderRecord.model_validate(await self._store.get(r_ref))

        record = ReorderRecord.model_validate(writes[r_ref])
        logger.info(
            "reorder_complete",
            variant_id=variant_id,
            batch_id=source_batch_id,
            size=size,
            qty=qty,
            remaining_batch_stock=record.remaining_batch_stock,
            record_id=record.id,
        )
        return record

    async def reorder_history(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> list[ReorderRecord]:
        """Reorder records for a variant, oldest first."""
        return await self._audit.reorders(variant_id, limit=limit, offset=offset)

    async def count_reorders(self, variant_id: str) -> int:
        return await self._audit.count_reorders(variant_id)
