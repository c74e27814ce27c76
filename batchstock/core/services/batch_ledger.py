"""
Batch Ledger.

Owns inbound lots. After creation a batch only changes through deductions
(variant creation, reorder) and closing.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.batch import Batch, BatchStatus, LineItem
from batchstock.core.exceptions import (
    BatchClosedError,
    BatchNotFoundError,
    InsufficientStockError,
    LineItemNotFoundError,
    SizeNotFoundError,
    ValidationError,
)
from batchstock.core.interfaces import DocRef, Document, IDocumentStore
from batchstock.core.services.transactions import (
    BATCHES,
    batch_ref,
    run_transaction,
)
from batchstock.core.services.validation import (
    from_pydantic,
    require_positive,
    require_text,
)

logger = get_logger(__name__)


def load_batch(batch_id: str, doc: Document | None) -> Batch:
    """Parse a stored batch document, raising BatchNotFoundError when absent."""
    if doc is None:
        raise BatchNotFoundError(batch_id)
    return Batch.model_validate(doc)


def apply_batch_deduction(
    batch: Batch, variant_type: str, color: str, size: str, qty: int
) -> int:
    """
    Deduct ``qty`` from one batch size in place.

    Shared by every operation that pulls stock out of a batch so they all
    enforce the same rules. Never clamps: a short batch is an error.

    Returns:
        Quantity remaining for the size.
    """
    if not batch.is_active:
        raise BatchClosedError(batch.id)
    line = batch.find_line(variant_type, color)
    if line is None:
        raise LineItemNotFoundError(batch.id, variant_type, color)
    stock = line.find_size(size)
    if stock is None:
        raise SizeNotFoundError(batch.id, size)
    if qty > stock.quantity:
        raise InsufficientStockError(batch.id, size, qty, stock.quantity)
    stock.quantity -= qty
    return stock.quantity


class BatchLedger:
    """Creates, reads and deducts from batches."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def create_batch(
        self,
        name: str,
        batch_type: str,
        line_items: Sequence[LineItem | Mapping[str, Any]],
        created_by: str = "",
    ) -> str:
        """
        Create a new active batch.

        Every line item needs at least one size, every size a quantity > 0,
        and every line a unit price > 0.

        Returns:
            The new batch id.

        Raises:
            ValidationError: If any of the above does not hold.
        """
        require_text("name", name)
        require_text("type", batch_type)
        if not line_items:
            raise ValidationError("line_items", "at least one line item is required")

        items = [self._build_line_item(i, raw) for i, raw in enumerate(line_items)]

        try:
            batch = Batch(
                id=uuid.uuid4().hex,
                name=name.strip(),
                type=batch_type.strip(),
                created_by=created_by,
                line_items=items,
            )
        except PydanticValidationError as e:
            raise from_pydantic(e) from None

        await self._store.set(batch_ref(batch.id), batch.model_dump(mode="json"))

        logger.info(
            "batch_created",
            batch_id=batch.id,
            name=batch.name,
            line_items=len(batch.line_items),
            total_quantity=batch.total_quantity,
        )
        return batch.id

    @staticmethod
    def _build_line_item(index: int, raw: LineItem | Mapping[str, Any]) -> LineItem:
        prefix = f"line_items[{index}]"
        try:
            item = raw if isinstance(raw, LineItem) else LineItem.model_validate(raw)
        except PydanticValidationError as e:
            raise from_pydantic(e, prefix) from None
        for j, stock in enumerate(item.size_stocks):
            if stock.quantity <= 0:
                raise ValidationError(
                    f"{prefix}.size_stocks[{j}].quantity",
                    "must be greater than 0",
                    stock.quantity,
                )
        return item

    async def get_batch(self, batch_id: str) -> Batch:
        """Get a batch by ID."""
        doc = await self._store.get(batch_ref(batch_id))
        return load_batch(batch_id, doc)

    async def list_batches(self, status: BatchStatus | None = None) -> list[Batch]:
        """List batches, newest first."""
        where = {"status": status.value} if status is not None else None
        docs = await self._store.list(BATCHES, where=where)
        # Stores list in insertion order; reversing first keeps ties newest-first
        batches = [Batch.model_validate(doc) for doc in reversed(docs)]
        return sorted(batches, key=lambda b: b.created_at, reverse=True)

    async def get_batch_stock(
        self, batch_id: str, variant_type: str, color: str, size: str
    ) -> int:
        """Current quantity of one batch size (snapshot read)."""
        batch = await self.get_batch(batch_id)
        line = batch.find_line(variant_type, color)
        if line is None:
            raise LineItemNotFoundError(batch_id, variant_type, color)
        stock = line.find_size(size)
        if stock is None:
            raise SizeNotFoundError(batch_id, size)
        return stock.quantity

    async def deduct(
        self,
        batch_id: str,
        variant_type: str,
        color: str,
        size: str,
        qty: int,
    ) -> int:
        """
        Atomically decrement one batch size.

        Returns:
            Quantity remaining for the size.

        Raises:
            BatchNotFoundError, LineItemNotFoundError, SizeNotFoundError:
                If the batch, line or size is absent.
            InsufficientStockError: If ``qty`` exceeds the current quantity.
        """
        require_text("batch_id", batch_id)
        require_positive("qty", qty)
        ref = batch_ref(batch_id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            batch = load_batch(batch_id, snapshot[ref])
            apply_batch_deduction(batch, variant_type, color, size, qty)
            return {ref: batch.model_dump(mode="json")}

        writes = await run_transaction(
            self._store,
            [ref],
            mutate,
            operation="batch_deduct",
            settings=self._settings.transactions,
        )
        committed = Batch.model_validate(writes[ref])
        remaining = committed.find_line(variant_type, color).find_size(size).quantity  # type: ignore[union-attr]

        logger.info(
            "batch_deducted",
            batch_id=batch_id,
            variant_type=variant_type,
            color=color,
            size=size,
            qty=qty,
            remaining=remaining,
        )
        return remaining

    async def close_batch(self, batch_id: str) -> Batch:
        """Close a batch so it can no longer supply stock."""
        ref = batch_ref(batch_id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            batch = load_batch(batch_id, snapshot[ref])
            batch.status = BatchStatus.CLOSED
            return {ref: batch.model_dump(mode="json")}

        writes = await run_transaction(
            self._store,
            [ref],
            mutate,
            operation="batch_close",
            settings=self._settings.transactions,
        )
        logger.info("batch_closed", batch_id=batch_id)
        return Batch.model_validate(writes[ref])
