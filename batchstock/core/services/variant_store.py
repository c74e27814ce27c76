"""
Variant Stock Store.

Sellable variants are carved out of a batch line item. Creation deducts every
requested size from the batch in the same transaction that inserts the
variant, so either all sizes move or nothing does.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.stock import VariantSizeStock, coerce_size_list
from batchstock.core.entities.variant import ProductVariant, VariantStockReport
from batchstock.core.exceptions import (
    ConflictError,
    SizeNotFoundError,
    ValidationError,
    VariantNotFoundError,
)
from batchstock.core.interfaces import DocRef, Document, IDocumentStore
from batchstock.core.services.batch_ledger import apply_batch_deduction, load_batch
from batchstock.core.services.transactions import (
    VARIANTS,
    batch_ref,
    run_transaction,
    variant_ref,
)
from batchstock.core.services.validation import from_pydantic, require_text

logger = get_logger(__name__)

SizeStockInput = VariantSizeStock | Mapping[str, Any]


def load_variant(variant_id: str, doc: Document | None) -> ProductVariant:
    """Parse a stored variant document, raising VariantNotFoundError when absent."""
    if doc is None:
        raise VariantNotFoundError(variant_id)
    return ProductVariant.model_validate(doc)


def dump_variant(variant: ProductVariant, stored: Document | None) -> Document:
    """Serialize a variant over its stored document, keeping keys the model ignores."""
    doc = dict(stored or {})
    doc.update(variant.model_dump(mode="json"))
    return doc


class VariantStockStore:
    """Creates variants from batches and reports their stock."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    async def create_variant(
        self,
        product_id: str,
        batch_id: str,
        variant_type: str,
        color: str,
        size_stocks: Sequence[SizeStockInput] | Mapping[str, int],
        created_by: str = "",
        default_reorder_level: int | None = None,
    ) -> ProductVariant:
        """
        Create a variant, deducting its initial stock from the batch.

        ``allocated`` starts at 0 for every size. Sizes without their own
        reorder level use ``default_reorder_level`` (or the configured one).

        Raises:
            ValidationError: On malformed input.
            BatchNotFoundError, LineItemNotFoundError, SizeNotFoundError:
                If the batch cannot supply the variant.
            InsufficientStockError: If any size exceeds the batch quantity;
                nothing is deducted and no variant is created.
        """
        require_text("product_id", product_id)
        require_text("batch_id", batch_id)
        require_text("variant_type", variant_type)
        require_text("color", color)
        stocks = self._build_size_stocks(size_stocks)

        if default_reorder_level is None:
            default_reorder_level = self._settings.stock.default_reorder_level

        try:
            variant = ProductVariant(
                id=uuid.uuid4().hex,
                product_id=product_id,
                origin_batch_id=batch_id,
                variant_type=variant_type,
                color=color,
                size_stocks=stocks,
                default_reorder_level=default_reorder_level,
                created_by=created_by,
            )
        except PydanticValidationError as e:
            raise from_pydantic(e) from None

        b_ref = batch_ref(batch_id)
        v_ref = variant_ref(variant.id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            if snapshot[v_ref] is not None:
                raise ConflictError(str(v_ref))
            batch = load_batch(batch_id, snapshot[b_ref])
            for stock in variant.size_stocks:
                apply_batch_deduction(batch, variant_type, color, stock.size, stock.quantity)
            return {
                b_ref: batch.model_dump(mode="json"),
                v_ref: variant.model_dump(mode="json"),
            }

        await run_transaction(
            self._store,
            [b_ref, v_ref],
            mutate,
            operation="variant_create",
            settings=self._settings.transactions,
        )

        logger.info(
            "variant_created",
            variant_id=variant.id,
            product_id=product_id,
            batch_id=batch_id,
            sizes=[s.size for s in variant.size_stocks],
        )
        return variant

    @staticmethod
    def _build_size_stocks(
        size_stocks: Sequence[SizeStockInput] | Mapping[str, int],
    ) -> list[VariantSizeStock]:
        raw_list = coerce_size_list(size_stocks)
        if not raw_list:
            raise ValidationError("size_stocks", "at least one size is required")

        stocks: list[VariantSizeStock] = []
        seen: set[str] = set()
        for i, raw in enumerate(raw_list):
            field = f"size_stocks[{i}]"
            try:
                stock = (
                    raw
                    if isinstance(raw, VariantSizeStock)
                    else VariantSizeStock.model_validate(raw)
                )
            except PydanticValidationError as e:
                raise from_pydantic(e, field) from None
            if stock.quantity <= 0:
                raise ValidationError(f"{field}.quantity", "must be greater than 0", stock.quantity)
            if stock.size in seen:
                raise ValidationError(f"{field}.size", "duplicate size", stock.size)
            seen.add(stock.size)
            stocks.append(stock.model_copy(update={"allocated": 0}))
        return stocks

    async def get_variant(self, variant_id: str) -> ProductVariant:
        """Get a variant by ID."""
        doc = await self._store.get(variant_ref(variant_id))
        return load_variant(variant_id, doc)

    async def list_variants(self, product_id: str | None = None) -> list[ProductVariant]:
        """List variants, optionally for a single product."""
        where = {"product_id": product_id} if product_id is not None else None
        docs = await self._store.list(VARIANTS, where=where)
        return [ProductVariant.model_validate(doc) for doc in docs]

    async def get_stock(self, variant_id: str) -> VariantStockReport:
        """Per-size quantity, allocated and derived status."""
        variant = await self.get_variant(variant_id)
        return variant.stock_report()

    async def set_reorder_level(
        self, variant_id: str, size: str, reorder_level: int | None
    ) -> ProductVariant:
        """
        Set (or clear, with None) the reorder level of one size.

        Quantities are untouched; only the alert threshold changes.
        """
        if reorder_level is not None and (
            isinstance(reorder_level, bool)
            or not isinstance(reorder_level, int)
            or reorder_level < 0
        ):
            raise ValidationError("reorder_level", "must be a non-negative integer", reorder_level)
        ref = variant_ref(variant_id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            variant = load_variant(variant_id, snapshot[ref])
            stock = variant.find_size(size)
            if stock is None:
                raise SizeNotFoundError(variant_id, size)
            stock.reorder_level = reorder_level
            return {ref: dump_variant(variant, snapshot[ref])}

        writes = await run_transaction(
            self._store,
            [ref],
            mutate,
            operation="variant_set_reorder_level",
            settings=self._settings.transactions,
        )
        logger.info(
            "variant_reorder_level_set",
            variant_id=variant_id,
            size=size,
            reorder_level=reorder_level,
        )
        return ProductVariant.model_validate(writes[ref])
