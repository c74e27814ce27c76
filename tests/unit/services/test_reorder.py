"""Tests for the reorder service."""

import asyncio

import pytest

from batchstock.core.exceptions import (
    BatchClosedError,
    BatchNotFoundError,
    InsufficientStockError,
    LineItemNotFoundError,
    SizeNotFoundError,
    ValidationError,
    VariantNotFoundError,
)


class TestSuggestedQuantity:
    def test_multiple_of_level(self, reorder_service):
        assert reorder_service.suggested_quantity(5) == 10

    @pytest.mark.parametrize("level", [None, 0])
    def test_fallback(self, reorder_service, level):
        assert reorder_service.suggested_quantity(level) == 10

    def test_uses_settings(self, store, settings):
        from batchstock.core.services import ReorderService

        settings.stock.suggested_reorder_multiplier = 3
        settings.stock.suggested_reorder_fallback = 7
        service = ReorderService(store, settings)
        assert service.suggested_quantity(4) == 12
        assert service.suggested_quantity(None) == 7


class TestReorder:
    async def test_moves_stock_from_batch(
        self, reorder_service, ledger, variant_store, batch_id, variant_id
    ):
        record = await reorder_service.reorder(variant_id, batch_id, "M", 10, "admin")

        assert record.quantity_added == 10
        assert record.source_batch_id == batch_id
        assert record.remaining_batch_stock == 5
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 5
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 15

    async def test_defaults_to_origin_batch(
        self, reorder_service, ledger, batch_id, variant_id
    ):
        record = await reorder_service.reorder(variant_id, None, "M", 1, "admin")
        assert record.source_batch_id == batch_id
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 14

    async def test_adds_missing_size(self, reorder_service, variant_store, batch_id, variant_id):
        await reorder_service.reorder(variant_id, batch_id, "L", 3, "admin")

        variant = await variant_store.get_variant(variant_id)
        stock = variant.find_size("L")
        assert stock.quantity == 3
        assert stock.allocated == 0
        assert variant.reorder_level_for(stock) == variant.default_reorder_level

    async def test_insufficient_changes_nothing(
        self, reorder_service, ledger, variant_store, batch_id, variant_id
    ):
        with pytest.raises(InsufficientStockError) as exc_info:
            await reorder_service.reorder(variant_id, batch_id, "M", 16, "admin")

        assert exc_info.value.current_stock == 15
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 15
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 5
        assert await reorder_service.count_reorders(variant_id) == 0

    async def test_other_batch_needs_matching_line(
        self, reorder_service, ledger, variant_id
    ):
        other = await ledger.create_batch(
            "B2",
            "uniform",
            [{"variant_type": "Shirt", "color": "White", "unit_price": 5, "size_stocks": {"M": 4}}],
        )
        with pytest.raises(LineItemNotFoundError):
            await reorder_service.reorder(variant_id, other, "M", 1, "admin")

    async def test_other_batch_with_matching_line(
        self, reorder_service, ledger, variant_store, blazer_line_items, variant_id
    ):
        other = await ledger.create_batch("B2", "uniform", blazer_line_items)
        record = await reorder_service.reorder(variant_id, other, "M", 2, "admin")

        assert record.source_batch_id == other
        assert record.remaining_batch_stock == 18
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 7

    async def test_missing_batch_size(self, reorder_service, batch_id, variant_id):
        with pytest.raises(SizeNotFoundError):
            await reorder_service.reorder(variant_id, batch_id, "XXL", 1, "admin")

    async def test_missing_batch(self, reorder_service, variant_id):
        with pytest.raises(BatchNotFoundError):
            await reorder_service.reorder(variant_id, "nope", "M", 1, "admin")

    async def test_missing_variant(self, reorder_service, batch_id):
        with pytest.raises(VariantNotFoundError):
            await reorder_service.reorder("nope", batch_id, "M", 1, "admin")

    async def test_closed_batch(self, reorder_service, ledger, batch_id, variant_id):
        await ledger.close_batch(batch_id)
        with pytest.raises(BatchClosedError):
            await reorder_service.reorder(variant_id, batch_id, "M", 1, "admin")

    async def test_closed_batch_reported_before_shortfall(
        self, reorder_service, ledger, batch_id, variant_id
    ):
        await ledger.close_batch(batch_id)
        with pytest.raises(BatchClosedError):
            await reorder_service.reorder(variant_id, batch_id, "M", 500, "admin")
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 15

    @pytest.mark.parametrize("qty,actor", [(0, "admin"), (-3, "admin"), (1, "")])
    async def test_rejects_bad_input(self, reorder_service, batch_id, variant_id, qty, actor):
        with pytest.raises(ValidationError):
            await reorder_service.reorder(variant_id, batch_id, "M", qty, actor)

    async def test_record_id_replay(
        self, reorder_service, ledger, variant_store, batch_id, variant_id
    ):
        first = await reorder_service.reorder(
            variant_id, batch_id, "M", 10, "admin", record_id="re-1"
        )
        # Would fail the batch precondition if it were applied again
        second = await reorder_service.reorder(
            variant_id, batch_id, "M", 10, "admin", record_id="re-1"
        )

        assert second == first
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 5
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 15
        assert await reorder_service.count_reorders(variant_id) == 1

    async def test_concurrent_reorders_never_overdraw_batch(
        self, reorder_service, ledger, variant_store, batch_id, variant_id
    ):
        results = await asyncio.gather(
            reorder_service.reorder(variant_id, batch_id, "M", 10, "a1"),
            reorder_service.reorder(variant_id, batch_id, "M", 10, "a2"),
            return_exceptions=True,
        )

        failures = [r for r in results if isinstance(r, Exception)]
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockError)
        assert await ledger.get_batch_stock(batch_id, "Blazer", "Navy", "M") == 5
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 15


class TestHistory:
    async def test_history(self, reorder_service, batch_id, variant_id):
        await reorder_service.reorder(variant_id, batch_id, "M", 1, "a1")
        await reorder_service.reorder(variant_id, batch_id, "L", 2, "a2")

        history = await reorder_service.reorder_history(variant_id)
        assert [(r.size, r.actor) for r in history] == [("M", "a1"), ("L", "a2")]
        assert [r.remaining_batch_stock for r in history] == [14, 6]
        assert await reorder_service.count_reorders(variant_id) == 2
        assert len(await reorder_service.reorder_history(variant_id, limit=1)) == 1
