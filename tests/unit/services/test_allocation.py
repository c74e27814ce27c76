"""Tests for the allocation service."""

import asyncio

import pytest

from batchstock.config import Settings
from batchstock.config.settings import TransactionSettings
from batchstock.core.exceptions import (
    InsufficientStockError,
    SizeNotFoundError,
    ValidationError,
    VariantNotFoundError,
)
from batchstock.core.services import AllocationService


class TestCheckAvailability:
    async def test_available(self, allocation_service, variant_id):
        result = await allocation_service.check_availability(variant_id, "M", 5)
        assert result.available
        assert result.current_stock == 5
        assert result.requested == 5

    async def test_not_available(self, allocation_service, variant_id):
        result = await allocation_service.check_availability(variant_id, "M", 6)
        assert not result.available
        assert result.current_stock == 5

    async def test_missing_size(self, allocation_service, variant_id):
        with pytest.raises(SizeNotFoundError):
            await allocation_service.check_availability(variant_id, "XL", 1)

    async def test_does_not_mutate(self, allocation_service, variant_store, variant_id):
        await allocation_service.check_availability(variant_id, "M", 1)
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 5


class TestAllocate:
    async def test_moves_quantity_to_allocated(self, allocation_service, variant_store, variant_id):
        record = await allocation_service.allocate(variant_id, "M", 3, "student-1", "admin")

        level = (await variant_store.get_stock(variant_id)).for_size("M")
        assert level.quantity == 2
        assert level.allocated == 3
        assert record.variant_id == variant_id
        assert record.quantity == 3
        assert record.recipient_id == "student-1"
        assert record.actor == "admin"

    async def test_allocate_everything(self, allocation_service, variant_store, variant_id):
        await allocation_service.allocate(variant_id, "M", 5, "student-1", "admin")
        level = (await variant_store.get_stock(variant_id)).for_size("M")
        assert level.quantity == 0
        assert level.allocated == 5

    async def test_insufficient_leaves_state(self, allocation_service, variant_store, variant_id):
        with pytest.raises(InsufficientStockError) as exc_info:
            await allocation_service.allocate(variant_id, "M", 6, "student-1", "admin")

        assert exc_info.value.current_stock == 5
        level = (await variant_store.get_stock(variant_id)).for_size("M")
        assert (level.quantity, level.allocated) == (5, 0)
        assert await allocation_service.count_allocations(variant_id) == 0

    async def test_missing_variant(self, allocation_service):
        with pytest.raises(VariantNotFoundError):
            await allocation_service.allocate("nope", "M", 1, "student-1", "admin")

    async def test_missing_size(self, allocation_service, variant_id):
        with pytest.raises(SizeNotFoundError):
            await allocation_service.allocate(variant_id, "XL", 1, "student-1", "admin")

    @pytest.mark.parametrize(
        "qty,recipient,actor",
        [(0, "s", "a"), (-1, "s", "a"), (1, "", "a"), (1, "s", " ")],
    )
    async def test_rejects_bad_input(self, allocation_service, variant_id, qty, recipient, actor):
        with pytest.raises(ValidationError):
            await allocation_service.allocate(variant_id, "M", qty, recipient, actor)

    async def test_record_id_replay(self, allocation_service, variant_store, variant_id):
        first = await allocation_service.allocate(
            variant_id, "M", 2, "student-1", "admin", record_id="req-1"
        )
        second = await allocation_service.allocate(
            variant_id, "M", 2, "student-1", "admin", record_id="req-1"
        )

        assert second == first
        assert (await variant_store.get_stock(variant_id)).for_size("M").quantity == 3
        assert await allocation_service.count_allocations(variant_id) == 1

    async def test_record_id_from_other_variant(
        self, allocation_service, variant_store, batch_id, variant_id
    ):
        other = await variant_store.create_variant("P2", batch_id, "Shirt", "White", {"S": 2})
        await allocation_service.allocate(variant_id, "M", 1, "s", "a", record_id="req-1")

        with pytest.raises(ValidationError):
            await allocation_service.allocate(other.id, "S", 1, "s", "a", record_id="req-1")

    async def test_concurrent_allocations_never_oversell(
        self, allocation_service, variant_store, batch_id
    ):
        variant = await variant_store.create_variant(
            "P1", batch_id, "Blazer", "Navy", {"M": 6}
        )

        results = await asyncio.gather(
            allocation_service.allocate(variant.id, "M", 5, "student-1", "admin"),
            allocation_service.allocate(variant.id, "M", 5, "student-2", "admin"),
            return_exceptions=True,
        )

        successes = [r for r in results if not isinstance(r, Exception)]
        failures = [r for r in results if isinstance(r, Exception)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert isinstance(failures[0], InsufficientStockError)
        assert failures[0].current_stock == 1

        level = (await variant_store.get_stock(variant.id)).for_size("M")
        assert (level.quantity, level.allocated) == (1, 5)
        assert await allocation_service.count_allocations(variant.id) == 1

    async def test_many_small_allocations_all_land(self, store, variant_store, batch_id):
        """Retries that lost the same race spread out instead of colliding again."""
        settings = Settings(
            transactions=TransactionSettings(max_attempts=8, retry_delay=0.005, retry_max_delay=0.1)
        )
        service = AllocationService(store, settings)
        variant = await variant_store.create_variant(
            "P1", batch_id, "Blazer", "Navy", {"M": 10}
        )

        results = await asyncio.gather(
            *(service.allocate(variant.id, "M", 1, f"student-{i}", "admin") for i in range(10)),
            return_exceptions=True,
        )

        assert [r for r in results if isinstance(r, Exception)] == []
        level = (await variant_store.get_stock(variant.id)).for_size("M")
        assert (level.quantity, level.allocated) == (0, 10)
        assert await service.count_allocations(variant.id) == 10


class TestHistory:
    async def test_history_oldest_first_with_pagination(self, allocation_service, variant_id):
        for recipient in ("s1", "s2", "s3"):
            await allocation_service.allocate(variant_id, "M", 1, recipient, "admin")

        history = await allocation_service.allocation_history(variant_id)
        assert [r.recipient_id for r in history] == ["s1", "s2", "s3"]

        page = await allocation_service.allocation_history(variant_id, limit=1, offset=1)
        assert [r.recipient_id for r in page] == ["s2"]
        assert await allocation_service.count_allocations(variant_id) == 3

    async def test_history_scoped_to_variant(self, allocation_service, variant_id):
        await allocation_service.allocate(variant_id, "M", 1, "s1", "admin")
        assert await allocation_service.allocation_history("other") == []
        assert await allocation_service.count_allocations("other") == 0

    async def test_default_page_size(self, store, variant_id, settings):
        settings.storage.history_page_size = 2
        service = AllocationService(store, settings)
        for recipient in ("s1", "s2", "s3"):
            await service.allocate(variant_id, "M", 1, recipient, "admin")

        assert len(await service.allocation_history(variant_id)) == 2
