"""
Integration tests for the full batch to variant stock flow.

Runs the same scenario against both storage backends through the facade.
"""

import asyncio

import pytest

from batchstock.application import InventoryService
from batchstock.core.exceptions import ErrorKind
from batchstock.infrastructure.storage.memory import InMemoryDocumentStore
from batchstock.infrastructure.storage.sqlite import ConnectionPool, SQLiteDocumentStore


@pytest.fixture(params=["memory", "sqlite"])
async def service(request, settings, tmp_path):
    if request.param == "memory":
        store = InMemoryDocumentStore()
    else:
        store = SQLiteDocumentStore(ConnectionPool(tmp_path / "flow.db", pool_size=2))
    service = InventoryService(store, settings)
    yield service
    await service.close()


async def _blazer_batch(service) -> str:
    result = await service.create_batch(
        "B1",
        "uniform",
        [{"variant_type": "Blazer", "color": "Navy", "unit_price": 45, "size_stocks": {"M": 20}}],
        "admin",
    )
    assert result.ok
    return result.data.id


class TestStockFlow:
    async def test_blazer_navy_scenario(self, service):
        batch_id = await _blazer_batch(service)

        created = await service.create_variant("P1", batch_id, "Blazer", "Navy", {"M": 5}, "admin")
        assert created.ok
        variant_id = created.data.id
        assert (await service.get_batch_stock(batch_id, "Blazer", "Navy", "M")).data[
            "current_stock"
        ] == 15

        allocated = await service.allocate(variant_id, "M", 3, "student-1", "admin")
        assert allocated.ok
        level = allocated.data["stock"].for_size("M")
        assert (level.quantity, level.allocated) == (2, 3)

        reordered = await service.reorder(variant_id, "M", 10, "admin", batch_id=batch_id)
        assert reordered.ok
        assert reordered.data["record"].remaining_batch_stock == 5
        assert reordered.data["stock"].for_size("M").quantity == 12
        assert (await service.get_batch_stock(batch_id, "Blazer", "Navy", "M")).data[
            "current_stock"
        ] == 5

        rejected = await service.allocate(variant_id, "M", 20, "student-2", "admin")
        assert not rejected.ok
        assert rejected.error_kind == ErrorKind.INSUFFICIENT_STOCK
        assert rejected.details["current_stock"] == 12

        stock = (await service.get_stock(variant_id)).data.for_size("M")
        assert (stock.quantity, stock.allocated) == (12, 3)
        assert (await service.allocation_history(variant_id)).data["total"] == 1
        assert (await service.reorder_history(variant_id)).data["total"] == 1

    async def test_over_reorder_leaves_both_tiers(self, service):
        batch_id = await _blazer_batch(service)
        variant_id = (
            await service.create_variant("P1", batch_id, "Blazer", "Navy", {"M": 5})
        ).data.id

        result = await service.reorder(variant_id, "M", 16, "admin")

        assert result.error_kind == ErrorKind.INSUFFICIENT_STOCK
        assert (await service.get_stock(variant_id)).data.for_size("M").quantity == 5
        assert (await service.get_batch_stock(batch_id, "Blazer", "Navy", "M")).data[
            "current_stock"
        ] == 15

    async def test_concurrent_allocations(self, service):
        batch_id = await _blazer_batch(service)
        variant_id = (
            await service.create_variant("P1", batch_id, "Blazer", "Navy", {"M": 6})
        ).data.id

        results = await asyncio.gather(
            service.allocate(variant_id, "M", 5, "student-1", "admin"),
            service.allocate(variant_id, "M", 5, "student-2", "admin"),
        )

        assert sorted(r.ok for r in results) == [False, True]
        failure = next(r for r in results if not r.ok)
        assert failure.error_kind in (ErrorKind.INSUFFICIENT_STOCK, ErrorKind.CONFLICT)

        level = (await service.get_stock(variant_id)).data.for_size("M")
        assert (level.quantity, level.allocated) == (1, 5)
        assert (await service.allocation_history(variant_id)).data["total"] == 1

    async def test_alerts_follow_stock(self, service):
        batch_id = await _blazer_batch(service)
        variant_id = (
            await service.create_variant("P1", batch_id, "Blazer", "Navy", {"M": 6})
        ).data.id

        assert (await service.scan_variant_alerts()).data == []

        await service.allocate(variant_id, "M", 6, "student-1", "admin")
        alerts = (await service.scan_variant_alerts()).data
        assert [a.alert_type.value for a in alerts] == ["OUT_OF_STOCK"]

        await service.reorder(variant_id, "M", 14, "admin")
        report = (await service.evaluate_alerts()).data
        assert report["variant_alerts"] == []
        assert [a.size for a in report["batch_alerts"]] == ["M"]
        assert report["batch_alerts"][0].alert_type.value == "OUT_OF_STOCK"
