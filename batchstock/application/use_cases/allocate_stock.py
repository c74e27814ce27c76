"""Allocate Stock Use Case - issues variant units to a recipient."""

from dataclasses import dataclass

from batchstock.application.dto.requests import AllocateRequest
from batchstock.config import get_logger
from batchstock.core.entities.audit import AllocationRecord
from batchstock.core.entities.variant import VariantStockReport
from batchstock.core.services import AllocationService, VariantStockStore

logger = get_logger(__name__)


@dataclass
class AllocateStockResult:
    """Result of an allocation."""

    record: AllocationRecord
    stock: VariantStockReport


class AllocateStockUseCase:
    """Allocate stock and report the variant's stock afterwards."""

    def __init__(
        self,
        allocation_service: AllocationService,
        variant_store: VariantStockStore,
    ):
        self._allocation = allocation_service
        self._variant_store = variant_store

    async def execute(self, request: AllocateRequest) -> AllocateStockResult:
        """Execute allocate stock use case."""
        logger.info(
            "allocate_stock_started",
            variant_id=request.variant_id,
            size=request.size,
            quantity=request.quantity,
        )

        record = await self._allocation.allocate(
            variant_id=request.variant_id,
            size=request.size,
            qty=request.quantity,
            recipient_id=request.recipient_id,
            actor=request.actor,
            record_id=request.record_id,
        )
        # Snapshot read after commit; may already include later changes
        stock = await self._variant_store.get_stock(request.variant_id)

        logger.info(
            "allocate_stock_complete",
            record_id=record.id,
            variant_status=stock.status.value,
        )
        return AllocateStockResult(record=record, stock=stock)
