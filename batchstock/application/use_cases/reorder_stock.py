"""Reorder Stock Use Case - replenishes a variant from a batch."""

from dataclasses import dataclass

from batchstock.application.dto.requests import ReorderRequest
from batchstock.config import get_logger
from batchstock.core.entities.audit import ReorderRecord
from batchstock.core.entities.variant import VariantStockReport
from batchstock.core.services import ReorderService, VariantStockStore

logger = get_logger(__name__)


@dataclass
class ReorderStockResult:
    """Result of a reorder."""

    record: ReorderRecord
    stock: VariantStockReport


class ReorderStockUseCase:
    """Move batch stock into a variant."""

    def __init__(
        self,
        reorder_service: ReorderService,
        variant_store: VariantStockStore,
    ):
        self._reorder = reorder_service
        self._variant_store = variant_store

    async def execute(self, request: ReorderRequest) -> ReorderStockResult:
        """Execute reorder stock use case."""
        logger.info(
            "reorder_stock_started",
            variant_id=request.variant_id,
            batch_id=request.batch_id,
            size=request.size,
            quantity=request.quantity,
        )

        record = await self._reorder.reorder(
            variant_id=request.variant_id,
            batch_id=request.batch_id,
            size=request.size,
            qty=request.quantity,
            actor=request.actor,
            record_id=request.record_id,
        )
        stock = await self._variant_store.get_stock(request.variant_id)

        logger.info(
            "reorder_stock_complete",
            record_id=record.id,
            remaining_batch_stock=record.remaining_batch_stock,
        )
        return ReorderStockResult(record=record, stock=stock)
