"""Create Batch Use Case - registers an inbound lot."""

from batchstock.application.dto.requests import CreateBatchRequest
from batchstock.config import get_logger
from batchstock.core.entities.batch import Batch
from batchstock.core.services import BatchLedger

logger = get_logger(__name__)


class CreateBatchUseCase:
    """Create an active batch and return it as stored."""

    def __init__(self, ledger: BatchLedger):
        self._ledger = ledger

    async def execute(self, request: CreateBatchRequest) -> Batch:
        """Execute create batch use case."""
        logger.info(
            "create_batch_started",
            name=request.name,
            line_items=len(request.line_items),
        )

        batch_id = await self._ledger.create_batch(
            name=request.name,
            batch_type=request.type,
            line_items=[item.model_dump() for item in request.line_items],
            created_by=request.created_by,
        )
        batch = await self._ledger.get_batch(batch_id)

        logger.info(
            "create_batch_complete",
            batch_id=batch.id,
            total_quantity=batch.total_quantity,
            total_value=batch.total_value,
        )
        return batch
