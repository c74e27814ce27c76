"""Create Variant Use Case - carves a sellable variant out of a batch."""

from batchstock.application.dto.requests import CreateVariantRequest
from batchstock.config import get_logger
from batchstock.core.entities.variant import ProductVariant
from batchstock.core.services import VariantStockStore

logger = get_logger(__name__)


class CreateVariantUseCase:
    """Create a variant, deducting every initial size from its batch at once."""

    def __init__(self, variant_store: VariantStockStore):
        self._variant_store = variant_store

    async def execute(self, request: CreateVariantRequest) -> ProductVariant:
        """Execute create variant use case."""
        logger.info(
            "create_variant_started",
            product_id=request.product_id,
            batch_id=request.batch_id,
            variant_type=request.variant_type,
            color=request.color,
        )

        variant = await self._variant_store.create_variant(
            product_id=request.product_id,
            batch_id=request.batch_id,
            variant_type=request.variant_type,
            color=request.color,
            size_stocks=[stock.model_dump() for stock in request.size_stocks],
            created_by=request.created_by,
            default_reorder_level=request.default_reorder_level,
        )

        logger.info(
            "create_variant_complete",
            variant_id=variant.id,
            total_quantity=sum(s.quantity for s in variant.size_stocks),
        )
        return variant
