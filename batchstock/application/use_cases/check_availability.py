"""Check Availability Use Case - advisory stock lookup."""

from batchstock.application.dto.requests import CheckAvailabilityRequest
from batchstock.config import get_logger
from batchstock.core.entities.stock import Availability
from batchstock.core.services import AllocationService

logger = get_logger(__name__)


class CheckAvailabilityUseCase:
    """Answer whether a quantity could be allocated right now."""

    def __init__(self, allocation_service: AllocationService):
        self._allocation = allocation_service

    async def execute(self, request: CheckAvailabilityRequest) -> Availability:
        availability = await self._allocation.check_availability(
            request.variant_id, request.size, request.quantity
        )
        logger.debug(
            "availability_checked",
            variant_id=request.variant_id,
            size=request.size,
            available=availability.available,
            current_stock=availability.current_stock,
        )
        return availability
