"""
Application layer - Use cases, DTOs, and the inventory facade.

This layer orchestrates business logic by:
1. Defining request DTOs and the result envelope
2. Implementing use cases that coordinate core services
3. Wiring a document store into the InventoryService facade
"""

from batchstock.application.dto import (
    AllocateRequest,
    CheckAvailabilityRequest,
    CreateBatchRequest,
    CreateVariantRequest,
    DeductRequest,
    HistoryRequest,
    LineItemInput,
    ListBatchesRequest,
    OperationResult,
    ReorderRequest,
    SetReorderLevelRequest,
)
from batchstock.application.services import InventoryService, create_inventory_service

__all__ = [
    # Request DTOs
    "CreateBatchRequest",
    "LineItemInput",
    "DeductRequest",
    "ListBatchesRequest",
    "CreateVariantRequest",
    "CheckAvailabilityRequest",
    "AllocateRequest",
    "ReorderRequest",
    "SetReorderLevelRequest",
    "HistoryRequest",
    # Result envelope
    "OperationResult",
    # Facade
    "InventoryService",
    "create_inventory_service",
]
