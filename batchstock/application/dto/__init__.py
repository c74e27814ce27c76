"""Data transfer objects for the facade boundary."""

from batchstock.application.dto.requests import (
    AllocateRequest,
    CheckAvailabilityRequest,
    CreateBatchRequest,
    CreateVariantRequest,
    DeductRequest,
    HistoryRequest,
    LineItemInput,
    ListBatchesRequest,
    ReorderRequest,
    SetReorderLevelRequest,
    SizeQuantityInput,
    VariantSizeInput,
)
from batchstock.application.dto.responses import OperationResult

__all__ = [
    # Requests
    "SizeQuantityInput",
    "VariantSizeInput",
    "LineItemInput",
    "CreateBatchRequest",
    "DeductRequest",
    "ListBatchesRequest",
    "CreateVariantRequest",
    "CheckAvailabilityRequest",
    "AllocateRequest",
    "ReorderRequest",
    "SetReorderLevelRequest",
    "HistoryRequest",
    # Responses
    "OperationResult",
]
