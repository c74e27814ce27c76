"""Request DTOs for the inventory facade.

Pydantic v2 models that validate caller input before any store access.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from batchstock.core.entities.batch import BatchStatus
from batchstock.core.entities.stock import coerce_size_list


class SizeQuantityInput(BaseModel):
    """One size and its quantity."""

    size: str = Field(..., min_length=1, description="Size label, e.g. 'M'")
    quantity: int = Field(..., gt=0, description="Units for this size")


class VariantSizeInput(SizeQuantityInput):
    """Initial stock for one variant size."""

    reorder_level: int | None = Field(
        default=None, ge=0, description="Size-specific reorder level"
    )


class LineItemInput(BaseModel):
    """Line item of a new batch."""

    variant_type: str = Field(..., min_length=1, description="Variant type, e.g. 'Blazer'")
    color: str = Field(..., min_length=1, description="Color")
    unit_price: float = Field(..., gt=0, description="Price per unit")
    size_stocks: list[SizeQuantityInput] = Field(
        ..., min_length=1, description="Per-size quantities"
    )

    @field_validator("size_stocks", mode="before")
    @classmethod
    def accept_size_map(cls, v: Any) -> Any:
        return coerce_size_list(v)


class CreateBatchRequest(BaseModel):
    """Request to create a batch."""

    name: str = Field(..., min_length=1, description="Batch name")
    type: str = Field(..., min_length=1, description="Batch type")
    line_items: list[LineItemInput] = Field(..., min_length=1)
    created_by: str = Field(default="", description="Actor creating the batch")


class DeductRequest(BaseModel):
    """Request to deduct one size from a batch."""

    batch_id: str = Field(..., min_length=1)
    variant_type: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class ListBatchesRequest(BaseModel):
    """Batch listing filter."""

    status: BatchStatus | None = Field(default=None, description="Only this status")


class CreateVariantRequest(BaseModel):
    """Request to create a variant from a batch."""

    product_id: str = Field(..., min_length=1)
    batch_id: str = Field(..., min_length=1, description="Source batch")
    variant_type: str = Field(..., min_length=1)
    color: str = Field(..., min_length=1)
    size_stocks: list[VariantSizeInput] = Field(..., min_length=1)
    created_by: str = Field(default="")
    default_reorder_level: int | None = Field(
        default=None, ge=0, description="Overrides the configured default"
    )

    @field_validator("size_stocks", mode="before")
    @classmethod
    def accept_size_map(cls, v: Any) -> Any:
        return coerce_size_list(v)


class CheckAvailabilityRequest(BaseModel):
    """Advisory stock check."""

    variant_id: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)


class AllocateRequest(BaseModel):
    """Request to issue variant stock to a recipient."""

    variant_id: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    recipient_id: str = Field(..., min_length=1, description="Recipient or order")
    actor: str = Field(..., min_length=1)
    record_id: str | None = Field(
        default=None, min_length=1, description="Idempotency key for retries"
    )


class ReorderRequest(BaseModel):
    """Request to move stock from a batch into a variant."""

    variant_id: str = Field(..., min_length=1)
    batch_id: str | None = Field(
        default=None, min_length=1, description="Defaults to the variant's origin batch"
    )
    size: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    actor: str = Field(..., min_length=1)
    record_id: str | None = Field(default=None, min_length=1)


class SetReorderLevelRequest(BaseModel):
    """Request to change the reorder level of one variant size."""

    variant_id: str = Field(..., min_length=1)
    size: str = Field(..., min_length=1)
    reorder_level: int | None = Field(..., ge=0, description="None clears the override")


class HistoryRequest(BaseModel):
    """Paginated audit history of one variant."""

    variant_id: str = Field(..., min_length=1)
    limit: int | None = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)
