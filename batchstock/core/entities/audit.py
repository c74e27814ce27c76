"""Append-only audit records for stock movements."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from batchstock.core.entities.stock import utcnow


def new_record_id() -> str:
    """Generate a unique audit record id."""
    return uuid.uuid4().hex


class AllocationRecord(BaseModel):
    """Units of a variant size issued to a recipient."""

    model_config = ConfigDict(frozen=True)

    id: str
    variant_id: str
    size: str
    quantity: int = Field(gt=0)
    recipient_id: str
    actor: str
    at: datetime = Field(default_factory=utcnow)


class ReorderRecord(BaseModel):
    """Units moved from a batch into a variant size."""

    model_config = ConfigDict(frozen=True)

    id: str
    variant_id: str
    size: str
    quantity_added: int = Field(gt=0)
    source_batch_id: str
    remaining_batch_stock: int = Field(ge=0)  # batch size quantity after deduction
    actor: str
    at: datetime = Field(default_factory=utcnow)
