"""Batch ledger entities."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator

from batchstock.core.entities.stock import (
    SizeStock,
    coerce_size_list,
    ensure_unique_sizes,
    find_size,
    utcnow,
)


class BatchStatus(str, Enum):
    """Lifecycle of an inbound lot."""

    ACTIVE = "active"
    CLOSED = "closed"


class LineItem(BaseModel):
    """One variant type and color within a batch, broken down by size."""

    variant_type: str = Field(min_length=1)
    color: str = Field(min_length=1)
    unit_price: float = Field(gt=0)
    size_stocks: list[SizeStock] = Field(min_length=1)

    @field_validator("size_stocks", mode="before")
    @classmethod
    def accept_size_map(cls, v: Any) -> Any:
        return coerce_size_list(v)

    @field_validator("size_stocks")
    @classmethod
    def unique_sizes(cls, v: list[SizeStock]) -> list[SizeStock]:
        return ensure_unique_sizes(v)

    def matches(self, variant_type: str, color: str) -> bool:
        return self.variant_type == variant_type and self.color == color

    def find_size(self, size: str) -> SizeStock | None:
        return find_size(self.size_stocks, size)

    @property
    def total_quantity(self) -> int:
        return sum(s.quantity for s in self.size_stocks)

    @property
    def total_value(self) -> float:
        return self.total_quantity * self.unit_price


class Batch(BaseModel):
    """An inbound lot of stock for one product type."""

    id: str
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    status: BatchStatus = BatchStatus.ACTIVE
    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)
    line_items: list[LineItem] = Field(min_length=1)

    @field_validator("line_items")
    @classmethod
    def unique_lines(cls, v: list[LineItem]) -> list[LineItem]:
        seen: set[tuple[str, str]] = set()
        for item in v:
            key = (item.variant_type, item.color)
            if key in seen:
                raise ValueError(
                    f"duplicate line item {item.variant_type}/{item.color}"
                )
            seen.add(key)
        return v

    def find_line(self, variant_type: str, color: str) -> LineItem | None:
        for item in self.line_items:
            if item.matches(variant_type, color):
                return item
        return None

    @property
    def is_active(self) -> bool:
        return self.status == BatchStatus.ACTIVE

    @property
    def total_quantity(self) -> int:
        """Units remaining across every line and size."""
        return sum(item.total_quantity for item in self.line_items)

    @property
    def total_value(self) -> float:
        """Remaining stock valued at unit price."""
        return sum(item.total_value for item in self.line_items)
