"""Sellable product variant entities."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from batchstock.core.entities.stock import (
    StockStatus,
    VariantSizeStock,
    coerce_size_list,
    ensure_unique_sizes,
    find_size,
    stock_status,
    utcnow,
    worst_status,
)


class ProductVariant(BaseModel):
    """A product configuration (type + color) with its own per-size stock."""

    id: str
    product_id: str = Field(min_length=1)
    origin_batch_id: str = Field(min_length=1)
    variant_type: str = Field(min_length=1)
    color: str = Field(min_length=1)
    size_stocks: list[VariantSizeStock] = Field(min_length=1)
    default_reorder_level: int = Field(default=5, ge=0)
    created_by: str = ""
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("size_stocks", mode="before")
    @classmethod
    def accept_size_map(cls, v: Any) -> Any:
        return coerce_size_list(v)

    @field_validator("size_stocks")
    @classmethod
    def unique_sizes(cls, v: list[VariantSizeStock]) -> list[VariantSizeStock]:
        return ensure_unique_sizes(v)

    def find_size(self, size: str) -> VariantSizeStock | None:
        return find_size(self.size_stocks, size)

    def reorder_level_for(self, stock: VariantSizeStock) -> int:
        """Size-specific reorder level, falling back to the variant default."""
        if stock.reorder_level is not None:
            return stock.reorder_level
        return self.default_reorder_level

    def stock_report(self) -> "VariantStockReport":
        levels = [
            SizeStockLevel(
                size=s.size,
                quantity=s.quantity,
                allocated=s.allocated,
                reorder_level=self.reorder_level_for(s),
                status=stock_status(s.quantity, self.reorder_level_for(s)),
            )
            for s in self.size_stocks
        ]
        return VariantStockReport(
            variant_id=self.id,
            product_id=self.product_id,
            variant_type=self.variant_type,
            color=self.color,
            sizes=levels,
            status=worst_status(level.status for level in levels),
        )


class SizeStockLevel(BaseModel):
    """Read model for one size of a variant."""

    size: str
    quantity: int
    allocated: int
    reorder_level: int
    status: StockStatus


class VariantStockReport(BaseModel):
    """Read model returned by getStock."""

    variant_id: str
    product_id: str
    variant_type: str
    color: str
    sizes: list[SizeStockLevel]
    status: StockStatus

    @property
    def total_quantity(self) -> int:
        return sum(level.quantity for level in self.sizes)

    def for_size(self, size: str) -> SizeStockLevel | None:
        for level in self.sizes:
            if level.size == size:
                return level
        return None
