"""Per-size stock entities shared by batches and variants."""

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    """Timezone-aware current UTC time."""
    return datetime.now(UTC)


class StockStatus(str, Enum):
    """Derived status of a size stock. Never persisted."""

    IN_STOCK = "IN_STOCK"
    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"


# Worst status wins when rolling sizes up to a variant
_STATUS_SEVERITY = {
    StockStatus.IN_STOCK: 0,
    StockStatus.LOW_STOCK: 1,
    StockStatus.OUT_OF_STOCK: 2,
}


def stock_status(quantity: int, reorder_level: int) -> StockStatus:
    """Classify a quantity against its reorder level."""
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def worst_status(statuses: Iterable[StockStatus]) -> StockStatus:
    """Most severe status of a collection (IN_STOCK when empty)."""
    return max(statuses, key=_STATUS_SEVERITY.__getitem__, default=StockStatus.IN_STOCK)


class SizeStock(BaseModel):
    """Quantity held for a single size."""

    size: str = Field(min_length=1)
    quantity: int = Field(ge=0)


class VariantSizeStock(SizeStock):
    """Sellable stock for one size of a variant."""

    allocated: int = Field(default=0, ge=0)  # cumulative issuance
    reorder_level: int | None = Field(default=None, ge=0)


class Availability(BaseModel):
    """Advisory answer to 'can qty units be issued right now?'."""

    available: bool
    current_stock: int
    requested: int


def coerce_size_list(value: Any) -> Any:
    """
    Accept the legacy ``{size: quantity}`` map as well as the canonical list.

    Lists pass through untouched; pydantic handles string quantities.
    """
    if isinstance(value, Mapping):
        return [{"size": size, "quantity": qty} for size, qty in value.items()]
    return value


S = TypeVar("S", bound=SizeStock)


def ensure_unique_sizes(stocks: list[S]) -> list[S]:
    """Reject size lists that repeat a size."""
    seen: set[str] = set()
    for stock in stocks:
        if stock.size in seen:
            raise ValueError(f"duplicate size '{stock.size}'")
        seen.add(stock.size)
    return stocks


def find_size(stocks: Iterable[S], size: str) -> S | None:
    """Find the entry for ``size``, if present."""
    for stock in stocks:
        if stock.size == size:
            return stock
    return None
