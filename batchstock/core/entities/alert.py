"""Stock alert entities."""

from enum import Enum

from pydantic import BaseModel, Field

from batchstock.core.entities.stock import StockStatus


class AlertType(str, Enum):
    """Kinds of stock alert."""

    LOW_STOCK = "LOW_STOCK"
    OUT_OF_STOCK = "OUT_OF_STOCK"

    @classmethod
    def from_status(cls, status: StockStatus) -> "AlertType | None":
        """Alert for a derived status; None when the size is in stock."""
        if status == StockStatus.OUT_OF_STOCK:
            return cls.OUT_OF_STOCK
        if status == StockStatus.LOW_STOCK:
            return cls.LOW_STOCK
        return None


class VariantStockAlert(BaseModel):
    """A variant size at or below its reorder level."""

    variant_id: str
    product_id: str
    variant_type: str
    color: str
    size: str
    current_stock: int
    reorder_level: int
    alert_type: AlertType


class BatchStockAlert(BaseModel):
    """A batch line-item size at or below its threshold."""

    batch_id: str
    batch_name: str
    variant_type: str
    color: str
    size: str
    current_stock: int
    threshold: int
    alert_type: AlertType


class BatchThresholds(BaseModel):
    """
    Thresholds for batch alert scans.

    Resolution order: per-batch size override, per-size override, default.
    """

    default: int = Field(default=5, ge=0)
    by_size: dict[str, int] = Field(default_factory=dict)
    by_batch: dict[str, dict[str, int]] = Field(default_factory=dict)

    def threshold_for(self, batch_id: str, size: str) -> int:
        batch_overrides = self.by_batch.get(batch_id, {})
        if size in batch_overrides:
            return batch_overrides[size]
        return self.by_size.get(size, self.default)


class StockAlertReport(BaseModel):
    """Combined result of both alert scans."""

    variant_alerts: list[VariantStockAlert] = Field(default_factory=list)
    batch_alerts: list[BatchStockAlert] = Field(default_factory=list)

    @property
    def out_of_stock_count(self) -> int:
        return sum(
            1
            for alert in [*self.variant_alerts, *self.batch_alerts]
            if alert.alert_type == AlertType.OUT_OF_STOCK
        )

    @property
    def low_stock_count(self) -> int:
        return sum(
            1
            for alert in [*self.variant_alerts, *self.batch_alerts]
            if alert.alert_type == AlertType.LOW_STOCK
        )
