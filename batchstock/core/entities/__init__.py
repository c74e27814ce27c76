"""Core domain entities."""

from batchstock.core.entities.alert import (
    AlertType,
    BatchStockAlert,
    BatchThresholds,
    StockAlertReport,
    VariantStockAlert,
)
from batchstock.core.entities.audit import (
    AllocationRecord,
    ReorderRecord,
    new_record_id,
)
from batchstock.core.entities.batch import Batch, BatchStatus, LineItem
from batchstock.core.entities.stock import (
    Availability,
    SizeStock,
    StockStatus,
    VariantSizeStock,
    stock_status,
)
from batchstock.core.entities.variant import (
    ProductVariant,
    SizeStockLevel,
    VariantStockReport,
)

__all__ = [
    # Stock entities
    "SizeStock",
    "VariantSizeStock",
    "StockStatus",
    "Availability",
    "stock_status",
    # Batch entities
    "Batch",
    "BatchStatus",
    "LineItem",
    # Variant entities
    "ProductVariant",
    "SizeStockLevel",
    "VariantStockReport",
    # Audit entities
    "AllocationRecord",
    "ReorderRecord",
    "new_record_id",
    # Alert entities
    "AlertType",
    "VariantStockAlert",
    "BatchStockAlert",
    "BatchThresholds",
    "StockAlertReport",
]
