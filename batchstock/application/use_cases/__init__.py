"""Application use cases."""

from batchstock.application.use_cases.allocate_stock import (
    AllocateStockResult,
    AllocateStockUseCase,
)
from batchstock.application.use_cases.check_availability import CheckAvailabilityUseCase
from batchstock.application.use_cases.create_batch import CreateBatchUseCase
from batchstock.application.use_cases.create_variant import CreateVariantUseCase
from batchstock.application.use_cases.normalize_legacy_documents import (
    LegacyMigrationResult,
    NormalizeLegacyDocumentsUseCase,
)
from batchstock.application.use_cases.reorder_stock import (
    ReorderStockResult,
    ReorderStockUseCase,
)
from batchstock.application.use_cases.scan_stock_alerts import ScanStockAlertsUseCase

__all__ = [
    "CreateBatchUseCase",
    "CreateVariantUseCase",
    "AllocateStockUseCase",
    "AllocateStockResult",
    "ReorderStockUseCase",
    "ReorderStockResult",
    "CheckAvailabilityUseCase",
    "ScanStockAlertsUseCase",
    "NormalizeLegacyDocumentsUseCase",
    "LegacyMigrationResult",
]
