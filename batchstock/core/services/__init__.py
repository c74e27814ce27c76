"""Core services: the stock ledger, allocation, reorder and alert logic."""

from batchstock.core.services.alerts import StockAlertEvaluator
from batchstock.core.services.allocation import AllocationService
from batchstock.core.services.audit_log import AuditLog
from batchstock.core.services.batch_ledger import BatchLedger, apply_batch_deduction
from batchstock.core.services.reorder import ReorderService
from batchstock.core.services.transactions import run_transaction
from batchstock.core.services.variant_store import VariantStockStore

__all__ = [
    "BatchLedger",
    "apply_batch_deduction",
    "VariantStockStore",
    "AllocationService",
    "ReorderService",
    "StockAlertEvaluator",
    "AuditLog",
    "run_transaction",
]
