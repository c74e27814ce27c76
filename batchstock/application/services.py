"""
Inventory facade and its factory.

This module wires a document store to the core services and use cases and
is the only place where exceptions become result envelopes.

Clean Architecture: Application layer orchestrates DI, not core layer.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from batchstock.application.dto.requests import (
    AllocateRequest,
    CheckAvailabilityRequest,
    CreateBatchRequest,
    CreateVariantRequest,
    DeductRequest,
    HistoryRequest,
    ListBatchesRequest,
    ReorderRequest,
    SetReorderLevelRequest,
)
from batchstock.application.dto.responses import OperationResult
from batchstock.application.use_cases import (
    AllocateStockUseCase,
    CheckAvailabilityUseCase,
    CreateBatchUseCase,
    CreateVariantUseCase,
    NormalizeLegacyDocumentsUseCase,
    ReorderStockUseCase,
    ScanStockAlertsUseCase,
)
from batchstock.config import Settings, get_logger, get_settings, operation_context
from batchstock.core.entities.alert import BatchThresholds
from batchstock.core.exceptions import ConflictError, ErrorKind, StockError
from batchstock.core.interfaces import IDocumentStore
from batchstock.core.services import (
    AllocationService,
    BatchLedger,
    ReorderService,
    StockAlertEvaluator,
    VariantStockStore,
)
from batchstock.core.services.validation import from_pydantic

logger = get_logger(__name__)


class InventoryService:
    """
    Caller-facing entry point.

    Every method takes primitives, validates them with a request model and
    returns an OperationResult; no exception escapes.
    """

    def __init__(self, store: IDocumentStore, settings: Settings | None = None):
        self._store = store
        self._settings = settings or get_settings()

        self.ledger = BatchLedger(store, self._settings)
        self.variants = VariantStockStore(store, self._settings)
        self.allocation = AllocationService(store, self._settings)
        self.reorders = ReorderService(store, self._settings)
        self.alerts = StockAlertEvaluator(store, self._settings)

        self._create_batch = CreateBatchUseCase(self.ledger)
        self._create_variant = CreateVariantUseCase(self.variants)
        self._allocate = AllocateStockUseCase(self.allocation, self.variants)
        self._reorder = ReorderStockUseCase(self.reorders, self.variants)
        self._check_availability = CheckAvailabilityUseCase(self.allocation)
        self._scan_alerts = ScanStockAlertsUseCase(self.alerts)
        self._normalize_legacy = NormalizeLegacyDocumentsUseCase(store, self._settings)

    @property
    def store(self) -> IDocumentStore:
        return self._store

    async def close(self) -> None:
        await self._store.close()

    async def _call(
        self, operation: str, action: Callable[[], Awaitable[Any]]
    ) -> OperationResult:
        with operation_context(operation):
            return await self._run(operation, action)

    async def _run(
        self, operation: str, action: Callable[[], Awaitable[Any]]
    ) -> OperationResult:
        try:
            return OperationResult.success(await action())
        except PydanticValidationError as e:
            error = from_pydantic(e)
            logger.info("operation_invalid", field=error.details["field"])
            return OperationResult.from_error(error)
        except ConflictError as e:
            logger.warning("operation_conflict", **e.details)
            return OperationResult.from_error(e)
        except StockError as e:
            if e.error_kind == ErrorKind.UNKNOWN:
                logger.error("operation_failed", error=e.message)
            else:
                logger.info("operation_rejected", code=e.code)
            return OperationResult.from_error(e)
        except Exception as e:
            logger.exception("operation_error", error=str(e))
            return OperationResult.failure(
                ErrorKind.UNKNOWN,
                f"Unexpected error during {operation}",
                {"error": type(e).__name__},
            )

    # Batches

    async def create_batch(
        self,
        name: str,
        batch_type: str,
        line_items: list[dict[str, Any]],
        created_by: str = "",
    ) -> OperationResult:
        return await self._call(
            "create_batch",
            lambda: self._create_batch.execute(
                CreateBatchRequest(
                    name=name, type=batch_type, line_items=line_items, created_by=created_by
                )
            ),
        )

    async def get_batch(self, batch_id: str) -> OperationResult:
        return await self._call("get_batch", lambda: self.ledger.get_batch(batch_id))

    async def list_batches(self, status: str | None = None) -> OperationResult:
        async def action() -> Any:
            request = ListBatchesRequest(status=status)
            return await self.ledger.list_batches(request.status)

        return await self._call("list_batches", action)

    async def get_batch_stock(
        self, batch_id: str, variant_type: str, color: str, size: str
    ) -> OperationResult:
        async def action() -> Any:
            quantity = await self.ledger.get_batch_stock(batch_id, variant_type, color, size)
            return {"batch_id": batch_id, "size": size, "current_stock": quantity}

        return await self._call("get_batch_stock", action)

    async def deduct_from_batch(
        self, batch_id: str, variant_type: str, color: str, size: str, qty: int
    ) -> OperationResult:
        async def action() -> Any:
            request = DeductRequest(
                batch_id=batch_id, variant_type=variant_type, color=color, size=size, quantity=qty
            )
            remaining = await self.ledger.deduct(
                request.batch_id, request.variant_type, request.color, request.size, request.quantity
            )
            return {"batch_id": batch_id, "size": size, "remaining": remaining}

        return await self._call("deduct_from_batch", action)

    async def close_batch(self, batch_id: str) -> OperationResult:
        return await self._call("close_batch", lambda: self.ledger.close_batch(batch_id))

    # Variants

    async def create_variant(
        self,
        product_id: str,
        batch_id: str,
        variant_type: str,
        color: str,
        size_stocks: list[dict[str, Any]] | dict[str, int],
        created_by: str = "",
        default_reorder_level: int | None = None,
    ) -> OperationResult:
        return await self._call(
            "create_variant",
            lambda: self._create_variant.execute(
                CreateVariantRequest(
                    product_id=product_id,
                    batch_id=batch_id,
                    variant_type=variant_type,
                    color=color,
                    size_stocks=size_stocks,
                    created_by=created_by,
                    default_reorder_level=default_reorder_level,
                )
            ),
        )

    async def get_variant(self, variant_id: str) -> OperationResult:
        return await self._call("get_variant", lambda: self.variants.get_variant(variant_id))

    async def list_variants(self, product_id: str | None = None) -> OperationResult:
        return await self._call("list_variants", lambda: self.variants.list_variants(product_id))

    async def get_stock(self, variant_id: str) -> OperationResult:
        return await self._call("get_stock", lambda: self.variants.get_stock(variant_id))

    async def set_reorder_level(
        self, variant_id: str, size: str, reorder_level: int | None
    ) -> OperationResult:
        async def action() -> Any:
            request = SetReorderLevelRequest(
                variant_id=variant_id, size=size, reorder_level=reorder_level
            )
            return await self.variants.set_reorder_level(
                request.variant_id, request.size, request.reorder_level
            )

        return await self._call("set_reorder_level", action)

    # Allocation

    async def check_availability(self, variant_id: str, size: str, qty: int) -> OperationResult:
        return await self._call(
            "check_availability",
            lambda: self._check_availability.execute(
                CheckAvailabilityRequest(variant_id=variant_id, size=size, quantity=qty)
            ),
        )

    async def allocate(
        self,
        variant_id: str,
        size: str,
        qty: int,
        recipient_id: str,
        actor: str,
        record_id: str | None = None,
    ) -> OperationResult:
        async def action() -> Any:
            result = await self._allocate.execute(
                AllocateRequest(
                    variant_id=variant_id,
                    size=size,
                    quantity=qty,
                    recipient_id=recipient_id,
                    actor=actor,
                    record_id=record_id,
                )
            )
            return {"record": result.record, "stock": result.stock}

        return await self._call("allocate", action)

    async def allocation_history(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> OperationResult:
        async def action() -> Any:
            request = HistoryRequest(variant_id=variant_id, limit=limit, offset=offset)
            records = await self.allocation.allocation_history(
                request.variant_id, limit=request.limit, offset=request.offset
            )
            total = await self.allocation.count_allocations(request.variant_id)
            return {"records": records, "total": total}

        return await self._call("allocation_history", action)

    # Reorder

    async def reorder(
        self,
        variant_id: str,
        size: str,
        qty: int,
        actor: str,
        batch_id: str | None = None,
        record_id: str | None = None,
    ) -> OperationResult:
        async def action() -> Any:
            result = await self._reorder.execute(
                ReorderRequest(
                    variant_id=variant_id,
                    batch_id=batch_id,
                    size=size,
                    quantity=qty,
                    actor=actor,
                    record_id=record_id,
                )
            )
            return {"record": result.record, "stock": result.stock}

        return await self._call("reorder", action)

    async def suggested_reorder_quantity(self, variant_id: str, size: str) -> OperationResult:
        async def action() -> Any:
            variant = await self.variants.get_variant(variant_id)
            stock = variant.find_size(size)
            level = variant.reorder_level_for(stock) if stock else variant.default_reorder_level
            return {"size": size, "suggested_quantity": self.reorders.suggested_quantity(level)}

        return await self._call("suggested_reorder_quantity", action)

    async def reorder_history(
        self, variant_id: str, limit: int | None = None, offset: int = 0
    ) -> OperationResult:
        async def action() -> Any:
            request = HistoryRequest(variant_id=variant_id, limit=limit, offset=offset)
            records = await self.reorders.reorder_history(
                request.variant_id, limit=request.limit, offset=request.offset
            )
            total = await self.reorders.count_reorders(request.variant_id)
            return {"records": records, "total": total}

        return await self._call("reorder_history", action)

    # Alerts

    async def scan_variant_alerts(self) -> OperationResult:
        return await self._call("scan_variant_alerts", self.alerts.scan_variant_alerts)

    async def scan_batch_alerts(
        self, thresholds: BatchThresholds | dict[str, Any] | None = None
    ) -> OperationResult:
        async def action() -> Any:
            resolved = (
                BatchThresholds.model_validate(thresholds) if thresholds is not None else None
            )
            return await self.alerts.scan_batch_alerts(resolved)

        return await self._call("scan_batch_alerts", action)

    async def evaluate_alerts(
        self, thresholds: BatchThresholds | dict[str, Any] | None = None
    ) -> OperationResult:
        async def action() -> Any:
            resolved = (
                BatchThresholds.model_validate(thresholds) if thresholds is not None else None
            )
            report = await self._scan_alerts.execute(resolved)
            return {
                "variant_alerts": report.variant_alerts,
                "batch_alerts": report.batch_alerts,
                "out_of_stock_count": report.out_of_stock_count,
                "low_stock_count": report.low_stock_count,
            }

        return await self._call("evaluate_alerts", action)

    # Maintenance

    async def normalize_legacy_documents(self) -> OperationResult:
        return await self._call("normalize_legacy_documents", self._normalize_legacy.execute)


def create_inventory_service(
    store: IDocumentStore | None = None,
    settings: Settings | None = None,
) -> InventoryService:
    """
    Create an InventoryService.

    Args:
        store: Optional store override; defaults to the configured backend
        settings: Optional settings override

    Returns:
        Configured InventoryService
    """
    settings = settings or get_settings()
    if store is None:
        # Lazy import infrastructure to keep the core importable without adapters
        from batchstock.infrastructure.storage import create_document_store

        store = create_document_store(settings)
    return InventoryService(store, settings)
