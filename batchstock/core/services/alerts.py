"""
Stock Alert Evaluator.

Read-only scans over both tiers. Results are snapshots and must never gate
a mutation.
"""

from __future__ import annotations

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.alert import (
    AlertType,
    BatchStockAlert,
    BatchThresholds,
    StockAlertReport,
    VariantStockAlert,
)
from batchstock.core.entities.batch import Batch
from batchstock.core.entities.stock import stock_status
from batchstock.core.entities.variant import ProductVariant
from batchstock.core.interfaces import IDocumentStore
from batchstock.core.services.transactions import BATCHES, VARIANTS

logger = get_logger(__name__)


class StockAlertEvaluator:
    """Derives LOW_STOCK / OUT_OF_STOCK alerts from current quantities."""

    def __init__(self, store: IDocumentStore, settings: Settings | None = None) -> None:
        self._store = store
        self._settings = settings or get_settings()

    def default_thresholds(self) -> BatchThresholds:
        """Batch thresholds from configuration."""
        alerts = self._settings.alerts
        return BatchThresholds(
            default=alerts.batch_default_threshold,
            by_size=dict(alerts.batch_size_thresholds),
        )

    async def scan_variant_alerts(self) -> list[VariantStockAlert]:
        """Alert for every variant size at or below its reorder level."""
        docs = await self._store.list(VARIANTS)
        alerts: list[VariantStockAlert] = []

        for doc in docs:
            variant = ProductVariant.model_validate(doc)
            for stock in variant.size_stocks:
                level = variant.reorder_level_for(stock)
                alert_type = AlertType.from_status(stock_status(stock.quantity, level))
                if alert_type is None:
                    continue
                alerts.append(
                    VariantStockAlert(
                        variant_id=variant.id,
                        product_id=variant.product_id,
                        variant_type=variant.variant_type,
                        color=variant.color,
                        size=stock.size,
                        current_stock=stock.quantity,
                        reorder_level=level,
                        alert_type=alert_type,
                    )
                )

        logger.info("variant_alert_scan_complete", variants=len(docs), alerts=len(alerts))
        return alerts

    async def scan_batch_alerts(
        self, thresholds: BatchThresholds | None = None
    ) -> list[BatchStockAlert]:
        """Alert for every active batch size at or below its threshold."""
        thresholds = thresholds or self.default_thresholds()
        docs = await self._store.list(BATCHES)
        alerts: list[BatchStockAlert] = []

        for doc in docs:
            batch = Batch.model_validate(doc)
            if not batch.is_active:
                continue
            for item in batch.line_items:
                for stock in item.size_stocks:
                    threshold = thresholds.threshold_for(batch.id, stock.size)
                    alert_type = AlertType.from_status(
                        stock_status(stock.quantity, threshold)
                    )
                    if alert_type is None:
                        continue
                    alerts.append(
                        BatchStockAlert(
                            batch_id=batch.id,
                            batch_name=batch.name,
                            variant_type=item.variant_type,
                            color=item.color,
                            size=stock.size,
                            current_stock=stock.quantity,
                            threshold=threshold,
                            alert_type=alert_type,
                        )
                    )

        logger.info("batch_alert_scan_complete", batches=len(docs), alerts=len(alerts))
        return alerts

    async def evaluate_all(self, thresholds: BatchThresholds | None = None) -> StockAlertReport:
        """Run both scans."""
        report = StockAlertReport(
            variant_alerts=await self.scan_variant_alerts(),
            batch_alerts=await self.scan_batch_alerts(thresholds),
        )
        logger.info(
            "stock_alert_evaluation_complete",
            out_of_stock=report.out_of_stock_count,
            low_stock=report.low_stock_count,
        )
        return report
