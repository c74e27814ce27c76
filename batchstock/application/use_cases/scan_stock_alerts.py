"""Scan Stock Alerts Use Case - low and out-of-stock signals for both tiers."""

from batchstock.config import get_logger
from batchstock.core.entities.alert import BatchThresholds, StockAlertReport
from batchstock.core.services import StockAlertEvaluator

logger = get_logger(__name__)


class ScanStockAlertsUseCase:
    """Run the variant and batch scans and combine them into one report."""

    def __init__(self, evaluator: StockAlertEvaluator):
        self._evaluator = evaluator

    async def execute(self, thresholds: BatchThresholds | None = None) -> StockAlertReport:
        """Execute stock alert scan."""
        logger.info("scan_stock_alerts_started", custom_thresholds=thresholds is not None)

        report = await self._evaluator.evaluate_all(thresholds)

        logger.info(
            "scan_stock_alerts_complete",
            variant_alerts=len(report.variant_alerts),
            batch_alerts=len(report.batch_alerts),
        )
        return report
