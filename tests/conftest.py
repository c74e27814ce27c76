"""Pytest configuration and fixtures."""

from collections.abc import Generator

import pytest

from batchstock.config import Settings, reset_settings
from batchstock.config.settings import StorageSettings, TransactionSettings
from batchstock.core.services import (
    AllocationService,
    BatchLedger,
    ReorderService,
    StockAlertEvaluator,
    VariantStockStore,
)
from batchstock.infrastructure.storage.memory import InMemoryDocumentStore


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Never leak the cached settings between tests."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings with fast conflict retries and a temp data dir."""
    return Settings(
        transactions=TransactionSettings(max_attempts=5, retry_delay=0.001, retry_max_delay=0.01),
        storage=StorageSettings(data_dir=tmp_path, history_page_size=50),
    )


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def ledger(store, settings) -> BatchLedger:
    return BatchLedger(store, settings)


@pytest.fixture
def variant_store(store, settings) -> VariantStockStore:
    return VariantStockStore(store, settings)


@pytest.fixture
def allocation_service(store, settings) -> AllocationService:
    return AllocationService(store, settings)


@pytest.fixture
def reorder_service(store, settings) -> ReorderService:
    return ReorderService(store, settings)


@pytest.fixture
def alert_evaluator(store, settings) -> StockAlertEvaluator:
    return StockAlertEvaluator(store, settings)


@pytest.fixture
def blazer_line_items() -> list[dict]:
    """One Blazer/Navy line with M=20, L=8 and one Shirt/White line with S=3."""
    return [
        {
            "variant_type": "Blazer",
            "color": "Navy",
            "unit_price": 45.0,
            "size_stocks": [{"size": "M", "quantity": 20}, {"size": "L", "quantity": 8}],
        },
        {
            "variant_type": "Shirt",
            "color": "White",
            "unit_price": 12.5,
            "size_stocks": [{"size": "S", "quantity": 3}],
        },
    ]


@pytest.fixture
async def batch_id(ledger, blazer_line_items) -> str:
    """Id of an active batch created from blazer_line_items."""
    return await ledger.create_batch("B1", "uniform", blazer_line_items, created_by="admin")


@pytest.fixture
async def variant_id(variant_store, batch_id) -> str:
    """Blazer/Navy variant holding M=5, carved out of batch_id."""
    variant = await variant_store.create_variant(
        product_id="P1",
        batch_id=batch_id,
        variant_type="Blazer",
        color="Navy",
        size_stocks=[{"size": "M", "quantity": 5}],
        created_by="admin",
    )
    return variant.id
