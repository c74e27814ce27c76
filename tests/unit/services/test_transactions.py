"""Tests for the bounded-retry transaction wrapper."""

from unittest.mock import AsyncMock

import pytest

from batchstock.config.settings import TransactionSettings
from batchstock.core.exceptions import ConflictError, InsufficientStockError
from batchstock.core.interfaces import DocRef
from batchstock.core.services.transactions import (
    allocation_ref,
    batch_ref,
    reorder_ref,
    run_transaction,
    variant_ref,
)

FAST = TransactionSettings(max_attempts=3, retry_delay=0.001, retry_max_delay=0.002)
REF = DocRef("variants", "v1")


def _noop(snapshot):
    return {}


class TestRefs:
    def test_collections(self):
        assert str(batch_ref("b1")) == "batches/b1"
        assert str(variant_ref("v1")) == "variants/v1"
        assert str(allocation_ref("r1")) == "allocation_records/r1"
        assert str(reorder_ref("r1")) == "reorder_records/r1"


class TestRunTransaction:
    async def test_success_first_attempt(self):
        store = AsyncMock()
        store.transaction.return_value = {REF: {"id": "v1"}}

        writes = await run_transaction(store, [REF], _noop, operation="test", settings=FAST)

        assert writes == {REF: {"id": "v1"}}
        store.transaction.assert_awaited_once_with([REF], _noop)

    async def test_retries_conflicts(self):
        store = AsyncMock()
        store.transaction.side_effect = [ConflictError(str(REF)), {REF: {"id": "v1"}}]

        writes = await run_transaction(store, [REF], _noop, operation="test", settings=FAST)

        assert writes == {REF: {"id": "v1"}}
        assert store.transaction.await_count == 2

    async def test_exhausted_conflicts_raise_with_attempts(self):
        store = AsyncMock()
        store.transaction.side_effect = ConflictError(str(REF))

        with pytest.raises(ConflictError) as exc_info:
            await run_transaction(store, [REF], _noop, operation="test", settings=FAST)

        assert store.transaction.await_count == 3
        assert exc_info.value.details == {"resource": "variants/v1", "attempts": 3}

    async def test_business_errors_not_retried(self):
        store = AsyncMock()
        store.transaction.side_effect = InsufficientStockError("v1", "M", 5, 1)

        with pytest.raises(InsufficientStockError):
            await run_transaction(store, [REF], _noop, operation="test", settings=FAST)

        assert store.transaction.await_count == 1
