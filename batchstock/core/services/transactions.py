"""
Bounded-retry wrapper around optimistic store transactions.

Mutators are re-run against a fresh snapshot on every attempt, so they must
be pure functions of the snapshot they receive.
"""

from collections.abc import Callable, Sequence
from typing import Any

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from batchstock.config import get_logger
from batchstock.config.settings import TransactionSettings
from batchstock.core.exceptions import ConflictError
from batchstock.core.interfaces import DocRef, Document, IDocumentStore, Mutator

logger = get_logger(__name__)

BATCHES = "batches"
VARIANTS = "variants"
ALLOCATIONS = "allocation_records"
REORDERS = "reorder_records"


def batch_ref(batch_id: str) -> DocRef:
    return DocRef(BATCHES, batch_id)


def variant_ref(variant_id: str) -> DocRef:
    return DocRef(VARIANTS, variant_id)


def allocation_ref(record_id: str) -> DocRef:
    return DocRef(ALLOCATIONS, record_id)


def reorder_ref(record_id: str) -> DocRef:
    return DocRef(REORDERS, record_id)


def _log_retry(operation: str) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        logger.warning(
            "transaction_conflict_retry",
            operation=operation,
            attempt=retry_state.attempt_number,
            error=str(retry_state.outcome.exception()) if retry_state.outcome else None,
        )

    return before_sleep


def _get_retry_decorator(operation: str, settings: TransactionSettings) -> Any:
    """Get tenacity retry decorator for conflicting transactions."""
    return retry(
        stop=stop_after_attempt(settings.max_attempts),
        wait=wait_random_exponential(
            multiplier=settings.retry_delay,
            min=settings.retry_delay,
            max=settings.retry_max_delay,
        ),
        retry=retry_if_exception_type(ConflictError),
        before_sleep=_log_retry(operation),
        reraise=True,
    )


async def run_transaction(
    store: IDocumentStore,
    refs: Sequence[DocRef],
    mutator: Mutator,
    *,
    operation: str,
    settings: TransactionSettings,
) -> dict[DocRef, Document]:
    """
    Run ``mutator`` in a store transaction, retrying on ConflictError.

    Business errors raised by the mutator are not retried.

    Raises:
        ConflictError: If every attempt lost the optimistic race.
    """
    retry_decorator = _get_retry_decorator(operation, settings)
    try:
        return await retry_decorator(store.transaction)(refs, mutator)
    except ConflictError:
        resource = ", ".join(str(ref) for ref in refs)
        logger.warning(
            "transaction_conflict_exhausted",
            operation=operation,
            resource=resource,
            attempts=settings.max_attempts,
        )
        raise ConflictError(resource, attempts=settings.max_attempts) from None
