"""Normalize Legacy Documents Use Case - one-time rewrite of old document shapes."""

from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from batchstock.config import Settings, get_logger, get_settings
from batchstock.core.entities.audit import AllocationRecord, ReorderRecord
from batchstock.core.entities.batch import Batch
from batchstock.core.entities.variant import ProductVariant
from batchstock.core.exceptions import ConflictError
from batchstock.core.interfaces import DocRef, Document, IDocumentStore
from batchstock.core.services.transactions import (
    ALLOCATIONS,
    BATCHES,
    REORDERS,
    VARIANTS,
    allocation_ref,
    batch_ref,
    reorder_ref,
    run_transaction,
    variant_ref,
)
from batchstock.core.services.validation import from_pydantic
from batchstock.infrastructure.storage.legacy import (
    is_legacy_batch,
    is_legacy_variant,
    normalize_batch_document,
    normalize_variant_document,
)

logger = get_logger(__name__)


@dataclass
class LegacyMigrationResult:
    """Counts of documents rewritten by the migration."""

    batches: int = 0
    variants: int = 0
    allocation_records: int = 0
    reorder_records: int = 0
    skipped: list[str] = field(default_factory=list)


class _HistoryChanged(Exception):
    """Embedded history grew after the record documents to write were chosen."""

    def __init__(self, doc: Document):
        super().__init__("embedded history changed")
        self.doc = doc


class NormalizeLegacyDocumentsUseCase:
    """
    Rewrite legacy batch and variant documents into the canonical shape.

    Each document is rewritten in its own store transaction from a fresh
    snapshot, so stock moved by a concurrent allocation or reorder is kept.
    A variant and the audit records lifted out of it commit together.

    Running it twice is harmless: canonical documents are left alone and
    lifted audit records keep stable ids. Documents without an ``id`` field
    cannot be addressed and are reported in ``skipped``.
    """

    def __init__(self, store: IDocumentStore, settings: Settings | None = None):
        self._store = store
        self._settings = settings or get_settings()

    async def execute(self) -> LegacyMigrationResult:
        """Execute legacy normalization."""
        logger.info("normalize_legacy_documents_started")
        result = LegacyMigrationResult()

        for doc in await self._store.list(BATCHES):
            if not is_legacy_batch(doc):
                continue
            doc_id = doc.get("id")
            if not doc_id:
                result.skipped.append(f"{BATCHES}/<missing id>")
                continue
            if await self._migrate_batch(doc_id):
                result.batches += 1

        for doc in await self._store.list(VARIANTS):
            if not is_legacy_variant(doc):
                continue
            doc_id = doc.get("id")
            if not doc_id:
                result.skipped.append(f"{VARIANTS}/<missing id>")
                continue
            writes = await self._migrate_variant(doc_id, doc)
            if variant_ref(doc_id) in writes:
                result.variants += 1
            result.allocation_records += sum(1 for r in writes if r.collection == ALLOCATIONS)
            result.reorder_records += sum(1 for r in writes if r.collection == REORDERS)

        if result.skipped:
            logger.warning("legacy_documents_skipped", skipped=result.skipped)

        logger.info(
            "normalize_legacy_documents_complete",
            batches=result.batches,
            variants=result.variants,
            allocation_records=result.allocation_records,
            reorder_records=result.reorder_records,
        )
        return result

    async def _migrate_batch(self, doc_id: str) -> bool:
        ref = batch_ref(doc_id)

        def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
            current = snapshot[ref]
            if current is None or not is_legacy_batch(current):
                return {}
            batch = self._validate(Batch, normalize_batch_document(doc_id, current), doc_id)
            return {ref: batch.model_dump(mode="json")}

        writes = await run_transaction(
            self._store,
            [ref],
            mutate,
            operation="normalize_batch",
            settings=self._settings.transactions,
        )
        return ref in writes

    async def _migrate_variant(self, doc_id: str, doc: Document) -> dict[DocRef, Document]:
        v_ref = variant_ref(doc_id)
        attempts = self._settings.transactions.max_attempts

        for _ in range(attempts):
            # The record refs come from the history seen so far; a transaction
            # that finds more entries is restarted with the wider ref set.
            _, seen_allocations, seen_reorders = normalize_variant_document(doc_id, doc)
            record_refs = [allocation_ref(raw["id"]) for raw in seen_allocations]
            record_refs += [reorder_ref(raw["id"]) for raw in seen_reorders]
            refs = [v_ref, *record_refs]

            def mutate(snapshot: dict[DocRef, Document | None]) -> dict[DocRef, Document]:
                current = snapshot[v_ref]
                if current is None or not is_legacy_variant(current):
                    return {}
                variant_doc, allocations, reorders = normalize_variant_document(doc_id, current)
                lifted = [(allocation_ref(raw["id"]), AllocationRecord, raw) for raw in allocations]
                lifted += [(reorder_ref(raw["id"]), ReorderRecord, raw) for raw in reorders]
                if any(ref not in snapshot for ref, _, _ in lifted):
                    raise _HistoryChanged(current)

                writes = {
                    ref: self._validate(model, raw, doc_id).model_dump(mode="json")
                    for ref, model, raw in lifted
                }
                variant = self._validate(ProductVariant, variant_doc, doc_id)
                writes[v_ref] = variant.model_dump(mode="json")
                return writes

            try:
                return await run_transaction(
                    self._store,
                    refs,
                    mutate,
                    operation="normalize_variant",
                    settings=self._settings.transactions,
                )
            except _HistoryChanged as e:
                logger.info("legacy_history_changed", variant_id=doc_id)
                doc = e.doc

        raise ConflictError(str(v_ref), attempts=attempts)

    @staticmethod
    def _validate(model, raw, doc_id):
        try:
            return model.model_validate(raw)
        except PydanticValidationError as e:
            raise from_pydantic(e, doc_id) from None
