"""
Adapters from legacy document shapes to the canonical ones.

Older documents use camelCase keys, ``sizes`` as either a list or a
``{size: quantity}`` map, ``items``/``price`` on batches, string quantities,
and audit history embedded in the variant document. These functions are
pure; the migration use case decides when to write their output back.
"""

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from batchstock.core.interfaces import Document

# Legacy batch statuses that mean "no longer a stock source"
_CLOSED_STATUSES = {"closed", "completed", "archived"}


def _first(doc: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in doc and doc[key] is not None:
            return doc[key]
    return default


def _timestamp(value: Any) -> str | None:
    """ISO string from datetimes, ISO strings, or {seconds, nanoseconds} maps."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Mapping) and "seconds" in value:
        seconds = value["seconds"] + value.get("nanoseconds", 0) / 1e9
        return datetime.fromtimestamp(seconds, tz=UTC).isoformat()
    return str(value)


def _size_list(value: Any, variant: bool = False) -> list[dict[str, Any]]:
    if isinstance(value, Mapping):
        entries = [{"size": size, "quantity": qty} for size, qty in value.items()]
    else:
        entries = [dict(entry) for entry in value or []]

    normalized = []
    for entry in entries:
        out: dict[str, Any] = {
            "size": str(entry["size"]),
            "quantity": int(entry.get("quantity") or 0),
        }
        if variant:
            out["allocated"] = int(entry.get("allocated") or 0)
            level = _first(entry, "reorder_level", "reorderLevel")
            out["reorder_level"] = int(level) if level is not None else None
        normalized.append(out)
    return normalized


def is_legacy_batch(doc: Mapping[str, Any]) -> bool:
    return "line_items" not in doc


def is_legacy_variant(doc: Mapping[str, Any]) -> bool:
    return (
        "size_stocks" not in doc
        or "allocationHistory" in doc
        or "reorderHistory" in doc
    )


def normalize_batch_document(doc_id: str, doc: Mapping[str, Any]) -> Document:
    """Canonical batch document from a legacy one."""
    status = str(_first(doc, "status", default="active")).lower()
    items = _first(doc, "line_items", "items", default=[])
    batch: Document = {
        "id": doc_id,
        "name": _first(doc, "name", default=doc_id),
        "type": _first(doc, "type", default="unknown"),
        "status": "closed" if status in _CLOSED_STATUSES else "active",
        "created_by": _first(doc, "created_by", "createdBy", default=""),
        "created_at": _timestamp(_first(doc, "created_at", "createdAt")),
        "line_items": [
            {
                "variant_type": _first(item, "variant_type", "variantType"),
                "color": item.get("color"),
                "unit_price": float(_first(item, "unit_price", "price", default=0)),
                "size_stocks": _size_list(_first(item, "size_stocks", "sizes", default=[])),
            }
            for item in items
        ],
    }
    if batch["created_at"] is None:
        del batch["created_at"]
    return batch


def normalize_variant_document(
    doc_id: str, doc: Mapping[str, Any]
) -> tuple[Document, list[Document], list[Document]]:
    """
    Canonical variant document plus the audit records lifted out of it.

    Returns:
        (variant document, allocation record documents, reorder record documents)
    """
    variant: Document = {
        "id": doc_id,
        "product_id": _first(doc, "product_id", "productId", "uniformId"),
        "origin_batch_id": _first(doc, "origin_batch_id", "originBatchId", "batchId"),
        "variant_type": _first(doc, "variant_type", "variantType", "type"),
        "color": doc.get("color"),
        "size_stocks": _size_list(_first(doc, "size_stocks", "sizes", default=[]), variant=True),
        "created_by": _first(doc, "created_by", "createdBy", default=""),
        "created_at": _timestamp(_first(doc, "created_at", "createdAt")),
    }
    default_level = _first(doc, "default_reorder_level", "defaultReorderLevel", "reorderLevel")
    if default_level is not None:
        variant["default_reorder_level"] = int(default_level)
    if variant["created_at"] is None:
        del variant["created_at"]

    allocations = [
        {
            "id": _first(entry, "id", default=f"{doc_id}-alloc-{i}"),
            "variant_id": doc_id,
            "size": str(entry.get("size")),
            "quantity": int(entry.get("quantity") or 0),
            "recipient_id": _first(entry, "recipient_id", "recipientId", "studentId", default=""),
            "actor": _first(entry, "actor", "allocatedBy", default="unknown"),
            "at": _timestamp(_first(entry, "at", "allocatedAt", "timestamp")),
        }
        for i, entry in enumerate(doc.get("allocationHistory") or [])
    ]
    reorders = [
        {
            "id": _first(entry, "id", default=f"{doc_id}-reorder-{i}"),
            "variant_id": doc_id,
            "size": str(entry.get("size")),
            "quantity_added": int(_first(entry, "quantity_added", "quantityAdded", default=0)),
            "source_batch_id": _first(
                entry, "source_batch_id", "sourceBatchId", "batchId",
                default=variant["origin_batch_id"],
            ),
            "remaining_batch_stock": int(
                _first(entry, "remaining_batch_stock", "remainingBatchStock", default=0)
            ),
            "actor": _first(entry, "actor", "reorderedBy", default="unknown"),
            "at": _timestamp(_first(entry, "at", "reorderedAt", "timestamp")),
        }
        for i, entry in enumerate(doc.get("reorderHistory") or [])
    ]
    # Records without a usable timestamp fall back to the model default (now)
    for record in [*allocations, *reorders]:
        if record["at"] is None:
            del record["at"]
    return variant, allocations, reorders
