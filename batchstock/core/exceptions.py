"""
Domain exceptions for the batchstock engine.

Every failure the engine reports is a StockError carrying a machine-readable
code, an error kind for the caller-facing result envelope, and context details.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Caller-facing failure categories."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INSUFFICIENT_STOCK = "INSUFFICIENT_STOCK"
    CONFLICT = "CONFLICT"
    UNKNOWN = "UNKNOWN"


class StockError(Exception):
    """Base exception for all engine errors."""

    error_kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to dictionary for result envelopes."""
        return {
            "error": self.code,
            "error_kind": self.error_kind.value,
            "message": self.message,
            "details": self.details,
        }


# Validation Exceptions
class ValidationError(StockError):
    """Input validation failed."""

    error_kind = ErrorKind.VALIDATION_ERROR

    def __init__(self, field: str, message: str, value: Any = None):
        super().__init__(
            f"Validation error for '{field}': {message}",
            code="VALIDATION_ERROR",
            details={
                "field": field,
                "message": message,
                "value": str(value)[:100] if value is not None else None,
            },
        )


class BatchClosedError(ValidationError):
    """Batch is closed and can no longer supply stock."""

    def __init__(self, batch_id: str):
        super().__init__(
            field="batch_id",
            message=f"Batch '{batch_id}' is closed",
            value=batch_id,
        )
        self.code = "BATCH_CLOSED"
        self.details["batch_id"] = batch_id


# Not-found Exceptions
class NotFoundError(StockError):
    """Base exception for missing batches, variants, lines, or sizes."""

    error_kind = ErrorKind.NOT_FOUND


class BatchNotFoundError(NotFoundError):
    """Batch not found in the ledger."""

    def __init__(self, batch_id: str):
        super().__init__(
            f"Batch not found: {batch_id}",
            code="BATCH_NOT_FOUND",
            details={"batch_id": batch_id},
        )


class VariantNotFoundError(NotFoundError):
    """Product variant not found."""

    def __init__(self, variant_id: str):
        super().__init__(
            f"Variant not found: {variant_id}",
            code="VARIANT_NOT_FOUND",
            details={"variant_id": variant_id},
        )


class LineItemNotFoundError(NotFoundError):
    """Batch has no line item for the variant type and color."""

    def __init__(self, batch_id: str, variant_type: str, color: str):
        super().__init__(
            f"Item {variant_type} with color {color} not found in batch {batch_id}",
            code="LINE_ITEM_NOT_FOUND",
            details={
                "batch_id": batch_id,
                "variant_type": variant_type,
                "color": color,
            },
        )


class SizeNotFoundError(NotFoundError):
    """Size not present on a batch line item or variant."""

    def __init__(self, owner_id: str, size: str):
        super().__init__(
            f"Size {size} not found on {owner_id}",
            code="SIZE_NOT_FOUND",
            details={"owner_id": owner_id, "size": size},
        )


# Stock Exceptions
class InsufficientStockError(StockError):
    """Requested quantity exceeds the stock on hand."""

    error_kind = ErrorKind.INSUFFICIENT_STOCK

    def __init__(self, owner_id: str, size: str, requested: int, current_stock: int):
        super().__init__(
            f"Not enough stock for size {size} on {owner_id}: "
            f"requested {requested}, available {current_stock}",
            code="INSUFFICIENT_STOCK",
            details={
                "owner_id": owner_id,
                "size": size,
                "requested": requested,
                "current_stock": current_stock,
            },
        )

    @property
    def current_stock(self) -> int:
        """Stock on hand when the request was rejected."""
        return self.details["current_stock"]


class ConflictError(StockError):
    """Optimistic precondition failed (documents changed since read)."""

    error_kind = ErrorKind.CONFLICT

    def __init__(self, resource: str, attempts: int = 1):
        super().__init__(
            f"Concurrent modification of {resource} (after {attempts} attempt(s))",
            code="CONCURRENT_MODIFICATION",
            details={"resource": resource, "attempts": attempts},
        )


# Storage Exceptions
class StorageError(StockError):
    """Base exception for storage backend failures."""

    error_kind = ErrorKind.UNKNOWN


class DatabaseError(StorageError):
    """Database operation failed."""

    def __init__(self, operation: str, error: str):
        super().__init__(
            f"Database error during {operation}: {error}",
            code="DATABASE_ERROR",
            details={"operation": operation, "error": error},
        )


class ConfigurationError(StockError):
    """Configuration error."""

    pass
