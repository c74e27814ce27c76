"""Boundary checks run before any store access."""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from batchstock.core.exceptions import ValidationError


def from_pydantic(exc: PydanticValidationError, prefix: str = "") -> ValidationError:
    """Convert the first pydantic error into a domain ValidationError."""
    errors = exc.errors()
    if not errors:
        return ValidationError(prefix or "input", str(exc))
    first = errors[0]
    loc = ".".join(str(part) for part in first.get("loc", ()))
    field = ".".join(p for p in (prefix, loc) if p) or "input"
    return ValidationError(field, first.get("msg", "invalid value"), first.get("input"))


def require_text(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must be a non-empty string", value)
    return value


def require_positive(field: str, value: Any) -> int:
    # bool is an int subclass
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError(field, "must be a positive integer", value)
    return value
