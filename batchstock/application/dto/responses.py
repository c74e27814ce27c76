"""Response DTOs for the inventory facade.

Every facade call returns an OperationResult: ``{ok: true, data}`` on
success, ``{ok: false, errorKind, message, details}`` on failure.
"""

import dataclasses
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from batchstock.core.exceptions import ErrorKind, StockError


class OperationResult(BaseModel):
    """Result envelope returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    ok: bool = Field(..., description="True when the operation succeeded")
    data: Any = Field(default=None, description="Payload on success")
    error_kind: ErrorKind | None = Field(default=None, serialization_alias="errorKind")
    message: str | None = Field(default=None)
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(
        cls,
        error_kind: ErrorKind,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "OperationResult":
        return cls(ok=False, error_kind=error_kind, message=message, details=details or {})

    @classmethod
    def from_error(cls, error: StockError) -> "OperationResult":
        details = {"code": error.code, **error.details}
        return cls.failure(error.error_kind, error.message, details)

    def to_dict(self) -> dict[str, Any]:
        """Caller-facing dict; failures omit ``data``, successes omit error fields."""
        if self.ok:
            return {"ok": True, "data": _jsonable(self.data)}
        return {
            "ok": False,
            "errorKind": self.error_kind.value if self.error_kind else ErrorKind.UNKNOWN.value,
            "message": self.message,
            "details": self.details,
        }


def _jsonable(data: Any) -> Any:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json")
    if dataclasses.is_dataclass(data) and not isinstance(data, type):
        return _jsonable(dataclasses.asdict(data))
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    return data
