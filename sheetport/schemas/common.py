from typing import Generic, TypeVar

from pydantic import BaseModel

from sheetport.exceptions import ExcelError, RowValidationError

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """JSON envelope returned by the web adapters."""

    success: bool
    data: T | None = None
    error: str | None = None
    meta: dict | None = None

    @classmethod
    def ok(cls, data: T, meta: dict | None = None) -> "ApiResponse[T]":
        return cls(success=True, data=data, meta=meta)

    @classmethod
    def fail(cls, error: str, meta: dict | None = None) -> "ApiResponse[None]":
        return cls(success=False, error=error, meta=meta)

    @classmethod
    def from_error(cls, exc: ExcelError) -> "ApiResponse[None]":
        meta: dict = {"status_code": exc.status_code}
        if isinstance(exc, RowValidationError):
            meta["row"] = exc.row
        return cls.fail(exc.message, meta=meta)
