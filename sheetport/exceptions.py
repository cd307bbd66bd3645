"""Errors raised by spreadsheet import and export.

Every error carries an HTTP-like ``status_code`` so callers can map it onto
their own transport. All of them abort the current call.
"""

from __future__ import annotations


class ExcelError(Exception):
    """Base class for import/export failures."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ExcelConfigError(ExcelError):
    """The field configuration is empty or malformed."""


class ExcelIOError(ExcelError):
    """The uploaded file could not be stored or read back."""


class UnsupportedFormatError(ExcelError):
    """The uploaded file is not a workbook format we can read."""

    status_code = 415


class RowValidationError(ExcelError):
    """An imported row failed the configured validation rules."""

    status_code = 422

    def __init__(self, row: int, message: str) -> None:
        super().__init__(f"Row {row}: {message}")
        self.row = row
        self.detail = message


class RowConsumerError(ExcelError):
    """The per-row consumer raised while handling an imported record.

    The consumer's exception is chained as ``__cause__``.
    """

    status_code = 500


class ExportLimitError(ExcelError):
    """The dataset does not fit the sheet limits of the chosen format."""

    status_code = 422
