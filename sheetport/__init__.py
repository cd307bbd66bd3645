"""Import and export flat tabular data as spreadsheets."""

from sheetport.excel import ExcelSchema, FieldDescriptor, FileFormat, column_label, parse_schema
from sheetport.exceptions import (
    ExcelConfigError,
    ExcelError,
    ExcelIOError,
    ExportLimitError,
    RowConsumerError,
    RowValidationError,
    UnsupportedFormatError,
)
from sheetport.schemas.transfer import ExportPayload
from sheetport.transfer import ExcelTransfer

__all__ = [
    "ExcelConfigError",
    "ExcelError",
    "ExcelIOError",
    "ExcelSchema",
    "ExcelTransfer",
    "ExportLimitError",
    "ExportPayload",
    "FieldDescriptor",
    "FileFormat",
    "RowConsumerError",
    "RowValidationError",
    "UnsupportedFormatError",
    "column_label",
    "parse_schema",
]
