"""Spreadsheet layout, reading and writing.

Provides the column indexer, field schema, readers, writers and row
reshaping used by the import and export services.
"""

from sheetport.excel.columns import column_label, column_offset
from sheetport.excel.formats import FileFormat, detect_format, normalize_format
from sheetport.excel.reader import ExcelReader
from sheetport.excel.rows import produce_rows
from sheetport.excel.schema import ExcelSchema, FieldDescriptor, parse_schema
from sheetport.excel.writer import ExcelWriter

__all__ = [
    "ExcelReader",
    "ExcelSchema",
    "ExcelWriter",
    "FieldDescriptor",
    "FileFormat",
    "column_label",
    "column_offset",
    "detect_format",
    "normalize_format",
    "parse_schema",
    "produce_rows",
]
