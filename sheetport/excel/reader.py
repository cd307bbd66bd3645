"""Spreadsheet reading.

Opens an uploaded workbook read-only (cached formula results, never the
formulas themselves) and yields its data rows as raw cell values.
"""

from __future__ import annotations

import contextlib
import csv
import io
import zipfile
from pathlib import Path
from typing import Any, Iterator

import openpyxl
import xlrd
from openpyxl.utils.exceptions import InvalidFileException
from xlrd.compdoc import CompDocError

from sheetport.config import settings
from sheetport.excel.formats import FileFormat
from sheetport.exceptions import UnsupportedFormatError

# Row 1 holds the header
DATA_START_ROW = 2

Rows = Iterator[tuple[int, list[Any]]]


def _fit(values: list[Any], width: int) -> list[Any]:
    """Pad or truncate a row to exactly ``width`` cells."""
    if len(values) >= width:
        return values[:width]
    return values + [None] * (width - len(values))


def _xls_value(book: xlrd.book.Book, cell: xlrd.sheet.Cell) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK, xlrd.XL_CELL_ERROR):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        return xlrd.xldate_as_datetime(cell.value, book.datemode)
    if cell.ctype == xlrd.XL_CELL_BOOLEAN:
        return bool(cell.value)
    return cell.value


class ExcelReader:
    """Reads data rows from xlsx, xls and csv files without modifying them."""

    @staticmethod
    @contextlib.contextmanager
    def open_rows(file_path: str | Path, fmt: FileFormat, width: int) -> Iterator[Rows]:
        """Open ``file_path`` and yield an iterator of ``(row_number, values)``.

        ``row_number`` is the 1-based sheet row; ``values`` always holds
        ``width`` cells, columns A onward. The workbook is closed when the
        context exits.

        Raises:
            UnsupportedFormatError: If the file cannot be parsed as ``fmt``.
        """
        path = Path(file_path)
        if fmt is FileFormat.XLSX:
            with ExcelReader._open_xlsx(path, width) as rows:
                yield rows
        elif fmt is FileFormat.XLS:
            with ExcelReader._open_xls(path, width) as rows:
                yield rows
        else:
            with ExcelReader._open_csv(path, width) as rows:
                yield rows

    @staticmethod
    @contextlib.contextmanager
    def _open_xlsx(path: Path, width: int) -> Iterator[Rows]:
        # A file object skips openpyxl's filename-extension check
        with open(path, "rb") as f:
            try:
                wb = openpyxl.load_workbook(f, read_only=True, data_only=True)
            except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
                raise UnsupportedFormatError(f"Unreadable xlsx file: {e}") from e
            try:
                ws = wb.active
                if ws is None:
                    raise UnsupportedFormatError("Workbook has no active sheet")
                yield (
                    (row_num, _fit(list(row), width))
                    for row_num, row in enumerate(
                        ws.iter_rows(
                            min_row=DATA_START_ROW, max_col=width, values_only=True
                        ),
                        start=DATA_START_ROW,
                    )
                )
            finally:
                wb.close()

    @staticmethod
    @contextlib.contextmanager
    def _open_xls(path: Path, width: int) -> Iterator[Rows]:
        try:
            book = xlrd.open_workbook(str(path), on_demand=True)
        except (xlrd.XLRDError, CompDocError) as e:
            raise UnsupportedFormatError(f"Unreadable xls file: {e}") from e
        try:
            if book.nsheets == 0:
                raise UnsupportedFormatError("Workbook has no sheets")
            sheet = book.sheet_by_index(0)
            yield (
                (
                    idx + 1,
                    _fit(
                        [_xls_value(book, c) for c in sheet.row_slice(idx, 0, width)],
                        width,
                    ),
                )
                for idx in range(DATA_START_ROW - 1, sheet.nrows)
            )
        finally:
            book.release_resources()

    @staticmethod
    @contextlib.contextmanager
    def _open_csv(path: Path, width: int) -> Iterator[Rows]:
        try:
            text = path.read_text(encoding=settings.CSV_ENCODING)
        except UnicodeDecodeError as e:
            raise UnsupportedFormatError(f"CSV file is not {settings.CSV_ENCODING}: {e}") from e
        reader = csv.reader(io.StringIO(text, newline=""))
        yield (
            (row_num, _fit(list(row), width))
            for row_num, row in enumerate(reader, start=1)
            if row_num >= DATA_START_ROW
        )
