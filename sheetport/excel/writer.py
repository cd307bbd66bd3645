"""Spreadsheet writing.

Builds a single styled sheet from a schema and reshaped records, then
serializes it to xlsx, xls or csv in memory.
"""

from __future__ import annotations

import csv
import datetime
import io
from decimal import Decimal
from typing import Any, Iterable

import openpyxl
import xlwt
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from sheetport.config import Settings, settings as default_settings
from sheetport.excel.columns import column_label
from sheetport.excel.formats import FileFormat
from sheetport.excel.schema import ExcelSchema, FieldDescriptor
from sheetport.excel.values import format_value
from sheetport.exceptions import ExportLimitError

HEADER_ROW = 1

# Sheet limits of the legacy .xls format
XLS_MAX_ROWS = 65536
XLS_MAX_COLUMNS = 256

_NATIVE_TYPES = (str, int, float, Decimal, datetime.date, datetime.time)

# openpyxl alignment name -> xlwt easyxf keyword
_XLS_ALIGN = {
    "general": "general",
    "left": "left",
    "center": "center",
    "right": "right",
    "fill": "filled",
    "justify": "justified",
    "centerContinuous": "center_across_selection",
    "distributed": "distributed",
}


def _cell_value(value: Any) -> Any:
    """Coerce a record value into something a worksheet cell accepts."""
    if value is None or isinstance(value, bool):
        return value
    if not isinstance(value, _NATIVE_TYPES):
        return str(value)
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    if isinstance(value, datetime.datetime) and value.tzinfo is not None:
        # Excel has no notion of time zones
        return value.replace(tzinfo=None)
    return value


def _set_value(cell: Any, value: Any) -> None:
    cell.value = _cell_value(value)
    if isinstance(cell.value, str):
        # Text starting with "=" stays text, never a formula
        cell.data_type = "s"


def _solid(color: str) -> PatternFill:
    return PatternFill(fill_type="solid", start_color=color, end_color=color)


def _style_cell(cell: Any, descriptor: FieldDescriptor, header: bool) -> None:
    color = descriptor.head_color if header else descriptor.color
    bg_color = descriptor.head_bg_color if header else descriptor.bg_color
    if header or color:
        cell.font = Font(bold=header, color=color)
    if descriptor.align:
        cell.alignment = Alignment(horizontal=descriptor.align)
    if bg_color:
        cell.fill = _solid(bg_color)


class ExcelWriter:
    """Writes records into a new single-sheet workbook."""

    def __init__(self, schema: ExcelSchema, config: Settings | None = None) -> None:
        self.schema = schema
        self.settings = config or default_settings
        self._text_width = [0] * len(schema)

    def new_workbook(self) -> Workbook:
        wb = openpyxl.Workbook()
        wb.active.title = self.settings.SHEET_TITLE
        return wb

    def build(self, wb: Workbook, rows: Iterable[dict[str, Any]]) -> int:
        """Write the header and every row into ``wb``; return the row count.

        Dictionary fields write the display value for a mapped raw value;
        everything else is written as a native cell.
        """
        ws = wb.active

        for offset, descriptor in enumerate(self.schema):
            cell = ws[f"{column_label(offset)}{HEADER_ROW}"]
            _set_value(cell, descriptor.title)
            _style_cell(cell, descriptor, header=True)
            self._measure(offset, descriptor.title)

        written = 0
        row_num = HEADER_ROW + 1
        for record in rows:
            for offset, descriptor in enumerate(self.schema):
                value = record.get(descriptor.name, "")
                if descriptor.has_dictionary and descriptor.has_display_for(value):
                    value = descriptor.to_display(value)
                cell = ws.cell(row=row_num, column=offset + 1)
                _set_value(cell, value)
                _style_cell(cell, descriptor, header=False)
                self._measure(offset, value)
            row_num += 1
            written += 1

        self._apply_widths(ws)
        return written

    def _measure(self, offset: int, value: Any) -> None:
        text = format_value(value)
        longest = max((len(line) for line in text.splitlines()), default=0)
        if longest > self._text_width[offset]:
            self._text_width[offset] = longest

    def column_width(self, offset: int) -> float:
        descriptor = self.schema.fields[offset]
        if descriptor.width:
            return descriptor.width
        return min(
            self._text_width[offset] + self.settings.AUTO_WIDTH_PADDING,
            self.settings.AUTO_WIDTH_MAX,
        )

    def _apply_widths(self, ws: Worksheet) -> None:
        for offset in range(len(self.schema)):
            ws.column_dimensions[column_label(offset)].width = self.column_width(offset)

    def serialize(self, wb: Workbook, fmt: FileFormat) -> bytes:
        """Render the workbook into ``fmt`` bytes."""
        if fmt is FileFormat.CSV:
            return self._to_csv(wb.active)
        if fmt is FileFormat.XLS:
            return self._to_xls(wb.active)
        buf = io.BytesIO()
        wb.save(buf)
        return buf.getvalue()

    def _to_csv(self, ws: Worksheet) -> bytes:
        output = io.StringIO(newline="")
        writer = csv.writer(output)
        for row in ws.iter_rows(values_only=True):
            writer.writerow([format_value(v) for v in row])
        return output.getvalue().encode(self.settings.CSV_ENCODING)

    def _to_xls(self, ws: Worksheet) -> bytes:
        if ws.max_row > XLS_MAX_ROWS:
            raise ExportLimitError(
                f"{ws.max_row - HEADER_ROW} rows exceed the xls limit of "
                f"{XLS_MAX_ROWS - HEADER_ROW} data rows; export as xlsx instead"
            )
        if len(self.schema) > XLS_MAX_COLUMNS:
            raise ExportLimitError(
                f"{len(self.schema)} columns exceed the xls limit of "
                f"{XLS_MAX_COLUMNS}; export as xlsx instead"
            )
        book = xlwt.Workbook(encoding="utf-8")
        sheet = book.add_sheet(ws.title)
        header_styles = []
        body_styles = []
        for descriptor in self.schema:
            align = (
                f"; align: horiz {_XLS_ALIGN[descriptor.align]}"
                if descriptor.align
                else ""
            )
            header_styles.append(xlwt.easyxf("font: bold on" + align))
            body_styles.append(xlwt.easyxf(align.lstrip("; ")))

        for row_idx, row in enumerate(ws.iter_rows(values_only=True)):
            styles = header_styles if row_idx == 0 else body_styles
            for col_idx, value in enumerate(row):
                if value is None:
                    continue
                if isinstance(value, Decimal):
                    value = float(value)
                elif isinstance(value, (datetime.date, datetime.time)):
                    value = format_value(value)
                sheet.write(row_idx, col_idx, value, styles[col_idx])

        for offset in range(len(self.schema)):
            # xlwt widths are in 1/256 of a character
            sheet.col(offset).width = min(int(self.column_width(offset) * 256), 65535)

        buf = io.BytesIO()
        book.save(buf)
        return buf.getvalue()
