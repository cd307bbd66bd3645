"""Export records into a downloadable spreadsheet."""

import logging

from sheetport.config import Settings, settings as default_settings
from sheetport.excel.formats import FileFormat, normalize_format
from sheetport.excel.rows import DataSource, produce_rows, resolve_data
from sheetport.excel.schema import ExcelSchema
from sheetport.excel.writer import ExcelWriter
from sheetport.schemas.transfer import ExportPayload

logger = logging.getLogger(__name__)


def export_records(
    filename: str,
    data: DataSource,
    schema: ExcelSchema,
    fmt: str | FileFormat | None = None,
    config: Settings | None = None,
) -> ExportPayload:
    """Write ``data`` under a styled header row and serialize it.

    ``data`` is an iterable of records (mappings or pydantic models) or a
    zero-argument callable producing one. ``fmt`` is ``xlsx``, ``xls`` or
    ``csv`` in any case; anything else exports xlsx.

    Raises:
        ExportLimitError: If the data does not fit an xls sheet.
    """
    config = config or default_settings
    file_format = normalize_format(fmt or config.DEFAULT_EXPORT_FORMAT)
    writer = ExcelWriter(schema, config)

    wb = writer.new_workbook()
    try:
        rows = writer.build(wb, produce_rows(resolve_data(data), schema))
        content = writer.serialize(wb, file_format)
    finally:
        wb.close()

    logger.info(
        "Exported %d rows to %s.%s (%d bytes)",
        rows, filename, file_format.extension, len(content),
    )
    return ExportPayload(
        filename=f"{filename}.{file_format.extension}",
        format=file_format,
        content=content,
        rows=rows,
    )
