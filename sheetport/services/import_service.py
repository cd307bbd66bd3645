"""Import records from an uploaded spreadsheet."""

import logging
import shutil
import tempfile
from pathlib import Path
from typing import Any, BinaryIO, Callable, Protocol

from sheetport.excel.columns import column_offset
from sheetport.excel.formats import detect_format
from sheetport.excel.reader import ExcelReader
from sheetport.excel.schema import ExcelSchema
from sheetport.excel.values import format_value
from sheetport.exceptions import ExcelIOError, RowConsumerError, RowValidationError
from sheetport.services.validation import RecordValidator

logger = logging.getLogger(__name__)

Consumer = Callable[[dict[str, Any]], Any]


class Upload(Protocol):
    """What we need from an uploaded file (FastAPI's ``UploadFile`` fits)."""

    filename: str | None
    file: BinaryIO


def _save_upload(upload: Upload, scratch_dir: Path | None = None) -> Path:
    suffix = Path(upload.filename or "upload.xlsx").suffix or ".xlsx"
    try:
        fd, tmp_path = tempfile.mkstemp(
            prefix="import_", suffix=suffix, dir=scratch_dir
        )
    except OSError as e:
        raise ExcelIOError(f"Cannot create scratch file: {e}") from e
    try:
        with open(fd, "wb") as f:
            upload.file.seek(0)
            shutil.copyfileobj(upload.file, f)
    except OSError as e:
        Path(tmp_path).unlink(missing_ok=True)
        raise ExcelIOError(f"Cannot store uploaded file: {e}") from e
    return Path(tmp_path)


def build_record(schema: ExcelSchema, values: list[Any]) -> dict[str, Any]:
    """Turn one row of raw cell values into a record.

    Export-only columns and blank cells are left out; dictionary columns
    accept either the raw key or its display text.
    """
    record: dict[str, Any] = {}
    for offset, raw in enumerate(values):
        descriptor = schema.at(offset)
        if descriptor is None or descriptor.only_export:
            continue
        text = format_value(raw)
        if text == "":
            continue
        record[descriptor.name] = descriptor.to_raw(text)
    return record


def import_upload(
    upload: Upload,
    schema: ExcelSchema,
    validator: RecordValidator | None = None,
    consumer: Consumer | None = None,
    scratch_dir: Path | None = None,
) -> list[dict[str, Any]] | bool:
    """Parse every data row of an uploaded spreadsheet.

    Row 1 is the header. Blank rows are skipped. With a ``consumer`` each
    record is handed over as it is read and ``True`` is returned; otherwise
    the records are returned in sheet order. The scratch copy of the upload
    is always removed.

    Raises:
        ExcelIOError: If the upload cannot be stored.
        UnsupportedFormatError: If the file is not xlsx, xls or csv.
        RowValidationError: On the first row that fails ``validator``.
        RowConsumerError: If ``consumer`` raises.
    """
    tmp_path = _save_upload(upload, scratch_dir)
    file_name = upload.filename or tmp_path.name
    try:
        try:
            fmt = detect_format(tmp_path, upload.filename)
        except OSError as e:
            raise ExcelIOError(f"Cannot read stored upload: {e}") from e

        records: list[dict[str, Any]] = []
        imported = 0
        # Columns A through the schema's last column
        width = column_offset(schema.last_column) + 1
        with ExcelReader.open_rows(tmp_path, fmt, width) as rows:
            for row_num, values in rows:
                record = build_record(schema, values)
                if not record:
                    continue

                if validator is not None:
                    errors = validator.validate(record)
                    if errors:
                        logger.warning(
                            "Import of %s rejected at row %d: %s",
                            file_name, row_num, errors[0],
                        )
                        raise RowValidationError(row_num, errors[0])

                if consumer is not None:
                    try:
                        consumer(record)
                    except Exception as e:
                        logger.warning(
                            "Import of %s aborted at row %d by consumer: %r",
                            file_name, row_num, e,
                        )
                        raise RowConsumerError(str(e) or repr(e)) from e
                else:
                    records.append(record)
                imported += 1
    finally:
        tmp_path.unlink(missing_ok=True)

    logger.info("Imported %d rows from %s (%s)", imported, file_name, fmt.value)
    if consumer is not None:
        return True
    return records
