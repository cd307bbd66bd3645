"""Spreadsheet file formats: detection on import, selection on export."""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Final

from sheetport.exceptions import UnsupportedFormatError

logger = logging.getLogger(__name__)

# File signatures
ZIP_MAGIC: Final[bytes] = b"PK\x03\x04"
OLE2_MAGIC: Final[bytes] = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

TEXT_SUFFIXES: Final[frozenset[str]] = frozenset({".csv", ".txt"})


class FileFormat(str, enum.Enum):
    XLSX = "xlsx"
    XLS = "xls"
    CSV = "csv"

    @property
    def extension(self) -> str:
        return self.value

    @property
    def content_type(self) -> str:
        return CONTENT_TYPES[self]


CONTENT_TYPES: Final[dict[FileFormat, str]] = {
    FileFormat.XLSX: (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    ),
    FileFormat.XLS: "application/vnd.ms-excel",
    FileFormat.CSV: "text/csv; charset=utf-8",
}


def normalize_format(fmt: str | FileFormat | None) -> FileFormat:
    """Pick the export format; unknown names fall back to xlsx."""
    if isinstance(fmt, FileFormat):
        return fmt
    try:
        return FileFormat((fmt or "").strip().lower())
    except ValueError:
        return FileFormat.XLSX


def detect_format(file_path: str | Path, filename: str | None = None) -> FileFormat:
    """Identify a stored upload by its leading bytes.

    Binary workbooks are recognised by signature. Anything else is accepted
    as CSV only when the upload was named ``.csv`` or ``.txt``.

    Raises:
        UnsupportedFormatError: If the file is not xlsx, xls or csv.
    """
    path = Path(file_path)
    with open(path, "rb") as f:
        head = f.read(8)

    if head.startswith(ZIP_MAGIC):
        detected = FileFormat.XLSX
    elif head.startswith(OLE2_MAGIC):
        detected = FileFormat.XLS
    elif Path(filename or path.name).suffix.lower() in TEXT_SUFFIXES:
        detected = FileFormat.CSV
    else:
        raise UnsupportedFormatError(
            f"Unsupported spreadsheet file: {filename or path.name}"
        )
    logger.debug("Detected %s as %s", filename or path.name, detected.value)
    return detected
