"""The import/export component applications configure and call."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping

from sheetport.config import Settings, settings as default_settings
from sheetport.excel.formats import FileFormat
from sheetport.excel.rows import DataSource
from sheetport.excel.schema import ExcelSchema, parse_schema
from sheetport.schemas.transfer import ExportPayload
from sheetport.services.export_service import export_records
from sheetport.services.import_service import Consumer, import_upload
from sheetport.services.validation import RecordValidator, Rules

logger = logging.getLogger(__name__)


class ExcelTransfer:
    """Imports and exports one kind of record as a flat spreadsheet.

    Configure it either by subclassing::

        class UserExcel(ExcelTransfer):
            fields = {
                "id": {"index": 0, "title": "ID"},
                "status": {"index": 1, "dictData": {0: "off", 1: "on"}},
            }
            import_rules = {"id": int}

    or by passing the same values to the constructor. The schema is parsed
    once here and never changes afterwards.

    Raises:
        ExcelConfigError: If no fields are configured.
    """

    fields: ClassVar[Mapping[str, Mapping[str, Any]]] = {}
    import_rules: ClassVar[Rules | None] = None
    import_messages: ClassVar[Mapping[str, str]] = {}

    def __init__(
        self,
        fields: Mapping[str, Mapping[str, Any]] | ExcelSchema | None = None,
        import_rules: Rules | None = None,
        import_messages: Mapping[str, str] | None = None,
        config: Settings | None = None,
    ) -> None:
        self.settings = config or default_settings
        self.schema = parse_schema(fields if fields is not None else type(self).fields)
        rules = import_rules if import_rules is not None else type(self).import_rules
        messages = import_messages if import_messages is not None else type(self).import_messages
        self.validator = RecordValidator(rules, messages) if rules else None

    def parse_import(
        self,
        form: Mapping[str, Any],
        consumer: Consumer | None = None,
        file_key: str | None = None,
    ) -> list[dict[str, Any]] | bool:
        """Import the file uploaded under ``file_key`` in a parsed form.

        Returns ``False`` when no file was uploaded under that key,
        ``True`` when every record went to ``consumer``, else the records.
        """
        key = file_key or self.settings.UPLOAD_FILE_KEY
        upload = form.get(key)
        if upload is None or isinstance(upload, str) or not getattr(upload, "filename", None):
            logger.debug("No upload under form key %r", key)
            return False
        return import_upload(
            upload,
            self.schema,
            validator=self.validator,
            consumer=consumer,
            scratch_dir=self.settings.SCRATCH_DIR,
        )

    def export(
        self,
        filename: str,
        data: DataSource,
        fields: Mapping[str, Mapping[str, Any]] | ExcelSchema | None = None,
        fmt: str | FileFormat | None = None,
    ) -> ExportPayload:
        """Export ``data`` as ``<filename>.<format>``.

        ``fields`` replaces the configured schema for this call only.
        """
        schema = parse_schema(fields) if fields else self.schema
        return export_records(filename, data, schema, fmt=fmt, config=self.settings)
