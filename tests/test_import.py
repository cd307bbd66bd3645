"""Tests for importing uploaded spreadsheets."""

import datetime

import pytest
from pydantic import Field

from sheetport.excel.values import format_value
from sheetport.exceptions import (
    ExcelConfigError,
    RowConsumerError,
    RowValidationError,
    UnsupportedFormatError,
)
from sheetport.services.import_service import import_upload
from sheetport.services.validation import RecordValidator
from sheetport.transfer import ExcelTransfer
from tests.helpers import load_sheet, make_upload, xlsx_bytes

HEADER = ["ID", "Name", "Status", "Created"]


class UserExcel(ExcelTransfer):
    fields = {
        "id": {"index": 0, "title": "ID"},
        "name": {"index": 1, "title": "Name"},
        "status": {"index": 2, "title": "Status", "dictData": {0: "inactive", 1: "active"}},
        "created_at": {"index": 3, "title": "Created", "only_export": True},
    }


class TestFormatValue:

    @pytest.mark.parametrize(
        "value, text",
        [
            (None, ""),
            ("abc", "abc"),
            (0, "0"),
            (7, "7"),
            (2.0, "2"),
            (2.5, "2.5"),
            (True, "TRUE"),
            (datetime.datetime(2024, 5, 6), "2024-05-06"),
            (datetime.datetime(2024, 5, 6, 7, 8, 9), "2024-05-06 07:08:09"),
            (datetime.date(2024, 5, 6), "2024-05-06"),
        ],
    )
    def test_format(self, value, text):
        assert format_value(value) == text


class TestImportUpload:

    def test_reads_records(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, "Alice", "active"], [2, "Bob", 0]])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)

        assert records == [
            {"id": "1", "name": "Alice", "status": 1},
            {"id": "2", "name": "Bob", "status": "0"},
        ]

    def test_unknown_dictionary_text_kept(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, "Alice", "suspended"]])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert records[0]["status"] == "suspended"

    def test_empty_rows_dropped(self, user_schema, scratch_dir):
        content = xlsx_bytes([
            HEADER,
            [1, "Alice"],
            [None, None, None],
            ["", "", ""],
            [3, "Cy"],
        ])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert [r["id"] for r in records] == ["1", "3"]

    def test_blank_cells_left_out(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, None, "active"]])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert records == [{"id": "1", "status": 1}]

    def test_zero_is_a_value(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [0, "Zed"]])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert records == [{"id": "0", "name": "Zed"}]

    def test_export_only_fields_ignored(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, "Alice", "active", "2024-01-02"]])
        records = import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert "created_at" not in records[0]

    def test_columns_past_schema_ignored(self, scratch_dir):
        schema = UserExcel(fields={"a": {"index": 0}}).schema
        content = xlsx_bytes([["A", "B"], ["x", "y"]])
        records = import_upload(make_upload(content), schema, scratch_dir=scratch_dir)
        assert records == [{"a": "x"}]

    def test_reads_past_column_z(self, scratch_dir):
        schema = UserExcel(fields={f"f{i}": {"index": i} for i in range(30)}).schema
        assert schema.last_column == "AD"
        row = [""] * 30
        row[0], row[29] = "first", "last"
        content = xlsx_bytes([[f"f{i}" for i in range(30)], row])
        records = import_upload(make_upload(content), schema, scratch_dir=scratch_dir)
        assert records == [{"f0": "first", "f29": "last"}]

    def test_scratch_file_removed(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, "Alice"]])
        import_upload(make_upload(content), user_schema, scratch_dir=scratch_dir)
        assert list(scratch_dir.iterdir()) == []

    def test_upload_without_extension(self, user_schema, scratch_dir):
        content = xlsx_bytes([HEADER, [1, "Alice"]])
        records = import_upload(
            make_upload(content, filename="export"), user_schema, scratch_dir=scratch_dir
        )
        assert records == [{"id": "1", "name": "Alice"}]


class TestImportFormats:

    def test_csv(self, user_schema, scratch_dir):
        content = "ID,Name,Status\r\n1,Alice,active\r\n,,\r\n2,Bob,1\r\n".encode("utf-8-sig")
        records = import_upload(
            make_upload(content, filename="users.csv"), user_schema, scratch_dir=scratch_dir
        )
        assert records == [
            {"id": "1", "name": "Alice", "status": 1},
            {"id": "2", "name": "Bob", "status": "1"},
        ]

    def test_xls(self, user_fields, users, config):
        transfer = ExcelTransfer(fields=user_fields, config=config)
        payload = transfer.export("users", users, fmt="xls")

        records = transfer.parse_import({"file": make_upload(payload.content, "users.xls")})
        assert records == [
            {"id": "1", "name": "Alice", "status": 1},
            {"id": "2", "name": "Bob", "status": 0},
        ]

    def test_unsupported_file(self, user_schema, scratch_dir):
        upload = make_upload(b"%PDF-1.4 not a sheet", filename="report.pdf")
        with pytest.raises(UnsupportedFormatError) as exc_info:
            import_upload(upload, user_schema, scratch_dir=scratch_dir)
        assert exc_info.value.status_code == 415
        assert list(scratch_dir.iterdir()) == []

    def test_corrupt_xlsx(self, user_schema, scratch_dir):
        upload = make_upload(b"PK\x03\x04 truncated", filename="broken.xlsx")
        with pytest.raises(UnsupportedFormatError):
            import_upload(upload, user_schema, scratch_dir=scratch_dir)
        assert list(scratch_dir.iterdir()) == []


class TestImportValidation:

    def test_reports_sheet_row(self, user_schema, scratch_dir):
        validator = RecordValidator({"id": int, "name": str})
        content = xlsx_bytes([
            HEADER,
            [1, "Alice"],
            [None, None],
            ["abc", "Bob"],
        ])
        with pytest.raises(RowValidationError) as exc_info:
            import_upload(make_upload(content), user_schema, validator=validator, scratch_dir=scratch_dir)

        error = exc_info.value
        assert error.row == 4
        assert error.status_code == 422
        assert error.message.startswith("Row 4: id")
        assert list(scratch_dir.iterdir()) == []

    def test_custom_messages(self, user_schema, scratch_dir):
        validator = RecordValidator(
            {"id": int, "name": (str, Field(min_length=3))},
            {"name.string_too_short": "name is too short", "id": "id must be a number"},
        )
        content = xlsx_bytes([HEADER, [1, "Al"]])
        with pytest.raises(RowValidationError) as exc_info:
            import_upload(make_upload(content), user_schema, validator=validator, scratch_dir=scratch_dir)
        assert exc_info.value.message == "Row 2: name is too short"

    def test_missing_required_field(self, user_schema, scratch_dir):
        validator = RecordValidator({"name": str}, {"name.missing": "name is required"})
        content = xlsx_bytes([HEADER, [1, None, "active"]])
        with pytest.raises(RowValidationError, match="name is required"):
            import_upload(make_upload(content), user_schema, validator=validator, scratch_dir=scratch_dir)

    def test_first_message_only(self):
        validator = RecordValidator({"id": int, "name": str})
        errors = validator.validate({"id": "x"})
        assert len(errors) == 2
        assert errors[0].startswith("id:")

    def test_valid_rows_pass(self, user_schema, scratch_dir):
        validator = RecordValidator({"id": int, "status": (int | None, None)})
        content = xlsx_bytes([HEADER, [1, "Alice", "active"]])
        records = import_upload(make_upload(content), user_schema, validator=validator, scratch_dir=scratch_dir)
        assert records == [{"id": "1", "name": "Alice", "status": 1}]


class TestImportConsumer:

    def test_consumer_receives_records(self, user_schema, scratch_dir):
        seen = []
        content = xlsx_bytes([HEADER, [1, "Alice"], [2, "Bob"]])
        result = import_upload(make_upload(content), user_schema, consumer=seen.append, scratch_dir=scratch_dir)

        assert result is True
        assert seen == [{"id": "1", "name": "Alice"}, {"id": "2", "name": "Bob"}]

    def test_consumer_failure_wrapped(self, user_schema, scratch_dir):
        def consume(record):
            if record["id"] == "2":
                raise LookupError("duplicate id 2")

        content = xlsx_bytes([HEADER, [1, "Alice"], [2, "Bob"]])
        with pytest.raises(RowConsumerError) as exc_info:
            import_upload(make_upload(content), user_schema, consumer=consume, scratch_dir=scratch_dir)

        error = exc_info.value
        assert error.status_code == 500
        assert error.message == "duplicate id 2"
        assert isinstance(error.__cause__, LookupError)
        assert list(scratch_dir.iterdir()) == []


class TestExcelTransferImport:

    def test_requires_fields(self):
        with pytest.raises(ExcelConfigError):
            ExcelTransfer()

    def test_missing_upload_key(self, config, scratch_dir):
        transfer = UserExcel(config=config)
        assert transfer.parse_import({}) is False
        assert transfer.parse_import({"other": make_upload(b"x")}) is False
        assert list(scratch_dir.iterdir()) == []

    def test_custom_upload_key(self, config):
        transfer = UserExcel(config=config)
        content = xlsx_bytes([HEADER, [1, "Alice"]])
        assert transfer.parse_import({"sheet": make_upload(content)}, file_key="sheet") == [
            {"id": "1", "name": "Alice"}
        ]

    def test_class_level_rules(self, config):
        class StrictUserExcel(UserExcel):
            import_rules = {"id": int}
            import_messages = {"id": "bad id"}

        content = xlsx_bytes([HEADER, ["x", "Alice"]])
        with pytest.raises(RowValidationError, match="Row 2: bad id"):
            StrictUserExcel(config=config).parse_import({"file": make_upload(content)})

    def test_round_trip(self, config):
        transfer = ExcelTransfer(
            fields={"id": {"index": 0}, "name": {"index": 1}, "city": {"index": 2}},
            config=config,
        )
        data = [
            {"id": 1, "name": "Alice", "city": "Oslo"},
            {"id": 2, "name": "Bob", "city": "Lima"},
        ]
        payload = transfer.export("people", data)
        records = transfer.parse_import({"file": make_upload(payload.content, payload.filename)})
        assert records == [{k: str(v) for k, v in row.items()} for row in data]

    def test_dictionary_round_trip(self, config):
        transfer = ExcelTransfer(
            fields={
                "id": {"index": 0},
                "status": {"index": 1, "dictData": {0: "inactive", 1: "active"}},
            },
            config=config,
        )
        payload = transfer.export("status", [{"id": 1, "status": 1}])
        ws = load_sheet(payload.content)
        assert [format_value(c.value) for c in ws[2]] == ["1", "active"]

        records = transfer.parse_import({"file": make_upload(payload.content, payload.filename)})
        assert records == [{"id": "1", "status": 1}]

    def test_formula_text_round_trip(self, config):
        transfer = ExcelTransfer(fields={"id": {"index": 0}, "note": {"index": 1}}, config=config)
        data = [{"id": 1, "note": "=1+1"}, {"id": 2, "note": "=SUM(A1:A9)"}]

        payload = transfer.export("notes", data)
        records = transfer.parse_import({"file": make_upload(payload.content, payload.filename)})
        assert records == [
            {"id": "1", "note": "=1+1"},
            {"id": "2", "note": "=SUM(A1:A9)"},
        ]

    def test_sparse_index_round_trip(self, config):
        transfer = ExcelTransfer(
            fields={"id": {"index": 0}, "name": {"index": 5}, "city": {"index": 9}},
            config=config,
        )
        data = [{"id": 1, "name": "Alice", "city": "Oslo"}]

        payload = transfer.export("people", data)
        ws = load_sheet(payload.content)
        assert [ws["A1"].value, ws["B1"].value, ws["C1"].value] == ["id", "name", "city"]
        assert ws.max_column == 3

        records = transfer.parse_import({"file": make_upload(payload.content, payload.filename)})
        assert records == [{"id": "1", "name": "Alice", "city": "Oslo"}]
