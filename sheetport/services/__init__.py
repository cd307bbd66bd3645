from sheetport.services.export_service import export_records
from sheetport.services.import_service import build_record, import_upload
from sheetport.services.validation import RecordValidator

__all__ = ["RecordValidator", "build_record", "export_records", "import_upload"]
