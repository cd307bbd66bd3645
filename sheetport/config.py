import os
import tempfile
from pathlib import Path


class Settings:
    """Import/export settings with environment variable overrides."""

    # Upload
    UPLOAD_FILE_KEY: str = os.getenv("SHEETPORT_UPLOAD_FILE_KEY", "file")
    # Uploaded workbooks land here before parsing
    SCRATCH_DIR: Path = Path(
        os.getenv("SHEETPORT_SCRATCH_DIR", tempfile.gettempdir())
    )

    # Export
    DEFAULT_EXPORT_FORMAT: str = os.getenv("SHEETPORT_EXPORT_FORMAT", "xlsx")
    SHEET_TITLE: str = os.getenv("SHEETPORT_SHEET_TITLE", "Worksheet")
    AUTO_WIDTH_PADDING: int = int(os.getenv("SHEETPORT_AUTO_WIDTH_PADDING", "2"))
    AUTO_WIDTH_MAX: int = int(os.getenv("SHEETPORT_AUTO_WIDTH_MAX", "50"))
    # BOM so Excel opens UTF-8 CSV correctly
    CSV_ENCODING: str = os.getenv("SHEETPORT_CSV_ENCODING", "utf-8-sig")


settings = Settings()
